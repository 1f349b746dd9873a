"""
Positioning device samples, sources and projection.
"""

from .records import (RawSample, AlignmentStatus, RecordParser,
                      decode_record, format_record)
from .projection import UTMCoordinate, to_utm
from .source import SampleSource, QueuedSampleSource

__all__ = ["RawSample", "AlignmentStatus", "RecordParser", "decode_record",
           "format_record", "UTMCoordinate", "to_utm", "SampleSource",
           "QueuedSampleSource"]
