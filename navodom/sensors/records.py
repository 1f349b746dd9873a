"""
Navigation sample records from the positioning device.

Samples travel as NMEA-style sentences:

    $PNAV,time,lat,lon,alt,heading,roll,pitch,speed,vel_down,
          arate_x,arate_y,arate_z,alignment*HH
"""

import logging
import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Dict, Any

from ..exceptions import RecordError

logger = logging.getLogger(__name__)

RECORD_TALKER = "PNAV"
RECORD_FIELD_COUNT = 14  # talker + 13 values

class AlignmentStatus(IntEnum):
    """Navigation solution alignment reported by the device."""
    
    INVALID = 0   # solution not yet converged
    FINE = 1      # GPS-aided fine alignment
    FULL = 2      # full navigation, differential GPS

@dataclass(frozen=True)
class RawSample:
    """One navigation solution as reported by the device."""
    
    timestamp: float
    
    # Position (decimal degrees, meters)
    latitude: float
    longitude: float
    altitude: float
    
    # Attitude (degrees); heading is a compass bearing
    heading: float
    roll: float
    pitch: float
    
    # Velocity (m/s); vertical velocity is positive down
    speed: float
    vel_down: float
    
    # Angular rates (deg/s): longitudinal, transverse, down
    arate_x: float
    arate_y: float
    arate_z: float
    
    alignment: AlignmentStatus = AlignmentStatus.INVALID

def calculate_checksum(body: str) -> str:
    """Calculate NMEA checksum of the text between '$' and '*'."""
    checksum = 0
    for char in body:
        checksum ^= ord(char)
    return f"{checksum:02X}"

def format_record(sample: RawSample) -> str:
    """
    Encode a sample as a record sentence.
    
    Args:
        sample: Sample to encode
        
    Returns:
        Sentence string without line terminator
    """
    body = ",".join([
        RECORD_TALKER,
        f"{sample.timestamp:.3f}",
        f"{sample.latitude:.8f}",
        f"{sample.longitude:.8f}",
        f"{sample.altitude:.3f}",
        f"{sample.heading:.3f}",
        f"{sample.roll:.3f}",
        f"{sample.pitch:.3f}",
        f"{sample.speed:.3f}",
        f"{sample.vel_down:.3f}",
        f"{sample.arate_x:.4f}",
        f"{sample.arate_y:.4f}",
        f"{sample.arate_z:.4f}",
        str(int(sample.alignment)),
    ])
    return f"${body}*{calculate_checksum(body)}"

def decode_record(sentence: str) -> RawSample:
    """
    Decode a record sentence.
    
    Raises:
        RecordError: if the sentence is malformed
    """
    sentence = sentence.strip()
    
    if not sentence.startswith('$') or '*' not in sentence:
        raise RecordError(f"not a record sentence: {sentence!r}")
    
    body, checksum = sentence[1:].rsplit('*', 1)
    if calculate_checksum(body) != checksum.upper():
        raise RecordError(f"checksum mismatch: {sentence!r}")
    
    fields = body.split(',')
    if fields[0] != RECORD_TALKER:
        raise RecordError(f"unsupported sentence type {fields[0]!r}")
    if len(fields) != RECORD_FIELD_COUNT:
        raise RecordError(
            f"expected {RECORD_FIELD_COUNT} fields, got {len(fields)}")
    
    try:
        values = [float(field) for field in fields[1:13]]
        alignment = AlignmentStatus(int(fields[13]))
    except ValueError as e:
        raise RecordError(f"bad field in {sentence!r}: {e}") from e
    
    if not all(math.isfinite(v) for v in values):
        raise RecordError(f"non-finite value in {sentence!r}")
    
    return RawSample(*values, alignment=alignment)

class RecordParser:
    """
    Parser for record sentences read from a device or a recording.
    
    Malformed sentences are counted and dropped.
    """
    
    def __init__(self):
        self.sentence_count = 0
        self.parse_errors = 0
    
    def parse_sentence(self, sentence: str) -> Optional[RawSample]:
        """
        Parse a single record sentence.
        
        Args:
            sentence: Record sentence string
            
        Returns:
            RawSample if the sentence decoded, None otherwise
        """
        self.sentence_count += 1
        
        try:
            return decode_record(sentence)
        except RecordError as e:
            self.parse_errors += 1
            logger.debug("dropping record: %s", e)
            return None
    
    def get_statistics(self) -> Dict[str, Any]:
        """Get parser statistics."""
        return {
            'sentences_processed': self.sentence_count,
            'parse_errors': self.parse_errors,
            'error_rate': self.parse_errors / max(1, self.sentence_count)
        }
