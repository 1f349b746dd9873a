"""
Sample sources for the odometry driver.
"""

from .sources import (SerialDeviceSource, CaptureSource, FixtureSource,
                      SimulatedSource, read_record_file)

__all__ = ["SerialDeviceSource", "CaptureSource", "FixtureSource",
           "SimulatedSource", "read_record_file"]
