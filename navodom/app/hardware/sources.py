"""
Navigation sample sources: serial device, capture replay, test fixture
and simulation.
"""

import logging
import math
import time
from typing import Callable, List, Optional

import serial

from ...exceptions import SourceUnavailableError
from ...math.constants import SOURCE_QUEUE_SIZE
from ...sensors.records import RawSample, AlignmentStatus, RecordParser
from ...sensors.source import SampleSource, QueuedSampleSource

logger = logging.getLogger(__name__)

EMPTY_BATCH = "-"

class SerialDeviceSource(QueuedSampleSource):
    """
    Positioning device streaming record sentences over a serial link.
    """
    
    name = "device"
    
    def __init__(self, serial_port: str = "/dev/ttyUSB0", baud_rate: int = 115200,
                 queue_size: int = SOURCE_QUEUE_SIZE):
        """
        Initialize the device source.
        
        Args:
            serial_port: Serial port device (e.g., "/dev/ttyUSB0")
            baud_rate: Baud rate
            queue_size: Samples buffered between cycles
        """
        super().__init__(queue_size)
        self.serial_port = serial_port
        self.baud_rate = baud_rate
        self.serial_conn = None
        self.parser = RecordParser()
        self.receive_buffer = ""
        self.last_sentence_time = 0.0
    
    def connect(self) -> None:
        try:
            self.serial_conn = serial.Serial(
                port=self.serial_port,
                baudrate=self.baud_rate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=0.1
            )
        except (serial.SerialException, OSError) as e:
            raise SourceUnavailableError(
                f"cannot open {self.serial_port}: {e}", source=self.name) from e
        
        # Clear any stale data
        self.serial_conn.reset_input_buffer()
        
        self._start_reader()
        logger.info("device: connected on %s at %d baud", self.serial_port, self.baud_rate)
    
    def _reader_loop(self) -> None:
        while self.running and self.serial_conn:
            try:
                waiting = self.serial_conn.in_waiting
                if waiting > 0:
                    data = self.serial_conn.read(waiting)
                    self.receive_buffer += data.decode('ascii', errors='ignore')
                    self._extract_sentences()
                else:
                    self._sleep(0.005)
            except (serial.SerialException, OSError) as e:
                logger.error("device: read error: %s", e)
                self._sleep(0.1)
    
    def _extract_sentences(self) -> None:
        """Extract complete sentences from the receive buffer."""
        while '\n' in self.receive_buffer:
            line, self.receive_buffer = self.receive_buffer.split('\n', 1)
            line = line.strip()
            if not line.startswith('$'):
                continue
            
            sample = self.parser.parse_sentence(line)
            if sample is not None:
                self.last_sentence_time = time.time()
                self._enqueue(sample)
    
    def get_data_age(self) -> float:
        """Seconds since the last decoded sample."""
        if self.last_sentence_time == 0:
            return float('inf')
        return time.time() - self.last_sentence_time
    
    def close(self) -> None:
        super().close()
        if self.serial_conn:
            self.serial_conn.close()
            self.serial_conn = None
        logger.info("device: closed")
    
    def get_statistics(self) -> dict:
        stats = super().get_statistics()
        stats.update({
            'serial_port': self.serial_port,
            'baud_rate': self.baud_rate,
            'data_age': self.get_data_age(),
            'parser': self.parser.get_statistics()
        })
        return stats

def read_record_file(path: str, parser: RecordParser) -> List[List[RawSample]]:
    """
    Read a file of record sentences.
    
    Blank lines separate batches, a line holding only "-" is an empty
    batch and lines starting with "#" are comments.
    Undecodable sentences are dropped by the parser.
    
    Raises:
        SourceUnavailableError: if the file cannot be read
    """
    try:
        with open(path, 'r') as f:
            lines = f.readlines()
    except OSError as e:
        raise SourceUnavailableError(f"cannot read {path}: {e}", source=path) from e
    
    batches = []
    batch = []
    for line in lines:
        line = line.strip()
        if not line:
            if batch:
                batches.append(batch)
                batch = []
            continue
        if line == EMPTY_BATCH:
            if batch:
                batches.append(batch)
                batch = []
            batches.append([])
            continue
        if line.startswith("#"):
            continue
        sample = parser.parse_sentence(line)
        if sample is not None:
            batch.append(sample)
    if batch:
        batches.append(batch)
    
    return batches

class FixtureSource(SampleSource):
    """
    Replays a fixture file one batch per cycle.
    
    The samples of a batch are all queued together; once a cycle has
    drained them the next call starts the following batch. After the
    last batch the source stays empty.
    """
    
    name = "test"
    
    def __init__(self, test_file: str):
        self.test_file = test_file
        self.parser = RecordParser()
        self.batches: List[List[RawSample]] = []
        self._batch_index = 0
        self._pending: List[RawSample] = []
        self._in_batch = False
    
    def connect(self) -> None:
        self.batches = read_record_file(self.test_file, self.parser)
        self._batch_index = 0
        self._in_batch = False
        logger.info("test: loaded %d batches from %s", len(self.batches), self.test_file)
    
    @property
    def exhausted(self) -> bool:
        return self._batch_index >= len(self.batches) and not self._pending
    
    def get_sample(self) -> Optional[RawSample]:
        if not self._in_batch:
            if self._batch_index >= len(self.batches):
                return None
            self._pending = list(self.batches[self._batch_index])
            self._batch_index += 1
            self._in_batch = True
        
        if self._pending:
            return self._pending.pop(0)
        
        # End of this cycle's batch
        self._in_batch = False
        return None
    
    def get_statistics(self) -> dict:
        return {
            'source': self.name,
            'batches': len(self.batches),
            'batch_index': self._batch_index,
            'parser': self.parser.get_statistics()
        }

class CaptureSource(QueuedSampleSource):
    """
    Replays a recorded capture in real time.
    
    Samples are released when the wall time since replay start reaches
    their offset from the first record, scaled by replay_speed.
    """
    
    name = "capture"
    
    def __init__(self, capture_file: str, replay_speed: float = 1.0,
                 queue_size: int = SOURCE_QUEUE_SIZE,
                 clock: Callable[[], float] = time.monotonic):
        super().__init__(queue_size)
        self.capture_file = capture_file
        self.replay_speed = replay_speed
        self.parser = RecordParser()
        self.samples: List[RawSample] = []
        self._clock = clock
    
    def connect(self) -> None:
        batches = read_record_file(self.capture_file, self.parser)
        self.samples = [sample for batch in batches for sample in batch]
        if not self.samples:
            raise SourceUnavailableError(
                f"no records in {self.capture_file}", source=self.name)
        
        self._start_reader()
        logger.info("capture: replaying %d samples from %s",
                    len(self.samples), self.capture_file)
    
    def _reader_loop(self) -> None:
        start_wall = self._clock()
        start_stamp = self.samples[0].timestamp
        
        for sample in self.samples:
            due = (sample.timestamp - start_stamp) / self.replay_speed
            while self.running:
                wait = due - (self._clock() - start_wall)
                if wait <= 0:
                    break
                self._sleep(min(wait, 0.05))
            if not self.running:
                return
            self._enqueue(sample)
        
        logger.info("capture: end of recording")

class SimulatedSource(QueuedSampleSource):
    """
    Simulated positioning device driving a circle.
    
    The solution reports INVALID alignment for align_after_s, then FINE,
    then FULL.
    """
    
    name = "simulation"
    
    # Meters per degree of latitude, close enough for a simulation
    METERS_PER_DEG = 111320.0
    
    def __init__(self, latitude: float = 30.2849, longitude: float = -97.7341,
                 altitude: float = 150.0, radius_m: float = 50.0,
                 speed_ms: float = 5.0, rate_hz: float = 50.0,
                 align_after_s: float = 1.0,
                 queue_size: int = SOURCE_QUEUE_SIZE):
        super().__init__(queue_size)
        self.latitude = latitude
        self.longitude = longitude
        self.altitude = altitude
        self.radius_m = radius_m
        self.speed_ms = speed_ms
        self.rate_hz = rate_hz
        self.align_after_s = align_after_s
        self.sim_time_start = 0.0
    
    def connect(self) -> None:
        self.sim_time_start = time.time()
        self._start_reader()
        logger.info("simulation: running at %.1f Hz", self.rate_hz)
    
    def sample_at(self, t: float, timestamp: float) -> RawSample:
        """Simulated sample t seconds into the run."""
        angular_velocity = self.speed_ms / self.radius_m
        angle = angular_velocity * t
        
        # Counter-clockwise circle starting due east of the center
        east = self.radius_m * math.cos(angle)
        north = self.radius_m * math.sin(angle)
        lat = self.latitude + north / self.METERS_PER_DEG
        lon = self.longitude + east / (self.METERS_PER_DEG * math.cos(math.radians(self.latitude)))
        
        # Travel direction is 90 degrees ahead of the radius
        yaw_deg = math.degrees(angle) + 90.0
        heading = (90.0 - yaw_deg) % 360.0
        
        if t < self.align_after_s:
            alignment = AlignmentStatus.INVALID
        elif t < 2 * self.align_after_s:
            alignment = AlignmentStatus.FINE
        else:
            alignment = AlignmentStatus.FULL
        
        return RawSample(
            timestamp=timestamp,
            latitude=lat,
            longitude=lon,
            altitude=self.altitude,
            heading=heading,
            roll=0.0,
            pitch=0.0,
            speed=self.speed_ms,
            vel_down=0.0,
            arate_x=0.0,
            arate_y=0.0,
            # Counter-clockwise turn is negative about the down axis
            arate_z=-math.degrees(angular_velocity),
            alignment=alignment
        )
    
    def _reader_loop(self) -> None:
        period = 1.0 / self.rate_hz
        while self.running:
            now = time.time()
            self._enqueue(self.sample_at(now - self.sim_time_start, now))
            self._sleep(period)
