"""
Fixed-rate odometry driver cycle.
"""

import logging
import threading
import time
from enum import Enum
from typing import Optional

from .acquirer import SampleAcquirer
from .adapter import ConventionAdapter, Gear, GearCell
from .messages import GpsInfo, make_pose_messages, ODOM_FRAME, VEHICLE_FRAME
from .normalizer import CoordinateNormalizer
from .state import Position3D
from ..bus import MessageBus
from ..math.constants import DEFAULT_FREQUENCY_HZ, ORIGIN_GRID_M
from ..sensors.projection import to_utm
from ..sensors.source import SampleSource

logger = logging.getLogger(__name__)

ODOM_TOPIC = "odom"
GPS_TOPIC = "gps"
TF_TOPIC = "tf"
SHIFTER_TOPIC = "shifter/state"

class DriverState(Enum):
    IDLE = "idle"            # waiting for the first valid fix
    TRACKING = "tracking"    # map origin set, publishing

class Rate:
    """Sleeps to keep a loop at a fixed frequency."""
    
    def __init__(self, frequency_hz: float, clock=time.monotonic, sleep=time.sleep):
        if frequency_hz <= 0:
            raise ValueError("frequency_hz must be positive")
        self.period = 1.0 / frequency_hz
        self._clock = clock
        self._sleep = sleep
        self._next = clock() + self.period
    
    def sleep(self) -> None:
        """Sleep until the start of the next cycle."""
        now = self._clock()
        remaining = self._next - now
        if remaining > 0:
            self._sleep(remaining)
            self._next += self.period
        else:
            # Overran the cycle; restart the schedule from now
            self._next = now + self.period

class CycleDriver:
    """
    Odometry driver for a GPS/inertial positioning device.
    
    Each cycle takes the newest converged sample, projects it to UTM,
    translates it into the local map frame, converts it to robot
    conventions and publishes odometry, transform and GPS status. The
    first accepted sample only fixes the map origin.
    """
    
    def __init__(self,
                 source: SampleSource,
                 bus: MessageBus,
                 frequency_hz: float = DEFAULT_FREQUENCY_HZ,
                 grid_size: float = ORIGIN_GRID_M,
                 frame_id: str = ODOM_FRAME,
                 child_frame_id: str = VEHICLE_FRAME,
                 initial_gear: Gear = Gear.DRIVE):
        """
        Initialize the driver.
        
        Args:
            source: Navigation sample source, connected by the caller
            bus: Message bus for gear input and odometry output
            frequency_hz: Cycle rate
            grid_size: Map origin grid in meters
            frame_id: Odometry reference frame
            child_frame_id: Vehicle body frame
            initial_gear: Gear assumed before any notification arrives
        """
        self.source = source
        self.bus = bus
        self.frequency_hz = frequency_hz
        self.frame_id = frame_id
        self.child_frame_id = child_frame_id
        
        self.acquirer = SampleAcquirer(source)
        self.normalizer = CoordinateNormalizer(grid_size)
        self.adapter = ConventionAdapter()
        self.gear = GearCell(initial_gear)
        
        self.state = DriverState.IDLE
        self.position = Position3D()
        self.odom_time: Optional[float] = None
        
        self.odom_pub = bus.advertise(ODOM_TOPIC)
        self.gps_pub = bus.advertise(GPS_TOPIC)
        self.tf_pub = bus.advertise(TF_TOPIC)
        bus.subscribe(SHIFTER_TOPIC, self.on_shifter)
        
        self._stop_event = threading.Event()
        
        # Statistics
        self.cycle_count = 0
        self.publish_count = 0
    
    def on_shifter(self, message) -> None:
        """Gear notification handler."""
        gear = getattr(message, "gear", message)
        try:
            self.gear.set(gear)
        except ValueError:
            logger.warning("ignoring unknown gear %r", gear)
    
    def spin_once(self) -> bool:
        """
        Run one acquire, normalize, adapt and publish cycle.
        
        Returns:
            True if odometry was published
        """
        self.cycle_count += 1
        
        sample = self.acquirer.acquire()
        if sample is None:
            logger.debug("no data this cycle")
            return False
        
        coord = to_utm(sample.latitude, sample.longitude)
        
        pos = self.position.pos
        pos.x, pos.y, pos.z = coord.easting, coord.northing, sample.altitude
        self.adapter.apply_orientation(sample, pos)
        
        if self.normalizer.normalize(pos):
            self.state = DriverState.TRACKING
            logger.info("map origin set, tracking (zone %s)", coord.zone)
            return False
        
        self.odom_time = sample.timestamp
        self.position.vel = self.adapter.adapt(sample, self.gear.get())
        
        self._publish(sample, coord)
        return True
    
    def _publish(self, sample, coord) -> None:
        self.gps_pub.publish(GpsInfo.from_sample(sample, coord, self.frame_id))
        
        transform, odom = make_pose_messages(
            self.position, self.odom_time, self.frame_id, self.child_frame_id)
        self.tf_pub.publish(transform)
        self.odom_pub.publish(odom)
        
        self.publish_count += 1
    
    def run(self, max_cycles: Optional[int] = None, rate: Optional[Rate] = None) -> None:
        """
        Cycle at the configured rate until stopped.
        
        Args:
            max_cycles: Stop after this many cycles (None runs until stop())
            rate: Cycle pacing, defaults to the configured frequency
        """
        rate = rate or Rate(self.frequency_hz)
        cycles = 0
        
        logger.info("starting main loop at %.1f Hz", self.frequency_hz)
        try:
            while not self._stop_event.is_set():
                if max_cycles is not None and cycles >= max_cycles:
                    break
                self.spin_once()
                cycles += 1
                rate.sleep()
        finally:
            logger.info("exiting main loop after %d cycles", cycles)
            self.source.close()
    
    def stop(self) -> None:
        """Ask the loop to exit before its next cycle."""
        self._stop_event.set()
    
    @property
    def running(self) -> bool:
        return not self._stop_event.is_set()
    
    def get_statistics(self) -> dict:
        """Get driver statistics."""
        origin = self.normalizer.origin
        return {
            'state': self.state.value,
            'cycles': self.cycle_count,
            'published': self.publish_count,
            'gear': self.gear.get().name,
            'map_origin': None if origin is None else (origin.x, origin.y, origin.z),
            'acquirer': self.acquirer.get_statistics(),
            'source': self.source.get_statistics()
        }
