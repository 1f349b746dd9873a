#!/usr/bin/env python3
"""
Unit tests for the odometry components.
"""

import math
import unittest
import numpy as np
import sys
import os

# Add package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from navodom.math import normalize_angle, compass_to_yaw, quaternion_from_rpy, snap_to_grid
from navodom.odometry import (SampleAcquirer, CoordinateNormalizer, ConventionAdapter,
                              Gear, GearCell, Pose3D, MapOrigin)
from navodom.odometry.messages import GpsQuality, quality_from_alignment
from navodom.sensors import RawSample, AlignmentStatus, SampleSource, QueuedSampleSource

def make_sample(timestamp=1.0, alignment=AlignmentStatus.FULL, **overrides):
    """Build a sample with neutral defaults."""
    values = dict(
        timestamp=timestamp,
        latitude=30.2849,
        longitude=-97.7341,
        altitude=150.0,
        heading=0.0,
        roll=0.0,
        pitch=0.0,
        speed=0.0,
        vel_down=0.0,
        arate_x=0.0,
        arate_y=0.0,
        arate_z=0.0,
        alignment=alignment
    )
    values.update(overrides)
    return RawSample(**values)

class BatchSource(SampleSource):
    """Source queuing one list of samples per cycle."""
    
    def __init__(self, batches):
        self.batches = [list(batch) for batch in batches]
        self.current = None
    
    def connect(self):
        pass
    
    def get_sample(self):
        if self.current is None:
            self.current = self.batches.pop(0) if self.batches else []
        if self.current:
            return self.current.pop(0)
        self.current = None
        return None

class StalledSource(QueuedSampleSource):
    """Queued source whose reader thread never runs."""
    
    name = "stalled"
    
    def connect(self):
        pass
    
    def _reader_loop(self):
        pass

class TestAngleMath(unittest.TestCase):
    """Test angle helpers."""
    
    def test_normalize_angle_range(self):
        """Normalized angles lie in (-pi, pi]."""
        for angle in np.linspace(-20.0, 20.0, 401):
            result = normalize_angle(angle)
            self.assertGreater(result, -math.pi)
            self.assertLessEqual(result, math.pi)
            self.assertAlmostEqual(math.cos(result), math.cos(angle), places=9)
            self.assertAlmostEqual(math.sin(result), math.sin(angle), places=9)
    
    def test_normalize_angle_boundaries(self):
        """Both pi and -pi map to pi."""
        self.assertAlmostEqual(normalize_angle(math.pi), math.pi)
        self.assertAlmostEqual(normalize_angle(-math.pi), math.pi)
        self.assertAlmostEqual(normalize_angle(0.0), 0.0)
    
    def test_compass_to_yaw(self):
        """North is pi/2, East is 0, South is -pi/2, West is pi."""
        self.assertAlmostEqual(compass_to_yaw(0.0), math.pi / 2)
        self.assertAlmostEqual(compass_to_yaw(90.0), 0.0)
        self.assertAlmostEqual(compass_to_yaw(180.0), -math.pi / 2)
        self.assertAlmostEqual(compass_to_yaw(270.0), math.pi)
        self.assertAlmostEqual(compass_to_yaw(360.0), math.pi / 2)
    
    def test_quaternion_from_yaw(self):
        """Pure yaw rotates about Z."""
        q = quaternion_from_rpy(0.0, 0.0, math.pi / 2)
        np.testing.assert_allclose(q, [0.0, 0.0, math.sqrt(0.5), math.sqrt(0.5)], atol=1e-12)
    
    def test_quaternion_is_unit(self):
        """Quaternions have unit norm."""
        q = quaternion_from_rpy(0.3, -0.2, 2.5)
        self.assertAlmostEqual(np.linalg.norm(q), 1.0)
    
    def test_snap_to_grid(self):
        """Values round to the nearest grid multiple."""
        self.assertEqual(snap_to_grid(12345.0, 10000.0), 10000.0)
        self.assertEqual(snap_to_grid(67890.0, 10000.0), 70000.0)
        self.assertEqual(snap_to_grid(15000.0, 10000.0), 20000.0)
        self.assertEqual(snap_to_grid(-15000.0, 10000.0), -20000.0)
        self.assertEqual(snap_to_grid(4999.9, 10000.0), 0.0)
    
    def test_snap_to_grid_halfway_to_even(self):
        """Halfway values round to the even grid multiple."""
        self.assertEqual(snap_to_grid(25000.0, 10000.0), 20000.0)
        self.assertEqual(snap_to_grid(-25000.0, 10000.0), -20000.0)
        self.assertEqual(snap_to_grid(5000.0, 10000.0), 0.0)
        self.assertEqual(snap_to_grid(35000.0, 10000.0), 40000.0)

class TestSampleAcquirer(unittest.TestCase):
    """Test SampleAcquirer class."""
    
    def test_keeps_latest_sample(self):
        """Only the newest of several queued samples is returned."""
        source = BatchSource([[make_sample(1.0), make_sample(2.0), make_sample(3.0)]])
        acquirer = SampleAcquirer(source)
        
        sample = acquirer.acquire()
        
        self.assertEqual(sample.timestamp, 3.0)
        self.assertEqual(acquirer.last_timestamp, 3.0)
        self.assertEqual(acquirer.discarded_count, 2)
    
    def test_overfilled_queue_keeps_newest(self):
        """A full source queue discards its oldest samples first."""
        source = StalledSource(queue_size=3)
        for timestamp in (1.0, 2.0, 3.0, 4.0, 5.0):
            source._enqueue(make_sample(timestamp))
        
        sample = SampleAcquirer(source).acquire()
        
        self.assertEqual(sample.timestamp, 5.0)
        self.assertEqual(source.samples_dropped, 2)
        self.assertEqual(source.samples_received, 5)
    
    def test_empty_cycle(self):
        """No queued sample yields no data."""
        acquirer = SampleAcquirer(BatchSource([[]]))
        
        self.assertIsNone(acquirer.acquire())
        self.assertEqual(acquirer.empty_count, 1)
        self.assertIsNone(acquirer.last_timestamp)
    
    def test_duplicate_timestamp(self):
        """The same timestamp twice in succession yields no data the second time."""
        source = BatchSource([[make_sample(5.0)], [make_sample(5.0)], [make_sample(6.0)]])
        acquirer = SampleAcquirer(source)
        
        self.assertIsNotNone(acquirer.acquire())
        self.assertIsNone(acquirer.acquire())
        self.assertEqual(acquirer.duplicate_count, 1)
        self.assertEqual(acquirer.acquire().timestamp, 6.0)
    
    def test_invalid_alignment(self):
        """Unaligned solutions are rejected even with a new timestamp."""
        source = BatchSource([
            [make_sample(1.0, AlignmentStatus.INVALID)],
            [make_sample(2.0, AlignmentStatus.INVALID)],
            [make_sample(3.0, AlignmentStatus.FINE)],
        ])
        acquirer = SampleAcquirer(source)
        
        self.assertIsNone(acquirer.acquire())
        self.assertIsNone(acquirer.acquire())
        self.assertEqual(acquirer.unaligned_count, 2)
        self.assertIsNone(acquirer.last_timestamp)
        
        self.assertEqual(acquirer.acquire().timestamp, 3.0)
    
    def test_unaligned_does_not_update_timestamp(self):
        """A rejected sample does not count as the last accepted one."""
        source = BatchSource([
            [make_sample(1.0)],
            [make_sample(2.0, AlignmentStatus.INVALID)],
            [make_sample(2.0)],
        ])
        acquirer = SampleAcquirer(source)
        
        acquirer.acquire()
        self.assertIsNone(acquirer.acquire())
        self.assertEqual(acquirer.acquire().timestamp, 2.0)
    
    def test_statistics(self):
        """Statistics report every counter."""
        stats = SampleAcquirer(BatchSource([])).get_statistics()
        
        for key in ['accepted', 'empty', 'duplicates', 'unaligned', 'discarded', 'last_timestamp']:
            self.assertIn(key, stats)

class TestCoordinateNormalizer(unittest.TestCase):
    """Test CoordinateNormalizer class."""
    
    def setUp(self):
        self.normalizer = CoordinateNormalizer()
    
    def test_grid_snapped_origin(self):
        """The first pose sets an origin on the 10 km grid."""
        pose, is_first = self.normalizer.to_local(12345.0, 67890.0, 150.0)
        
        self.assertTrue(is_first)
        self.assertEqual(self.normalizer.origin, MapOrigin(10000.0, 70000.0, 150.0))
        self.assertAlmostEqual(pose.x, 2345.0)
        self.assertAlmostEqual(pose.y, -2110.0)
        self.assertAlmostEqual(pose.z, 0.0)
    
    def test_halfway_origin_rounds_to_even(self):
        """A first pose halfway between grid lines snaps to the even line."""
        pose, _ = self.normalizer.to_local(25000.0, 3345000.0, 0.0)
        
        self.assertEqual(self.normalizer.origin, MapOrigin(20000.0, 3340000.0, 0.0))
        self.assertAlmostEqual(pose.x, 5000.0)
        self.assertAlmostEqual(pose.y, 5000.0)
    
    def test_first_call_only(self):
        """Only the first call reports the initial pose."""
        _, first = self.normalizer.to_local(620000.0, 3350000.0, 10.0)
        _, second = self.normalizer.to_local(620000.0, 3350000.0, 10.0)
        _, third = self.normalizer.to_local(1.0, 2.0, 3.0)
        
        self.assertTrue(first)
        self.assertFalse(second)
        self.assertFalse(third)
    
    def test_origin_never_changes(self):
        """Later poses far away do not move the origin."""
        self.normalizer.to_local(12345.0, 67890.0, 150.0)
        origin = self.normalizer.origin
        
        self.normalizer.to_local(99999.0, 11111.0, -40.0)
        
        self.assertEqual(self.normalizer.origin, origin)
    
    def test_translation_invariance(self):
        """Local deltas equal projected deltas."""
        self.normalizer.to_local(621234.5, 3351234.5, 149.0)
        
        p1, _ = self.normalizer.to_local(621300.25, 3351200.75, 151.5)
        p2, _ = self.normalizer.to_local(621250.0, 3351290.0, 148.0)
        
        self.assertAlmostEqual(p1.x - p2.x, 621300.25 - 621250.0)
        self.assertAlmostEqual(p1.y - p2.y, 3351200.75 - 3351290.0)
        self.assertAlmostEqual(p1.z - p2.z, 151.5 - 148.0)
    
    def test_orientation_untouched(self):
        """Normalizing changes only the position."""
        pose = Pose3D(x=12345.0, y=67890.0, z=5.0, roll=0.1, pitch=-0.2, yaw=1.5)
        
        self.normalizer.normalize(pose)
        
        self.assertEqual((pose.roll, pose.pitch, pose.yaw), (0.1, -0.2, 1.5))
    
    def test_restart_reuses_origin(self):
        """Two runs starting near each other pick the same origin."""
        other = CoordinateNormalizer()
        
        self.normalizer.to_local(621234.0, 3351234.0, 150.0)
        other.to_local(622890.0, 3349100.0, 170.0)
        
        self.assertEqual(self.normalizer.origin.x, other.origin.x)
        self.assertEqual(self.normalizer.origin.y, other.origin.y)
    
    def test_no_origin_before_first_pose(self):
        self.assertIsNone(self.normalizer.origin)
        self.assertFalse(self.normalizer.has_origin)
    
    def test_invalid_grid(self):
        with self.assertRaises(ValueError):
            CoordinateNormalizer(grid_size=0.0)

class TestConventionAdapter(unittest.TestCase):
    """Test ConventionAdapter class."""
    
    def setUp(self):
        self.adapter = ConventionAdapter()
    
    def test_gear_sign_flip(self):
        """Reverse gear negates the forward speed."""
        sample = make_sample(speed=5.0)
        
        self.assertAlmostEqual(self.adapter.adapt(sample, Gear.REVERSE).x, -5.0)
        self.assertAlmostEqual(self.adapter.adapt(sample, Gear.DRIVE).x, 5.0)
        self.assertAlmostEqual(self.adapter.adapt(sample, Gear.NEUTRAL).x, 5.0)
    
    def test_linear_velocity(self):
        """Lateral velocity is zero and vertical velocity points up."""
        vel = self.adapter.adapt(make_sample(speed=3.0, vel_down=0.5), Gear.DRIVE)
        
        self.assertEqual(vel.y, 0.0)
        self.assertAlmostEqual(vel.z, -0.5)
    
    def test_angular_rates(self):
        """Rates convert to radians with pitch and yaw inverted."""
        vel = self.adapter.adapt(
            make_sample(arate_x=10.0, arate_y=20.0, arate_z=30.0), Gear.DRIVE)
        
        self.assertAlmostEqual(vel.roll, math.radians(10.0))
        self.assertAlmostEqual(vel.pitch, -math.radians(20.0))
        self.assertAlmostEqual(vel.yaw, -math.radians(30.0))
    
    def test_heading_conversion(self):
        """Compass North is yaw pi/2 and East is yaw 0."""
        _, _, yaw_north = self.adapter.orient(make_sample(heading=0.0))
        _, _, yaw_east = self.adapter.orient(make_sample(heading=90.0))
        
        self.assertAlmostEqual(yaw_north, math.pi / 2)
        self.assertAlmostEqual(yaw_east, 0.0)
    
    def test_yaw_range(self):
        """Any heading converts to a yaw in (-pi, pi]."""
        for heading in np.arange(0.0, 360.0, 7.5):
            _, _, yaw = self.adapter.orient(make_sample(heading=float(heading)))
            self.assertGreater(yaw, -math.pi)
            self.assertLessEqual(yaw, math.pi)
    
    def test_roll_and_pitch(self):
        """Roll is kept and pitch inverted."""
        roll, pitch, _ = self.adapter.orient(make_sample(roll=2.0, pitch=3.0))
        
        self.assertAlmostEqual(roll, math.radians(2.0))
        self.assertAlmostEqual(pitch, -math.radians(3.0))
    
    def test_apply_orientation(self):
        """Orientation is written into the pose without moving it."""
        pose = Pose3D(x=1.0, y=2.0, z=3.0)
        
        self.adapter.apply_orientation(make_sample(heading=180.0), pose)
        
        self.assertAlmostEqual(pose.yaw, -math.pi / 2)
        self.assertEqual((pose.x, pose.y, pose.z), (1.0, 2.0, 3.0))

class TestGearCell(unittest.TestCase):
    """Test GearCell class."""
    
    def test_default_drive(self):
        self.assertEqual(GearCell().get(), Gear.DRIVE)
    
    def test_last_writer_wins(self):
        cell = GearCell()
        cell.set(Gear.REVERSE)
        cell.set(int(Gear.PARK))
        
        self.assertEqual(cell.get(), Gear.PARK)
    
    def test_unknown_gear(self):
        with self.assertRaises(ValueError):
            GearCell().set(42)

class TestGpsQuality(unittest.TestCase):
    """Test alignment to fix quality mapping."""
    
    def test_mapping(self):
        self.assertEqual(quality_from_alignment(AlignmentStatus.FULL), GpsQuality.DGPS_FIX)
        self.assertEqual(quality_from_alignment(AlignmentStatus.FINE), GpsQuality.GPS_FIX)
        self.assertEqual(quality_from_alignment(AlignmentStatus.INVALID), GpsQuality.INVALID_FIX)

if __name__ == '__main__':
    unittest.main()
