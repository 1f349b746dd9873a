#!/usr/bin/env python3
"""
Basic usage example of the odometry driver.

This example runs the driver against the simulated positioning device
and an in-process message bus, without any hardware.
"""

import sys
import os
import threading
import time
import numpy as np

# Add package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from navodom.bus import MessageBus
from navodom.app.hardware import SimulatedSource
from navodom.odometry import CycleDriver, Gear, Odometry
from navodom.odometry.driver import ODOM_TOPIC, SHIFTER_TOPIC

def print_status(odom: Odometry):
    """Print a published odometry message."""
    pose = odom.pose
    print(f"Time: {odom.stamp:.2f}")
    print(f"  Position: [{pose.x:7.2f}, {pose.y:7.2f}, {pose.z:5.2f}] m")
    print(f"  Heading:  {pose.yaw:6.3f} rad ({np.degrees(pose.yaw):6.1f}°)")
    print(f"  Speed:    {odom.twist.x:5.2f} m/s, yaw rate {odom.twist.yaw:6.3f} rad/s")
    print()

def main():
    """Main example function."""
    print("Odometry Driver - Basic Usage Example")
    print("=" * 50)
    
    bus = MessageBus()
    source = SimulatedSource(radius_m=30.0, speed_ms=3.0, rate_hz=20.0, align_after_s=0.5)
    source.connect()
    
    driver = CycleDriver(source, bus, frequency_hz=20.0)
    
    last_print_time = 0.0
    print_interval = 1.0
    
    def on_odom(odom):
        nonlocal last_print_time
        if odom.stamp - last_print_time >= print_interval:
            print_status(odom)
            last_print_time = odom.stamp
    
    bus.subscribe(ODOM_TOPIC, on_odom)
    
    print("Driving for 6 seconds...")
    driver_thread = threading.Thread(target=driver.run, kwargs={"max_cycles": 120})
    driver_thread.start()
    
    # Gear changes arrive asynchronously, between cycles
    time.sleep(4.0)
    print("Shifting to reverse...")
    bus.publish(SHIFTER_TOPIC, Gear.REVERSE)
    
    driver_thread.join()
    
    stats = driver.get_statistics()
    print("\n=== Final Statistics ===")
    print(f"Cycles:      {stats['cycles']}")
    print(f"Published:   {stats['published']}")
    print(f"Map origin:  {stats['map_origin']}")
    print(f"Acquirer:    {stats['acquirer']}")

if __name__ == "__main__":
    main()
