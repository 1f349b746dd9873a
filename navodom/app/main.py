#!/usr/bin/env python3
"""
Odometry driver for a GPS/inertial positioning device.

Publishes the vehicle pose and velocity in a local map frame, the
vehicle to map transform and the GPS status, one JSON object per line.
"""

import argparse
import logging
import signal
import sys
from typing import List, Optional

from .config import Config
from .hardware import SerialDeviceSource, CaptureSource, FixtureSource, SimulatedSource
from ..bus import MessageBus, JsonLinesSink
from ..exceptions import ConfigError, SourceUnavailableError
from ..odometry.driver import CycleDriver
from ..sensors.source import SampleSource

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_DEVICE_UNAVAILABLE = 2
EXIT_BAD_PARAMETERS = 9

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser exiting with the bad-parameters status."""
    
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_BAD_PARAMETERS, f"{self.prog}: error: {message}\n")

def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="navodom",
        description="GPS/inertial odometry driver",
        epilog="Example:\n  navodom -q 2 -o odom.jsonl",
        formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("-c", "--config", help="JSON configuration file")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("-f", "--capture", metavar="FILE",
                        help="replay a recorded capture from FILE")
    source.add_argument("-t", "--test", metavar="FILE",
                        help="run with fake data from FILE, one batch per cycle")
    source.add_argument("-s", "--simulate", action="store_true",
                        help="use the simulated device")
    parser.add_argument("-q", "--queue-depth", type=int, metavar="N",
                        help="topic queue depth (default: 1)")
    parser.add_argument("-r", "--rate", type=float, metavar="HZ",
                        help="driver cycle rate")
    parser.add_argument("-o", "--output", metavar="FILE",
                        help="write published messages to FILE ('-' for stdout)")
    parser.add_argument("-n", "--cycles", type=int, metavar="N",
                        help="stop after N cycles")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="log at DEBUG level")
    return parser

def apply_arguments(config: Config, args: argparse.Namespace) -> None:
    """Override configuration values with command line options."""
    if args.capture:
        config.set("data_source", "capture")
        config.set("capture_file", args.capture)
    elif args.test:
        config.set("data_source", "test")
        config.set("test_file", args.test)
    elif args.simulate:
        config.set("data_source", "simulation")
    
    if args.queue_depth is not None:
        config.set("queue_depth", max(1, args.queue_depth))
    if args.rate is not None:
        config.set("frequency_hz", args.rate)
    if args.output is not None:
        config.set("output_file", args.output)
    if args.verbose:
        config.set("log_level", "DEBUG")

def setup_logging(level: str, log_file: str = "") -> None:
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT,
                        handlers=handlers, force=True)

def create_source(config: Config) -> SampleSource:
    """Create the sample source selected by the configuration."""
    data_source = config.data_source
    if data_source == "capture":
        return CaptureSource(config.capture_file, config.replay_speed)
    if data_source == "test":
        return FixtureSource(config.test_file)
    if data_source == "simulation":
        return SimulatedSource(**config.simulation)
    return SerialDeviceSource(config.serial_port, config.baud_rate)

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    
    try:
        config = Config(args.config)
        apply_arguments(config, args)
        config.validate()
        setup_logging(config.log_level, config.log_file)
    except (ConfigError, ValueError) as e:
        print(f"navodom: {e}", file=sys.stderr)
        return EXIT_BAD_PARAMETERS
    
    logger.info("topic queue depth = %d", config.queue_depth)
    
    output = None
    if config.output_file and config.output_file != "-":
        try:
            output = open(config.output_file, "w")
        except OSError as e:
            logger.error("cannot open output file: %s", e)
            return EXIT_BAD_PARAMETERS
    
    source = create_source(config)
    try:
        source.connect()
    except SourceUnavailableError as e:
        logger.error("data source unavailable: %s", e)
        if output is not None:
            output.close()
        return EXIT_DEVICE_UNAVAILABLE
    
    bus = MessageBus(queue_depth=config.queue_depth)
    driver = CycleDriver(
        source, bus,
        frequency_hz=config.frequency_hz,
        grid_size=config.grid_size_m,
        frame_id=config.odom_frame,
        child_frame_id=config.vehicle_frame,
        initial_gear=config.initial_gear)
    
    if config.output_file == "-":
        JsonLinesSink(sys.stdout).attach(bus)
    elif output is not None:
        JsonLinesSink(output).attach(bus)
    
    def _signal_handler(signum, frame):
        logger.info("shutdown signal received, stopping driver")
        driver.stop()
    
    previous_int = signal.signal(signal.SIGINT, _signal_handler)
    previous_term = signal.signal(signal.SIGTERM, _signal_handler)
    
    try:
        driver.run(max_cycles=args.cycles)
    finally:
        signal.signal(signal.SIGINT, previous_int)
        signal.signal(signal.SIGTERM, previous_term)
        if output is not None:
            output.close()
    
    stats = driver.get_statistics()
    logger.info("published %d of %d cycles", stats['published'], stats['cycles'])
    return EXIT_OK

if __name__ == "__main__":
    sys.exit(main())
