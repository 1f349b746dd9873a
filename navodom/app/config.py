"""
Configuration manager for the odometry driver.
"""

import copy
import json
import logging
import os
from typing import Dict, Any, Optional

from ..exceptions import ConfigError
from ..odometry.adapter import Gear

logger = logging.getLogger(__name__)

DATA_SOURCES = ("device", "capture", "test", "simulation")

class Config:
    """Configuration manager for the odometry driver."""
    
    DEFAULT_CONFIG = {
        # Data source: device, capture, test or simulation
        "data_source": "device",
        
        # Device configuration
        "serial_port": "/dev/ttyUSB0",
        "baud_rate": 115200,
        
        # Recorded data
        "capture_file": "",
        "test_file": "",
        "replay_speed": 1.0,
        
        # Driver
        "frequency_hz": 50.0,
        "queue_depth": 1,
        "grid_size_m": 10000.0,
        "initial_gear": "DRIVE",
        "frames": {
            "odom": "odom",
            "vehicle": "vehicle"
        },
        
        # Output
        "output_file": "",
        
        # Logging
        "log_level": "INFO",
        "log_file": "",
        
        # Simulated device
        "simulation": {
            "latitude": 30.2849,
            "longitude": -97.7341,
            "altitude": 150.0,
            "radius_m": 50.0,
            "speed_ms": 5.0,
            "rate_hz": 50.0,
            "align_after_s": 1.0
        }
    }
    
    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.
        
        Args:
            config_file: Path to a JSON configuration file, or None for defaults
        """
        self.config_file = config_file
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        
        if config_file:
            if not os.path.exists(config_file):
                raise ConfigError(f"config file {config_file} not found")
            self.load_config()
    
    def load_config(self) -> None:
        """
        Load configuration from file.
        
        Raises:
            ConfigError: if the file cannot be read or parsed
        """
        try:
            with open(self.config_file, 'r') as f:
                file_config = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"failed to load config {self.config_file}: {e}") from e
        
        if not isinstance(file_config, dict):
            raise ConfigError(f"config {self.config_file} must hold a JSON object")
        
        # File config overrides defaults
        self._merge_config(self.config, file_config)
        logger.info("Configuration loaded from %s", self.config_file)
    
    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]):
        """Recursively merge configuration dictionaries."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value
    
    def get(self, key: str, default=None):
        """Get configuration value with optional default."""
        keys = key.split('.')
        value = self.config
        
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        
        return value
    
    def set(self, key: str, value: Any):
        """Set configuration value."""
        keys = key.split('.')
        config = self.config
        
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]
        
        config[keys[-1]] = value
    
    def validate(self) -> None:
        """
        Check configuration values.
        
        Raises:
            ConfigError: on the first invalid value
        """
        if self.data_source not in DATA_SOURCES:
            raise ConfigError(
                f"data_source must be one of {', '.join(DATA_SOURCES)}, "
                f"got {self.data_source!r}")
        if self.data_source == "capture" and not self.capture_file:
            raise ConfigError("capture data source needs capture_file")
        if self.data_source == "test" and not self.test_file:
            raise ConfigError("test data source needs test_file")
        for key in ("frequency_hz", "grid_size_m", "replay_speed"):
            if self._number(key) <= 0:
                raise ConfigError(f"{key} must be positive")
        self._number("queue_depth")
        self._number("baud_rate")
        
        simulation = self.simulation
        if not isinstance(simulation, dict):
            raise ConfigError("simulation must be an object")
        unknown = set(simulation) - set(self.DEFAULT_CONFIG["simulation"])
        if unknown:
            raise ConfigError(
                f"unknown simulation settings: {', '.join(sorted(unknown))}")
        for key in simulation:
            self._number(f"simulation.{key}")
        
        # Checked for its exception
        self.initial_gear
    
    def _number(self, key: str) -> float:
        value = self.get(key)
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{key} must be a number, got {value!r}") from e
    
    # Property accessors for common configuration values
    @property
    def data_source(self) -> str:
        return self.config["data_source"]
    
    @property
    def serial_port(self) -> str:
        return self.config["serial_port"]
    
    @property
    def baud_rate(self) -> int:
        return int(self.config["baud_rate"])
    
    @property
    def capture_file(self) -> str:
        return self.config["capture_file"]
    
    @property
    def test_file(self) -> str:
        return self.config["test_file"]
    
    @property
    def frequency_hz(self) -> float:
        return float(self.config["frequency_hz"])
    
    @property
    def replay_speed(self) -> float:
        return float(self.config["replay_speed"])
    
    @property
    def queue_depth(self) -> int:
        # Topic queues hold at least one message
        return max(1, int(self.config["queue_depth"]))
    
    @property
    def grid_size_m(self) -> float:
        return float(self.config["grid_size_m"])
    
    @property
    def initial_gear(self) -> Gear:
        value = self.config["initial_gear"]
        try:
            if isinstance(value, str):
                return Gear[value.upper()]
            return Gear(value)
        except (KeyError, ValueError) as e:
            raise ConfigError(f"unknown initial_gear {value!r}") from e
    
    @property
    def odom_frame(self) -> str:
        return self.config["frames"]["odom"]
    
    @property
    def vehicle_frame(self) -> str:
        return self.config["frames"]["vehicle"]
    
    @property
    def output_file(self) -> str:
        return self.config["output_file"]
    
    @property
    def log_level(self) -> str:
        return self.config["log_level"]
    
    @property
    def log_file(self) -> str:
        return self.config["log_file"]
    
    @property
    def simulation(self) -> Dict[str, float]:
        return self.config["simulation"]
