"""
Command line application for the odometry driver.
"""

from .config import Config

__all__ = ["Config"]
