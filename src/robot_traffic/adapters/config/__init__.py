"""Configuration adapters."""

from robot_traffic.adapters.config.app_config import AppConfig

__all__ = ["AppConfig"]
