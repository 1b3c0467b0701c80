"""Pipeline observers."""

from robot_traffic.adapters.observers.logging_observer import LoggingObserver

__all__ = ["LoggingObserver"]
