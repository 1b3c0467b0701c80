"""Errors raised by the simulation pipeline."""

from robot_traffic.domain.models.pipeline import SkipReason


class SimulationError(Exception):
    """Base class for fatal simulation errors."""


class ShutdownProtocolError(SimulationError):
    """A worker stopped without acknowledging shutdown."""

    def __init__(self, vehicle_id: int) -> None:
        super().__init__(f"Robot {vehicle_id} stopped without acknowledging shutdown")
        self.vehicle_id = vehicle_id


class TerminationError(SimulationError):
    """The dispatcher control loop ended without signalling termination."""

    def __init__(self) -> None:
        super().__init__("Dispatcher stopped without signalling termination")


class RecordParseError(ValueError):
    """A raw route record could not be parsed. Never fatal."""

    def __init__(self, reason: SkipReason, detail: str) -> None:
        super().__init__(f"{reason.value}: {detail}")
        self.reason = reason
        self.detail = detail
