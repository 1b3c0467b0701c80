"""Traffic report domain model."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

REPORT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class TrafficCondition(StrEnum):
    """Traffic condition observed near a station."""

    HEAVY = "HEAVY"
    MODERATE = "MODERATE"
    LIGHT = "LIGHT"


@dataclass(frozen=True)
class TrafficReport:
    """Traffic condition reported by a vehicle passing a station."""

    vehicle_id: int
    timestamp: datetime
    speed: float  # km/h
    condition: TrafficCondition

    def to_row(self) -> list[str]:
        """Render as an output record: id, timestamp, speed (2dp), condition."""
        return [
            str(self.vehicle_id),
            self.timestamp.strftime(REPORT_TIME_FORMAT),
            f"{self.speed:.2f}",
            self.condition.value,
        ]
