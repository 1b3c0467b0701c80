"""Domain models for the traffic simulation."""

from robot_traffic.domain.models.pipeline import Instruction, SkipReason
from robot_traffic.domain.models.point import Point, RoutePoint
from robot_traffic.domain.models.station import Station
from robot_traffic.domain.models.traffic_report import (
    REPORT_TIME_FORMAT,
    TrafficCondition,
    TrafficReport,
)
from robot_traffic.domain.models.vehicle_state import VehicleState

__all__ = [
    "REPORT_TIME_FORMAT",
    "Instruction",
    "Point",
    "RoutePoint",
    "SkipReason",
    "Station",
    "TrafficCondition",
    "TrafficReport",
    "VehicleState",
]
