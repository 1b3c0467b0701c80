"""Application layer: the simulation pipeline."""

from robot_traffic.application.dispatcher import Dispatcher, parse_record
from robot_traffic.application.errors import (
    RecordParseError,
    ShutdownProtocolError,
    SimulationError,
    TerminationError,
)
from robot_traffic.application.report_sink import ReportSink
from robot_traffic.application.simulation import SimulationResult, TrafficSimulation
from robot_traffic.application.station_index import StationIndex
from robot_traffic.application.vehicle_worker import VehicleWorker

__all__ = [
    "Dispatcher",
    "RecordParseError",
    "ReportSink",
    "ShutdownProtocolError",
    "SimulationError",
    "SimulationResult",
    "StationIndex",
    "TerminationError",
    "TrafficSimulation",
    "VehicleWorker",
    "parse_record",
]
