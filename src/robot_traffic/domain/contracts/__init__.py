"""Contracts (protocols) for pipeline components."""

from robot_traffic.domain.contracts.pipeline_observer import PipelineObserver
from robot_traffic.domain.contracts.vehicle_worker import VehicleWorkerProtocol

__all__ = ["PipelineObserver", "VehicleWorkerProtocol"]
