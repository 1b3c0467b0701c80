"""Control-plane and diagnostic enums shared across the pipeline."""

from enum import StrEnum


class Instruction(StrEnum):
    """Instructions sent to the dispatcher's control loop."""

    SHUTDOWN = "SHUTDOWN"


class SkipReason(StrEnum):
    """Why a route record was dropped before reaching a worker."""

    MALFORMED_RECORD = "malformed record"
    INVALID_VEHICLE_ID = "invalid vehicle id"
    INVALID_LATITUDE = "invalid latitude"
    INVALID_LONGITUDE = "invalid longitude"
    INVALID_TIMESTAMP = "invalid timestamp"
    UNKNOWN_VEHICLE = "unknown vehicle"
    WORKER_STOPPED = "worker stopped"
