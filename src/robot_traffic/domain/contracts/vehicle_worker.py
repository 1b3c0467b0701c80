"""Protocol for the dispatcher's view of a vehicle worker."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from robot_traffic.domain.models.point import RoutePoint


class VehicleWorkerProtocol(Protocol):
    """Handle through which the dispatcher drives a single vehicle."""

    vehicle_id: int

    async def deliver(self, route_point: "RoutePoint") -> bool:
        """Push a route point, waiting while the inbox is full.

        Returns:
            False if the worker has already stopped and the point was dropped.
        """
        ...

    async def wait_idle(self) -> None:
        """Wait until the points already delivered have been processed."""
        ...

    def halt(self) -> None:
        """Stop immediately, discarding queued points."""
        ...

    async def close(self) -> None:
        """Signal end of stream; queued points are processed first."""
        ...

    async def wait_acknowledged(self) -> None:
        """Wait for the worker's shutdown acknowledgement."""
        ...
