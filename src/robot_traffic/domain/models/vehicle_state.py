"""Vehicle trajectory state."""

from dataclasses import dataclass

from robot_traffic.domain.models.point import RoutePoint


@dataclass
class VehicleState:
    """Last and current route points of a single vehicle.

    Owned and mutated only by that vehicle's worker.
    """

    current: RoutePoint | None = None
    last: RoutePoint | None = None

    def is_stationary(self, route_point: RoutePoint) -> bool:
        """True if `route_point` is at exactly the same position as the last one."""
        return self.last is not None and route_point.point == self.last.point
