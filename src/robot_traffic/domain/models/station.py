"""Station domain model."""

from dataclasses import dataclass

from robot_traffic.domain.models.point import Point


@dataclass(frozen=True)
class Station:
    """A named, fixed reference location."""

    name: str
    point: Point
