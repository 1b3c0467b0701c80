"""Great-circle distance, speed and traffic classification."""

import math

from robot_traffic.domain.models import Point, TrafficCondition

EARTH_RADIUS_KM = 6371.0
NEARBY_STATION_PROXIMITY_KM = 0.35


def distance_km(a: Point, b: Point) -> float:
    """Haversine distance in km between two points."""
    d_lat = math.radians(b.lat - a.lat)
    d_lon = math.radians(b.lon - a.lon)

    h = math.sin(d_lat / 2) * math.sin(d_lat / 2) + math.cos(math.radians(a.lat)) * math.cos(
        math.radians(b.lat)
    ) * math.sin(d_lon / 2) * math.sin(d_lon / 2)

    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def speed_kmh(distance: float, elapsed_seconds: float) -> float:
    """Average speed in km/h for `distance` km covered in `elapsed_seconds`.

    Returns 0 when either value is exactly zero.
    """
    if distance == 0 or elapsed_seconds == 0:
        return 0.0
    return distance / (elapsed_seconds / 3600.0)


def classify(speed: float, distance: float) -> TrafficCondition:
    """Classify traffic from speed (km/h) and distance travelled (km).

    Rules are evaluated in order and the first match wins.
    """
    if (distance < 2 and speed < 24.14) or (distance > 4 and speed < 40.23):
        return TrafficCondition.HEAVY
    if distance < 1 and speed < 32.19:
        return TrafficCondition.MODERATE
    return TrafficCondition.LIGHT
