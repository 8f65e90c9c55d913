from collections import namedtuple
from typing import Optional

from geopy.distance import great_circle

EARTH_RADIUS_KM = 6371.0
WALK_MAX_KM = 2.0
MIN_TRAVEL_MINUTES = 5

# average door-to-door speeds, km/h
SPEED_KMH = {
    "walk": 5.0,
    "drive": 30.0,
}

Coord = namedtuple("Coord", ["latitude", "longitude"])

# Estimated hop between two consecutive stops of the same day
TravelSegment = namedtuple("TravelSegment", [
    "distance_km",   # rounded to one decimal
    "duration_min",  # whole minutes, never below MIN_TRAVEL_MINUTES
    "mode",          # "walk" | "drive"
])


def haversine_km(a: Coord, b: Coord) -> float:
    """Great-circle distance between two coordinates in km."""
    return great_circle(
        (a.latitude, a.longitude),
        (b.latitude, b.longitude),
        radius=EARTH_RADIUS_KM,
    ).km


def travel_mode(distance_km: float) -> str:
    return "walk" if distance_km < WALK_MAX_KM else "drive"


def estimate_travel_minutes(distance_km: float, mode: str) -> int:
    hours = distance_km / SPEED_KMH.get(mode, SPEED_KMH["drive"])
    return max(MIN_TRAVEL_MINUTES, int(round(hours * 60)))


def travel_segment(origin: Coord, destination: Coord) -> TravelSegment:
    """
    Estimate the hop from origin to destination.

    The mode is decided on the reported (rounded) distance so a segment shown
    as 2.0 km is always a drive.
    """
    raw_km = haversine_km(origin, destination)
    distance_km = round(raw_km, 1)
    mode = travel_mode(distance_km)
    return TravelSegment(
        distance_km=distance_km,
        duration_min=estimate_travel_minutes(raw_km, mode),
        mode=mode,
    )


def coord_of(place) -> Optional[Coord]:
    """Coordinates of anything with latitude/longitude attributes, if both are set."""
    lat = getattr(place, "latitude", None)
    lon = getattr(place, "longitude", None)
    if lat is None or lon is None:
        return None
    return Coord(float(lat), float(lon))
