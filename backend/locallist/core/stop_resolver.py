from typing import Any, Callable, Dict, List, Optional, Sequence
from uuid import UUID, uuid4

from locallist.core.catalog import CandidatePlace
from locallist.core.scheduler import ScheduledStop


def place_summary(place: CandidatePlace) -> Dict[str, Any]:
    return {
        "id": place.id,
        "name": place.name,
        "category": place.category,
        "neighborhood": place.neighborhood,
        "why_this_place": place.why_this_place,
        "price_range": place.price_range,
        "photos": list(place.photos) if place.photos else [],
        "latitude": place.latitude,
        "longitude": place.longitude,
    }


def resolve_stop_places(
    stops: Sequence[ScheduledStop],
    candidates: Sequence[CandidatePlace],
    id_factory: Callable[[], UUID] = uuid4,
) -> List[Dict[str, Any]]:
    """
    Join scheduled stops back to their places for presentation.

    Each resolved stop gets a fresh id that only identifies it within this
    response. A stop whose place is not among the candidates gets place=None.
    """
    by_id = {p.id: p for p in candidates}

    resolved = []
    for stop in stops:
        place: Optional[CandidatePlace] = by_id.get(stop.place_id)
        segment = stop.travel_from_previous
        resolved.append({
            "id": id_factory(),
            "place_id": stop.place_id,
            "day_number": stop.day_number,
            "order_index": stop.order_index,
            "time_block": stop.time_block,
            "suggested_arrival": stop.suggested_arrival,
            "suggested_duration_min": stop.suggested_duration_min,
            "travel_from_previous": segment._asdict() if segment is not None else None,
            "place": place_summary(place) if place is not None else None,
        })
    return resolved
