import logging
import random
from collections import namedtuple
from typing import List, Optional, Sequence

from locallist.core.catalog import CandidatePlace
from locallist.core.geo import coord_of, travel_segment
from locallist.core.preferences import TripPreferences
from locallist.core.timeslots import day_slots, is_good_time_match

logger = logging.getLogger(__name__)

ScheduledStop = namedtuple("ScheduledStop", [
    "place_id",
    "day_number",              # 1-based
    "order_index",             # slot position in the day template, 0-based
    "time_block",
    "suggested_arrival",       # "HH:MM"
    "suggested_duration_min",
    "travel_from_previous",    # TravelSegment or None
])


class ScheduleBuilder:
    """
    Lays candidates out over the day template, one pass per day.

    Candidates are shuffled once per build so repeated requests vary; pass a
    seeded random.Random to make the outcome reproducible. A place is used at
    most once per plan, and a slot with no time-compatible place left is
    skipped rather than filled.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def build(self, candidates: Sequence[CandidatePlace], preferences: TripPreferences) -> List[ScheduledStop]:
        shuffled = list(candidates)
        self.rng.shuffle(shuffled)

        slots = day_slots(preferences.max_stops_per_day)
        used = set()
        stops: List[ScheduledStop] = []

        for day in range(1, preferences.days + 1):
            prev = None

            for order, slot in enumerate(slots):
                place = next(
                    (p for p in shuffled
                     if p.id not in used and is_good_time_match(p.best_time, slot.time_block)),
                    None,
                )
                if place is None:
                    continue

                used.add(place.id)
                here = coord_of(place)

                segment = None
                if prev is not None and here is not None:
                    segment = travel_segment(prev, here)

                stops.append(ScheduledStop(
                    place_id=place.id,
                    day_number=day,
                    order_index=order,
                    time_block=slot.time_block,
                    suggested_arrival=slot.arrival,
                    suggested_duration_min=slot.duration_min,
                    travel_from_previous=segment,
                ))

                # coordinate-less stops keep the chain anchored on the last known point
                if here is not None:
                    prev = here

        logger.info(
            f"Scheduled {len(stops)} stops over {preferences.days} day(s) "
            f"from {len(shuffled)} candidates ({len(slots)} slots/day)"
        )
        return stops


def build_plan_schedule(
    candidates: Sequence[CandidatePlace],
    preferences: TripPreferences,
    rng: Optional[random.Random] = None,
) -> List[ScheduledStop]:
    return ScheduleBuilder(rng).build(candidates, preferences)
