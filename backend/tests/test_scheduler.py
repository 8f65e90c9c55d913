"""
Tests for laying candidates out over days and time blocks
"""

import random

from conftest import MIAMI, make_place

from locallist.core.preferences import TripPreferences
from locallist.core.scheduler import ScheduleBuilder, build_plan_schedule


def spread(n, best_time=None):
    """n places on a rough north-south line through Miami, ~0.5 km apart"""
    lat, lon = MIAMI
    return [make_place("food", best_time, lat + i * 0.0045, lon) for i in range(n)]


def test_empty_candidates_give_empty_schedule(seeded_rng):
    assert ScheduleBuilder(seeded_rng).build([], TripPreferences(days=3)) == []


def test_places_are_used_at_most_once(seeded_rng):
    places = spread(20)
    stops = ScheduleBuilder(seeded_rng).build(places, TripPreferences(days=3, max_stops_per_day=5))

    assert len(stops) == 15
    assert len({s.place_id for s in stops}) == 15


def test_runs_out_of_places_without_repeating(seeded_rng):
    places = spread(4)
    stops = ScheduleBuilder(seeded_rng).build(places, TripPreferences(days=2, max_stops_per_day=5))

    assert len(stops) == 4
    assert {s.day_number for s in stops} == {1}
    assert len({s.place_id for s in stops}) == 4


def test_max_stops_limits_slots_per_day(seeded_rng):
    stops = ScheduleBuilder(seeded_rng).build(spread(10), TripPreferences(days=1, max_stops_per_day=3))
    assert [s.time_block for s in stops] == ["morning", "lunch", "afternoon"]
    assert [s.order_index for s in stops] == [0, 1, 2]


def test_six_stops_still_fit_the_five_block_day(seeded_rng):
    stops = ScheduleBuilder(seeded_rng).build(spread(10), TripPreferences(days=1, max_stops_per_day=6))
    assert len(stops) == 5


def test_slot_values_come_from_the_template(seeded_rng):
    stops = ScheduleBuilder(seeded_rng).build(spread(5), TripPreferences(days=1))
    assert [(s.time_block, s.suggested_arrival, s.suggested_duration_min) for s in stops] == [
        ("morning", "09:00", 60),
        ("lunch", "12:00", 90),
        ("afternoon", "14:30", 90),
        ("dinner", "19:00", 90),
        ("evening", "21:00", 60),
    ]


def test_first_stop_of_each_day_has_no_travel(seeded_rng):
    stops = ScheduleBuilder(seeded_rng).build(spread(10), TripPreferences(days=2))

    for day in (1, 2):
        day_stops = [s for s in stops if s.day_number == day]
        assert day_stops[0].travel_from_previous is None
        assert all(s.travel_from_previous is not None for s in day_stops[1:])


def test_travel_segments_are_well_formed(seeded_rng):
    stops = ScheduleBuilder(seeded_rng).build(spread(5), TripPreferences(days=1))
    for stop in stops[1:]:
        segment = stop.travel_from_previous
        assert segment.distance_km >= 0
        assert segment.duration_min >= 5
        assert segment.mode == ("walk" if segment.distance_km < 2.0 else "drive")


def test_skipped_slot_keeps_template_position(seeded_rng):
    late = [make_place("nightlife", "evening"), make_place("nightlife", "evening")]
    stops = ScheduleBuilder(seeded_rng).build(late, TripPreferences(days=1))

    assert [(s.time_block, s.order_index) for s in stops] == [("dinner", 3), ("evening", 4)]


def test_time_of_day_is_respected(seeded_rng):
    places = spread(3, "morning") + spread(3, "evening")
    stops = ScheduleBuilder(seeded_rng).build(places, TripPreferences(days=1))
    by_id = {p.id: p for p in places}

    for stop in stops:
        tag = by_id[stop.place_id].best_time
        if stop.time_block in ("morning", "lunch", "afternoon"):
            assert tag == "morning"
        else:
            assert tag == "evening"


def test_travel_chain_skips_places_without_coordinates(seeded_rng):
    lat, lon = MIAMI
    a = make_place("coffee", "morning", lat, lon)
    b = make_place("food", "lunch")  # no coordinates
    c = make_place("nightlife", "evening", lat + 0.0135, lon)

    stops = ScheduleBuilder(seeded_rng).build([c, b, a], TripPreferences(days=1))

    assert [(s.place_id, s.order_index) for s in stops] == [(a.id, 0), (b.id, 1), (c.id, 3)]
    assert stops[0].travel_from_previous is None
    assert stops[1].travel_from_previous is None
    # measured from a, the last stop with coordinates
    assert stops[2].travel_from_previous == (1.5, 18, "walk")


def test_same_seed_same_schedule():
    places = spread(12)
    prefs = TripPreferences(days=2, max_stops_per_day=4)
    first = build_plan_schedule(places, prefs, random.Random(42))
    second = build_plan_schedule(places, prefs, random.Random(42))
    assert first == second


def test_input_order_is_not_mutated(seeded_rng):
    places = spread(8)
    snapshot = list(places)
    ScheduleBuilder(seeded_rng).build(places, TripPreferences(days=1))
    assert places == snapshot
