import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from blocksim.config.config import ScheduleParams
from blocksim.engine.engine import build_blocks
from blocksim.engine.interpolation import (
    commercial_position,
    empty_leg_position,
    frame_at,
    path_position,
    path_progress,
    track_for_leg,
    vehicle_position,
)
from blocksim.models.data_models import Leg, RouteTrack, Vehicle
from blocksim.schedule.normalizer import normalize_trips
from blocksim.schedule.tracks import tracks_by_key

OUT = ("S1", "S2", "S3", "S4")
RET = ("S4", "S3", "S2", "S1")


@pytest.fixture
def trip():
    raw = {
        "trip_id": "T1",
        "route_id": "R1",
        "direction_id": 0,
        "stop_times": [
            {"stop_id": "S1", "stop_sequence": 1, "arrival_time": 1000, "departure_time": 1000},
            {"stop_id": "S2", "stop_sequence": 2, "arrival_time": 1100, "departure_time": 1160},
            {"stop_id": "S3", "stop_sequence": 3, "arrival_time": 1260, "departure_time": 1260},
            {"stop_id": "S4", "stop_sequence": 4, "arrival_time": 1400, "departure_time": 1400},
        ],
    }
    return normalize_trips([raw])[0]


@pytest.fixture
def tracks():
    return tracks_by_key([RouteTrack("R1", 0, OUT), RouteTrack("R1", 1, RET)])


class TestCommercialPosition:
    def test_in_transit_interpolates(self, trip):
        assert commercial_position(trip, 1050, OUT) == pytest.approx(0.5)
        assert commercial_position(trip, 1210, OUT) == pytest.approx(1.5)

    def test_dwelling_stays_on_stop(self, trip):
        assert commercial_position(trip, 1100, OUT) == 1.0
        assert commercial_position(trip, 1130, OUT) == 1.0
        assert commercial_position(trip, 1160, OUT) == pytest.approx(1.0)

    def test_departure_instant_starts_next_bracket(self, trip):
        assert commercial_position(trip, 1260, OUT) == pytest.approx(2.0)

    def test_before_first_departure_and_after_last_arrival(self, trip):
        assert commercial_position(trip, 900, OUT) == 0.0
        assert commercial_position(trip, 1000, OUT) == 0.0
        assert commercial_position(trip, 1400, OUT) == 3.0
        assert commercial_position(trip, 5000, OUT) == 3.0

    def test_uses_route_path_index_not_trip_index(self, trip):
        path = ("S0",) + OUT
        assert commercial_position(trip, 1050, path) == pytest.approx(1.5)

    def test_stop_missing_from_path_falls_back_to_trip_index(self, trip):
        path = ("S1", "S3", "S4")
        assert commercial_position(trip, 1050, path) == pytest.approx(0.5)
        assert commercial_position(trip, 1130, path) == 1.0


def test_empty_leg_is_pure_time_interpolation():
    leg = Leg("empty", "S4", "S1", 2000, 2600)

    assert empty_leg_position(leg, 2150, OUT) == pytest.approx(2.25)
    assert empty_leg_position(leg, 2000, OUT) == 3.0
    assert empty_leg_position(leg, 2600, OUT) == 0.0
    assert empty_leg_position(Leg("empty", "S1", "S4", 50, 50), 50, OUT) == 0.0


def test_empty_leg_unknown_endpoints_span_whole_path():
    leg = Leg("empty", "DEPOT", "GARAGE", 0, 100)
    assert empty_leg_position(leg, 50, OUT) == pytest.approx(1.5)


def test_path_position_dispatch(trip):
    leg = Leg("commercial", "S1", "S4", 1000, 1400, trip_id="T1", route_id="R1", direction_id=0)

    assert path_position(leg, 1050, OUT, trip) == pytest.approx(0.5)
    with pytest.raises(ValueError):
        path_position(leg, 1050, OUT)


def test_path_progress():
    assert path_progress(1.5, 4) == pytest.approx(0.5)
    assert path_progress(0.0, 1) == 0.0
    assert path_progress(3.0, 4) == 1.0


def test_track_for_leg(tracks):
    com = Leg("commercial", "S4", "S1", 0, 10, trip_id="X", route_id="R1", direction_id=1)
    assert track_for_leg(com, tracks, "R1").stop_ids == RET

    terminal = Leg("empty", "S4", "S1", 0, 10)
    assert track_for_leg(terminal, tracks, "R1").direction_id == 1

    partial = Leg("empty", "S2", "S3", 0, 10)
    assert track_for_leg(partial, tracks, "R1").direction_id == 0

    off_route = Leg("empty", "S1", "S4", 0, 10)
    assert track_for_leg(off_route, tracks, "R2") is None


def test_frame_mirrors_return_direction(trip, tracks):
    com = Leg("commercial", "S1", "S4", 1000, 1400, trip_id="T1", route_id="R1", direction_id=0)
    empty = Leg("empty", "S4", "S1", 1400, 2000)
    v = Vehicle("BUS-0001", "hsl(1, 85%, 45%)", "R1", legs=[com, empty])
    trips_by_id = {"T1": trip}

    pos = vehicle_position(v, 1050, trips_by_id, tracks)
    assert (pos.kind, pos.trip_id, pos.direction_id) == ("commercial", "T1", 0)
    assert pos.progress == pytest.approx(0.5 / 3)
    assert pos.track_x == pytest.approx(pos.progress)

    # 1400: 영업 종료 == 공차 시작 → 공차 레그 표시
    pos = vehicle_position(v, 1700, trips_by_id, tracks)
    assert (pos.kind, pos.direction_id) == ("empty", 1)
    assert pos.path_index == pytest.approx(1.5)
    assert pos.track_x == pytest.approx(0.5)

    assert frame_at([v], 1400, trips_by_id, tracks)[0].kind == "empty"
    assert frame_at([v], 5000, trips_by_id, tracks) == []


def test_frame_from_build_blocks_result():
    raw = {
        "trip_id": "T1", "route_id": "R1", "direction_id": 0,
        "stop_times": [
            {"stop_id": s, "stop_sequence": i + 1, "arrival_time": a, "departure_time": a}
            for i, (s, a) in enumerate([("S1", 1000), ("S2", 1100), ("S3", 1200), ("S4", 1300)])
        ],
    }
    result = build_blocks([raw], [], ScheduleParams(verbose=False))

    frame = frame_at(result["vehicles"], 1050, result["trips_by_id"], result["tracks"])

    assert [(p.bus_id, p.trip_id) for p in frame] == [("BUS-0001", "T1")]
    assert frame[0].path_index == pytest.approx(0.5)
    assert frame[0].progress == pytest.approx(0.5 / 3)


def test_track_for_leg_accepts_track_list():
    leg = Leg("empty", "S4", "S1", 0, 10)
    track_list = [RouteTrack("R1", 0, OUT), RouteTrack("R1", 1, RET)]

    assert track_for_leg(leg, track_list, "R1").direction_id == 1
