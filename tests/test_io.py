import json
import sys
from pathlib import Path

import pytest
import requests

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from blocksim.config.config import ScheduleParams
from blocksim.engine.engine import build_blocks
from blocksim.io.exporters import export_run
from blocksim.io.loaders import load_gtfs_trips, load_route_names, load_segments, load_stop_coords
from blocksim.models.data_models import RouteTrack
from blocksim.routing.osrm_client import OSRM
from blocksim.routing.segment_builder import build_empty_segments, empty_segment_pairs
from blocksim.utils.utils import straight_line_seconds


def _write(path: Path, text: str):
    path.write_text(text.strip() + "\n", encoding="utf-8")


@pytest.fixture
def gtfs_dir(tmp_path):
    _write(tmp_path / "trips.txt", """
route_id,service_id,trip_id,direction_id
R1,WK,T1,0
R1,WK,T2,
R1,SAT,T3,1
R2,WK,T4,1
""")
    _write(tmp_path / "stop_times.txt", """
trip_id,arrival_time,departure_time,stop_id,stop_sequence
T1,08:00:00,08:00:00,A,1
T1,08:20:00,,B,2
T2,09:00:00,09:00:00,B,1
T2,09:20:00,09:20:00,A,2
T3,10:00:00,10:00:00,A,1
T3,10:20:00,10:20:00,B,2
T4,08:00:00,08:00:00,C,1
""")
    _write(tmp_path / "stops.txt", """
stop_id,stop_name,stop_lat,stop_lon
A,Stop A,4.600,-74.080
B,Stop B,4.610,-74.070
C,Stop C,,
""")
    _write(tmp_path / "routes.txt", """
route_id,route_short_name
R1,1
R2,
""")
    return tmp_path


def test_load_gtfs_trips_filters_by_service(gtfs_dir):
    trips = load_gtfs_trips(str(gtfs_dir), service_id="WK")

    assert [t["trip_id"] for t in trips] == ["T1", "T2", "T4"]
    t1 = trips[0]
    assert t1["direction_id"] == 0
    assert [st["stop_id"] for st in t1["stop_times"]] == ["A", "B"]
    # 빈 출발시각은 도착시각으로 보완
    assert t1["stop_times"][1]["departure_time"] == "08:20:00"
    assert trips[1]["direction_id"] == 0
    assert len(trips[2]["stop_times"]) == 1


def test_load_gtfs_trips_route_filter(gtfs_dir):
    trips = load_gtfs_trips(str(gtfs_dir), route_ids=["R2"])
    assert [t["trip_id"] for t in trips] == ["T4"]


def test_loaded_trips_feed_the_engine(gtfs_dir):
    result = build_blocks(load_gtfs_trips(str(gtfs_dir), service_id="WK"), [],
                          ScheduleParams(verbose=False))

    # T4 는 정류장 1개 → 제외, T1→T2 는 B 에서 이어짐
    assert result["stats"]["dropped"] == 1
    assert [[leg.trip_id for leg in v.legs] for v in result["vehicles"]] == [["T1", "T2"]]


def test_load_stop_coords_and_route_names(gtfs_dir):
    coords = load_stop_coords(str(gtfs_dir))

    assert coords == {"A": (-74.08, 4.6), "B": (-74.07, 4.61)}
    assert load_route_names(str(gtfs_dir)) == {"R1": "1", "R2": "R2"}


def test_load_segments_maps_columns(tmp_path):
    path = tmp_path / "segments.csv"
    _write(path, """
from_stop_id,to_stop_id,duration
A,B,300
B,A,
""")

    segs = load_segments(str(path))

    assert segs == [
        {"start_node_id": "A", "end_node_id": "B", "travel_time": 300.0},
        {"start_node_id": "B", "end_node_id": "A", "travel_time": 0.0},
    ]


def test_load_segments_missing_column_raises(tmp_path):
    path = tmp_path / "segments.csv"
    _write(path, """
start_node_id,end_node_id
A,B
""")

    with pytest.raises(ValueError, match="이동시간"):
        load_segments(str(path))


def test_export_run_writes_all_files(gtfs_dir, tmp_path):
    result = build_blocks(load_gtfs_trips(str(gtfs_dir)), [], ScheduleParams(verbose=False))

    files = export_run(result, str(tmp_path / "out"))

    records = json.loads(files["vehicles"].read_text(encoding="utf-8"))
    assert records[0]["bus_id"] == "BUS-0001"
    assert records[0]["legs"][0]["type"] == "commercial"
    assert files["csv"].read_text(encoding="utf-8").startswith("Bus ID,Route(s),")
    assert "[08:00:00] Bus BUS-0001 starts commercial trip T1 at stop A" in files["log"].read_text(encoding="utf-8")


# ---- 공차 세그먼트 생성 ----

def test_empty_segment_pairs_terminals_and_parkings():
    tracks = [
        RouteTrack("R1", 0, ("A", "B", "C")),
        RouteTrack("R1", 1, ("C", "B", "A")),
        RouteTrack("R2", 0, ("L",)),
    ]

    pairs = empty_segment_pairs(tracks, parkings={"R1": ["P", "A"]})

    assert pairs == [
        ("A", "C"), ("C", "A"),
        ("A", "P"), ("P", "A"), ("C", "P"), ("P", "C"),
    ]


class _FakeOSRM:
    def __init__(self, matrix=None, error=None):
        self.matrix = matrix
        self.error = error
        self.calls = []

    def table_durations(self, coords):
        self.calls.append(coords)
        if self.error:
            raise self.error
        return self.matrix


COORDS = {"A": (0.0, 0.0), "B": (0.0, 0.01)}


def test_build_empty_segments_prefers_osrm_and_fills_gaps():
    osrm = _FakeOSRM(matrix=[[0.0, 120.4], [None, 0.0]])
    P = ScheduleParams(use_osrm=True)

    segs = build_empty_segments([("A", "B"), ("B", "A"), ("A", "Z")], COORDS, P, osrm)

    assert len(osrm.calls) == 1
    assert [(s.start_node_id, s.end_node_id) for s in segs] == [("A", "B"), ("B", "A")]
    assert segs[0].travel_time == 120
    assert segs[1].travel_time == round(straight_line_seconds(0.0, 0.01, 0.0, 0.0, P.avg_speed_kmh))


def test_build_empty_segments_falls_back_when_osrm_fails():
    osrm = _FakeOSRM(error=requests.ConnectionError("down"))
    P = ScheduleParams(use_osrm=True, avg_speed_kmh=36.0)

    segs = build_empty_segments([("A", "B")], COORDS, P, osrm)

    # 0.01도 ≈ 1112m / 10 m/s
    assert segs[0].travel_time == pytest.approx(111, abs=1)


def test_build_empty_segments_without_osrm():
    osrm = _FakeOSRM(matrix=[[0.0, 1.0], [1.0, 0.0]])

    segs = build_empty_segments([("A", "B")], COORDS, ScheduleParams(use_osrm=False), osrm)

    assert osrm.calls == []
    assert segs[0].travel_time > 0


# ---- OSRM 클라이언트 ----

class _FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"status {self.status}")

    def json(self):
        return self.payload


class _FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.urls = []
        self.headers = {}

    def get(self, url, params=None, timeout=None):
        self.urls.append(url)
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def test_osrm_route_summary_is_cached():
    session = _FakeSession([_FakeResponse({
        "code": "Ok",
        "routes": [{"distance": 1500.0, "duration": 240.0,
                    "geometry": {"coordinates": [[1, 2], [3, 4]]}}],
    })])
    osrm = OSRM("http://osrm.local/", session=session)

    first = osrm.route_summary((1.0, 2.0), (3.0, 4.0))
    second = osrm.route_summary((1.0, 2.0), (3.0, 4.0))

    assert first == {"distance": 1500.0, "duration": 240.0, "coords": [[1, 2], [3, 4]]}
    assert second is first
    assert session.urls == ["http://osrm.local/route/v1/driving/1.000000,2.000000;3.000000,4.000000"]


def test_osrm_table_keeps_missing_cells():
    session = _FakeSession([_FakeResponse({"durations": [[0, 60], [None, 0]]})])
    osrm = OSRM(session=session)

    assert osrm.table_durations([(0.0, 0.0), (1.0, 1.0)]) == [[0.0, 60.0], [None, 0.0]]
    assert osrm.table_durations([]) == []


def test_osrm_is_available_handles_errors():
    down = OSRM(session=_FakeSession([requests.ConnectionError("refused")]))
    empty = OSRM(session=_FakeSession([_FakeResponse({"code": "Ok", "routes": []})]))
    bad = OSRM(session=_FakeSession([_FakeResponse({"code": "InvalidQuery", "message": "x"})]))

    assert down.is_available() is False
    assert empty.is_available() is False
    assert bad.is_available() is False
