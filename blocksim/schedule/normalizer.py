# 파일: schedule/normalizer.py
# - 원시 트립/정류장시각 → 초 단위 정규화 Trip
# - 정류장시각은 stop_sequence 기준 안정 정렬
# - 자정 넘김(종료 < 시작) 1회 보정: +day_seconds
# - 정류장시각 2개 미만 트립 제외, trip_id 중복은 첫 번째만 사용
# - 결과는 start_time 오름차순 (동률은 입력 순서 유지)

from __future__ import annotations
from typing import Any, Dict, List, Optional

from ..models.data_models import StopTime, Trip
from ..utils.utils import get_field as _get, parse_time, to_int

def _parse_counted(value, stats: Dict[str, int]) -> float:
    ok, sec = parse_time(value)
    if not ok:
        stats["bad_times"] += 1
    return sec

def normalize_trip(raw: Any, day_seconds: int = 86400,
                   stats: Optional[Dict[str, int]] = None) -> Optional[Trip]:
    """원시 트립 1건 정규화. 정류장시각 2개 미만이면 None."""
    if stats is None:
        stats = {"bad_times": 0}
    stats.setdefault("bad_times", 0)

    rows = []
    for st in (_get(raw, "stop_times") or []):
        rows.append((
            str(_get(st, "stop_id")),
            to_int(_get(st, "stop_sequence", 0)),
            _parse_counted(_get(st, "arrival_time"), stats),
            _parse_counted(_get(st, "departure_time"), stats),
        ))
    if len(rows) < 2:
        return None
    rows.sort(key=lambda r: r[1])

    start = rows[0][3]
    end = rows[-1][2]
    if end < start:
        # 23:50 출발 → 00:10 도착: 둘째 정류장부터 시작 이전 시각은 익일로 간주
        # (첫 정류장 도착은 출발 전 대기일 수 있으므로 그대로)
        end += day_seconds
        rows = rows[:1] + [
            (sid, seq,
             arr + day_seconds if arr < start else arr,
             dep + day_seconds if dep < start else dep)
            for sid, seq, arr, dep in rows[1:]
        ]

    return Trip(
        trip_id=str(_get(raw, "trip_id")),
        route_id=str(_get(raw, "route_id")),
        direction_id=to_int(_get(raw, "direction_id", 0)),
        stop_times=tuple(StopTime(*r) for r in rows),
        start_time=start,
        end_time=end,
    )

def normalize_trips(raw_trips: List[Any], day_seconds: int = 86400,
                    stats: Optional[Dict[str, int]] = None) -> List[Trip]:
    """
    raw_trips: [{trip_id, route_id, direction_id, stop_times: [{stop_id, stop_sequence,
                 arrival_time, departure_time}]}, ...]  (dict 또는 동일 속성 객체)
    stats: 넘기면 {"input", "duplicates", "dropped", "bad_times", "kept"} 를 채움
    """
    if stats is None:
        stats = {}
    stats.update({"input": len(raw_trips), "duplicates": 0, "dropped": 0, "bad_times": 0})

    seen = set()
    trips: List[Trip] = []
    for raw in raw_trips:
        tid = str(_get(raw, "trip_id"))
        if tid in seen:
            stats["duplicates"] += 1
            continue
        seen.add(tid)

        trip = normalize_trip(raw, day_seconds, stats)
        if trip is None:
            stats["dropped"] += 1
            continue
        trips.append(trip)

    # sorted() 는 안정 정렬 → 동일 시작시각은 입력 순서 유지
    trips = sorted(trips, key=lambda t: t.start_time)
    stats["kept"] = len(trips)
    return trips
