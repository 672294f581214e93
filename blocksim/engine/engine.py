# 파일: engine/engine.py
"""
블록 편성 엔진 진입점
- 원시 트립 정규화 → 공차 조회표 → 탐욕 배정 → 재생용 트랙
- 입력이 바뀌면 전체를 처음부터 다시 계산 (증분 갱신 없음)
- 결과 무결성 검사: 트립 커버리지, 레그 비중첩, 노선 순수성, 공차 레그 규칙
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional
from collections import Counter
import time

from ..config.config import ScheduleParams
from ..models.data_models import Trip, Vehicle
from ..schedule.normalizer import normalize_trips
from ..schedule.tracks import build_route_tracks
from ..routing.deadhead import DeadheadLookup
from ..dispatch.assignment import assign_vehicles

def check_integrity(vehicles: List[Vehicle], trips: List[Trip]) -> List[str]:
    """위반 메시지 리스트. 비어 있으면 정상"""
    problems: List[str] = []
    route_of = {t.trip_id: t.route_id for t in trips}

    seen = Counter()
    for v in vehicles:
        for a, b in zip(v.legs, v.legs[1:]):
            if a.end_time > b.start_time:
                problems.append(f"{v.bus_id}: overlap {a.end_time} > {b.start_time}")
            if a.is_commercial and b.is_commercial and a.end_stop_id != b.start_stop_id:
                problems.append(f"{v.bus_id}: missing empty leg {a.end_stop_id}->{b.start_stop_id}")
            if not a.is_commercial and not b.is_commercial:
                problems.append(f"{v.bus_id}: consecutive empty legs")
        for leg in v.legs:
            if not leg.is_commercial:
                if leg.start_stop_id == leg.end_stop_id:
                    problems.append(f"{v.bus_id}: empty leg at single stop {leg.start_stop_id}")
                continue
            seen[leg.trip_id] += 1
            if route_of.get(leg.trip_id, v.route_id) != v.route_id:
                problems.append(f"{v.bus_id}: trip {leg.trip_id} off route {v.route_id}")

    for tid, n in seen.items():
        if n > 1:
            problems.append(f"trip {tid} assigned {n} times")
        if tid not in route_of:
            problems.append(f"unknown trip {tid}")
    for tid in route_of:
        if tid not in seen:
            problems.append(f"trip {tid} not assigned")
    return problems

def build_blocks(raw_trips: List[Any], raw_segments: List[Any],
                 P: Optional[ScheduleParams] = None) -> Dict[str, Any]:
    P = P or ScheduleParams()
    t0 = time.perf_counter()

    stats: Dict[str, Any] = {}
    trips = normalize_trips(raw_trips, P.day_seconds, stats)
    if P.verbose:
        print(f"[NORM] 입력 {stats['input']} → 트립 {stats['kept']} | 중복 {stats['duplicates']} "
              f"| 정류장 부족 {stats['dropped']} | 시각 파싱 실패 {stats['bad_times']}", flush=True)
        if stats["bad_times"]:
            print("⚠️  파싱 실패 시각은 0초로 처리됨 → 트립 순서가 틀어질 수 있음", flush=True)

    lookup = DeadheadLookup(raw_segments, P.deadhead_default_sec)
    vehicles = assign_vehicles(trips, lookup, P)
    tracks = build_route_tracks(trips)

    stats["vehicles"] = len(vehicles)
    stats["segments"] = len(lookup)
    stats["empty_legs"] = sum(1 for v in vehicles for leg in v.legs if not leg.is_commercial)
    stats["elapsed_sec"] = time.perf_counter() - t0
    if P.verbose:
        print(f"[ENGINE] 차량 {stats['vehicles']}대 | 공차 레그 {stats['empty_legs']} "
              f"| 세그먼트 {stats['segments']} | {stats['elapsed_sec']:.2f}s", flush=True)

    return {
        "trips": trips,
        "trips_by_id": {t.trip_id: t for t in trips},
        "vehicles": vehicles,
        "tracks": tracks,
        "lookup": lookup,
        "stats": stats,
    }
