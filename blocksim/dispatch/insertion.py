# 파일: dispatch/insertion.py
# - (하드) 시드 트립과 같은 route_id 만 이어붙임
# - (하드) 후보 출발 ≥ 직전 레그 종료 + 공차시간(직전 종점 → 후보 시점)
# - 가능한 후보 중 출발시각 최소, 동률은 풀 순서상 먼저 나온 것

from __future__ import annotations
from typing import Callable, List, Optional, Sequence

from ..models.data_models import Leg, Trip, Vehicle, COMMERCIAL, EMPTY

def is_feasible_next(last_leg: Leg, cand: Trip, seed_route_id: str,
                     deadhead: Callable[[str, str], float]) -> bool:
    if cand.route_id != seed_route_id:
        return False
    ready = last_leg.end_time + deadhead(last_leg.end_stop_id, cand.first_stop_id)
    return cand.start_time >= ready

def find_next_trip(last_leg: Leg, seed_route_id: str, pool: Sequence[Trip],
                   assigned: List[bool], deadhead: Callable[[str, str], float],
                   candidates: Optional[Sequence[int]] = None) -> Optional[int]:
    """
    pool: 트립 배열, assigned: 배정 여부 플래그 (pool 과 같은 길이)
    candidates: 검사할 pool 인덱스 (None → 전체, 풀 순서대로)
    반환: 선택된 pool 인덱스 또는 None
    """
    idxs = range(len(pool)) if candidates is None else candidates
    best: Optional[int] = None
    for i in idxs:
        if assigned[i]:
            continue
        c = pool[i]
        if not is_feasible_next(last_leg, c, seed_route_id, deadhead):
            continue
        # 엄격 비교 → 동일 출발시각이면 먼저 만난 후보 유지
        if best is None or c.start_time < pool[best].start_time:
            best = i
    return best

def commercial_leg(trip: Trip) -> Leg:
    return Leg(
        kind=COMMERCIAL,
        start_stop_id=trip.first_stop_id,
        end_stop_id=trip.last_stop_id,
        start_time=trip.start_time,
        end_time=trip.end_time,
        trip_id=trip.trip_id,
        route_id=trip.route_id,
        direction_id=trip.direction_id,
    )

def append_trip(v: Vehicle, trip: Trip, deadhead: Callable[[str, str], float]) -> Optional[Leg]:
    """
    차량 v 끝에 트립 추가. 직전 종점과 시점이 다르면 공차 레그를 먼저 넣음.
    반환: 삽입된 공차 레그(없으면 None)
    """
    empty = None
    last = v.last_leg
    if last is not None and last.end_stop_id != trip.first_stop_id:
        dh = deadhead(last.end_stop_id, trip.first_stop_id)
        empty = Leg(
            kind=EMPTY,
            start_stop_id=last.end_stop_id,
            end_stop_id=trip.first_stop_id,
            start_time=last.end_time,
            end_time=last.end_time + dh,
        )
        v.legs.append(empty)
        v.total_empty_time += dh

    v.legs.append(commercial_leg(trip))
    v.total_commercial_time += trip.duration
    return empty
