"""
차량 배정(블록 편성): 탐욕적 '가장 이른 가능한 다음 트립' 체이닝

1. 미배정 트립 중 가장 이른 트립을 시드로 새 차량 생성
2. 같은 노선에서 (직전 종료 + 공차시간) 이후 출발하는 트립 중 가장 이른 것을 반복해서 이어붙임
3. 더 이을 수 없으면 차량 확정 → 1로

이전 선택을 되돌리지 않는 휴리스틱이며 최적해를 보장하지 않는다.
체인 한 단계마다 남은 풀을 다시 훑으므로 최악 O(n^2). 하루 수천 트립 규모까지는 충분하지만
그 이상에서는 이 부분이 병목이 된다.
"""

from __future__ import annotations
from typing import Callable, Dict, List, Optional

from ..config.config import ScheduleParams
from ..models.data_models import Trip, Vehicle
from ..vehicle.vehicle_init import new_vehicle
from .insertion import append_trip, find_next_trip

def assign_vehicles(trips: List[Trip], deadhead: Callable[[str, str], float],
                    P: Optional[ScheduleParams] = None, first_number: int = 1) -> List[Vehicle]:
    """
    trips: 정규화된 트립 (start_time 오름차순이 아니면 안정 정렬로 맞춤)
    deadhead: (from_stop, to_stop) → 초. DeadheadLookup 인스턴스 등
    first_number: 첫 차량 순번 (BUS-0001). 카운터는 이 함수 안에서만 증가
    """
    P = P or ScheduleParams()
    pool = sorted(trips, key=lambda t: t.start_time)
    assigned = [False] * len(pool)

    # 노선별 후보 인덱스 (풀 순서 유지) → 다른 노선 트립은 애초에 검사하지 않음
    by_route: Dict[str, List[int]] = {}
    for i, t in enumerate(pool):
        by_route.setdefault(t.route_id, []).append(i)

    vehicles: List[Vehicle] = []
    number = first_number
    seed_idx = 0

    while True:
        while seed_idx < len(pool) and assigned[seed_idx]:
            seed_idx += 1
        if seed_idx >= len(pool):
            break

        seed = pool[seed_idx]
        assigned[seed_idx] = True
        v = new_vehicle(number, seed.route_id, P)
        append_trip(v, seed, deadhead)

        cands = by_route[seed.route_id]
        while True:
            nxt = find_next_trip(v.last_leg, seed.route_id, pool, assigned, deadhead, cands)
            if nxt is None:
                break
            assigned[nxt] = True
            append_trip(v, pool[nxt], deadhead)

        vehicles.append(v)
        if P.log_every_vehicles and len(vehicles) % P.log_every_vehicles == 0:
            left = assigned.count(False)
            print(f"[ASSIGN] {len(vehicles)}대 편성 | 남은 트립 {left}", flush=True)
        number += 1

    return vehicles
