"""
타임라인 조회 (순수 함수)
- 시각 t 에 활성인 레그/차량
- 대시보드 카운터
- 요약 CSV / 시간순 이벤트 로그
"""

from __future__ import annotations
from typing import Dict, List, Optional

import pandas as pd

from ..models.data_models import Leg, Vehicle
from ..utils.utils import fmt_hms, round_minutes

SUMMARY_COLUMNS = [
    "Bus ID", "Route(s)", "Total Trips", "Commercial Time (min)", "Empty Time (min)",
]

# ----------------- 활성 판정 -----------------
def is_active(leg: Leg, t: float) -> bool:
    # 양끝 포함 → 경계 시각에는 인접 레그 두 개가 동시에 활성일 수 있음
    return leg.start_time <= t <= leg.end_time

def active_legs(v: Vehicle, t: float) -> List[Leg]:
    return [leg for leg in v.legs if is_active(leg, t)]

def display_leg(v: Vehicle, t: float) -> Optional[Leg]:
    """활성 레그가 여럿이면 늦게 시작한 레그. 동률이면 레그 순서상 뒤의 것"""
    best: Optional[Leg] = None
    for leg in v.legs:
        if not is_active(leg, t):
            continue
        if best is None or leg.start_time >= best.start_time:
            best = leg
    return best

def active_vehicles_at(vehicles: List[Vehicle], t: float) -> List[Vehicle]:
    return [v for v in vehicles if any(is_active(leg, t) for leg in v.legs)]

def active_commercial_vehicles_at(vehicles: List[Vehicle], t: float) -> List[Vehicle]:
    return [v for v in vehicles
            if any(leg.is_commercial and is_active(leg, t) for leg in v.legs)]

def dispatched_vehicles_at(vehicles: List[Vehicle], t: float) -> List[Vehicle]:
    # 한 번이라도 출발한 차량 (이미 운행 종료한 차량 포함)
    return [v for v in vehicles if any(leg.start_time <= t for leg in v.legs)]

def timeline_stats(vehicles: List[Vehicle], t: float) -> Dict[str, int]:
    return {
        "active": len(active_vehicles_at(vehicles, t)),
        "dispatched": len(dispatched_vehicles_at(vehicles, t)),
        "fleet": len(vehicles),
        "active_trips": len(active_commercial_vehicles_at(vehicles, t)),
    }

# ----------------- 요약 CSV -----------------
def summary_frame(vehicles: List[Vehicle]) -> pd.DataFrame:
    rows = [
        [v.bus_id, v.route_id, v.trip_count,
         round_minutes(v.total_commercial_time), round_minutes(v.total_empty_time)]
        for v in vehicles
    ]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)

def summary_csv(vehicles: List[Vehicle]) -> str:
    return summary_frame(vehicles).to_csv(index=False, lineterminator="\n")

# ----------------- 이벤트 로그 -----------------
def _leg_events(v: Vehicle, leg: Leg) -> List[dict]:
    base = {"bus_id": v.bus_id, "kind": leg.kind, "trip_id": leg.trip_id}
    if leg.is_commercial:
        texts = (
            ("start", leg.start_time, leg.start_stop_id,
             f"Bus {v.bus_id} starts commercial trip {leg.trip_id} at stop {leg.start_stop_id}"),
            ("end", leg.end_time, leg.end_stop_id,
             f"Bus {v.bus_id} ends commercial trip {leg.trip_id} at stop {leg.end_stop_id}"),
        )
    else:
        texts = (
            ("start", leg.start_time, leg.start_stop_id,
             f"Bus {v.bus_id} starts empty repositioning to {leg.end_stop_id}"),
            ("end", leg.end_time, leg.end_stop_id,
             f"Bus {v.bus_id} arrives empty at {leg.end_stop_id}"),
        )
    return [
        {**base, "t": t, "event": ev, "stop_id": stop, "text": f"[{fmt_hms(t)}] {msg}"}
        for ev, t, stop, msg in texts
    ]

def tracking_events(vehicles: List[Vehicle]) -> List[dict]:
    events: List[dict] = []
    for v in vehicles:
        for leg in v.legs:
            events.extend(_leg_events(v, leg))
    # 안정 정렬: 같은 시각은 차량/레그 순서 유지
    events.sort(key=lambda e: e["t"])
    return events

def event_log(vehicles: List[Vehicle]) -> str:
    return "\n".join(e["text"] for e in tracking_events(vehicles))
