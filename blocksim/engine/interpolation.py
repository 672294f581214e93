"""
재생용 위치 보간
- 영업 레그: 트립 정류장시각으로 현재 구간(주행/정차)을 찾아 트랙 인덱스로 보간
- 공차 레그: 양 끝 정류장 인덱스 사이를 시간 비율로만 보간 (중간 정류장 무관)
- 반환 위치는 트랙 정류장 인덱스(소수). 0 = 트랙 시작, n-1 = 종점
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..models.data_models import Leg, RouteTrack, Trip, Vehicle, VehiclePosition, stop_index_map
from ..schedule.tracks import tracks_by_key
from .timeline import display_leg

TrackMap = Dict[Tuple[str, int], RouteTrack]

def _track_map(tracks: Union[TrackMap, Iterable[RouteTrack]]) -> TrackMap:
    # build_route_tracks() 리스트도 그대로 받음
    return tracks if isinstance(tracks, dict) else tracks_by_key(list(tracks))

def _index_of(path: Dict[str, int], stop_id: str) -> Optional[int]:
    return path.get(stop_id)

def _clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))

def empty_leg_position(leg: Leg, t: float, path_stop_ids: Sequence[str]) -> float:
    n = len(path_stop_ids)
    if n == 0:
        return 0.0
    path = stop_index_map(path_stop_ids)
    i0 = _index_of(path, leg.start_stop_id)
    i1 = _index_of(path, leg.end_stop_id)
    i0 = 0 if i0 is None else i0
    i1 = n - 1 if i1 is None else i1

    dt = leg.end_time - leg.start_time
    frac = _clamp01((t - leg.start_time) / dt) if dt > 0 else 0.0
    return i0 + (i1 - i0) * frac

def commercial_position(trip: Trip, t: float, path_stop_ids: Sequence[str]) -> float:
    """
    - t ≤ 첫 출발: 0, t ≥ 마지막 도착: 종점 인덱스
    - 주행 중 (dep_i ≤ t < arr_i+1): 두 정류장 트랙 인덱스 사이 선형보간
    - 정차 중 (arr_i ≤ t ≤ dep_i): 해당 정류장 인덱스
    - 트랙에 없는 정류장은 트립 내 순번(i)으로 대체
    """
    n = len(path_stop_ids)
    last_idx = max(0, n - 1)
    if t >= trip.end_time:
        return float(last_idx)
    if t <= trip.start_time:
        return 0.0

    path = stop_index_map(path_stop_ids)
    sts = trip.stop_times
    for i in range(len(sts) - 1):
        cur, nxt = sts[i], sts[i + 1]

        if cur.departure_time <= t < nxt.arrival_time:
            dt = nxt.arrival_time - cur.departure_time
            frac = (t - cur.departure_time) / dt if dt > 0 else 0.0
            a = _index_of(path, cur.stop_id)
            b = _index_of(path, nxt.stop_id)
            if a is None or b is None:
                a, b = i, i + 1
            return a + (b - a) * frac

        if cur.arrival_time <= t <= cur.departure_time:
            a = _index_of(path, cur.stop_id)
            return float(i if a is None else a)

    # 종점 정차 중
    last = sts[-1]
    if t >= last.arrival_time:
        a = _index_of(path, last.stop_id)
        return float(last_idx if a is None else a)
    # 시각 역전 등으로 구간을 못 찾은 경우
    return 0.0

def path_position(leg: Leg, t: float, path_stop_ids: Sequence[str],
                  trip: Optional[Trip] = None) -> float:
    if leg.is_commercial:
        if trip is None:
            raise ValueError(f"commercial leg {leg.trip_id} needs its Trip for interpolation")
        return commercial_position(trip, t, path_stop_ids)
    return empty_leg_position(leg, t, path_stop_ids)

def path_progress(index: float, path_len: int) -> float:
    return _clamp01(index / max(1, path_len - 1))

def track_for_leg(leg: Leg, tracks: Union[TrackMap, Iterable[RouteTrack]],
                  route_id: str) -> Optional[RouteTrack]:
    """
    영업 레그: 자기 노선/방향 트랙
    공차 레그: 차량 노선 트랙 중 종점↔종점이 일치하는 트랙 → 두 정류장을 순서대로 포함하는 트랙
    """
    tracks = _track_map(tracks)
    if leg.is_commercial:
        return tracks.get((leg.route_id or route_id, leg.direction_id or 0))

    own = [tr for (rid, _), tr in sorted(tracks.items()) if rid == route_id]
    for tr in own:
        if tr.stop_ids and tr.stop_ids[0] == leg.start_stop_id and tr.stop_ids[-1] == leg.end_stop_id:
            return tr
    for tr in own:
        idx = tr.index_map()
        a, b = idx.get(leg.start_stop_id), idx.get(leg.end_stop_id)
        if a is not None and b is not None and a <= b:
            return tr
    return None

def vehicle_position(v: Vehicle, t: float, trips_by_id: Dict[str, Trip],
                     tracks: Union[TrackMap, Iterable[RouteTrack]]) -> Optional[VehiclePosition]:
    leg = display_leg(v, t)
    if leg is None:
        return None
    tr = track_for_leg(leg, tracks, v.route_id)
    if tr is None:
        return None

    trip = trips_by_id.get(leg.trip_id) if leg.trip_id else None
    if leg.is_commercial and trip is None:
        return None
    idx = path_position(leg, t, tr.stop_ids, trip)
    prog = path_progress(idx, len(tr.stop_ids))
    return VehiclePosition(
        bus_id=v.bus_id,
        color=v.color,
        kind=leg.kind,
        trip_id=leg.trip_id,
        route_id=tr.route_id,
        direction_id=tr.direction_id,
        path_index=idx,
        progress=prog,
        # 복귀 방향(1) 트랙은 오른쪽→왼쪽으로 그림
        track_x=1.0 - prog if tr.direction_id == 1 else prog,
        t=t,
    )

def frame_at(vehicles: List[Vehicle], t: float, trips_by_id: Dict[str, Trip],
             tracks: Union[TrackMap, Iterable[RouteTrack]]) -> List[VehiclePosition]:
    tracks = _track_map(tracks)
    out: List[VehiclePosition] = []
    for v in vehicles:
        pos = vehicle_position(v, t, trips_by_id, tracks)
        if pos is not None:
            out.append(pos)
    return out
