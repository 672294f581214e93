"""
노선/방향별 기준 정류장 순서(RouteTrack) 구성
- 외부에서 경로를 주지 않으면 노선/방향마다 정류장이 가장 많은 트립을 대표로 사용
"""

from typing import Dict, List, Optional, Tuple

from ..models.data_models import RouteTrack, Trip

def build_route_tracks(trips: List[Trip],
                       short_names: Optional[Dict[str, str]] = None) -> List[RouteTrack]:
    best: Dict[Tuple[str, int], Trip] = {}
    for t in trips:
        key = (t.route_id, t.direction_id)
        cur = best.get(key)
        # 동률이면 먼저 나온 트립 유지
        if cur is None or len(t.stop_times) > len(cur.stop_times):
            best[key] = t

    names = short_names or {}
    tracks = [
        RouteTrack(
            route_id=rid,
            direction_id=did,
            stop_ids=tuple(st.stop_id for st in t.stop_times),
            short_name=names.get(rid, rid),
        )
        for (rid, did), t in best.items()
    ]
    tracks.sort(key=lambda tr: (tr.route_id, tr.direction_id))
    return tracks

def tracks_by_key(tracks: List[RouteTrack]) -> Dict[Tuple[str, int], RouteTrack]:
    return {tr.key: tr for tr in tracks}
