# 파일: routing/segment_builder.py
# - 노선 트랙의 종점↔종점, 종점↔차고지(parking) 공차 세그먼트 쌍 생성
# - 이동시간: OSRM table 1회 호출 → 실패/결측 칸은 직선거리/평균속도 근사

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Tuple
import math

import numpy as np
import requests

from ..config.config import ScheduleParams
from ..models.data_models import RouteTrack, Segment
from ..utils.utils import straight_line_seconds
from .osrm_client import OSRM

def empty_segment_pairs(tracks: Iterable[RouteTrack],
                        parkings: Optional[Dict[str, List[str]]] = None) -> List[Tuple[str, str]]:
    """
    tracks: 노선/방향별 정류장 순서
    parkings: {route_id: [parking_stop_id, ...]}
    반환: 중복 제거된 (start, end) 쌍 (최초 등장 순서 유지)
    """
    parkings = parkings or {}
    pairs: List[Tuple[str, str]] = []
    for tr in tracks:
        if len(tr.stop_ids) < 2:
            continue
        first, last = tr.stop_ids[0], tr.stop_ids[-1]
        if first != last:
            pairs += [(first, last), (last, first)]
        for pk in parkings.get(tr.route_id, []):
            if pk != first:
                pairs += [(first, pk), (pk, first)]
            if pk != last and first != last:
                pairs += [(last, pk), (pk, last)]

    seen = set()
    out: List[Tuple[str, str]] = []
    for p in pairs:
        if p in seen:
            continue
        seen.add(p)
        out.append(p)
    return out

def _osrm_matrix(stop_ids: List[str], stop_coords: Dict[str, Tuple[float, float]],
                 osrm_obj: OSRM) -> Optional[np.ndarray]:
    try:
        mat = osrm_obj.table_durations([stop_coords[s] for s in stop_ids])
    except (requests.RequestException, ValueError) as e:
        print(f"[SEG] OSRM table 실패 → 직선거리 근사 사용: {e}", flush=True)
        return None
    if len(mat) != len(stop_ids):
        return None
    return np.array([[np.nan if x is None else x for x in row] for row in mat], dtype=float)

def build_empty_segments(pairs: List[Tuple[str, str]],
                         stop_coords: Dict[str, Tuple[float, float]],
                         P: ScheduleParams,
                         osrm_obj: Optional[OSRM] = None) -> List[Segment]:
    """
    stop_coords: {stop_id: (lon, lat)}
    좌표 없는 정류장이 포함된 쌍은 건너뜀 (조회 시 기본 패널티 적용됨)
    """
    usable = [(a, b) for a, b in pairs if a in stop_coords and b in stop_coords]
    skipped = len(pairs) - len(usable)

    mat = None
    pos: Dict[str, int] = {}
    if usable and P.use_osrm:
        if osrm_obj is None:
            osrm_obj = OSRM(P.osrm_base_url, P.osrm_profile)
        stop_ids = sorted({s for p in usable for s in p})
        pos = {s: i for i, s in enumerate(stop_ids)}
        mat = _osrm_matrix(stop_ids, stop_coords, osrm_obj)

    segments: List[Segment] = []
    n_osrm = 0
    for a, b in usable:
        dur = float("nan")
        if mat is not None:
            dur = float(mat[pos[a], pos[b]])
        if math.isfinite(dur):
            n_osrm += 1
        else:
            (lon1, lat1), (lon2, lat2) = stop_coords[a], stop_coords[b]
            dur = straight_line_seconds(lon1, lat1, lon2, lat2, P.avg_speed_kmh)
        segments.append(Segment(a, b, round(dur)))

    print(f"[SEG] 공차 세그먼트 {len(segments)}개 (OSRM {n_osrm}, 직선근사 {len(segments) - n_osrm}, "
          f"좌표없음 skip {skipped})", flush=True)
    return segments
