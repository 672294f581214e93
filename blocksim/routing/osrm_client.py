"""
파일명: routing/osrm_client.py
OSRM HTTP 클라이언트
- route_summary(): 두 정류장 간 거리/소요시간/geometry
- table_durations(): 다수 정류장 간 소요시간 행렬 (공차 세그먼트 일괄 생성용)
- is_available(): 연결 테스트
"""

from __future__ import annotations
from typing import List, Tuple, Dict, Any, Optional
import requests

def _fmt_coords(coords: List[Tuple[float, float]]) -> str:
    return ";".join([f"{lon:.6f},{lat:.6f}" for lon, lat in coords])

class OSRM:
    def __init__(self, base_url: str = "http://127.0.0.1:5001", profile: str = "driving",
                 cache: bool = True, timeout: float = 30, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.profile = profile
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", "blocksim/0.1")
        self._cache_route: Optional[Dict[str, Dict[str, Any]]] = {} if cache else None
        self._cache_table: Optional[Dict[str, List[List[Optional[float]]]]] = {} if cache else None

    def route_summary(self, start: Tuple[float, float], end: Tuple[float, float]) -> Optional[Dict[str, Any]]:
        """
        start→end 경로:
          - distance: 미터
          - duration: 초
          - coords: [[lon,lat], ...] (GeoJSON geometry)
        경로가 없으면 None
        """
        key = _fmt_coords([start, end])
        if self._cache_route is not None and key in self._cache_route:
            return self._cache_route[key]

        url = f"{self.base_url}/route/v1/{self.profile}/{key}"
        params = {"overview": "full", "geometries": "geojson"}
        r = self.session.get(url, params=params, timeout=self.timeout)
        r.raise_for_status()
        js = r.json()
        if js.get("code", "Ok") != "Ok":
            raise RuntimeError(f"OSRM code={js.get('code')} {js.get('message', '')}")
        routes = js.get("routes", [])
        if not routes:
            return None

        route = routes[0]
        geom = route.get("geometry", {}) or {}
        data = {
            "distance": float(route.get("distance", 0.0)),
            "duration": float(route.get("duration", 0.0)),
            "coords": geom.get("coordinates", []) or [list(start), list(end)],
        }
        if self._cache_route is not None:
            self._cache_route[key] = data
        return data

    def table_durations(self, coords: List[Tuple[float, float]]) -> List[List[Optional[float]]]:
        """coords 전체 쌍 소요시간(초) 행렬. 경로 없는 칸은 None 유지"""
        if not coords:
            return []
        key = _fmt_coords(coords)
        if self._cache_table is not None and key in self._cache_table:
            return self._cache_table[key]
        url = f"{self.base_url}/table/v1/{self.profile}/{key}"
        r = self.session.get(url, params={"annotations": "duration"}, timeout=self.timeout)
        r.raise_for_status()
        js = r.json()
        durations = js.get("durations", []) or []
        mat = [[None if x is None else float(x) for x in row] for row in durations]
        if self._cache_table is not None:
            self._cache_table[key] = mat
        return mat

    def is_available(self, probe: Tuple[Tuple[float, float], Tuple[float, float]] = ((-74.08, 4.60), (-74.07, 4.61))) -> bool:
        try:
            return self.route_summary(*probe) is not None
        except (requests.RequestException, RuntimeError, ValueError) as e:
            print(f"[OSRM] 연결 실패: {e}", flush=True)
            return False
