# 파일명: io/loaders.py
# 설명:
# - GTFS trips.txt + stop_times.txt → 원시 트립 dict 리스트 (시각 문자열은 그대로, 정규화는 normalizer)
# - 서비스/노선 필터
# - 공차 세그먼트 CSV 읽기 (컬럼 자동 매핑)
# - stops.txt 좌표 읽기

from __future__ import annotations
from pathlib import Path
from typing import Dict, List, Optional, Tuple
import numpy as np
import pandas as pd

# ---- 내부 유틸 ----
def _pick_first(df: pd.DataFrame, candidates: list[str]) -> Optional[str]:
    for c in candidates:
        if c in df.columns:
            return c
    return None

def _read_txt(path: Path) -> pd.DataFrame:
    # GTFS 는 전부 문자열로 읽고 필요한 컬럼만 변환 (앞자리 0 보존)
    return pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")

def _missing(what: str, cands: list[str], df: pd.DataFrame) -> ValueError:
    cols_preview = ", ".join(map(str, df.columns.tolist()))
    return ValueError(
        f"[{what}] 컬럼 후보 미발견: {cands}\n원본 컬럼 목록:\n{cols_preview}"
    )

# ---- 트립 ----
def load_gtfs_trips(
    gtfs_dir: str,
    service_id: Optional[str] = None,
    route_ids: Optional[List[str]] = None,
) -> List[dict]:
    """
    반환: [{trip_id, route_id, direction_id, service_id, stop_times: [...]}, ...]
    direction_id 가 비어 있으면 0
    """
    base = Path(gtfs_dir)
    trips = _read_txt(base / "trips.txt")
    st = _read_txt(base / "stop_times.txt")

    for col in ("trip_id", "route_id"):
        if col not in trips.columns:
            raise _missing(f"trips.{col}", [col], trips)
    for col in ("trip_id", "stop_id", "stop_sequence", "arrival_time", "departure_time"):
        if col not in st.columns:
            raise _missing(f"stop_times.{col}", [col], st)

    if service_id is not None and "service_id" in trips.columns:
        trips = trips[trips["service_id"] == service_id]
    if route_ids:
        trips = trips[trips["route_id"].isin(route_ids)]

    if "direction_id" not in trips.columns:
        trips = trips.assign(direction_id="0")
    trips = trips.copy()
    trips["direction_id"] = pd.to_numeric(trips["direction_id"], errors="coerce").fillna(0).astype(int)
    if "service_id" not in trips.columns:
        trips["service_id"] = ""

    st = st[st["trip_id"].isin(trips["trip_id"])].copy()
    seq = pd.to_numeric(st["stop_sequence"], errors="coerce")
    bad_seq = int(seq.isna().sum())
    st["stop_sequence"] = np.where(seq.isna(), 0, seq).astype(int)
    # 빈 도착/출발은 서로 보완 (GTFS 에서 흔함)
    st["arrival_time"] = st["arrival_time"].where(st["arrival_time"] != "", st["departure_time"])
    st["departure_time"] = st["departure_time"].where(st["departure_time"] != "", st["arrival_time"])

    groups = {
        tid: g[["stop_id", "stop_sequence", "arrival_time", "departure_time"]].to_dict("records")
        for tid, g in st.groupby("trip_id", sort=False)
    }

    out: List[dict] = []
    for row in trips.itertuples(index=False):
        out.append({
            "trip_id": str(row.trip_id),
            "route_id": str(row.route_id),
            "direction_id": int(row.direction_id),
            "service_id": str(row.service_id),
            "stop_times": groups.get(row.trip_id, []),
        })

    print(f"[LOAD] trips {len(out)} | stop_times {len(st)}"
          + (f" | stop_sequence 오류 {bad_seq}" if bad_seq else ""), flush=True)
    return out

# ---- 세그먼트 ----
def load_segments(path: str) -> List[dict]:
    """
    공차 세그먼트 CSV → [{start_node_id, end_node_id, travel_time}, ...]
    travel_time 결측은 0
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")

    start_cands = ["start_node_id", "from_stop_id", "start_stop_id", "origin", "from"]
    end_cands = ["end_node_id", "to_stop_id", "end_stop_id", "destination", "to"]
    time_cands = ["travel_time", "duration", "travel_time_sec", "seconds"]

    s_col = _pick_first(df, start_cands)
    e_col = _pick_first(df, end_cands)
    t_col = _pick_first(df, time_cands)
    if s_col is None:
        raise _missing("시작 정류장", start_cands, df)
    if e_col is None:
        raise _missing("종료 정류장", end_cands, df)
    if t_col is None:
        raise _missing("이동시간", time_cands, df)

    df = df[[s_col, e_col, t_col]].rename(columns={
        s_col: "start_node_id", e_col: "end_node_id", t_col: "travel_time",
    })
    df["start_node_id"] = df["start_node_id"].astype(str)
    df["end_node_id"] = df["end_node_id"].astype(str)
    df["travel_time"] = pd.to_numeric(df["travel_time"], errors="coerce").fillna(0.0)

    print(f"[LOAD] segments {len(df)}", flush=True)
    return df.to_dict("records")

# ---- 좌표 ----
def load_stop_coords(gtfs_dir: str) -> Dict[str, Tuple[float, float]]:
    """stops.txt → {stop_id: (lon, lat)}. 좌표가 숫자가 아니면 제외"""
    stops = _read_txt(Path(gtfs_dir) / "stops.txt")
    for col in ("stop_id", "stop_lat", "stop_lon"):
        if col not in stops.columns:
            raise _missing(f"stops.{col}", [col], stops)
    lon = pd.to_numeric(stops["stop_lon"], errors="coerce")
    lat = pd.to_numeric(stops["stop_lat"], errors="coerce")
    ok = lon.notna() & lat.notna()
    return {
        sid: (float(x), float(y))
        for sid, x, y in zip(stops.loc[ok, "stop_id"], lon[ok], lat[ok])
    }

def load_route_names(gtfs_dir: str) -> Dict[str, str]:
    path = Path(gtfs_dir) / "routes.txt"
    if not path.exists():
        return {}
    routes = _read_txt(path)
    if "route_short_name" not in routes.columns:
        return {}
    return {
        rid: (name or rid)
        for rid, name in zip(routes["route_id"], routes["route_short_name"])
    }
