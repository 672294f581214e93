# main.py - blocksim 패키지 기반 차량 블록 편성 실행
"""
GTFS 시간표 → 논리 버스(블록) 편성 → 추적표/로그 저장 메인 실행 스크립트
"""

import os
import sys
import time
from dataclasses import asdict
from pathlib import Path

# === (0) 프로젝트 루트 설정 ===
PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

print(f"PROJECT_ROOT: {PROJECT_ROOT}")

# === (1) blocksim 패키지에서 필요한 모듈 임포트 ===
from blocksim.config.config import (
    ScheduleParams,
    GTFS_DIR,
    SEGMENTS_PATH,
    SERVICE_ID,
    ROUTE_IDS,
    RUN_TAG,
    OUT_DIR,
)

from blocksim.io.loaders import load_gtfs_trips, load_segments, load_stop_coords
from blocksim.io.exporters import export_run, save_json
from blocksim.schedule.normalizer import normalize_trips
from blocksim.schedule.tracks import build_route_tracks
from blocksim.routing.osrm_client import OSRM
from blocksim.routing.segment_builder import empty_segment_pairs, build_empty_segments
from blocksim.engine.engine import build_blocks, check_integrity
from blocksim.engine.timeline import timeline_stats
from blocksim.utils.utils import fmt_hms

print(f">>> RUN_TAG: {RUN_TAG}")

# === (2) 시작 ===
start_time = time.time()
P = ScheduleParams()
print(f"\n>>> Params: {P}")

# === (3) 시간표 로드 ===
print("\n=== 시간표 로드 ===")
raw_trips = load_gtfs_trips(GTFS_DIR, service_id=SERVICE_ID, route_ids=ROUTE_IDS)

# === (4) 공차 세그먼트 ===
print("\n=== 공차 세그먼트 ===")
if SEGMENTS_PATH and os.path.exists(SEGMENTS_PATH):
    raw_segments = load_segments(SEGMENTS_PATH)
else:
    print("⚠️  세그먼트 파일 없음 → 종점/차고지 쌍 자동 생성")
    osrm_obj = None
    if P.use_osrm:
        osrm_obj = OSRM(P.osrm_base_url, P.osrm_profile)
        if not osrm_obj.is_available():
            print("⚠️  OSRM 연결 실패 → 직선거리 근사 사용")
            P.use_osrm = False
    tracks = build_route_tracks(normalize_trips(raw_trips, P.day_seconds))
    pairs = empty_segment_pairs(tracks)
    raw_segments = build_empty_segments(pairs, load_stop_coords(GTFS_DIR), P, osrm_obj)

# === (5) 편성 실행 ===
print("\n=== 블록 편성 ===")
t0_wall = time.perf_counter()
result = build_blocks(raw_trips, raw_segments, P)
wall = time.perf_counter() - t0_wall

problems = check_integrity(result["vehicles"], result["trips"])
if problems:
    print(f"⚠️  무결성 위반 {len(problems)}건")
    for p in problems[:20]:
        print(f"  - {p}")

print(f"\n[LOG] RUN_TAG={RUN_TAG} | wall={wall:.2f}s")

# === (6) 결과 저장 ===
print("\n=== 결과 저장 ===")
SAVE_DIR = PROJECT_ROOT / OUT_DIR
os.makedirs(SAVE_DIR, exist_ok=True)

output_files = export_run(result, str(SAVE_DIR))
output_files["segments"] = SAVE_DIR / "empty_segments.json"
save_json([s if isinstance(s, dict) else asdict(s) for s in raw_segments],
          str(output_files["segments"]))

print("[SAVED]")
for k, v in output_files.items():
    print(f"  ✓ {v}")

# === (7) 결과 요약 ===
vehicles = result["vehicles"]
t_first = min((v.legs[0].start_time for v in vehicles if v.legs), default=0)
first = timeline_stats(vehicles, t_first)

elapsed = time.time() - start_time

print("\n" + "=" * 50)
print("📊 최종 결과")
print("=" * 50)
print(f"  - Output Dir   : {OUT_DIR}")
print(f"  - Trips        : {len(result['trips'])}")
print(f"  - Vehicles     : {len(vehicles)}")
print(f"  - Empty legs   : {result['stats']['empty_legs']}")
print(f"  - First depart : {fmt_hms(t_first)} ({first['active']} active)")
print(f"  - Integrity    : {'OK' if not problems else f'{len(problems)} issues'}")
print(f"  - Elapsed(s)   : {elapsed:.2f}")
print("=" * 50)
