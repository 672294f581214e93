"""
차량 블록(운행 체인) 편성 / 재생 엔진 파라미터와 입출력 경로 정의
- 공차(deadhead) 기본 패널티: 세그먼트 미정의 시 600초
- 자정 넘김: 종료시각 < 시작시각이면 +86400 (1회)
- 재생: 최대 36시간, 첫 차량 10분 전부터 시작
"""

from dataclasses import dataclass

# =========================
# 1) 파라미터 클래스
# =========================
@dataclass
class ScheduleParams:
    # ----- 시간/정규화 -----
    day_seconds: int = 86400              # 자정 넘김 보정량(초)

    # ----- 공차 이동 -----
    deadhead_default_sec: int = 600       # 직접 세그먼트 없을 때 10분 패널티

    # ----- 차량 ID/색상 -----
    bus_id_prefix: str = "BUS"
    bus_id_width: int = 4                 # BUS-0001
    color_saturation: int = 85            # hsl(h, 85%, 45%)
    color_lightness: int = 45

    # ----- 재생(가상 시계) -----
    playback_max_sec: int = 36 * 3600     # 36:00:00 에서 정지
    playback_preroll_sec: int = 600       # 첫 운행 10분 전부터 시작
    speed_options: tuple = (1, 2, 5, 10, 60, 120, 240, 480)

    # ----- OSRM 이동시간(공차 세그먼트 생성용) -----
    use_osrm: bool = False
    osrm_base_url: str = "http://127.0.0.1:5001"
    osrm_profile: str = "driving"
    avg_speed_kmh: float = 25.0           # OSRM 미사용 시 직선+평균속도 근사

    # ----- 로그 -----
    verbose: bool = True
    log_every_vehicles: int | None = None  # None → 차량별 진행 로그 생략

# =========================
# 2) 입출력 경로/태그
# =========================
GTFS_DIR: str = "data/gtfs"
SEGMENTS_PATH: str | None = "data/empty_segments.csv"
SERVICE_ID: str | None = None         # None → 전체 서비스
ROUTE_IDS: list | None = None         # None → 전체 노선

RUN_TAG: str = "weekday_blocks"       # 시나리오 명칭

OUT_DIR: str = f"outputs/{RUN_TAG}"   # vehicles.json / tracking.csv / tracking_log.txt / empty_segments.json
