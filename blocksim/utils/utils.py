"""
파일명: utils.py
시간/거리 보조 함수
"""

import math
import re
from typing import Any, Tuple

def parse_time(value) -> Tuple[bool, float]:
    """
    "HH:MM:SS" / "HH:MM" 문자열 또는 숫자(초)를 초로 변환.
    return: (성공여부, 초). 실패 시 (False, 0)
    - 시(hour)는 24 이상 허용 (익일 운행 표기)
    """
    if isinstance(value, bool):
        return False, 0
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return False, 0
        return True, value
    if not isinstance(value, str):
        return False, 0
    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        return False, 0
    h, m = int(parts[0]), int(parts[1])
    s = int(parts[2]) if len(parts) == 3 else 0
    return True, h * 3600 + m * 60 + s

def get_field(obj: Any, key: str, default=None):
    # dict 또는 같은 속성을 가진 객체 모두 허용
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)

def to_int(value, default: int = 0) -> int:
    """문자열/실수 정수 변환 ("1.0" → 1). 숫자가 아니면 default"""
    if isinstance(value, bool) or value is None:
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default

def time_to_seconds(value) -> float:
    # 외부 경계: 파싱 실패는 0초로 (관대한 정책 유지)
    _, sec = parse_time(value)
    return sec

def fmt_hms(sec: float) -> str:
    # 24시 넘어가도 날짜 래핑 없이 25:10:00 처럼 표시
    sec = int(max(0, math.floor(sec)))
    h = sec // 3600; m = (sec % 3600) // 60; s = sec % 60
    return f"{h:02d}:{m:02d}:{s:02d}"

def format_time_input(text: str) -> str:
    """
    느슨한 시각 입력을 HH:MM:SS 로 정리.
    - HHMMSS → HH:MM:SS, HMMSS → 0H:MM:SS
    - HHMM → HH:MM:00, HMM → 0H:MM:00, H/HH → HH:00:00
    - 분/초는 59 상한, 시는 24 이상 허용
    """
    digits = re.sub(r"\D", "", text or "")
    if not digits:
        return text

    n = len(digits)
    if n == 6:
        h, m, s = digits[0:2], digits[2:4], digits[4:6]
    elif n == 5:
        h, m, s = "0" + digits[0], digits[1:3], digits[3:5]
    elif n == 4:
        h, m, s = digits[0:2], digits[2:4], "00"
    elif n == 3:
        h, m, s = "0" + digits[0], digits[1:3], "00"
    elif n <= 2:
        h, m, s = digits.zfill(2), "00", "00"
    else:
        d = digits.ljust(6, "0")
        h, m, s = d[0:2], d[2:4], d[4:6]

    m = min(59, int(m)); s = min(59, int(s))
    return f"{h.zfill(2)}:{m:02d}:{s:02d}"

def round_minutes(sec: float) -> int:
    # 0.5분은 올림 (파이썬 round 의 banker's rounding 회피)
    return int(math.floor(sec / 60.0 + 0.5))

# --- 직선거리(하버사인) 기반 소요시간 근사 ---
def haversine_m(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    R = 6371000.0  # meters
    p1, p2 = math.radians(lat1), math.radians(lat2)
    dphi = p2 - p1
    dl = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dl / 2) ** 2
    return 2 * R * math.atan2(math.sqrt(a), math.sqrt(1 - a))

def straight_line_seconds(lon1: float, lat1: float, lon2: float, lat2: float, avg_speed_kmh: float) -> float:
    """
    haversine(미터) / (평균속도 m/s) 로 시간(초) 근사.
    OSRM을 쓰지 않거나 실패했을 때 공차 세그먼트 fallback으로 사용.
    """
    d_m = haversine_m(lon1, lat1, lon2, lat2)
    v_mps = max(0.1, float(avg_speed_kmh) / 3.6)  # m/s (0으로 나눔 방지)
    return d_m / v_mps
