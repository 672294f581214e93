"""
재생용 가상 시계
- 엔진은 타이머를 갖지 않는다. 호출 측이 (벽시계 경과 × 배속) 만큼 advance 하고
  매 프레임 timeline / interpolation 조회를 다시 호출한다.
- 모든 메서드는 새 PlaybackClock 을 반환 (상태 공유 없음)
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import List, Optional

from ..config.config import ScheduleParams
from ..models.data_models import Vehicle

@dataclass(frozen=True)
class PlaybackClock:
    current_sec: float = 0.0
    speed: float = 1
    playing: bool = False
    max_sec: float = 36 * 3600

    def play(self) -> "PlaybackClock":
        return replace(self, playing=True)

    def pause(self) -> "PlaybackClock":
        return replace(self, playing=False)

    def toggle(self) -> "PlaybackClock":
        return replace(self, playing=not self.playing)

    def reset(self) -> "PlaybackClock":
        return replace(self, playing=False, current_sec=0.0)

    def seek(self, t: float) -> "PlaybackClock":
        return replace(self, current_sec=max(0.0, min(float(t), self.max_sec)))

    def set_speed(self, speed: float, P: Optional[ScheduleParams] = None) -> "PlaybackClock":
        P = P or ScheduleParams()
        if speed not in P.speed_options:
            raise ValueError(f"speed x{speed} not in {P.speed_options}")
        return replace(self, speed=speed)

    def advance(self, wall_delta_sec: float) -> "PlaybackClock":
        if not self.playing or wall_delta_sec <= 0:
            return self
        nxt = self.current_sec + wall_delta_sec * self.speed
        return replace(self, current_sec=min(nxt, self.max_sec))

def initial_time(vehicles: List[Vehicle], P: Optional[ScheduleParams] = None) -> float:
    """첫 레그 시작 preroll 초 전 (기본 10분). 차량이 없으면 0"""
    P = P or ScheduleParams()
    starts = [v.legs[0].start_time for v in vehicles if v.legs]
    if not starts:
        return 0.0
    earliest = min(starts)
    if earliest >= P.playback_max_sec:
        return 0.0
    return max(0.0, earliest - P.playback_preroll_sec)

def new_clock(vehicles: List[Vehicle], P: Optional[ScheduleParams] = None) -> PlaybackClock:
    P = P or ScheduleParams()
    return PlaybackClock(current_sec=initial_time(vehicles, P), max_sec=P.playback_max_sec)
