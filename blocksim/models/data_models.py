"""
파일명: models/data_models.py
트립/정류장시각/세그먼트/레그/차량(블록) 자료구조 정의 (+ 재생용 위치 상태)
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

COMMERCIAL = "commercial"
EMPTY = "empty"

@dataclass(frozen=True)
class StopTime:
    stop_id: str
    stop_sequence: int
    arrival_time: float    # 서비스일 00:00 기준 초 (86400 초과 가능)
    departure_time: float

@dataclass(frozen=True)
class Trip:
    """정규화된 영업 트립. 생성 후 변경하지 않는다."""
    trip_id: str
    route_id: str
    direction_id: int
    stop_times: Tuple[StopTime, ...]
    start_time: float      # 첫 정류장 출발
    end_time: float        # 마지막 정류장 도착 (자정 넘김 보정 후)

    @property
    def first_stop_id(self) -> str:
        return self.stop_times[0].stop_id

    @property
    def last_stop_id(self) -> str:
        return self.stop_times[-1].stop_id

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

@dataclass(frozen=True)
class Segment:
    # 공차 이동 전용 방향성 간선 (승객 운행과 무관)
    start_node_id: str
    end_node_id: str
    travel_time: float

@dataclass
class Leg:
    # kind: "commercial" | "empty"
    kind: str
    start_stop_id: str
    end_stop_id: str
    start_time: float
    end_time: float
    trip_id: Optional[str] = None       # commercial 만
    route_id: Optional[str] = None
    direction_id: Optional[int] = None

    @property
    def is_commercial(self) -> bool:
        return self.kind == COMMERCIAL

    def to_dict(self) -> dict:
        d = {
            "type": self.kind,
            "start_stop_id": self.start_stop_id,
            "end_stop_id": self.end_stop_id,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }
        if self.trip_id is not None:
            d["trip_id"] = self.trip_id
        return d

@dataclass
class Vehicle:
    """논리 버스(블록): 한 대의 차량이 하루 동안 수행하는 레그 체인"""
    bus_id: str
    color: str
    route_id: str                       # 시드 트립의 노선
    legs: List[Leg] = field(default_factory=list)
    total_commercial_time: float = 0.0
    total_empty_time: float = 0.0

    @property
    def commercial_legs(self) -> List[Leg]:
        return [leg for leg in self.legs if leg.is_commercial]

    @property
    def trip_count(self) -> int:
        return len(self.commercial_legs)

    @property
    def last_leg(self) -> Optional[Leg]:
        return self.legs[-1] if self.legs else None

    def to_dict(self) -> dict:
        return {
            "bus_id": self.bus_id,
            "color": self.color,
            "legs": [leg.to_dict() for leg in self.legs],
            "total_commercial_time": self.total_commercial_time,
            "total_empty_time": self.total_empty_time,
        }

def stop_index_map(stop_ids) -> Dict[str, int]:
    # 같은 정류장이 여러 번 나오면 첫 위치 사용
    out: Dict[str, int] = {}
    for i, sid in enumerate(stop_ids):
        out.setdefault(sid, i)
    return out

@dataclass(frozen=True)
class RouteTrack:
    """노선/방향별 기준 정류장 순서 (재생 화면의 선형 트랙)"""
    route_id: str
    direction_id: int
    stop_ids: Tuple[str, ...]
    short_name: Optional[str] = None

    @property
    def key(self) -> Tuple[str, int]:
        return (self.route_id, self.direction_id)

    def index_map(self) -> Dict[str, int]:
        return stop_index_map(self.stop_ids)

@dataclass
class VehiclePosition:
    bus_id: str
    color: str
    kind: str
    trip_id: Optional[str]
    route_id: str
    direction_id: int
    path_index: float      # 트랙 정류장 인덱스(소수)
    progress: float        # 0.0~1.0 (트랙 시작→끝)
    track_x: float         # 화면 좌→우 위치 (방향 1은 반전)
    t: float
