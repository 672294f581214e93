# vehicle/vehicle_init.py
"""
논리 버스 생성: 순번 기반 ID + ID 해시 기반 고정 색상
"""
from typing import Optional

from ..config.config import ScheduleParams
from ..models.data_models import Vehicle

def _to_int32(x: int) -> int:
    x &= 0xFFFFFFFF
    return x - (1 << 32) if x >= (1 << 31) else x

def bus_id_for(number: int, P: Optional[ScheduleParams] = None) -> str:
    P = P or ScheduleParams()
    return f"{P.bus_id_prefix}-{number:0{P.bus_id_width}d}"

def hue_for(bus_id: str) -> int:
    # h = c + ((h << 5) - h), 시프트는 32비트 정수 의미 (기존 화면 색상과 동일)
    h = 0
    for ch in bus_id:
        h = ord(ch) + _to_int32(_to_int32(h) << 5) - h
    return abs(h) % 360

def bus_color(bus_id: str, P: Optional[ScheduleParams] = None) -> str:
    P = P or ScheduleParams()
    return f"hsl({hue_for(bus_id)}, {P.color_saturation}%, {P.color_lightness}%)"

def new_vehicle(number: int, route_id: str, P: Optional[ScheduleParams] = None) -> Vehicle:
    bus_id = bus_id_for(number, P)
    return Vehicle(bus_id=bus_id, color=bus_color(bus_id, P), route_id=route_id)
