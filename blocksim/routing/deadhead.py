"""
파일명: routing/deadhead.py
공차(deadhead) 이동시간 조회
- 같은 정류장: 0초
- (start, end) 방향성 세그먼트가 있으면 그 travel_time
- 없으면 기본 패널티(600초)
"""

from typing import Any, Dict, Iterable, Tuple

from ..utils.utils import get_field as _get

DEFAULT_DEADHEAD_SEC = 600

class DeadheadLookup:
    def __init__(self, segments: Iterable[Any] = (), default_sec: float = DEFAULT_DEADHEAD_SEC):
        self.default_sec = default_sec
        # 선형 탐색 대신 (start, end) 인덱스. 중복 세그먼트는 첫 번째 우선
        self._index: Dict[Tuple[str, str], float] = {}
        for s in segments:
            key = (str(_get(s, "start_node_id")), str(_get(s, "end_node_id")))
            self._index.setdefault(key, _get(s, "travel_time") or 0)

    def __len__(self) -> int:
        return len(self._index)

    def __call__(self, from_stop: str, to_stop: str) -> float:
        return self.travel_time(from_stop, to_stop)

    def has_edge(self, from_stop: str, to_stop: str) -> bool:
        return (from_stop, to_stop) in self._index

    def travel_time(self, from_stop: str, to_stop: str) -> float:
        if from_stop == to_stop:
            return 0
        return self._index.get((from_stop, to_stop), self.default_sec)
