"""
파일명: exporters.py
결과 객체를 JSON / CSV / 텍스트 로그로 저장
"""

import json
from pathlib import Path
from typing import Any, Dict, List

from ..models.data_models import Vehicle
from ..engine.timeline import event_log, summary_csv

def save_json(obj: Any, path: str):
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2)

def save_text(text: str, path: str):
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)

def vehicles_to_records(vehicles: List[Vehicle]) -> List[dict]:
    return [v.to_dict() for v in vehicles]

def export_run(result: Dict[str, Any], out_dir: str) -> Dict[str, Path]:
    """build_blocks() 결과 → vehicles.json / tracking.csv / tracking_log.txt"""
    out = Path(out_dir)
    files = {
        "vehicles": out / "vehicles.json",
        "csv": out / "tracking.csv",
        "log": out / "tracking_log.txt",
    }
    vehicles = result["vehicles"]
    save_json(vehicles_to_records(vehicles), str(files["vehicles"]))
    save_text(summary_csv(vehicles), str(files["csv"]))
    save_text(event_log(vehicles), str(files["log"]))
    return files
