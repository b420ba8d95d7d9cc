# patchseq/services/storage.py
from __future__ import annotations

import os, json
from pathlib import Path
from typing import Optional

DATA_DIR = Path(os.getenv("DATA_DIR", "storage"))
RUNS_DIR = DATA_DIR / "runs"


def run_dir(run_id: str) -> Path:
    d = RUNS_DIR / run_id
    d.mkdir(parents=True, exist_ok=True)
    return d


def run_json_path(run_id: str) -> Path:
    return RUNS_DIR / run_id / "run.json"


def save_run(run_id: str, data: dict) -> None:
    p = run_dir(run_id) / "run.json"
    with open(p, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


def load_run(run_id: str) -> Optional[dict]:
    # run ids are generated uuids; anything with a separator is not one of ours
    if not run_id or "/" in run_id or "\\" in run_id or run_id.startswith("."):
        return None
    p = run_json_path(run_id)
    if not p.exists():
        return None
    with open(p, "r", encoding="utf-8") as f:
        return json.load(f)
