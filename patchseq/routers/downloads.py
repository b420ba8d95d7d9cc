# patchseq/routers/downloads.py
from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from patchseq.services.storage import load_run

router = APIRouter(prefix="/download", tags=["download"])


@router.get("/{run_id}")
def download_by_run(run_id: str):
    """Patched file produced by a /api/patch run."""
    r = load_run(run_id)
    if not r:
        raise HTTPException(status_code=404, detail="run_id not found")

    out_path = (r.get("paths") or {}).get("output_file_path")
    if not out_path or not Path(out_path).exists():
        raise HTTPException(status_code=404, detail="output file not found")

    stem = Path(r.get("original_filename") or "output.bin").stem
    return FileResponse(
        path=out_path,
        filename=f"{stem}.mod.bin",
        media_type="application/octet-stream",
    )
