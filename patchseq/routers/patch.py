# patchseq/routers/patch.py
from __future__ import annotations

import json
import logging
import os
import uuid
from dataclasses import asdict
from datetime import datetime

from fastapi import APIRouter, File, Form, HTTPException, UploadFile

from patchseq.services import hexcodec, locator
from patchseq.services.definition import parse_transitions
from patchseq.services.errors import DefinitionParseError, HexDecodeError, OutputWriteError, PatchSeqError
from patchseq.services.patch_engine import create_delta, crc32_hex, sha256
from patchseq.services.runner import apply_transitions, write_output
from patchseq.services.storage import load_run, run_dir, save_run

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["patch"])

MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(64 * 1024 * 1024)))


async def read_upload(bin_file: UploadFile) -> bytes:
    data = await bin_file.read()
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(413, f"File too large: {len(data)} bytes")
    return data


@router.post("/scan")
async def scan_bin(bin_file: UploadFile = File(...), signature: str = Form(...)):
    data = await read_upload(bin_file)
    try:
        pattern = hexcodec.decode(signature)
    except HexDecodeError as e:
        raise HTTPException(400, str(e))
    if not pattern:
        raise HTTPException(400, "Empty signature")

    offsets = locator.scan(data, pattern)
    loc = locator.Location.from_offsets(offsets)
    return {
        "filename": bin_file.filename,
        "size_bytes": len(data),
        "signature": hexcodec.encode(pattern),
        "matches": len(offsets),
        "offsets": offsets,
        "status": loc.status,
        "offset": loc.offset,
    }


@router.post("/patch")
async def patch_bin(bin_file: UploadFile = File(...), sequence: str = Form(...)):
    try:
        raw = json.loads(sequence)
    except json.JSONDecodeError as e:
        raise HTTPException(422, f"sequence is not valid JSON: {e}")
    try:
        transitions = parse_transitions(raw)
    except DefinitionParseError as e:
        raise HTTPException(422, str(e))

    stock = await read_upload(bin_file)
    filename = bin_file.filename or "upload.bin"

    buf = bytearray(stock)
    try:
        applied = apply_transitions(buf, transitions, filename)
    except PatchSeqError as e:
        logger.warning("patch of %s failed: %s", filename, e)
        raise HTTPException(400, str(e))
    mod = bytes(buf)

    run_id = str(uuid.uuid4())
    try:
        rdir = run_dir(run_id)
        out_path = rdir / "output.bin"
        write_output(out_path, mod)
        delta = create_delta(stock, mod, rdir)
    except (OutputWriteError, OSError) as e:
        logger.error("run %s: could not store result: %s", run_id, e)
        raise HTTPException(500, f"failed to store patched file: {e}")

    run = {
        "id": run_id,
        "created_at": datetime.utcnow().isoformat(),
        "original_filename": filename,
        "size_bytes": len(mod),
        "transitions": [asdict(t) for t in applied],
        "input": {"sha256": sha256(stock), "crc32": crc32_hex(stock)},
        "output": {"sha256": sha256(mod), "crc32": crc32_hex(mod)},
        "delta_size_bytes": delta["delta_size"],
        "paths": {"output_file_path": str(out_path)},
        "download_url": f"/download/{run_id}",
    }
    save_run(run_id, run)
    logger.info("run %s: %d transition(s) applied to %s", run_id, len(applied), filename)

    return {k: v for k, v in run.items() if k != "paths"}


@router.get("/runs/{run_id}")
def get_run(run_id: str):
    r = load_run(run_id)
    if not r:
        raise HTTPException(status_code=404, detail="run_id not found")
    # internal paths stay private
    return {k: v for k, v in r.items() if k != "paths"}


@router.post("/fingerprint")
async def fingerprint(bin_file: UploadFile = File(...)):
    data = await read_upload(bin_file)
    return {
        "filename": bin_file.filename,
        "size_bytes": len(data),
        "sha256": sha256(data),
        "crc32": crc32_hex(data),
    }
