# tools/patch_seq.py
# Applies a patch sequence definition (patch-seq.def by default) to the files it names.
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from patchseq.services import hexcodec
from patchseq.services.definition import load_definition
from patchseq.services.errors import PatchSeqError
from patchseq.services.runner import SequenceResult, run_definition

DEFAULT_DEF = "patch-seq.def"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Patch files in place using unique hex signatures from a patch definition"
    )
    parser.add_argument(
        "--definition",
        default=os.getenv("PATCH_SEQ_DEF", DEFAULT_DEF),
        help=f"patch definition file (JSON, or YAML by .yml/.yaml suffix; default {DEFAULT_DEF})",
    )
    parser.add_argument(
        "--keep-going", action="store_true",
        help="continue with the next file after a failure instead of stopping",
    )
    parser.add_argument("--quiet", action="store_true", help="do not print buffer hex dumps")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def print_progress(index: int, stage: str, buf: bytes) -> None:
    label = "before" if stage == "before" else "after "
    print(f"{label} ({index}): {hexcodec.encode(buf)}")


def print_summary(r: SequenceResult) -> None:
    if not r.ok:
        print(f"error: {r.error}", file=sys.stderr)
        return
    dest = r.output_file if r.written else "(not written)"
    print(f"{r.input_file}: applied {len(r.transitions)} output: {dest}")


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    progress = None if args.quiet else print_progress
    try:
        defn = load_definition(args.definition)
        results = run_definition(
            defn,
            stop_on_error=not args.keep_going,
            progress=progress,
            on_result=print_summary,
        )
    except PatchSeqError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    return 0 if all(r.ok for r in results) else 1


if __name__ == "__main__":
    raise SystemExit(main())
