# patchseq/services/runner.py
"""
Sequence runner: drives each file of a patch definition through its ordered
transitions.

For every transition the signature is searched in the buffer as left by the
previous transitions, so a later signature may target bytes an earlier patch
wrote. A signature must match exactly once; no match and several matches are
both failures and nothing is written for that file.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from patchseq.services import applier, hexcodec, locator
from patchseq.services.definition import FileSequence, Transition
from patchseq.services.errors import (
    AmbiguousSignatureError,
    HexDecodeError,
    InputReadError,
    OutputWriteError,
    PatchSeqError,
    SignatureNotFoundError,
    SizeMismatchError,
)
from patchseq.services.patch_engine import sha256

logger = logging.getLogger(__name__)

# progress(index, stage, buffer) with stage "before" / "after"
Progress = Callable[[int, str, bytes], None]


@dataclass
class TransitionResult:
    index: int
    desc: str
    offset: int
    length: int


@dataclass
class SequenceResult:
    input_file: str
    output_file: Optional[str] = None
    transitions: List[TransitionResult] = field(default_factory=list)
    input_sha256: Optional[str] = None
    output_sha256: Optional[str] = None
    written: bool = False
    error: Optional[PatchSeqError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _read_bytes(path: Path) -> bytearray:
    try:
        with open(path, "rb") as f:
            return bytearray(f.read())
    except OSError as e:
        raise InputReadError(f"failed to read input file {str(path)!r}: {e}") from e


def write_output(path: Path, data: bytes) -> None:
    # open() creates with 0666 minus umask
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise OutputWriteError(f"failed to write output file {str(path)!r}: {e}") from e


def _decode(index: int, label: str, what: str, value: str) -> bytes:
    try:
        data = hexcodec.decode(value)
    except HexDecodeError as e:
        raise HexDecodeError(f"sequence {index} of {label!r}: bad {what}: {e}") from e
    if what == "signature" and not data:
        raise HexDecodeError(f"sequence {index} of {label!r}: empty signature")
    return data


def apply_transition(buf: bytearray, index: int, t: Transition, label: str = "<buffer>") -> TransitionResult:
    signature = _decode(index, label, "signature", t.signature)
    patch = _decode(index, label, "patch", t.patch)

    # in-place edits only, checked before touching the buffer
    if len(signature) != len(patch):
        raise SizeMismatchError(index, label, len(signature), len(patch))

    loc = locator.locate(buf, signature)
    if loc.status == locator.NOT_FOUND:
        raise SignatureNotFoundError(
            f"sequence {index} of {label!r}: patch transition not applied: signature not found"
        )
    if loc.status == locator.AMBIGUOUS:
        raise AmbiguousSignatureError(
            f"sequence {index} of {label!r}: multiple matches ({loc.matches}): "
            f"signature not specific enough",
            matches=loc.matches,
        )

    applier.apply(buf, loc.offset, patch)
    logger.debug("sequence %d of %s: patched %d byte(s) at 0x%X", index, label, len(patch), loc.offset)
    return TransitionResult(index=index, desc=t.desc, offset=loc.offset, length=len(patch))


def apply_transitions(
    buf: bytearray,
    transitions: Iterable[Transition],
    label: str = "<buffer>",
    progress: Optional[Progress] = None,
) -> List[TransitionResult]:
    out = []
    for i, t in enumerate(transitions):
        if progress:
            progress(i, "before", bytes(buf))
        out.append(apply_transition(buf, i, t, label))
        if progress:
            progress(i, "after", bytes(buf))
    return out


def run_sequence(fs: FileSequence, progress: Optional[Progress] = None) -> SequenceResult:
    """
    Load the input once, apply every transition, then persist to
    `output_file` if one is set. Raises the first PatchSeqError; in that case
    nothing is written.
    """
    src = Path(fs.input_file)
    buf = _read_bytes(src)
    res = SequenceResult(input_file=fs.input_file, output_file=fs.output_file or None)
    res.input_sha256 = sha256(bytes(buf))

    res.transitions = apply_transitions(buf, fs.sequence, fs.input_file, progress)
    res.output_sha256 = sha256(bytes(buf))

    if fs.persists:
        write_output(Path(fs.output_file), bytes(buf))
        res.written = True
        logger.info("wrote %s (%d bytes, %d transition(s))", fs.output_file, len(buf), len(res.transitions))
    else:
        logger.info("%s: %d transition(s) applied, no output file; result discarded", fs.input_file, len(res.transitions))
    return res


def run_definition(
    defn: Iterable[FileSequence],
    stop_on_error: bool = True,
    progress: Optional[Progress] = None,
    on_result: Optional[Callable[[SequenceResult], None]] = None,
) -> List[SequenceResult]:
    """
    Run every file sequence in order.

    stop_on_error=True re-raises the first failure, leaving only the outputs
    of the sequences that finished before it. With False the failure is
    recorded on that sequence's result and the next sequence still runs.
    `on_result` is called as each sequence finishes, before the next starts.
    """
    results = []
    for fs in defn:
        try:
            res = run_sequence(fs, progress)
        except PatchSeqError as e:
            if stop_on_error:
                raise
            logger.info("%s failed, continuing with next file: %s", fs.input_file, e)
            res = SequenceResult(input_file=fs.input_file, output_file=fs.output_file or None, error=e)
        results.append(res)
        if on_result:
            on_result(res)
    return results
