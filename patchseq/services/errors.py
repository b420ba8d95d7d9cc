# patchseq/services/errors.py
from __future__ import annotations

from typing import Optional


class PatchSeqError(RuntimeError):
    """Base for every failure a patch run can hit. None of them are retried."""


class DefinitionReadError(PatchSeqError):
    pass


class DefinitionParseError(PatchSeqError):
    pass


class InputReadError(PatchSeqError):
    pass


class HexDecodeError(PatchSeqError, ValueError):
    pass


class SizeMismatchError(PatchSeqError):
    def __init__(self, index: int, filename: str, signature_len: int, patch_len: int):
        self.index = index
        self.filename = filename
        self.signature_len = signature_len
        self.patch_len = patch_len
        super().__init__(
            f"sequence {index} of {filename!r}: signature is {signature_len} bytes, "
            f"patch is {patch_len} bytes; signature and patch must match in byte size "
            f"(in-place changes only)"
        )


class SignatureNotFoundError(PatchSeqError):
    pass


class AmbiguousSignatureError(PatchSeqError):
    def __init__(self, message: str, matches: Optional[int] = None):
        self.matches = matches
        super().__init__(message)


class OutputWriteError(PatchSeqError):
    pass
