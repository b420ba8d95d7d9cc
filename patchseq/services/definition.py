# patchseq/services/definition.py
"""
Declarative patch definitions.

A definition is an ordered list of file sequences:

    [
      {
        "input-file": "fw.bin",
        "output-file": "fw.mod.bin",
        "sequence": [
          {"desc": "skip crc check", "settings": "",
           "transition": {"signature": "DEADBEEF", "patch": "CAFEBABE"}}
        ]
      }
    ]

JSON by default (the classic `patch-seq.def`), YAML when the file ends in
.yml / .yaml.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from patchseq.services.errors import DefinitionParseError, DefinitionReadError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yml", ".yaml"}

_SCALAR_TAGS = {
    "tag:yaml.org,2002:int",
    "tag:yaml.org,2002:float",
    "tag:yaml.org,2002:bool",
}


class _DefinitionLoader(yaml.SafeLoader):
    """SafeLoader that keeps plain scalars as text, so 9090 or 0000 stay hex strings."""


_DefinitionLoader.yaml_implicit_resolvers = {
    first: [(tag, rx) for tag, rx in resolvers if tag not in _SCALAR_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class TransitionSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    signature: str
    patch: str


class Transition(BaseModel):
    model_config = ConfigDict(frozen=True)

    desc: str = ""
    settings: str = ""  # reserved
    transition: TransitionSpec

    @property
    def signature(self) -> str:
        return self.transition.signature

    @property
    def patch(self) -> str:
        return self.transition.patch


class FileSequence(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    input_file: str = Field(alias="input-file")
    output_file: Optional[str] = Field(default=None, alias="output-file")
    sequence: Tuple[Transition, ...] = ()

    @property
    def persists(self) -> bool:
        return bool(self.output_file)


_definition_adapter = TypeAdapter(List[FileSequence])


def parse_definition(data: Any) -> List[FileSequence]:
    if not isinstance(data, list):
        raise DefinitionParseError(
            f"patch definition must be a list of file sequences, got {type(data).__name__}"
        )
    try:
        return _definition_adapter.validate_python(data)
    except ValidationError as e:
        raise DefinitionParseError(f"invalid patch definition: {e}") from e


def loads_definition(text: str, fmt: str = "json") -> List[FileSequence]:
    try:
        if fmt == "yaml":
            data = yaml.load(text, Loader=_DefinitionLoader)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DefinitionParseError(f"failed to parse patch definition: {e}") from e
    return parse_definition(data)


def load_definition(path: str | Path) -> List[FileSequence]:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DefinitionReadError(f"failed to read patch definition {str(p)!r}: {e}") from e

    fmt = "yaml" if p.suffix.lower() in YAML_SUFFIXES else "json"
    defn = loads_definition(text, fmt)
    logger.debug("loaded %d file sequence(s) from %s", len(defn), p)
    return defn


_transitions_adapter = TypeAdapter(List[Transition])


def parse_transitions(data: Any) -> List[Transition]:
    """A bare transition list, as posted to the HTTP patch endpoint."""
    if not isinstance(data, list):
        raise DefinitionParseError(f"sequence must be a list of transitions, got {type(data).__name__}")
    try:
        return _transitions_adapter.validate_python(data)
    except ValidationError as e:
        raise DefinitionParseError(f"invalid transition sequence: {e}") from e
