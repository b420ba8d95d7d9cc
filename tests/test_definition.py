import pytest
from pydantic import ValidationError

from conftest import make_step
from patchseq.services.definition import (
    FileSequence,
    load_definition,
    loads_definition,
    parse_definition,
    parse_transitions,
)
from patchseq.services.errors import DefinitionParseError, DefinitionReadError


def test_parse_dashed_fields():
    defn = parse_definition([
        {
            "input-file": "in.bin",
            "output-file": "out.bin",
            "sequence": [make_step("DEADBEEF", "CAFEBABE", desc="first", settings="x")],
        }
    ])
    assert len(defn) == 1
    fs = defn[0]
    assert fs.input_file == "in.bin"
    assert fs.output_file == "out.bin"
    assert fs.persists
    t = fs.sequence[0]
    assert t.desc == "first"
    assert t.settings == "x"
    assert t.signature == "DEADBEEF"
    assert t.patch == "CAFEBABE"


@pytest.mark.parametrize("extra", [{}, {"output-file": ""}, {"output-file": None}])
def test_missing_or_empty_output_does_not_persist(extra):
    fs = parse_definition([{"input-file": "in.bin", "sequence": [], **extra}])[0]
    assert not fs.persists


def test_order_is_kept():
    defn = parse_definition([
        {"input-file": "a", "sequence": [make_step("01", "02"), make_step("03", "04")]},
        {"input-file": "b", "sequence": []},
    ])
    assert [fs.input_file for fs in defn] == ["a", "b"]
    assert [t.signature for t in defn[0].sequence] == ["01", "03"]


def test_desc_and_settings_are_optional():
    t = parse_transitions([{"transition": {"signature": "90", "patch": "CC"}}])[0]
    assert t.desc == ""
    assert t.settings == ""


def test_file_sequence_is_immutable():
    fs = parse_definition([{"input-file": "a", "sequence": []}])[0]
    with pytest.raises(ValidationError):
        fs.input_file = "b"


def test_populate_by_field_name():
    fs = FileSequence(input_file="a", output_file="b")
    assert fs.persists


@pytest.mark.parametrize("data", [
    {"input-file": "a"},
    [{"sequence": []}],
    [{"input-file": "a", "sequence": [{"desc": "no transition"}]}],
    [{"input-file": "a", "sequence": [{"transition": {"signature": "90"}}]}],
])
def test_invalid_definitions(data):
    with pytest.raises(DefinitionParseError):
        parse_definition(data)


def test_parse_transitions_requires_list():
    with pytest.raises(DefinitionParseError):
        parse_transitions({"signature": "90", "patch": "CC"})


def test_loads_bad_json():
    with pytest.raises(DefinitionParseError):
        loads_definition("[{not json")


def test_load_json_file(write_def):
    p = write_def([{"input-file": "fw.bin", "sequence": [make_step("AA", "BB")]}])
    defn = load_definition(p)
    assert defn[0].sequence[0].patch == "BB"


def test_load_yaml_file(tmp_path):
    p = tmp_path / "seq.yml"
    p.write_text(
        "- input-file: fw.bin\n"
        "  output-file: fw.mod.bin\n"
        "  sequence:\n"
        "    - desc: nop out check\n"
        "      transition:\n"
        "        signature: \"75 0A\"\n"
        "        patch: \"90 90\"\n",
        encoding="utf-8",
    )
    fs = load_definition(p)[0]
    assert fs.output_file == "fw.mod.bin"
    assert fs.sequence[0].signature == "75 0A"


def test_load_missing_file(tmp_path):
    with pytest.raises(DefinitionReadError):
        load_definition(tmp_path / "nope.def")


def test_yaml_all_digit_hex_stays_text(tmp_path):
    p = tmp_path / "nops.yaml"
    p.write_text(
        "- input-file: fw.bin\n"
        "  output-file: null\n"
        "  sequence:\n"
        "    - transition:\n"
        "        signature: 7500\n"
        "        patch: 9090\n"
        "    - transition:\n"
        "        signature: 0000\n"
        "        patch: 1e10\n",
        encoding="utf-8",
    )
    fs = load_definition(p)[0]
    assert not fs.persists
    assert [(t.signature, t.patch) for t in fs.sequence] == [("7500", "9090"), ("0000", "1e10")]
