import json
import subprocess
import sys
from pathlib import Path

import pytest

import gen_jit
from x86jitgen.assembler import TableKind
from x86jitgen.errors import UsageError


SCRIPT = Path(__file__).resolve().parents[1] / "gen_jit.py"


def _run(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, str(SCRIPT), *args],
        capture_output=True,
        text=True,
    )


def test_cli_generates_single_table(tmp_path: Path) -> None:
    result = _run("--table", "jit", "--output-dir", str(tmp_path))

    assert result.returncode == 0, result.stderr
    assert f"jit table written to {tmp_path / 'jit.c'}" in result.stdout
    assert "total execution time" in result.stdout
    assert sorted(path.name for path in tmp_path.iterdir()) == ["jit.c"]

    text = (tmp_path / "jit.c").read_text("utf-8")
    assert text.startswith("switch(opcode)\n")
    assert '    case 0x05|0x100:\n' in text


def test_cli_leaves_unchanged_tables_alone(tmp_path: Path) -> None:
    _run("--table", "jit0f_16", "--output-dir", str(tmp_path))
    result = _run("--table", "jit0f_16", "--output-dir", str(tmp_path))

    assert result.returncode == 0, result.stderr
    assert "jit0f_16 table unchanged at" in result.stdout


def test_cli_generates_all_tables_with_ir(tmp_path: Path) -> None:
    result = _run("--all", "--ir-json", "--output-dir", str(tmp_path))

    assert result.returncode == 0, result.stderr
    assert sorted(path.name for path in tmp_path.iterdir()) == [
        "jit.c",
        "jit.json",
        "jit0f_16.c",
        "jit0f_16.json",
        "jit0f_32.c",
        "jit0f_32.json",
    ]
    payload = json.loads((tmp_path / "jit0f_32.json").read_text("utf-8"))
    assert payload["op"] == "switch"


def test_cli_without_table_selection_is_usage_error(tmp_path: Path) -> None:
    out_dir = tmp_path / "out"
    result = _run("--output-dir", str(out_dir))

    assert result.returncode == 2
    assert "pass --table [jit|jit0f_16|jit0f_32] or --all" in result.stderr
    assert not out_dir.exists()


def test_cli_rejects_incomplete_encoding_table(tmp_path: Path) -> None:
    encodings = tmp_path / "encodings.json"
    encodings.write_text(json.dumps([{"opcode": 0x90, "nonfaulting": 1}]), "utf-8")
    out_dir = tmp_path / "out"

    result = _run("--all", "--encodings", str(encodings), "--output-dir", str(out_dir))

    assert result.returncode == 1
    assert "generation failed: opcode 0x00: opcode slot has no encoding" in result.stderr
    assert not out_dir.exists()


@pytest.mark.parametrize(
    "contents,message",
    [
        ('[{"opcode": "0x0F10", "e": 1}]', "opcode must be an integer, got '0x0F10'"),
        ('[{"opcode": null}]', "opcode must be an integer, got None"),
        ("[{", "is not valid JSON"),
    ],
)
def test_cli_reports_malformed_encoding_table(tmp_path: Path, contents: str, message: str) -> None:
    encodings = tmp_path / "encodings.json"
    encodings.write_text(contents, "utf-8")
    out_dir = tmp_path / "out"

    result = _run("--all", "--encodings", str(encodings), "--output-dir", str(out_dir))

    assert result.returncode == 1
    assert "generation failed:" in result.stderr
    assert message in result.stderr
    assert "Traceback" not in result.stderr
    assert not out_dir.exists()


def test_resolve_options_selects_tables(tmp_path: Path) -> None:
    args = gen_jit.parse_args(["--table", "jit0f_32", "--output-dir", str(tmp_path)])

    options = gen_jit.resolve_options(args)

    assert options.tables == (TableKind.JIT0F_32,)
    assert options.output_dir == tmp_path
    assert options.encodings is None
    assert not options.ir_json


def test_resolve_options_all_tables() -> None:
    options = gen_jit.resolve_options(gen_jit.parse_args(["--all"]))

    assert options.tables == tuple(TableKind)
    assert options.output_dir == gen_jit.DEFAULT_OUTPUT_DIR


def test_resolve_options_requires_selection() -> None:
    with pytest.raises(UsageError, match="--all"):
        gen_jit.resolve_options(gen_jit.parse_args([]))


def test_main_reports_written_tables(tmp_path: Path, capsys) -> None:
    gen_jit.main(["--table", "jit0f_16", "--output-dir", str(tmp_path)])

    captured = capsys.readouterr()
    assert "jit0f_16 table written to" in captured.out
    assert (tmp_path / "jit0f_16.c").exists()
