import json
import logging
from pathlib import Path

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from bubble import bubble_cli
from bubble.bubble_errors import FrontendError, UnexpectedTokenError

SOURCE = "function add(a: i32, b: i32): i32 { return a + b; }"


def test_run_bubble_string_input_prints_json(capsys: pytest.CaptureFixture[str]) -> None:
    bubble_cli.run_bubble(source=SOURCE, is_string=True)
    data = json.loads(capsys.readouterr().out)
    assert [node["kind"] for node in data] == ["function_statement"]
    assert data[0]["name"] == "add"
    assert data[0]["span"] == [0, len(SOURCE)]


def test_run_bubble_source_format(capsys: pytest.CaptureFixture[str]) -> None:
    bubble_cli.run_bubble(source=SOURCE, is_string=True, fmt="source")
    out = capsys.readouterr().out
    assert out.splitlines()[0] == "function add(a: i32, b: i32): i32 {"
    assert "    return a + b;" in out


def test_run_bubble_block(capsys: pytest.CaptureFixture[str]) -> None:
    output = bubble_cli.run_bubble(source="x = 1; x", is_string=True, block=True)
    data = json.loads(capsys.readouterr().out)
    assert data["kind"] == "statements"
    assert [s["naked"] for s in data["statements"]] == [False, True]
    assert json.loads(output) == data


def test_run_bubble_file_input(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    file_path = tmp_path / "input.bbl"
    file_path.write_text(SOURCE, encoding="utf-8")
    bubble_cli.run_bubble(source=str(file_path), fmt="source")
    assert "function add" in capsys.readouterr().out


def test_run_bubble_output_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    output_path = tmp_path / "out.bbl"
    bubble_cli.run_bubble(source=SOURCE, is_string=True, fmt="source", out=str(output_path))
    assert capsys.readouterr().out == ""
    assert output_path.read_text(encoding="utf-8").startswith("function add(")


def test_run_bubble_rejects_other_extensions() -> None:
    with pytest.raises(ValueError, match=r"Only \.bbl files"):
        bubble_cli.run_bubble("program.txt")


def test_run_bubble_propagates_parse_errors() -> None:
    with pytest.raises(UnexpectedTokenError):
        bubble_cli.run_bubble(source="let = 1;", is_string=True)


def test_main_string(capsys: pytest.CaptureFixture[str]) -> None:
    assert bubble_cli.main(["-s", "let x = 1;", "-f", "source"]) == 0
    assert capsys.readouterr().out.strip() == "let x = 1;"


def test_main_reports_errors(capsys: pytest.CaptureFixture[str]) -> None:
    assert bubble_cli.main(["-s", "let x = ;"]) == 1
    err = capsys.readouterr().err.strip()
    assert err.startswith("<string>:1:9: Unexpected token SEMICOLON")


def test_main_reports_file_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    src_file = tmp_path / "bad.bbl"
    src_file.write_text("function f() {\n  @\n}", encoding="utf-8")
    assert bubble_cli.main([str(src_file)]) == 1
    err = capsys.readouterr().err
    assert err.startswith(f"{src_file}:2:3: Invalid character")


def test_main_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert bubble_cli.main([str(tmp_path / "missing.bbl")]) == 1
    assert capsys.readouterr().err.startswith("bubble: ")


def test_main_block_mode(capsys: pytest.CaptureFixture[str]) -> None:
    assert bubble_cli.main(["-s", "--block", "-f", "source", "1;2"]) == 0
    assert capsys.readouterr().out == "1;\n2\n"


def test_main_invalid_format() -> None:
    with pytest.raises(SystemExit) as e:
        bubble_cli.main(["-s", "x", "-f", "xml"])
    assert e.value.code == 2


def test_main_without_source_starts_repl(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []
    monkeypatch.setattr("bubble.bubble_repl.start_repl", lambda fmt: calls.append(fmt))
    assert bubble_cli.main([]) == 0
    assert bubble_cli.main(["--repl", "-f", "source"]) == 0
    assert calls == ["json", "source"]


def test_verbose_enables_debug_logging(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    levels: list[int] = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: levels.append(kw["level"]))
    bubble_cli.main(["-s", "let x = 1;", "--verbose"])
    bubble_cli.main(["-s", "let x = 1;"])
    assert levels == [logging.DEBUG, logging.WARNING]


def test_render_matches_run(capsys: pytest.CaptureFixture[str]) -> None:
    assert bubble_cli.render(SOURCE, fmt="source") == bubble_cli.run_bubble(
        SOURCE, is_string=True, fmt="source"
    )


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])  # type: ignore[misc]
@given(source=st.text(max_size=30))  # type: ignore[misc]
def test_main_never_crashes_on_random_input(
    source: str, capsys: pytest.CaptureFixture[str]
) -> None:
    status = bubble_cli.main(["-s", "--", source]) if source else 0
    assert status in (0, 1)
    capsys.readouterr()


def test_frontend_error_location() -> None:
    assert FrontendError("boom", 3, 2, 7).location() == "2:7"
