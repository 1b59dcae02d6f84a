import json
import os
import runpy
import pytest

SCRIPT_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    "scripts",
    "analyze_document.py",
)


@pytest.fixture(name="cli")
def cli_fixture():
    """The analyze_document command, loaded without running it."""
    return runpy.run_path(SCRIPT_PATH)["main"]


def test_cli_compares_consecutive_runs(cli, tmp_path, capsys):
    """Test that a second run sees the analysis stored by the first."""
    database_url = f"sqlite:///{tmp_path / 'history.db'}"
    document = tmp_path / "essay.txt"

    document.write_text("Hello world.", encoding="utf-8")
    cli([str(document), "--db", database_url])
    assert "First upload, nothing to compare against." in capsys.readouterr().out

    document.write_text("Hello world. This is great!", encoding="utf-8")
    cli([str(document), "--db", database_url, "--json"])
    data = json.loads(capsys.readouterr().out)

    assert data["stats"]["word_count"] == 5
    assert data["differences"]["word_count"] == 3
    assert data["previous_upload"]["word_count"] == 2


def test_cli_reports_empty_document(cli, tmp_path, capsys):
    document = tmp_path / "empty.txt"
    document.write_text("   ", encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        cli([str(document), "--db", f"sqlite:///{tmp_path / 'history.db'}"])

    assert exc_info.value.code == 1
    assert "ERROR: No text found in the document." in capsys.readouterr().out


def test_cli_missing_file(cli, tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli([str(tmp_path / "missing.txt")])

    assert exc_info.value.code == 1
    assert "ERROR: File not found" in capsys.readouterr().out
