"""
Tests for the import_access_logs command line entry point.
"""

from pathlib import Path

import pytest
from sqlalchemy import create_engine, select

import import_access_logs as cli
from visitor_import.storage import VisitorRow, VisitRow


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep the CLI from replacing pytest's logging handlers."""
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr(cli, "stop_logging", lambda: None)


def _read_visits(db_path: Path):
    engine = create_engine(f"sqlite:///{db_path}")
    try:
        with engine.connect() as conn:
            visitors = {row.address: row.visit_count for row in conn.execute(select(VisitorRow))}
            requests = [row.request for row in conn.execute(select(VisitRow).order_by(VisitRow.id))]
    finally:
        engine.dispose()
    return visitors, requests


################################################################################
# _parse_args
################################################################################

def test_parse_args_defaults():
    args = cli._parse_args([])
    assert args.log_dir == "/etc/httpd/logs"
    assert args.file_list is None
    assert args.prefix == "access"
    assert args.batch_size == 1000
    assert args.noise_prefixes == ["/assets", "/css", "/favicon"]
    assert args.exempt_addresses == []
    assert args.yes is False


def test_parse_args_overrides():
    args = cli._parse_args([
        "/tmp/logs", "--list", "a.log,b.log", "--batch-size", "10",
        "--noise-prefix", "/static", "--exempt", "127.0.0.1", "--exempt", "127.0.0.1", "-y",
    ])
    assert args.log_dir == "/tmp/logs"
    assert args.file_list == "a.log,b.log"
    assert args.batch_size == 10
    assert args.noise_prefixes == ["/static"]
    assert args.exempt_addresses == ["127.0.0.1"]
    assert args.yes is True


def test_parse_args_rejects_zero_batch():
    with pytest.raises(SystemExit):
        cli._parse_args(["--batch-size", "0"])


################################################################################
# _prompt_confirm
################################################################################

@pytest.mark.parametrize("answer,expected", [("y", True), ("YES", True), ("n", False), ("", False)])
def test_prompt_confirm(answer, expected):
    prompts = []

    def fake_input(prompt):
        prompts.append(prompt)
        return answer

    assert cli._prompt_confirm(12, fake_input) is expected
    assert prompts == ["Do you want to import 12 records? [y/N] "]


def test_prompt_confirm_eof():
    def closed_stdin(prompt):
        raise EOFError

    assert cli._prompt_confirm(3, closed_stdin) is False


################################################################################
# main
################################################################################

def test_main_imports_logs(tmp_path, write_log, log_dir, make_line):
    write_log("access_log", [make_line(path="/a"), "junk", make_line(path="/favicon.ico")])
    write_log("access_log.1", [make_line(host="10.0.0.2", path="/b")])
    db_path = tmp_path / "out.db"

    code = cli.main([str(log_dir), "--database-url", f"sqlite:///{db_path}", "-y", "--no-progress"])

    assert code == 0
    visitors, requests = _read_visits(db_path)
    assert visitors == {"24.99.237.149": 1, "10.0.0.2": 1}
    assert requests == ["/a", "/b"]


def test_main_explicit_list_and_exempt(tmp_path, write_log, log_dir, make_line):
    write_log("one.log", [make_line(host="10.0.0.1", path="/a"), make_line(host="10.0.0.2", path="/b")])
    write_log("access_log", [make_line(path="/ignored")])
    db_path = tmp_path / "out.db"

    code = cli.main([
        str(log_dir), "--list", "one.log", "--exempt", "10.0.0.1",
        "--database-url", f"sqlite:///{db_path}", "-y", "--no-progress",
    ])

    assert code == 0
    visitors, requests = _read_visits(db_path)
    assert visitors == {"10.0.0.1": 0, "10.0.0.2": 1}
    assert requests == ["/b"]


def test_main_invalid_directory(tmp_path):
    code = cli.main([str(tmp_path / "nope"), "--database-url", f"sqlite:///{tmp_path / 'out.db'}", "-y"])
    assert code == 2
    assert not (tmp_path / "out.db").exists()


def test_main_declined(monkeypatch, tmp_path, write_log, log_dir, make_line):
    write_log("access_log", [make_line()])
    monkeypatch.setattr("builtins.input", lambda prompt: "n")
    db_path = tmp_path / "out.db"

    code = cli.main([str(log_dir), "--database-url", f"sqlite:///{db_path}", "--no-progress"])

    assert code == 1
    assert not db_path.exists()
