from __future__ import annotations

import pytest

from audioshelf.database import Database, dispose_engine
from audioshelf.user_management import SqlUserStore
from audioshelf.webapi import __main__ as cli


def test_parser_defaults():
    args = cli.build_parser().parse_args([])

    assert args.host == "0.0.0.0"
    assert args.port == 8085
    assert args.reload is False
    assert args.create_admin is None


def test_main_runs_uvicorn_factory(monkeypatch):
    calls = {}

    def fake_run(target, **kwargs):
        calls["target"] = target
        calls.update(kwargs)

    monkeypatch.setattr(cli.uvicorn, "run", fake_run)

    cli.main(["--port", "9000", "--log-level", "debug"])

    assert calls["target"] == "audioshelf.webapi.application:create_app"
    assert calls["factory"] is True
    assert calls["port"] == 9000
    assert calls["log_level"] == "debug"


def test_create_admin_stores_admin_account(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setattr(cli.getpass, "getpass", lambda _prompt: "s3cret")

    try:
        cli.main(["--create-admin", "Root"])
    finally:
        dispose_engine()

    database = Database(url)
    try:
        record = SqlUserStore(database).verify_credentials("root", "s3cret")
    finally:
        database.dispose()
    assert record is not None
    assert record.admin is True


def test_create_admin_rejects_empty_password(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setattr(cli.getpass, "getpass", lambda _prompt: "")

    try:
        with pytest.raises(SystemExit):
            cli.main(["--create-admin", "root"])
    finally:
        dispose_engine()
