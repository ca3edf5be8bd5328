"""Tests for health, news and the CLI."""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from journal import cli
from journal.services.auth import verify_passphrase
from journal.services.news import latest_news


def test_health(client):
    assert client.get("/api/system/health").json() == {"status": "ok"}


def test_news_items_share_timestamp():
    now = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)
    items = latest_news(now)

    assert len(items) == 18
    assert [item["id"] for item in items] == list(range(1, 19))
    assert {item["datetime"] for item in items} == {now.isoformat()}


def test_news_endpoint(client):
    items = client.get("/api/news").json()
    assert len(items) == 18
    assert set(items[0]) == {"id", "title", "summary", "category", "datetime"}


def test_cli_hash_passphrase(capsys):
    with patch("journal.cli.getpass.getpass", side_effect=["hunter2", "hunter2"]):
        cli.hash_passphrase_command()

    line = capsys.readouterr().out.strip().splitlines()[-1]
    hashed = line.split("=", 1)[1].strip("'")
    assert verify_passphrase("hunter2", hashed)


def test_cli_mismatched_passphrase():
    with patch("journal.cli.getpass.getpass", side_effect=["a", "b"]):
        with pytest.raises(SystemExit):
            cli.hash_passphrase_command()


def test_cli_unknown_command(monkeypatch):
    monkeypatch.setattr("sys.argv", ["journal.cli", "bogus"])
    with pytest.raises(SystemExit):
        cli.main()
