"""Tests for the startup dependency check."""

from reviewgate_core.deps import missing_dependencies


def test_nothing_missing_on_posix():
    assert missing_dependencies("jsonl") == []


def test_missing_fcntl_reported(mocker):
    mocker.patch("reviewgate_core.deps._available", side_effect=lambda name: name != "fcntl")

    missing = missing_dependencies("jsonl")

    assert [d.name for d in missing] == ["fcntl"]
    assert "WSL" in missing[0].remediation


def test_sqlite_only_checked_for_sqlite_store(mocker):
    mocker.patch("reviewgate_core.deps._available", side_effect=lambda name: name != "sqlite3")

    assert missing_dependencies("jsonl") == []
    assert [d.name for d in missing_dependencies("sqlite")] == ["sqlite3"]
