"""Tests for the CLI entry point and hook commands."""

import json

import pytest
from click.testing import CliRunner

from reviewgate_cli.cli import _build_log, main
from reviewgate_core.config import load_config, resolve_paths
from reviewgate_store.jsonl import JsonlEventLog
from reviewgate_store.models import FileModified, ReviewTriggered, encode_line
from reviewgate_store.sqlite import SQLiteEventLog


@pytest.fixture
def project(tmp_path, monkeypatch):
    """A project directory with a .reviewgate.yml pinning every path inside tmp_path."""
    monkeypatch.delenv("CLAUDE_PLUGIN_ROOT", raising=False)
    monkeypatch.delenv("REVIEWGATE_CONFIG", raising=False)
    root = tmp_path / "project"
    root.mkdir()
    cfg = tmp_path / ".reviewgate.yml"
    cfg.write_text(f"project_root: {root}\nregistry_path: {tmp_path / 'registry.json'}\n")
    return root, cfg


def _invoke(project, args, payload=None, raw_input=None):
    _, cfg = project
    stdin = raw_input if raw_input is not None else (json.dumps(payload) if payload is not None else "")
    return CliRunner().invoke(main, ["--config", str(cfg), *args], input=stdin)


def _edit(path, tool="Edit", session="s1"):
    return {"tool_name": tool, "session_id": session, "tool_input": {"file_path": path}}


def _log_lines(root):
    path = root / ".claude" / "code-review" / "event-log.jsonl"
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


def _write_settings(root, section):
    settings = root / ".claude" / "settings.json"
    settings.parent.mkdir(parents=True, exist_ok=True)
    settings.write_text(json.dumps({"codeReview": section}))


# ---------------------------------------------------------------------------
# Group behaviour
# ---------------------------------------------------------------------------


class TestGroup:
    def test_unknown_command_exits_1(self, project):
        result = _invoke(project, ["frobnicate"])
        assert result.exit_code == 1
        assert "frobnicate" in result.stderr

    def test_missing_command_exits_1_with_usage(self, project):
        result = _invoke(project, [])
        assert result.exit_code == 1
        assert "Usage" in result.stderr

    def test_missing_dependency_exits_1_with_remediation(self, project, mocker):
        from reviewgate_core.deps import MissingDependency

        mocker.patch(
            "reviewgate_core.deps.missing_dependencies",
            return_value=[MissingDependency(name="fcntl", remediation="Run it on Linux.")],
        )

        result = _invoke(project, ["log"], payload=_edit("a.py"))

        assert result.exit_code == 1
        assert "fcntl is required" in result.stderr
        assert "Run it on Linux." in result.stderr
        assert _log_lines(project[0]) == []

    def test_bad_config_file_falls_back_to_defaults(self, tmp_path, monkeypatch, mocker):
        monkeypatch.chdir(tmp_path)
        mocker.patch("reviewgate_core.config.detect_project_root", return_value=tmp_path)
        cfg = tmp_path / ".reviewgate.yml"
        cfg.write_text("store: postgres\n")

        result = CliRunner().invoke(main, ["--config", str(cfg), "status", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == []

    def test_non_mapping_config_falls_back_to_defaults(self, tmp_path, monkeypatch, mocker, caplog):
        monkeypatch.chdir(tmp_path)
        mocker.patch("reviewgate_core.config.detect_project_root", return_value=tmp_path)
        cfg = tmp_path / ".reviewgate.yml"
        cfg.write_text("- a\n- b\n")

        result = CliRunner().invoke(main, ["--config", str(cfg), "status", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == []
        assert "Using default configuration." in caplog.text

    def test_unreadable_config_does_not_fail_log_hook(self, tmp_path, monkeypatch, mocker, caplog):
        monkeypatch.chdir(tmp_path)
        mocker.patch("reviewgate_core.config.detect_project_root", return_value=tmp_path)
        cfg = tmp_path / ".reviewgate.yml"
        cfg.mkdir()

        result = CliRunner().invoke(main, ["--config", str(cfg), "log"], input="")

        assert result.exit_code == 0
        assert "Could not read" in caplog.text


class TestBuildLog:
    def test_default_is_jsonl(self, tmp_path):
        config = load_config(config_path=str(tmp_path / "none.yml"))
        config["project_root"] = str(tmp_path)
        log = _build_log(config, resolve_paths(config))
        assert isinstance(log, JsonlEventLog)

    def test_sqlite_store(self, tmp_path):
        config = load_config(config_path=str(tmp_path / "none.yml"), cli_overrides={"store": "sqlite"})
        config["project_root"] = str(tmp_path)
        log = _build_log(config, resolve_paths(config))
        assert isinstance(log, SQLiteEventLog)
        log.close()

    def test_unopenable_sqlite_falls_back_to_jsonl(self, tmp_path, mocker):
        mocker.patch("reviewgate_store.sqlite.SQLiteEventLog.__init__", side_effect=OSError("read-only"))
        config = load_config(config_path=str(tmp_path / "none.yml"), cli_overrides={"store": "sqlite"})
        config["project_root"] = str(tmp_path)

        log = _build_log(config, resolve_paths(config))

        assert isinstance(log, JsonlEventLog)


# ---------------------------------------------------------------------------
# log
# ---------------------------------------------------------------------------


class TestLogCommand:
    def test_records_tracked_edit(self, project):
        root, _ = project

        result = _invoke(project, ["log"], payload=_edit("src/app.py", tool="Write"))

        assert result.exit_code == 0
        (line,) = _log_lines(root)
        assert line["event"] == "file_modified"
        assert line["file"] == "src/app.py"
        assert line["tool"] == "Write"
        assert line["timestamp"].endswith("Z")

    def test_first_run_initializes_settings(self, project):
        root, _ = project

        result = _invoke(project, ["log"], payload=_edit("src/app.py"))

        assert result.exit_code == 0
        assert "code-review plugin initialized" in result.stderr
        settings = json.loads((root / ".claude" / "settings.json").read_text())
        assert settings["codeReview"]["fileExtensions"] == ["py", "js", "ts", "md", "sh"]
        assert (root / ".claude" / "code-review" / "rules.md").exists()

    def test_initialization_notice_printed_once(self, project):
        _invoke(project, ["log"], payload=_edit("a.py"))

        result = _invoke(project, ["log"], payload=_edit("b.py"))

        assert "initialized" not in result.stderr

    def test_existing_unrelated_settings_preserved(self, project):
        root, _ = project
        settings = root / ".claude" / "settings.json"
        settings.parent.mkdir(parents=True)
        settings.write_text(json.dumps({"permissions": {"allow": ["Bash(ls)"]}}))

        _invoke(project, ["log"], payload=_edit("a.py"))

        document = json.loads(settings.read_text())
        assert document["permissions"] == {"allow": ["Bash(ls)"]}
        assert document["codeReview"]["enabled"] is True

    def test_missing_session_is_silent_noop(self, project):
        root, _ = project

        result = _invoke(project, ["log"], payload=_edit("a.py", session=""))

        assert result.exit_code == 0
        assert result.output == ""
        assert _log_lines(root) == []
        assert not (root / ".claude" / "settings.json").exists()

    def test_non_mutating_tool_ignored(self, project):
        result = _invoke(project, ["log"], payload=_edit("a.py", tool="Read"))
        assert result.exit_code == 0
        assert _log_lines(project[0]) == []

    def test_untracked_extension_ignored(self, project):
        result = _invoke(project, ["log"], payload=_edit("notes.txt"))
        assert result.exit_code == 0
        assert _log_lines(project[0]) == []

    def test_disabled_settings_ignored(self, project):
        root, _ = project
        _write_settings(root, {"enabled": False, "fileExtensions": ["py"]})

        result = _invoke(project, ["log"], payload=_edit("a.py"))

        assert result.exit_code == 0
        assert _log_lines(root) == []

    def test_custom_extensions_respected(self, project):
        root, _ = project
        _write_settings(root, {"enabled": True, "fileExtensions": ["rs"]})

        _invoke(project, ["log"], payload=_edit("a.py"))
        _invoke(project, ["log"], payload=_edit("src/main.rs"))

        assert [line["file"] for line in _log_lines(root)] == ["src/main.rs"]

    def test_invalid_stdin_is_noop(self, project):
        result = _invoke(project, ["log"], raw_input="not json at all")
        assert result.exit_code == 0
        assert _log_lines(project[0]) == []

    def test_append_failure_still_exits_0(self, project):
        root, _ = project
        _write_settings(root, {"enabled": True, "fileExtensions": ["py"]})
        # A plain file where the log directory should be makes every append fail.
        (root / ".claude" / "code-review").write_text("")

        result = _invoke(project, ["log"], payload=_edit("a.py"))

        assert result.exit_code == 0
        assert result.stdout == ""


# ---------------------------------------------------------------------------
# review
# ---------------------------------------------------------------------------


class TestReviewCommand:
    def test_worked_example(self, project):
        root, _ = project
        _write_settings(root, {"enabled": True, "fileExtensions": ["py"]})
        log_path = root / ".claude" / "code-review" / "event-log.jsonl"
        log_path.parent.mkdir(parents=True, exist_ok=True)
        log_path.write_text(
            encode_line(FileModified(file="a.py", tool="Edit"))
            + encode_line(FileModified(file="b.py", tool="Edit"))
            + encode_line(ReviewTriggered(files=("a.py", "b.py")))
            + encode_line(FileModified(file="a.py", tool="Edit"))
            + encode_line(FileModified(file="c.py", tool="Edit"))
        )

        first = _invoke(project, ["review"], payload={"session_id": "s1"})

        assert first.exit_code == 2
        assert first.stdout == "- a.py\n- c.py\n"
        assert "CODE REVIEW REQUIRED" in first.stderr
        assert "- a.py\n- c.py" in first.stderr
        assert 'subagent_type "code-reviewer"' in first.stderr
        last = _log_lines(root)[-1]
        assert last["event"] == "review_triggered"
        assert last["files"] == ["a.py", "c.py"]

        second = _invoke(project, ["review"], payload={"session_id": "s1"})

        assert second.exit_code == 0
        assert second.output == ""

    def test_log_then_review_end_to_end(self, project):
        _invoke(project, ["log"], payload=_edit("src/b.py"))
        _invoke(project, ["log"], payload=_edit("src/a.py", tool="Write"))
        _invoke(project, ["log"], payload=_edit("src/b.py"))

        result = _invoke(project, ["review"], payload={"session_id": "s1"})

        assert result.exit_code == 2
        assert result.stdout == "- src/a.py\n- src/b.py\n"
        assert "Python rules: .claude/code-review/rules/python.md" in result.stderr

    def test_nothing_pending_is_silent(self, project):
        result = _invoke(project, ["review"], payload={"session_id": "s1"})

        assert result.exit_code == 0
        assert result.stdout == ""
        assert _log_lines(project[0]) == []

    def test_missing_session_is_noop(self, project):
        _invoke(project, ["log"], payload=_edit("a.py"))

        result = _invoke(project, ["review"], payload={})

        assert result.exit_code == 0
        assert result.output == ""

    def test_disabled_is_noop_regardless_of_log(self, project):
        root, _ = project
        _invoke(project, ["log"], payload=_edit("a.py"))
        _write_settings(root, {"enabled": False, "fileExtensions": ["py"]})

        result = _invoke(project, ["review"], payload={"session_id": "s1"})

        assert result.exit_code == 0
        assert result.output == ""
        assert all(line["event"] == "file_modified" for line in _log_lines(root))

    def test_malformed_log_lines_do_not_crash(self, project):
        root, _ = project
        _write_settings(root, {"enabled": True, "fileExtensions": ["py"]})
        log_path = root / ".claude" / "code-review" / "event-log.jsonl"
        log_path.parent.mkdir(parents=True, exist_ok=True)
        log_path.write_text("{broken\n" + encode_line(FileModified(file="ok.py", tool="Edit")) + "]]]\n")

        result = _invoke(project, ["review"], payload={"session_id": "s1"})

        assert result.exit_code == 2
        assert result.stdout == "- ok.py\n"

    def test_unreadable_log_is_noop(self, project):
        root, _ = project
        _write_settings(root, {"enabled": True, "fileExtensions": ["py"]})
        (root / ".claude" / "code-review" / "event-log.jsonl").mkdir(parents=True)

        result = _invoke(project, ["review"], payload={"session_id": "s1"})

        assert result.exit_code == 0
        assert result.stdout == ""

    def test_sqlite_backend(self, project):
        _, cfg = project
        cfg.write_text(cfg.read_text() + "store: sqlite\n")

        _invoke(project, ["log"], payload=_edit("a.py"))
        result = _invoke(project, ["review"], payload={"session_id": "s1"})

        assert result.exit_code == 2
        assert result.stdout == "- a.py\n"
        assert _invoke(project, ["review"], payload={"session_id": "s1"}).exit_code == 0


# ---------------------------------------------------------------------------
# status / history / stats
# ---------------------------------------------------------------------------


class TestStatusCommand:
    def test_json_output(self, project):
        _invoke(project, ["log"], payload=_edit("b.py"))
        _invoke(project, ["log"], payload=_edit("a.py"))

        result = _invoke(project, ["status", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == ["a.py", "b.py"]

    def test_does_not_write_marker(self, project):
        _invoke(project, ["log"], payload=_edit("a.py"))

        _invoke(project, ["status"])

        assert [line["event"] for line in _log_lines(project[0])] == ["file_modified"]
        assert _invoke(project, ["review"], payload={"session_id": "s1"}).exit_code == 2

    def test_clean_project(self, project):
        result = _invoke(project, ["status"])
        assert result.exit_code == 0
        assert "No files modified" in result.stdout

    def test_lists_pending_files(self, project):
        _invoke(project, ["log"], payload=_edit("src/app.py"))

        result = _invoke(project, ["status"])

        assert "1 file(s) modified" in result.stdout
        assert "src/app.py" in result.stdout


class TestHistoryCommand:
    def test_no_reviews(self, project):
        result = _invoke(project, ["history"])
        assert result.exit_code == 0
        assert "No reviews" in result.stdout

    def test_lists_reviews(self, project):
        _invoke(project, ["log"], payload=_edit("first.py"))
        _invoke(project, ["review"], payload={"session_id": "s1"})
        _invoke(project, ["log"], payload=_edit("second.py"))
        _invoke(project, ["review"], payload={"session_id": "s1"})

        result = _invoke(project, ["history"])

        assert result.exit_code == 0
        assert "Review History" in result.stdout
        assert "first.py" in result.stdout
        assert "second.py" in result.stdout

    def test_limit(self, project):
        _invoke(project, ["log"], payload=_edit("first.py"))
        _invoke(project, ["review"], payload={"session_id": "s1"})
        _invoke(project, ["log"], payload=_edit("second.py"))
        _invoke(project, ["review"], payload={"session_id": "s1"})

        result = _invoke(project, ["history", "--limit", "1"])

        assert "second.py" in result.stdout
        assert "first.py" not in result.stdout


class TestStatsCommand:
    def test_no_events(self, project):
        result = _invoke(project, ["stats"])
        assert result.exit_code == 0
        assert "No events" in result.stdout

    def test_reports_counts(self, project):
        _invoke(project, ["log"], payload=_edit("hot.py"))
        _invoke(project, ["log"], payload=_edit("hot.py", tool="Write"))
        _invoke(project, ["log"], payload=_edit("cold.py"))
        _invoke(project, ["review"], payload={"session_id": "s1"})

        result = _invoke(project, ["stats"])

        assert result.exit_code == 0
        assert "Recorded edits:    3" in result.stdout
        assert "Reviews requested: 1" in result.stdout
        assert "hot.py" in result.stdout
        assert "Edit" in result.stdout


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


class TestInitCommand:
    def test_writes_defaults(self, project):
        root, _ = project

        result = _invoke(project, ["init"])

        assert result.exit_code == 0
        section = json.loads((root / ".claude" / "settings.json").read_text())["codeReview"]
        assert section["enabled"] is True
        assert section["fileExtensions"] == ["py", "js", "ts", "md", "sh"]
        assert (root / ".claude" / "code-review" / "rules" / "typescript.md").exists()

    def test_custom_extensions_and_disable(self, project):
        root, _ = project

        result = _invoke(project, ["init", "-e", ".rs", "-e", "go", "--disable"])

        assert result.exit_code == 0
        section = json.loads((root / ".claude" / "settings.json").read_text())["codeReview"]
        assert section["enabled"] is False
        assert section["fileExtensions"] == ["rs", "go"]

    def test_existing_section_kept_without_force(self, project):
        root, _ = project
        _write_settings(root, {"enabled": True, "fileExtensions": ["rs"]})

        result = _invoke(project, ["init"])

        assert result.exit_code == 0
        assert "already has a codeReview section" in result.stdout
        section = json.loads((root / ".claude" / "settings.json").read_text())["codeReview"]
        assert section["fileExtensions"] == ["rs"]

    def test_force_with_yes_replaces(self, project):
        root, _ = project
        _write_settings(root, {"enabled": True, "fileExtensions": ["rs"]})

        result = _invoke(project, ["init", "--force", "--yes"])

        assert result.exit_code == 0
        section = json.loads((root / ".claude" / "settings.json").read_text())["codeReview"]
        assert section["fileExtensions"] == ["py", "js", "ts", "md", "sh"]

    def test_force_declined_aborts(self, project):
        root, cfg = project
        _write_settings(root, {"enabled": True, "fileExtensions": ["rs"]})

        result = CliRunner().invoke(main, ["--config", str(cfg), "init", "--force"], input="n\n")

        assert result.exit_code == 1
        section = json.loads((root / ".claude" / "settings.json").read_text())["codeReview"]
        assert section["fileExtensions"] == ["rs"]

    def test_blank_extensions_rejected(self, project):
        result = _invoke(project, ["init", "-e", "."])
        assert result.exit_code != 0
        assert "extension" in result.output.lower()
