"""Tests for the review instruction block."""

from reviewgate_core.prompt import REVIEWER_SUBAGENT, build_review_instructions, format_file_list
from reviewgate_core.settings import Settings


def test_format_file_list():
    assert format_file_list(["a.py", "src/c.py"]) == "- a.py\n- src/c.py"


def test_format_file_list_empty():
    assert format_file_list([]) == ""


class TestBuildReviewInstructions:
    def test_header_and_bullets(self):
        text = build_review_instructions(["a.py", "c.py"])

        assert text.startswith("📋 CODE REVIEW REQUIRED\n")
        assert "Files modified since last review:\n- a.py\n- c.py\n" in text

    def test_delegates_to_reviewer_subagent(self):
        text = build_review_instructions(["a.py"])

        assert REVIEWER_SUBAGENT == "code-reviewer"
        assert 'subagent_type "code-reviewer"' in text
        assert "Pass only the file list as the prompt." in text

    def test_includes_triage_policy(self):
        text = build_review_instructions(["a.py"])

        assert "The ONLY valid reasons to skip feedback:" in text
        assert text.rstrip().endswith("Default to fixing. When in doubt, ask the user.")

    def test_no_rules_section_without_settings(self):
        assert "Review rules:" not in build_review_instructions(["a.py"])

    def test_rules_for_languages_present(self):
        text = build_review_instructions(["app.py", "deploy.sh", "README.md"], Settings())

        assert "Review rules: .claude/code-review/rules.md" in text
        assert "Python rules: .claude/code-review/rules/python.md" in text
        assert "Shell rules: .claude/code-review/rules/shell.md" in text
        assert "Typescript rules" not in text

    def test_language_without_configured_rules_omitted(self):
        settings = Settings(language_specific_rules={})

        text = build_review_instructions(["app.py"], settings)

        assert "Review rules:" in text
        assert "Python rules" not in text
