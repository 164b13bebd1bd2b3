"""Instruction text returned to the agent when a review is required.

The host feeds a blocking hook's stderr back to the model, so this block is
written for the agent, not for a human at a terminal.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reviewgate_core.utils.files import languages_for

if TYPE_CHECKING:
    from reviewgate_core.settings import Settings

REVIEWER_SUBAGENT = "code-reviewer"

_TRIAGE_POLICY = """\
After receiving review results:
1. Show all findings to the user
2. Evaluate each finding against ONE heuristic: "What results in highest quality code?"

   The ONLY valid reasons to skip feedback:
   - IMPOSSIBLE: You tried to fix it and cannot satisfy the feedback, product requirements, lint rules, AND test coverage simultaneously. You must have actually attempted the fix.
   - CONFLICTS WITH REQUIREMENTS: The feedback directly contradicts explicit product requirements
   - MAKES CODE WORSE: Applying the feedback would genuinely degrade code quality

   NEVER VALID (reject these excuses from yourself):
   - "Too much time" / "too complex" → not your call, do the work
   - "Out of scope" → if you touched the code, it's in scope
   - "Inconsistent with existing code" → fix the existing code too
   - "Pre-existing code" / "didn't write this" → present value/effort, let user decide
   - "Only renamed/moved" → touching a file puts it in scope
   - "Would require large refactor" → present value/effort, let user decide
   - Any argument that results in lower quality code

3. For each finding:
   - NO VALID SKIP REASON → fix it
   - VALID SKIP REASON → skip it, cite which reason + specific justification
   - UNCERTAIN → ASK the user
4. Summarize: what was fixed, what was skipped (and why), what needs user decision

Default to fixing. When in doubt, ask the user."""


def format_file_list(files: list[str]) -> str:
    return "\n".join(f"- {f}" for f in files)


def _rules_section(files: list[str], settings: Settings | None) -> str:
    if settings is None:
        return ""
    lines = [f"Review rules: {settings.rules_file}"]
    for language in languages_for(files):
        rules_path = settings.language_specific_rules.get(language)
        if rules_path:
            lines.append(f"{language.capitalize()} rules: {rules_path}")
    return "\n".join(lines) + "\n\n"


def build_review_instructions(files: list[str], settings: Settings | None = None) -> str:
    """Render the stderr block for a blocking review request."""
    return (
        "📋 CODE REVIEW REQUIRED\n"
        "\n"
        "Files modified since last review:\n"
        f"{format_file_list(files)}\n"
        "\n"
        f"{_rules_section(files, settings)}"
        f'INSTRUCTION: Use the Task tool with subagent_type "{REVIEWER_SUBAGENT}". '
        "Pass only the file list as the prompt. "
        "The agent will follow its configured review procedure.\n"
        "\n"
        f"{_TRIAGE_POLICY}"
    )
