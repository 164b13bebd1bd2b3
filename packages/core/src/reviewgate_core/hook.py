"""Parsing of the JSON payload the host pipes into every hook."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


def parse_hook_input(raw: str) -> dict[str, Any]:
    """Decode the hook payload. Empty, invalid or non-object input yields {}."""
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def json_get(data: dict[str, Any], path: str) -> str:
    """Look up a dotted path, returning "" for anything missing or non-scalar."""
    cur: Any = data
    for part in path.split("."):
        if isinstance(cur, dict):
            cur = cur.get(part, "")
        else:
            return ""
    if cur is None or isinstance(cur, (dict, list)):
        return ""
    return str(cur)


@dataclass(frozen=True)
class ToolEvent:
    """One PostToolUse notification."""

    tool_name: str
    session_id: str
    file_path: str

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> ToolEvent:
        return cls(
            tool_name=json_get(data, "tool_name"),
            session_id=json_get(data, "session_id"),
            file_path=json_get(data, "tool_input.file_path"),
        )
