"""Read markdown frontmatter and update single fields in place."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from agent_keeper.errors import FrontmatterError

_FRONTMATTER_RE = re.compile(r"^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)", re.DOTALL)
_DELIMITER_RE = re.compile(r"^---[ \t]*$")
_YAML_KEYWORDS = {"true", "false", "yes", "no", "on", "off", "null", "~"}
_YAML_INDICATORS = tuple("-?:,[]{}#&*!|>'\"%@`")
_NUMBER_RE = re.compile(r"^[-+]?(\d[\d_]*)?(\.\d+)?([eE][-+]?\d+)?$")


@dataclass(frozen=True)
class Frontmatter:
    data: dict[str, Any]
    body: str

    def scalars(self) -> dict[str, str]:
        values: dict[str, str] = {}
        for key, value in self.data.items():
            if isinstance(value, bool):
                values[str(key)] = "true" if value else "false"
            elif isinstance(value, (str, int, float)):
                values[str(key)] = str(value)
        return values


def extract_frontmatter(text: str) -> Optional[Frontmatter]:
    match = _FRONTMATTER_RE.match(text)
    if not match or not match.group(1).strip():
        return None
    try:
        raw = yaml.safe_load(match.group(1))
    except yaml.YAMLError:
        return None
    if not isinstance(raw, dict):
        return None
    return Frontmatter(data=raw, body=text[match.end() :].strip())


def format_frontmatter_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if value is None:
        return "null"
    text = str(value)
    if (
        not text
        or text != text.strip()
        or text.lower() in _YAML_KEYWORDS
        or text.startswith(_YAML_INDICATORS)
        or ": " in text
        or " #" in text
        or text.endswith(":")
        or "\n" in text
        or _NUMBER_RE.match(text)
    ):
        return json.dumps(text, ensure_ascii=False)
    return text


def _line_ending(lines: list[str]) -> str:
    return "\r\n" if lines and lines[0].endswith("\r\n") else "\n"


def _is_complex_value(rest: str, next_line: Optional[str]) -> bool:
    if rest.startswith(("[", "{", "|", ">")):
        return True
    if rest or next_line is None:
        return False
    return next_line.startswith((" ", "\t", "-"))


def set_frontmatter_field(
    text: str, key: str, value: Any, path: Optional[Path] = None
) -> str:
    """Rewrite one top-level scalar field, leaving every other line untouched.

    List and mapping values are not rewritten; asking to do so raises
    ``FrontmatterError``.
    """
    formatted = f"{key}: {format_frontmatter_value(value)}"
    lines = text.splitlines(keepends=True)
    newline = _line_ending(lines)

    close_index = None
    if lines and _DELIMITER_RE.match(lines[0].rstrip("\r\n")):
        for index in range(1, len(lines)):
            if _DELIMITER_RE.match(lines[index].rstrip("\r\n")):
                close_index = index
                break
    if close_index is None:
        return f"---{newline}{formatted}{newline}---{newline}{text}"

    key_re = re.compile(rf"^{re.escape(key)}\s*:(.*)$")
    for index in range(1, close_index):
        content = lines[index].rstrip("\r\n")
        match = key_re.match(content)
        if not match:
            continue
        next_line = lines[index + 1] if index + 1 < close_index else None
        if _is_complex_value(match.group(1).strip(), next_line):
            raise FrontmatterError(key, "list and mapping values cannot be edited", path)
        ending = lines[index][len(content) :]
        lines[index] = formatted + ending
        return "".join(lines)

    lines.insert(close_index, formatted + newline)
    return "".join(lines)
