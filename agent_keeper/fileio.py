import json
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Optional

import pyjson5

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore

from agent_keeper.utils import atomic_write


_BARE_KEY_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_TOML_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}


@dataclass(frozen=True)
class ReadResult:
    ok: bool
    data: Optional[Any] = None
    error: Optional[str] = None


def loads_jsonc(text: str) -> Any:
    """Parse strict JSON, falling back to JSON5 for comments and trailing commas."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return pyjson5.decode(text)


def dumps_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, sort_keys=False, ensure_ascii=False) + "\n"


def _dump_toml_key(key: str) -> str:
    if _BARE_KEY_RE.match(key):
        return key
    return _dump_toml_value(key)


def _dump_toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, list):
        return "[" + ", ".join(_dump_toml_value(item) for item in value) + "]"
    if isinstance(value, dict):
        items = [
            f"{_dump_toml_key(str(key))} = {_dump_toml_value(item)}"
            for key, item in value.items()
            if item is not None
        ]
        return "{ " + ", ".join(items) + " }" if items else "{}"
    return f'"{_escape_toml_string(str(value))}"'


def _escape_toml_string(text: str) -> str:
    out: list[str] = []
    for char in text:
        if char in _TOML_ESCAPES:
            out.append(_TOML_ESCAPES[char])
        elif char < " " or char == "\x7f":
            out.append(f"\\u{ord(char):04X}")
        else:
            out.append(char)
    return "".join(out)


def _is_table_array(value: Any) -> bool:
    return (
        isinstance(value, list)
        and bool(value)
        and all(isinstance(item, dict) for item in value)
    )


def _has_toml_scalars(table: dict[str, Any]) -> bool:
    return any(
        value is not None and not isinstance(value, dict) and not _is_table_array(value)
        for value in table.values()
    )


def _dump_toml_table(lines: list[str], path: list[str], table: dict[str, Any]) -> None:
    for key, value in table.items():
        if value is None or isinstance(value, dict) or _is_table_array(value):
            continue
        lines.append(f"{_dump_toml_key(str(key))} = {_dump_toml_value(value)}")

    for key, value in table.items():
        child_path = path + [_dump_toml_key(str(key))]
        header = ".".join(child_path)
        if isinstance(value, dict):
            if not value or _has_toml_scalars(value):
                lines.append("")
                lines.append(f"[{header}]")
            _dump_toml_table(lines, child_path, value)
        elif _is_table_array(value):
            for item in value:
                lines.append("")
                lines.append(f"[[{header}]]")
                _dump_toml_table(lines, child_path, item)


def dumps_toml(payload: dict[str, Any]) -> str:
    lines: list[str] = []
    _dump_toml_table(lines, [], payload)
    text = "\n".join(lines).strip()
    return text + "\n" if text else ""


class FileIO:
    def read_json(self, path: Path) -> ReadResult:
        if not path.exists() or path.stat().st_size == 0:
            return ReadResult(ok=True, data=None)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            return ReadResult(ok=False, error=str(exc))
        if not text.strip():
            return ReadResult(ok=True, data=None)
        try:
            return ReadResult(ok=True, data=loads_jsonc(text))
        except (ValueError, pyjson5.Json5Exception) as exc:
            return ReadResult(ok=False, error=f"Invalid JSON: {exc}")

    def read_toml(self, path: Path) -> ReadResult:
        if not path.exists() or path.stat().st_size == 0:
            return ReadResult(ok=True, data=None)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            return ReadResult(ok=False, error=str(exc))
        try:
            return ReadResult(ok=True, data=tomllib.loads(text))
        except tomllib.TOMLDecodeError as exc:
            return ReadResult(ok=False, error=f"Invalid TOML: {exc}")

    def read_text(self, path: Path) -> Optional[str]:
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def write_json(self, path: Path, payload: Any) -> None:
        atomic_write(path, dumps_json(payload))

    def write_toml(self, path: Path, payload: dict[str, Any]) -> None:
        atomic_write(path, dumps_toml(payload))

    def write_text(self, path: Path, content: str) -> None:
        atomic_write(path, content)

    def list_directories(self, path: Path) -> list[str]:
        if not path.is_dir():
            return []
        return sorted(
            item.name
            for item in path.iterdir()
            if item.is_dir() and not item.name.startswith(".")
        )

    def exists(self, path: Path) -> bool:
        return path.exists()
