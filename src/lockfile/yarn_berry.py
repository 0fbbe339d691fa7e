"""Reader and writer for Yarn Berry (v2+) lockfiles.

Berry lockfiles are a YAML-compatible subset ("syml"). Reading goes through
PyYAML's BaseLoader so every scalar stays a string; writing reproduces Yarn's
own key ordering and quoting so untouched entries round-trip byte for byte.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from constants import Constants

logger = logging.getLogger(__name__)

PRIORITY_KEYS = [
    "__metadata",
    "version",
    "resolution",
    "dependencies",
    "peerDependencies",
    "dependenciesMeta",
    "peerDependenciesMeta",
    "binaries",
]

SIMPLE_STRING_RE = re.compile(
    r"^(?![-?:,\][{}#&*!|>'\"%@` \t\r\n]).([ \t]*(?![,\][{}:# \t\r\n]).)*$"
)


class LockfileParseError(ValueError):
    """Raised when lockfile text cannot be read as a mapping of entries."""


@dataclass
class LockfileDocument:
    """Parsed lockfile: entries in file order plus formatting to restore."""
    entries: Dict[str, Any] = field(default_factory=dict)
    header: str = ""
    newline: str = "\n"


def _detect_newline(text: str) -> str:
    match = re.search(r"\r?\n", text)
    return match.group(0) if match else "\n"


def _extract_header(text: str) -> str:
    """Return the leading comment block, including one trailing blank line."""
    lines = []
    for line in text.splitlines():
        if line.startswith("#"):
            lines.append(line)
        elif not line.strip() and lines:
            break
        elif line.strip():
            break
    if not lines:
        return ""
    return "\n".join(lines) + "\n\n"


def parse_lockfile(text: str) -> LockfileDocument:
    """Parse lockfile text.

    Raises:
        LockfileParseError: when the YAML is malformed or not a mapping.
    """
    newline = _detect_newline(text)
    normalized = text.replace("\r\n", "\n")
    try:
        data = yaml.load(normalized, Loader=yaml.BaseLoader)  # nosec B506 - BaseLoader builds no objects
    except yaml.YAMLError as e:
        raise LockfileParseError(f"Malformed lockfile: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise LockfileParseError("Lockfile root must be a mapping of entries")
    for key, value in data.items():
        if not isinstance(value, dict):
            raise LockfileParseError(f"Lockfile entry {key!r} must be a mapping")
    logger.debug("Parsed lockfile with %d entries", len(data))
    return LockfileDocument(entries=data, header=_extract_header(normalized), newline=newline)


def _stringify_string(value: str) -> str:
    if SIMPLE_STRING_RE.match(value):
        return value
    return json.dumps(value, ensure_ascii=False)


def _sort_keys(keys: List[str]) -> List[str]:
    def _key(name: str):
        try:
            return (PRIORITY_KEYS.index(name), "")
        except ValueError:
            return (len(PRIORITY_KEYS), name)
    return sorted(keys, key=_key)


def _stringify_value(value: Any, indent_level: int, newline_if_object: bool) -> str:
    if value is None:
        return "null\n"
    if isinstance(value, bool):
        return ("true" if value else "false") + "\n"
    if isinstance(value, (int, float)):
        return f"{value}\n"
    if isinstance(value, str):
        return _stringify_string(value) + "\n"

    indent = "  " * indent_level
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]\n"
        items = "".join(
            f"{indent}- {_stringify_value(item, indent_level + 1, False)}" for item in value
        )
        return "\n" + items

    if isinstance(value, dict):
        if not value:
            return "{}\n"
        fields = []
        for index, key in enumerate(_sort_keys(list(value))):
            record_indent = indent if index > 0 or newline_if_object else ""
            part = _stringify_value(value[key], indent_level + 1, True)
            separator = "" if part.startswith("\n") else " "
            fields.append(f"{record_indent}{_stringify_string(str(key))}:{separator}{part}")
        joined = ("\n" if indent_level == 0 else "").join(fields)
        return ("\n" + joined) if newline_if_object else joined

    raise TypeError(f"Cannot serialize {type(value).__name__} in a lockfile")


def stringify_lockfile(entries: Dict[str, Any], header: Optional[str] = None, newline: str = "\n") -> str:
    """Serialize entries in Yarn's lockfile dialect.

    Args:
        entries: Mapping of compound descriptor keys to entry records.
        header: Leading comment block; defaults to Yarn's standard header.
        newline: Line ending to emit.
    """
    if header is None:
        header = Constants.LOCKFILE_HEADER + "\n"
    body = _stringify_value(dict(entries), 0, False) if entries else ""
    text = header + body
    if newline != "\n":
        text = text.replace("\n", newline)
    return text
