"""Minimal ``.env`` reader used to supply defaults for unset environment variables."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

from .errors import ConfigurationError


def _parse_line(line: str) -> tuple[str, str] | None:
    stripped = line.strip()
    if not stripped or stripped.startswith("#") or "=" not in stripped:
        return None
    if stripped.startswith("export "):
        stripped = stripped[len("export ") :]

    key, raw_value = stripped.split("=", 1)
    key = key.strip()
    if not key:
        return None

    value = raw_value.strip()
    if value[:1] in ("'", '"') and value[-1:] == value[:1] and len(value) >= 2:
        value = value[1:-1]
    elif " #" in value:
        value = value.split(" #", 1)[0].rstrip()
    return key, value


def read_dotenv(path: Path) -> Dict[str, str]:
    """
    Load key/value pairs from a ``.env`` file.

    Missing files yield an empty mapping. Later duplicates of a key win, matching
    how a shell would source the file.

    Raises:
        ConfigurationError: If the file exists but cannot be read
    """
    if not path.exists():
        return {}

    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise ConfigurationError(f"Failed to load configuration from {path}") from exc

    values: Dict[str, str] = {}
    for line in lines:
        parsed = _parse_line(line)
        if parsed is not None:
            values[parsed[0]] = parsed[1]
    return values


__all__ = ["read_dotenv"]
