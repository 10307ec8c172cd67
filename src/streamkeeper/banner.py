"""Startup banner."""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional, TextIO

logger = logging.getLogger(__name__)

_RESET = "\x1b[0m"
_BRIGHT = "\x1b[1m"
_YELLOW = "\x1b[33m"
_CYAN = "\x1b[36m"
_WHITE = "\x1b[37m"

_INNER_WIDTH = 62
_LABEL_WIDTH = 11


def supports_color(stream: TextIO, environ: Optional[dict] = None) -> bool:
    env = os.environ if environ is None else environ
    if env.get("NO_COLOR"):
        return False
    if env.get("FORCE_COLOR"):
        return True
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def render_banner(service_name: str, version: str, environment: str, started_at: datetime, *, color: bool) -> str:
    rows = [
        ("Service:", service_name),
        ("Version:", version),
        ("Env:", environment),
        ("Started:", started_at.isoformat()),
    ]
    if not color:
        rule = "=" * 42
        body = "\n".join(f"{label} {value}" for label, value in rows)
        return f"{rule}\nSERVICE STARTUP\n{rule}\n{body}\n{rule}"

    value_width = _INNER_WIDTH - _LABEL_WIDTH
    top = f"{_CYAN}╔{'═' * _INNER_WIDTH}╗"
    title = f"║{_BRIGHT}{_WHITE}{'SERVICE STARTUP'.center(_INNER_WIDTH)}{_RESET}{_CYAN}║"
    divider = f"╠{'═' * _INNER_WIDTH}╣"
    lines = [
        f"║{_YELLOW}  {label:<{_LABEL_WIDTH - 2}}{_WHITE}{value[:value_width]:<{value_width}}{_CYAN}║" for label, value in rows
    ]
    bottom = f"╚{'═' * _INNER_WIDTH}╝{_RESET}"
    return "\n".join([top, title, divider, *lines, bottom])


def show_banner(
    service_name: str,
    version: str = "1.0.0",
    environment: str = "development",
    *,
    stream: Optional[TextIO] = None,
) -> None:
    """Print the startup banner, coloured when the terminal supports it."""
    if not service_name:
        logger.warning("No service name provided for banner")
        return

    out = stream or sys.stdout
    started_at = datetime.now(timezone.utc)
    out.write(render_banner(service_name, version, environment, started_at, color=supports_color(out)) + "\n")
    out.flush()
    logger.debug("Service banner displayed for %s %s (%s)", service_name, version, environment)


__all__ = ["render_banner", "show_banner", "supports_color"]
