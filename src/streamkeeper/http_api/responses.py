"""JSON responses rendered with orjson."""

from __future__ import annotations

from typing import Any

import orjson
from aiohttp import web


def _dumps(payload: Any) -> str:
    return orjson.dumps(payload).decode("utf-8")


def json_response(payload: Any, *, status: int = 200) -> web.Response:
    return web.json_response(payload, status=status, dumps=_dumps)


__all__ = ["json_response"]
