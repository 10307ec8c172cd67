"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
import os
from typing import Any

import pytest
from redis.exceptions import ResponseError

from streamkeeper.config import runtime
from streamkeeper.process_status import ProcessStatusRegistry

# Set required environment variables for tests
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault("REDIS_PORT", "6379")
os.environ.setdefault("SERVICE_NAME", "Test-Service")


@pytest.fixture(autouse=True)
def _isolate_dotenv(monkeypatch):
    """Keep a developer's .env file out of configuration tests."""
    monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", ())
    runtime.reset_default_values()
    yield
    runtime.reset_default_values()


class FakeRedis:
    """In-memory Redis Streams stand-in for testing."""

    def __init__(self):
        self.streams: dict[str, list[tuple[str, dict[str, str]]]] = {}
        self.groups: dict[tuple[str, str], dict[str, Any]] = {}
        self.acked: list[tuple[str, str, str]] = []
        self.closed = False
        self.ping_error: Exception | None = None
        self._sequence = 0

    async def ping(self) -> bool:
        if self.ping_error is not None:
            raise self.ping_error
        return True

    async def aclose(self) -> None:
        self.closed = True

    async def xadd(self, name: str, fields: dict[str, Any], maxlen: int | None = None, approximate: bool = True) -> str:
        self._sequence += 1
        entry_id = f"{self._sequence}-0"
        entries = self.streams.setdefault(name, [])
        entries.append((entry_id, {str(k): str(v) for k, v in fields.items()}))
        if maxlen is not None and len(entries) > maxlen:
            del entries[: len(entries) - maxlen]
        return entry_id

    async def xgroup_create(self, name: str, groupname: str, id: str = "$", mkstream: bool = False) -> bool:
        if (name, groupname) in self.groups:
            raise ResponseError("BUSYGROUP Consumer Group name already exists")
        if name not in self.streams:
            if not mkstream:
                raise ResponseError("ERR The XGROUP subcommand requires the key to exist")
            self.streams[name] = []
        cursor = len(self.streams[name]) if id == "$" else 0
        self.groups[(name, groupname)] = {"cursor": cursor, "pending": {}}
        return True

    async def xreadgroup(
        self,
        groupname: str,
        consumername: str,
        streams: dict[str, str],
        count: int | None = None,
        block: int | None = None,
        noack: bool = False,
    ) -> list:
        result = []
        for name, position in streams.items():
            group = self.groups[(name, groupname)]
            if position != ">":
                continue
            entries = self.streams.get(name, [])[group["cursor"] :]
            if count is not None:
                entries = entries[:count]
            group["cursor"] += len(entries)
            for entry_id, fields in entries:
                group["pending"][entry_id] = fields
            if entries:
                result.append([name, list(entries)])
        if not result and block:
            await asyncio.sleep(0)
        return result

    async def xack(self, name: str, groupname: str, *ids: str) -> int:
        pending = self.groups[(name, groupname)]["pending"]
        acked = 0
        for entry_id in ids:
            if pending.pop(entry_id, None) is not None:
                acked += 1
                self.acked.append((name, groupname, entry_id))
        return acked

    async def xautoclaim(
        self,
        name: str,
        groupname: str,
        consumername: str,
        min_idle_time: int,
        start_id: str = "0-0",
        count: int | None = None,
        justid: bool = False,
    ) -> list:
        pending = self.groups[(name, groupname)]["pending"]
        return ["0-0", list(pending.items()), []]


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def registry() -> ProcessStatusRegistry:
    return ProcessStatusRegistry()
