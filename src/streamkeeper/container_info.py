"""
Consumer name discovery.

Inside Docker the consumer name is the container name, found by asking the
Engine API over its Unix socket for the container whose hostname matches ours.
Anywhere else the lower-cased service name is used.
"""

from __future__ import annotations

import asyncio
import logging
import os
import socket
from typing import Any, Optional

import aiohttp

logger = logging.getLogger(__name__)

DOCKER_SOCKET_PATH = "/var/run/docker.sock"
DOCKER_API_BASE = "http://docker"
DEFAULT_LOOKUP_TIMEOUT_SECONDS = 2.0

_LOOKUP_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError, KeyError, TypeError)


async def _get_json(session: aiohttp.ClientSession, path: str) -> Any:
    async with session.get(f"{DOCKER_API_BASE}{path}") as response:
        response.raise_for_status()
        return await response.json()


async def find_container_name(
    hostname: str,
    *,
    socket_path: str = DOCKER_SOCKET_PATH,
    timeout_seconds: float = DEFAULT_LOOKUP_TIMEOUT_SECONDS,
) -> Optional[str]:
    """Return the name of the running container whose hostname is ``hostname``."""
    connector = aiohttp.UnixConnector(path=socket_path)
    timeout = aiohttp.ClientTimeout(total=timeout_seconds)
    async with aiohttp.ClientSession(connector=connector, timeout=timeout) as session:
        containers = await _get_json(session, "/containers/json")
        for container in containers:
            info = await _get_json(session, f"/containers/{container['Id']}/json")
            if info.get("Config", {}).get("Hostname") == hostname:
                return str(info["Name"]).lstrip("/")
    return None


async def resolve_consumer_name(
    service_name: str,
    *,
    socket_path: str = DOCKER_SOCKET_PATH,
    hostname: Optional[str] = None,
) -> str:
    """Container name when running under Docker, else the lower-cased service name."""
    fallback = service_name.lower()
    if not os.path.exists(socket_path):
        logger.debug("Docker socket %s not present; using consumer name %s", socket_path, fallback)
        return fallback

    hostname = hostname or os.environ.get("HOSTNAME") or socket.gethostname()
    try:
        container_name = await find_container_name(hostname, socket_path=socket_path)
    except _LOOKUP_ERRORS as exc:
        logger.warning("Failed to fetch container name for host %s: %s", hostname, exc)
        return fallback

    if not container_name:
        logger.warning("No container found matching hostname %s", hostname)
        return fallback

    logger.info("Container name resolved: %s (hostname=%s)", container_name, hostname)
    return container_name


__all__ = ["find_container_name", "resolve_consumer_name"]
