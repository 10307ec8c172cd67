"""
Service wiring.

run_service builds every component from a validated AppConfig in startup
order and then waits for the shutdown orchestrator to report an exit code.
"""

from __future__ import annotations

import logging
from typing import NoReturn

from .config.settings import AppConfig
from .connection.lifecycle_manager import ConnectionLifecycleManager
from .connection.retry_policy import RetryPolicy
from .container_info import resolve_consumer_name
from .errors import ConnectionExhaustedError
from .health.aggregator import HealthAggregator
from .health.checks import event_stream_check
from .http_api.app import HttpServer, create_app
from .http_api.rate_limiter import FixedWindowRateLimiter
from .ingestion.consumer import StreamConsumer
from .ingestion.handlers import log_event_handler
from .ingestion.pipeline import EventHandler, EventIngestionPipeline
from .process_status import ProcessStatusRegistry
from .redis_protocol.streams import READ_BLOCK_MS
from .redis_utils import create_redis_client
from .sample_events import make_test_event_publisher
from .service_lifecycle.periodic_job import PeriodicJob
from .service_lifecycle.shutdown_orchestrator import ShutdownOrchestrator

logger = logging.getLogger(__name__)


def build_retry_policy(config: AppConfig) -> RetryPolicy:
    connection = config.redis.connection
    return RetryPolicy.from_milliseconds(connection.max_retries, connection.retry_delays_ms)


def read_block_ms(config: AppConfig) -> int:
    """Keep XREADGROUP blocking well inside the socket timeout."""
    return max(1, min(READ_BLOCK_MS, config.redis.connection.timeout_ms // 2))


async def run_service(config: AppConfig, *, handler: EventHandler = log_event_handler) -> NoReturn:
    """Start the service and block until it shuts down.

    Raises:
        ConnectionExhaustedError: When Redis cannot be reached within the retry policy
        SystemExit: With the shutdown exit code once teardown completes
    """
    registry = ProcessStatusRegistry()

    redis_client = create_redis_client(config.redis)
    connection_manager = ConnectionLifecycleManager(
        redis_client,
        build_retry_policy(config),
        connect_timeout_seconds=config.redis.connection.timeout_ms / 1000.0,
    )
    try:
        await connection_manager.connect()
    except ConnectionExhaustedError:
        await connection_manager.disconnect()
        raise

    consumer_name = await resolve_consumer_name(config.service.name)
    pipeline = EventIngestionPipeline(handler, registry)
    consumer = StreamConsumer(
        redis_client,
        pipeline,
        registry,
        stream=config.stream.name,
        group=config.stream.consumer_group,
        consumer_name=consumer_name,
        block_ms=read_block_ms(config),
    )
    consumer.start()

    health = HealthAggregator(
        service_name=config.service.name,
        version=config.service.version,
        timeout_seconds=config.monitoring.health_check_timeout_ms / 1000.0,
    )
    health.register_check("redis", connection_manager.check_connection)
    health.register_check("eventStream", event_stream_check(registry))

    publish_test_event = make_test_event_publisher(redis_client, config.stream.name, config.service.name)
    app = create_app(
        health_aggregator=health,
        rate_limiter=FixedWindowRateLimiter(registry),
        publish_test_event=publish_test_event,
        stream_name=config.stream.name,
    )
    http_server = HttpServer(app, config.service.host, config.service.port)

    orchestrator = ShutdownOrchestrator(
        registry,
        connection_manager=connection_manager,
        http_server=http_server,
        timeout_seconds=config.monitoring.shutdown_timeout_ms / 1000.0,
    )

    try:
        await http_server.start()
    except OSError:
        await consumer.stop()
        await connection_manager.disconnect()
        raise

    interval = config.stream.test_event_interval_seconds
    if interval > 0:
        test_event_job = PeriodicJob("test-event", interval, publish_test_event)
        test_event_job.start()
        orchestrator.add_background_job(test_event_job)
    orchestrator.add_background_job(consumer)

    orchestrator.register_signals()
    logger.info(
        "%s is running on http://%s:%s (stream=%s, group=%s, consumer=%s)",
        config.service.name,
        config.service.host,
        config.service.port,
        config.stream.name,
        config.stream.consumer_group,
        consumer_name,
    )
    await orchestrator.wait_for_exit()


__all__ = ["build_retry_policy", "read_block_ms", "run_service"]
