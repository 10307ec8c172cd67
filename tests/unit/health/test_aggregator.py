"""Tests for the health aggregator."""

import asyncio

import pytest

from streamkeeper.health import HealthAggregator
from streamkeeper.health.aggregator import overall_status
from streamkeeper.health.checks import event_stream_check
from streamkeeper.health.types import HealthCheckResult, HealthStatus


def _static(result):
    async def _check():
        return result

    return _check


def _healthy():
    return _static(HealthCheckResult.healthy_result(latency_ms=0.5))


def _unhealthy(error="down"):
    return _static(HealthCheckResult.unhealthy_result(error))


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def aggregator():
    return HealthAggregator(service_name="Orders", version="1.2.3", timeout_seconds=0.05)


class TestOverallStatus:
    def test_all_healthy(self):
        results = {"a": HealthCheckResult(HealthStatus.HEALTHY), "b": HealthCheckResult(HealthStatus.HEALTHY)}
        assert overall_status(results) is HealthStatus.HEALTHY

    def test_degraded_without_unhealthy(self):
        results = {"a": HealthCheckResult(HealthStatus.HEALTHY), "b": HealthCheckResult(HealthStatus.DEGRADED)}
        assert overall_status(results) is HealthStatus.DEGRADED

    def test_unhealthy_wins(self):
        results = {"a": HealthCheckResult(HealthStatus.DEGRADED), "b": HealthCheckResult(HealthStatus.UNHEALTHY)}
        assert overall_status(results) is HealthStatus.UNHEALTHY


class TestPerformChecks:
    @pytest.mark.asyncio
    async def test_timeout_is_reported_unhealthy(self, aggregator):
        async def slow():
            await asyncio.sleep(1)
            return HealthCheckResult.healthy_result()

        aggregator.register_check("redis", slow)
        aggregator.register_check("eventStream", _healthy())

        results = await aggregator.perform_checks()

        assert results["redis"].status is HealthStatus.UNHEALTHY
        assert results["redis"].timed_out is True
        assert results["redis"].to_dict()["timeout"] is True
        assert "redis" in results["redis"].error
        assert results["eventStream"].healthy

    @pytest.mark.asyncio
    async def test_raising_check_is_reported_unhealthy(self, aggregator):
        async def broken():
            raise RuntimeError("probe exploded")

        aggregator.register_check("redis", broken)

        results = await aggregator.perform_checks()

        assert results["redis"].status is HealthStatus.UNHEALTHY
        assert results["redis"].error == "probe exploded"

    @pytest.mark.asyncio
    async def test_no_checks_gives_empty_results(self, aggregator):
        assert await aggregator.perform_checks() == {}


class TestReadiness:
    @pytest.mark.asyncio
    async def test_ready_when_all_healthy(self, aggregator):
        aggregator.register_check("redis", _healthy())

        readiness = await aggregator.check_readiness()

        assert readiness["status"] == "ready"
        assert "reason" not in readiness

    @pytest.mark.asyncio
    async def test_not_ready_lists_unhealthy_dependencies(self, aggregator):
        aggregator.register_check("redis", _unhealthy())
        aggregator.register_check("cache", _healthy())
        aggregator.register_check("eventStream", _unhealthy())

        readiness = await aggregator.check_readiness()

        assert readiness["status"] == "not_ready"
        assert readiness["reason"] == "Dependencies unhealthy: redis, eventStream"

    @pytest.mark.asyncio
    async def test_degraded_check_is_not_ready(self, aggregator):
        aggregator.register_check("redis", _static(HealthCheckResult(HealthStatus.DEGRADED)))

        readiness = await aggregator.check_readiness()

        assert readiness["status"] == "not_ready"


class TestDetailedHealth:
    @pytest.mark.asyncio
    async def test_reports_service_block_and_checks(self):
        clock = FakeClock()
        aggregator = HealthAggregator(service_name="Orders", version="1.2.3", clock=clock)
        aggregator.register_check("redis", _healthy())
        clock.now += 42.7

        health = await aggregator.get_detailed_health()

        assert health["status"] == "healthy"
        assert health["service"] == {"name": "Orders", "version": "1.2.3", "uptime": 42}
        assert health["checks"]["redis"]["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_redis_healthy_but_stream_inactive_is_unhealthy(self, aggregator, registry):
        aggregator.register_check("redis", _healthy())
        aggregator.register_check("eventStream", event_stream_check(registry))

        health = await aggregator.get_detailed_health()

        assert health["status"] == "unhealthy"
        assert health["checks"]["eventStream"]["consumerActive"] is False
        assert health["checks"]["eventStream"]["lastMessage"] is None


def test_liveness_does_not_run_checks(aggregator):
    called = []

    async def check():
        called.append(True)
        return HealthCheckResult.healthy_result()

    aggregator.register_check("redis", check)

    assert aggregator.check_liveness()["status"] == "OK"
    assert called == []
