"""liquidity.providers.http

HTTP series provider.

`GET {base_url}/series/{series_id}` answers `[..]` or `{"values": [..]}`.

One `series()` call is one read:
- paced so read starts are at least `1 / rate_limit_rps` seconds apart
- retried with exponential backoff on transport errors, 5xx and 429
- refused outright while the breaker is open (after N consecutive failed reads)

Retries, failed reads and breaker trips are counted in the metrics registry.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx

from liquidity.core.config import ProviderConfig
from liquidity.core.exceptions import ProviderError
from liquidity.core.metrics import MetricsRegistry
from liquidity.providers.base import coerce_series

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    max_retries: int = 3
    base_delay_s: float = 1.0
    max_delay_s: float = 8.0

    def delay(self, attempt: int) -> float:
        return min(self.base_delay_s * 2**attempt, self.max_delay_s)


def _retryable(exc: httpx.HTTPError) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status >= 500 or status == 429
    return isinstance(exc, httpx.TransportError)


class _Pacer:
    def __init__(self, rate_per_sec: float, clock: Clock, sleep: Sleep) -> None:
        self.interval = 1.0 / max(rate_per_sec, 0.001)
        self._clock = clock
        self._sleep = sleep
        self._next_at = float("-inf")
        self._lock = asyncio.Lock()

    async def wait(self) -> None:
        async with self._lock:
            now = self._clock()
            delay = self._next_at - now
            self._next_at = max(now, self._next_at) + self.interval
        if delay > 0:
            await self._sleep(delay)


class _Breaker:
    def __init__(self, threshold: int, cooldown_s: float, clock: Clock) -> None:
        self.threshold = max(threshold, 1)
        self.cooldown_s = cooldown_s
        self._clock = clock
        self.failures = 0
        self.opened_at: float | None = None

    def allow(self) -> bool:
        if self.opened_at is None:
            return True
        if self._clock() - self.opened_at < self.cooldown_s:
            return False
        # Half-open: one trial read; a failure re-opens immediately.
        self.opened_at = None
        self.failures = self.threshold - 1
        return True

    def success(self) -> None:
        self.failures = 0
        self.opened_at = None

    def failure(self) -> bool:
        """Record a failed read. True when this failure opened the breaker."""

        self.failures += 1
        if self.opened_at is None and self.failures >= self.threshold:
            self.opened_at = self._clock()
            return True
        return False


class HttpProvider:
    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        policy: RetryPolicy | None = None,
        rate_limit_rps: float = 5.0,
        breaker_threshold: int = 5,
        breaker_cooldown_s: float = 30.0,
        metrics: MetricsRegistry | None = None,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.client = client
        self.policy = policy or RetryPolicy()
        self.metrics = metrics or MetricsRegistry()
        self._sleep = sleep
        self._pacer = _Pacer(rate_limit_rps, clock, sleep)
        self._breaker = _Breaker(breaker_threshold, breaker_cooldown_s, clock)

    @classmethod
    def from_config(
        cls,
        cfg: ProviderConfig,
        *,
        metrics: MetricsRegistry | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> HttpProvider:
        client = httpx.AsyncClient(base_url=cfg.base_url, timeout=cfg.timeout_s, transport=transport)
        return cls(
            client,
            policy=RetryPolicy(max_retries=cfg.max_retries),
            rate_limit_rps=cfg.rate_limit_rps,
            breaker_threshold=cfg.breaker_threshold,
            breaker_cooldown_s=cfg.breaker_cooldown_s,
            metrics=metrics,
            clock=clock,
            sleep=sleep,
        )

    async def series(self, series_id: str) -> list[float]:
        if not self._breaker.allow():
            self.metrics.inc("provider_rejected", series=series_id)
            raise ProviderError(f"{series_id}: circuit open")

        await self._pacer.wait()
        try:
            values = coerce_series(series_id, await self._fetch(series_id))
        except ProviderError as e:
            self._record_failure(series_id, e)
            raise
        self._breaker.success()
        return values

    async def _fetch(self, series_id: str) -> Any:
        path = f"/series/{series_id}"
        attempt = 0
        while True:
            try:
                resp = await self.client.get(path)
                resp.raise_for_status()
                return resp.json()
            except httpx.HTTPError as e:
                if attempt >= self.policy.max_retries or not _retryable(e):
                    raise ProviderError(f"{series_id}: {e}") from e
                self.metrics.inc("provider_retries", series=series_id)
                await self._sleep(self.policy.delay(attempt))
                attempt += 1
            except ValueError as e:
                raise ProviderError(f"{series_id}: payload is not JSON") from e

    def _record_failure(self, series_id: str, exc: ProviderError) -> None:
        self.metrics.inc("provider_failures", series=series_id)
        logger.warning("provider_request_failed", extra={"series_id": series_id, "error": str(exc)})
        if self._breaker.failure():
            self.metrics.inc("provider_breaker_trips")
            logger.warning("provider_circuit_open", extra={"cooldown_s": self._breaker.cooldown_s})

    async def aclose(self) -> None:
        await self.client.aclose()
