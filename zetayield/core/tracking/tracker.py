"""Polls the hub chain's CCTX registry until a bridge settles or a deadline passes."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

from structlog.contextvars import bound_contextvars

from ...config import settings
from ...providers.cctx import CctxProvider
from .models import CctxRecord, TrackingResult, TrackingStatus, classify


logger = logging.getLogger(__name__)

MIN_TRACK_TIMEOUT_SECONDS = 10
DEFAULT_POLL_INTERVAL_SECONDS = 3.0


class CctxSource(Protocol):
    async def cctxs_by_inbound_hash(self, tx_hash: str) -> List[Dict[str, Any]]:
        ...

    async def cctx_by_hash(self, cctx_hash: str) -> Optional[Dict[str, Any]]:
        ...


class CctxTracker:
    """Blocking poll loop over a ``CctxSource``.

    The registry has no subscription mechanism, so the tracker polls on a fixed
    interval. ``clock`` and ``sleep`` are injectable so elapsed time can be
    simulated. The deadline only stops new polls; a request already in flight
    is allowed to finish.
    """

    def __init__(
        self,
        source: CctxSource,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._source = source
        self.poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep

    async def _poll(self, tx_hash: str) -> List[CctxRecord]:
        cctxs = await self._source.cctxs_by_inbound_hash(tx_hash)
        if cctxs:
            return [CctxRecord.from_api(cctx) for cctx in cctxs]

        direct = await self._source.cctx_by_hash(tx_hash)
        if direct:
            return [CctxRecord.from_api(direct)]
        return []

    async def track(self, tx_hash: str, timeout_seconds: float) -> TrackingResult:
        """
        Track ``tx_hash`` until it completes, fails, or ``timeout_seconds`` elapse.

        The timeout is floored at 10 seconds. A ``pending`` result carries the
        last records seen and can be retried later with the same hash.
        """
        with bound_contextvars(cctx_hash=tx_hash):
            return await self._track(tx_hash, timeout_seconds)

    async def _track(self, tx_hash: str, timeout_seconds: float) -> TrackingResult:
        deadline = self._clock() + max(timeout_seconds, MIN_TRACK_TIMEOUT_SECONDS)
        last_seen: List[CctxRecord] = []
        polls = 0

        while self._clock() < deadline:
            records = await self._poll(tx_hash)
            polls += 1
            if records:
                last_seen = records
                status = classify(last_seen)
                if status != TrackingStatus.PENDING:
                    logger.info(
                        "CCTX for %s is %s after %d polls: %s",
                        tx_hash,
                        status.value,
                        polls,
                        [record.status for record in last_seen],
                    )
                    return TrackingResult(status=status, records=last_seen, polls=polls)

            await self._sleep(self.poll_interval)

        logger.info("CCTX for %s still pending after %d polls", tx_hash, polls)
        return TrackingResult(status=TrackingStatus.PENDING, records=last_seen, polls=polls)


# Singleton instance
_tracker: Optional[CctxTracker] = None


def get_cctx_tracker() -> CctxTracker:
    """Get the singleton tracker configured from settings."""
    global _tracker
    if _tracker is None:
        _tracker = CctxTracker(CctxProvider(), poll_interval=settings.cctx_poll_interval_seconds)
    return _tracker


async def track_cctx_status(tx_hash: str, timeout_seconds: Optional[float] = None) -> TrackingResult:
    timeout = timeout_seconds if timeout_seconds is not None else settings.cctx_default_track_timeout_seconds
    return await get_cctx_tracker().track(tx_hash, timeout)
