"""Background refresh of the normalized listing.

Every tick of the fixed interval starts a poll without waiting for earlier
ones, so a slow response can land after a newer one. Each poll therefore
takes a sequence number when it starts, and a result is applied only when
its sequence is newer than the last applied one.

A failed poll leaves the previous models in place and marks the snapshot
stale until the next successful poll.
"""

import asyncio
import time
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Set, Tuple

from libs.catalog import ModelNormalizer, NormalizedModel
from libs.common.logging import ServiceLogger
from libs.common.metrics import MetricsCollector
from ..upstream.client import UpstreamClient, UpstreamError


@dataclass(frozen=True)
class CatalogSnapshot:
    """The last applied listing plus the state of the most recent poll."""
    models: Tuple[NormalizedModel, ...] = ()
    sequence: int = 0
    fetched_at: Optional[float] = None
    error: Optional[str] = None

    @property
    def stale(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sequence": self.sequence,
            "fetched_at": self.fetched_at,
            "stale": self.stale,
            "error": self.error,
            "models": [m.to_dict() for m in self.models],
        }


class ModelPoller:
    """Polls the upstream listing on a fixed interval.

    Parameters
    - client: ``UpstreamClient`` used for each fetch
    - normalizer: ``ModelNormalizer`` applied to each successful fetch
    - interval: seconds between poll starts
    - metrics_collector: optional collector for poll outcomes
    """

    def __init__(
        self,
        client: UpstreamClient,
        normalizer: ModelNormalizer,
        interval: float = 60.0,
        metrics_collector: Optional[MetricsCollector] = None
    ):
        self.client = client
        self.normalizer = normalizer
        self.interval = interval
        self.metrics_collector = metrics_collector
        self.log = ServiceLogger("dashboard_service.poller", strategy=normalizer.strategy.name)

        self._issued = 0
        self._applied = 0
        self._snapshot = CatalogSnapshot()
        self._timer_task: Optional[asyncio.Task] = None
        self._in_flight: Set[asyncio.Task] = set()

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    @property
    def running(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    def next_sequence(self) -> int:
        self._issued += 1
        return self._issued

    def apply(self, sequence: int, models, fetched_at: Optional[float] = None) -> bool:
        """Install a poll result unless a newer one was already applied."""
        if sequence <= self._applied:
            self.log.warning(
                "Discarding out-of-order poll result",
                sequence=sequence,
                last_applied=self._applied
            )
            self._record("discarded")
            return False

        self._applied = sequence
        self._snapshot = CatalogSnapshot(
            models=tuple(models),
            sequence=sequence,
            fetched_at=fetched_at if fetched_at is not None else time.time(),
        )
        self._record("applied", sequence)
        self.log.info("Poll result applied", sequence=sequence, count=len(self._snapshot.models))
        return True

    def record_failure(self, sequence: int, error: Exception) -> bool:
        """Mark the current snapshot stale, keeping its models."""
        self._record("failed")
        if sequence <= self._applied:
            return False
        self._snapshot = replace(self._snapshot, error=str(error))
        self.log.error("Poll failed, keeping previous listing", sequence=sequence, error=str(error))
        return True

    async def poll_once(self) -> CatalogSnapshot:
        """Run a single poll and return the snapshot afterwards."""
        sequence = self.next_sequence()
        try:
            raw_models = await self.client.fetch_models()
        except UpstreamError as e:
            self.record_failure(sequence, e)
            return self._snapshot

        models = self.normalizer.normalize(raw_models)
        self.apply(sequence, models, fetched_at=time.time())
        return self._snapshot

    def start(self) -> None:
        """Start the timer loop; the first poll begins immediately."""
        if self.running:
            return
        self._timer_task = asyncio.create_task(self._run())
        self.log.info("Poller started", interval=self.interval)

    async def stop(self) -> None:
        """Stop the timer loop and abandon in-flight polls."""
        tasks = list(self._in_flight)
        if self._timer_task is not None:
            tasks.append(self._timer_task)
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._timer_task = None
        self._in_flight.clear()
        self.log.info("Poller stopped", last_applied=self._applied)

    async def _run(self) -> None:
        while True:
            task = asyncio.create_task(self.poll_once())
            self._in_flight.add(task)
            task.add_done_callback(self._on_poll_done)
            await asyncio.sleep(self.interval)

    def _on_poll_done(self, task: asyncio.Task) -> None:
        self._in_flight.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.log.error("Poll crashed", error=str(error), error_type=type(error).__name__)

    def _record(self, outcome: str, sequence: Optional[int] = None) -> None:
        if self.metrics_collector is not None:
            self.metrics_collector.record_poll(outcome, sequence)
