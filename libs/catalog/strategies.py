"""Provider selection strategies."""

from typing import List, Optional
import structlog

from .base import (
    LATENCY_SENTINEL,
    NormalizedModel,
    ProviderSelectionStrategy,
    RawModel,
    RawProvider,
)

logger = structlog.get_logger("catalog.strategies")


def _effective_latency(latency: Optional[float]) -> float:
    return LATENCY_SENTINEL if latency is None else latency


class BestUptimeThenLatency(ProviderSelectionStrategy):
    """Highest uptime wins, lowest latency breaks ties.

    Providers without a positive uptime never qualify, so a model with no
    measured provider is dropped from the listing. The listing is ranked
    by uptime (descending) then latency (ascending, missing last).
    """

    name = "best_performance"
    drop_unmatched = True
    uptime_precision = 1
    latency_precision = 2

    def select(self, model: RawModel) -> Optional[RawProvider]:
        best: Optional[RawProvider] = None
        best_uptime = 0.0
        best_latency = LATENCY_SENTINEL

        for provider in model.providers:
            uptime = provider.uptime
            if uptime is None or uptime <= 0:
                continue
            latency = _effective_latency(provider.latency)
            if best is None or uptime > best_uptime or (
                uptime == best_uptime and latency < best_latency
            ):
                best, best_uptime, best_latency = provider, uptime, latency

        if best is None:
            logger.debug("No measured provider, dropping model", model=model.name)
        return best

    def order(self, models: List[NormalizedModel]) -> List[NormalizedModel]:
        return sorted(
            models,
            key=lambda m: (-(m.uptime or 0.0), _effective_latency(m.latency)),
        )


class FastestLatencyWithFallback(ProviderSelectionStrategy):
    """Lowest parsed latency wins; the first listed provider is the fallback.

    Never drops a model and never reorders the listing.
    """

    name = "fastest"

    def select(self, model: RawModel) -> Optional[RawProvider]:
        if not model.providers:
            return None

        fastest = model.providers[0]
        fastest_latency = fastest.latency
        for provider in model.providers:
            latency = provider.latency
            if latency is not None and (fastest_latency is None or latency < fastest_latency):
                fastest, fastest_latency = provider, latency
        return fastest
