"""Normalization of the upstream model listing.

``ModelNormalizer`` turns the raw ``models`` array into a list of
``NormalizedModel`` records, one per model, each reported against a single
provider chosen by the configured ``ProviderSelectionStrategy``.

The pass is a pure function of its input: running it twice on the same raw
listing produces equal output.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Optional
import structlog

from .base import (
    UNKNOWN_PROVIDER,
    Capabilities,
    NormalizedModel,
    ProviderSelectionStrategy,
    RawModel,
)

logger = structlog.get_logger("catalog.normalizer")


def _round(value: Optional[float], precision: Optional[int]) -> Optional[float]:
    if value is None or precision is None:
        return value
    # Half up on the exact binary value of the float
    quantum = Decimal(1).scaleb(-precision)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


class ModelNormalizer:
    """Normalizes and ranks raw listing entries.

    Parameters
    - strategy: provider selection policy (see ``libs.catalog.strategies``)
    """

    def __init__(self, strategy: ProviderSelectionStrategy):
        self.strategy = strategy

    def normalize(
        self,
        raw_models: Iterable[Any],
        category: Optional[str] = None
    ) -> List[NormalizedModel]:
        """Normalize a raw listing.

        Parameters
        - raw_models: the upstream ``models`` array (entries of any shape)
        - category: keep only models whose ``type`` equals this tag

        Returns
        - Normalized models in the order defined by the strategy
        """
        normalized: List[NormalizedModel] = []
        skipped = 0

        for entry in raw_models:
            model = RawModel.from_dict(entry)
            if model is None:
                skipped += 1
                continue
            if category is not None and model.type != category:
                continue
            result = self.normalize_model(model)
            if result is not None:
                normalized.append(result)

        ordered = self.strategy.order(normalized)
        logger.debug(
            "Listing normalized",
            strategy=self.strategy.name,
            category=category,
            count=len(ordered),
            skipped=skipped
        )
        return ordered

    def normalize_model(self, model: RawModel) -> Optional[NormalizedModel]:
        """Normalize a single parsed model, or ``None`` if the strategy drops it."""
        provider = self.strategy.select(model)
        if provider is None and self.strategy.drop_unmatched:
            return None

        if provider is None:
            return NormalizedModel(
                name=model.name,
                display_name=model.display_name or model.name,
                provider_id=f"{UNKNOWN_PROVIDER}/{model.name}",
                type=model.type,
                capabilities=Capabilities.from_features(model.features),
                context_window=model.context_window,
            )

        return NormalizedModel(
            name=model.name,
            display_name=model.display_name or model.name,
            provider_id=f"{provider.prefix}/{model.name}",
            type=model.type,
            capabilities=Capabilities.from_features(model.features, provider.features),
            context_window=model.context_window,
            latency=_round(provider.latency, self.strategy.latency_precision),
            uptime=_round(provider.uptime, self.strategy.uptime_precision),
        )


def to_payload(models: Iterable[NormalizedModel]) -> List[Dict[str, Any]]:
    """Serialize normalized models to their JSON wire form."""
    return [model.to_dict() for model in models]
