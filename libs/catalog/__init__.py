"""Model catalog normalization.

Turns the upstream model listing into ranked, one-provider-per-model records
and offers the filtered/sorted views the dashboard renders.
"""

from .base import (
    Capabilities,
    NormalizedModel,
    ProviderSelectionStrategy,
    RawModel,
    RawProvider,
)
from .factory import SelectionMode, create_normalizer, create_selection_strategy
from .normalizer import ModelNormalizer, to_payload
from .strategies import BestUptimeThenLatency, FastestLatencyWithFallback

__all__ = [
    "BestUptimeThenLatency",
    "Capabilities",
    "FastestLatencyWithFallback",
    "ModelNormalizer",
    "NormalizedModel",
    "ProviderSelectionStrategy",
    "RawModel",
    "RawProvider",
    "SelectionMode",
    "create_normalizer",
    "create_selection_strategy",
    "to_payload",
]
