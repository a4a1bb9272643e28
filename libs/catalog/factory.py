"""Factory for provider selection strategies and normalizers.

Centralizes creation so call sites name a ``SelectionMode`` instead of
importing concrete strategy classes.
"""

from enum import Enum
from typing import Union
import structlog

from .base import ProviderSelectionStrategy
from .normalizer import ModelNormalizer
from .strategies import BestUptimeThenLatency, FastestLatencyWithFallback

logger = structlog.get_logger("catalog.factory")


class SelectionMode(Enum):
    """Supported provider selection modes."""
    BEST_PERFORMANCE = "best_performance"
    FASTEST = "fastest"


_STRATEGIES = {
    SelectionMode.BEST_PERFORMANCE: BestUptimeThenLatency,
    SelectionMode.FASTEST: FastestLatencyWithFallback,
}


def create_selection_strategy(mode: Union[SelectionMode, str]) -> ProviderSelectionStrategy:
    """Create the strategy for ``mode``.

    Raises
    - ValueError: ``mode`` is not a known selection mode
    """
    try:
        selection_mode = SelectionMode(mode)
    except ValueError:
        supported = ", ".join(m.value for m in SelectionMode)
        raise ValueError(f"Unsupported selection mode: {mode!r} (expected one of {supported})")
    return _STRATEGIES[selection_mode]()


def create_normalizer(mode: Union[SelectionMode, str]) -> ModelNormalizer:
    """Create a ``ModelNormalizer`` wired to the strategy for ``mode``."""
    strategy = create_selection_strategy(mode)
    logger.debug("Normalizer created", strategy=strategy.name)
    return ModelNormalizer(strategy)
