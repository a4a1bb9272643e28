"""Catalog data types and the provider selection interface.

The upstream listing is not under our control, so every raw record is parsed
leniently: a missing or malformed field becomes ``None`` (or an empty
feature list) instead of an error. Normalized records are frozen dataclasses
so a listing can be shared between requests without defensive copies.
"""

import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Optional, Tuple

# First decimal-or-integer token anywhere in the string, e.g. "~1.25s" -> 1.25
_NUMBER_TOKEN = re.compile(r"\d+(?:\.\d+)?|\.\d+")
# Leading numeric prefix, e.g. "99.5%" -> 99.5
_LEADING_NUMBER = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)")

UPTIME_UNAVAILABLE = "N/A"
LATENCY_SENTINEL = 999.0
UNKNOWN_PROVIDER = "unknown"

FUNCTION_CALLING = "function_calling"
VISION = "vision"
AUDIO = "audio"
REASONING = "reasoning"
HYBRID_REASONING = "hybrid-reasoning"
CAPABILITY_NAMES = (FUNCTION_CALLING, VISION, AUDIO, REASONING)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_uptime(value: Any) -> Optional[float]:
    """Parse an uptime percentage.

    Accepts numbers and numeric strings with trailing text ("99.5%").
    Returns ``None`` for absent values, the ``"N/A"`` sentinel and anything
    without a leading number.
    """
    if value is None or value == UPTIME_UNAVAILABLE:
        return None
    if _is_number(value):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if not match:
            return None
        number = float(match.group(0))
    else:
        return None
    return number if math.isfinite(number) else None


def parse_latency(value: Any) -> Optional[float]:
    """Extract the first numeric token from a latency value ("1.2s" -> 1.2).

    A bare numeric zero is how the listing reports a missing measurement, so
    it parses as ``None``; a string such as ``"0s"`` is a real reading.
    """
    if _is_number(value):
        number = float(value)
        return number if math.isfinite(number) and number != 0 else None
    if not isinstance(value, str):
        return None
    match = _NUMBER_TOKEN.search(value)
    return float(match.group(0)) if match else None


def parse_context_window(value: Any) -> Optional[int]:
    if _is_number(value):
        if isinstance(value, float) and not value.is_integer():
            return None
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def parse_features(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(tag for tag in value if isinstance(tag, str))


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


@dataclass(frozen=True)
class Capabilities:
    """Four-flag capability summary derived from feature tags."""
    function_calling: bool = False
    vision: bool = False
    audio: bool = False
    reasoning: bool = False

    @classmethod
    def from_features(cls, *feature_lists: Iterable[str]) -> "Capabilities":
        """Merge any number of feature lists into one capability set."""
        merged = set()
        for features in feature_lists:
            merged.update(features)
        return cls(
            function_calling=FUNCTION_CALLING in merged,
            vision=VISION in merged,
            audio=AUDIO in merged,
            reasoning=REASONING in merged or HYBRID_REASONING in merged,
        )

    def to_dict(self) -> Dict[str, bool]:
        return asdict(self)


@dataclass(frozen=True)
class RawProvider:
    """One upstream provider entry for a model."""
    prefix: str
    features: Tuple[str, ...] = ()
    uptime: Optional[float] = None
    latency: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["RawProvider"]:
        """Parse a provider entry; non-mapping entries yield ``None``."""
        if not isinstance(data, dict):
            return None
        metrics = data.get("performance_metrics")
        if not isinstance(metrics, dict):
            metrics = {}
        return cls(
            prefix=_optional_str(data.get("prefix")) or UNKNOWN_PROVIDER,
            features=parse_features(data.get("features")),
            uptime=parse_uptime(metrics.get("uptime_percentage")),
            latency=parse_latency(metrics.get("latency")),
        )


@dataclass(frozen=True)
class RawModel:
    """One upstream model entry, parsed leniently."""
    name: str
    display_name: Optional[str] = None
    type: Optional[str] = None
    context_window: Optional[int] = None
    features: Tuple[str, ...] = ()
    providers: Tuple[RawProvider, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> Optional["RawModel"]:
        """Parse a model entry.

        Entries that are not mappings or carry no usable ``name`` cannot be
        identified and yield ``None``.
        """
        if not isinstance(data, dict):
            return None
        name = _optional_str(data.get("name"))
        if name is None:
            return None
        raw_providers = data.get("proxy_providers")
        if not isinstance(raw_providers, (list, tuple)):
            raw_providers = ()
        providers = tuple(
            provider
            for provider in (RawProvider.from_dict(p) for p in raw_providers)
            if provider is not None
        )
        return cls(
            name=name,
            display_name=_optional_str(data.get("display_name")),
            type=_optional_str(data.get("type")),
            context_window=parse_context_window(data.get("context_window")),
            features=parse_features(data.get("features")),
            providers=providers,
        )


@dataclass(frozen=True)
class NormalizedModel:
    """Display-ready record for one model/provider pairing."""
    name: str
    display_name: str
    provider_id: str
    type: Optional[str]
    capabilities: Capabilities
    context_window: Optional[int] = None
    latency: Optional[float] = None
    uptime: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation consumed by the dashboard front end."""
        return {
            "name": self.name,
            "display_name": self.display_name,
            "providerId": self.provider_id,
            "type": self.type,
            "capabilities": self.capabilities.to_dict(),
            "context_window": self.context_window,
            "latency": self.latency,
            "uptime": self.uptime,
        }


class ProviderSelectionStrategy(ABC):
    """Picks the provider a normalized model is reported against.

    Class attributes
    - name: stable identifier, also used as a metrics/log label
    - drop_unmatched: drop models for which ``select`` returns ``None``
      instead of reporting them against ``unknown/{name}``
    - uptime_precision / latency_precision: decimal places kept in the
      output, ``None`` to keep the parsed value as is
    """

    name: str = "abstract"
    drop_unmatched: bool = False
    uptime_precision: Optional[int] = None
    latency_precision: Optional[int] = None

    @abstractmethod
    def select(self, model: RawModel) -> Optional[RawProvider]:
        """Return the chosen provider or ``None`` when none qualifies."""

    def order(self, models: List[NormalizedModel]) -> List[NormalizedModel]:
        """Order the final listing; the default keeps upstream order."""
        return list(models)
