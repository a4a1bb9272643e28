"""Filtered and sorted views over a normalized listing.

These are the table operations the dashboard offers: category tabs, free-text
search, capability filters (all selected flags must be set) and column
sorting. A ``CatalogQuery`` is an immutable snapshot of those choices; a new
query is built for every change rather than mutating one in place.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .base import CAPABILITY_NAMES, NormalizedModel


@dataclass(frozen=True)
class CategoryTab:
    """A dashboard tab and the upstream ``type`` tag it shows."""
    key: str
    label: str
    type: str


CATEGORY_TABS = (
    CategoryTab("chat", "Chat & Completion", "chat/completion"),
    CategoryTab("audio", "Audio & Transcriptions", "audio/transcriptions"),
    CategoryTab("embedding", "Embeddings", "embeddings"),
    CategoryTab("image", "Image Generation", "images/generations"),
)

_TABS_BY_KEY = {tab.key: tab for tab in CATEGORY_TABS}
_TAB_ALIASES = {
    "embed": "embedding",
    "embeddings": "embedding",
    "images": "image",
}

SORT_FIELDS: Dict[str, Callable[[NormalizedModel], Any]] = {
    "name": lambda m: m.name,
    "display_name": lambda m: m.display_name,
    "providerId": lambda m: m.provider_id,
    "type": lambda m: m.type,
    "context_window": lambda m: m.context_window,
    "latency": lambda m: m.latency,
    "uptime": lambda m: m.uptime,
}


def resolve_category(key: str) -> Optional[CategoryTab]:
    """Look up a tab by key, alias or upstream ``type`` tag."""
    key = _TAB_ALIASES.get(key, key)
    if key in _TABS_BY_KEY:
        return _TABS_BY_KEY[key]
    for tab in CATEGORY_TABS:
        if tab.type == key:
            return tab
    return None


@dataclass(frozen=True)
class CatalogQuery:
    """Table state: which rows are shown and in what order.

    ``category`` accepts a tab key or a raw ``type`` tag. Empty ``search``
    and ``capabilities`` match everything; ``sort_field=None`` keeps the
    listing order.
    """
    category: Optional[str] = None
    search: str = ""
    capabilities: Tuple[str, ...] = ()
    sort_field: Optional[str] = None
    ascending: bool = True

    def __post_init__(self):
        unknown = [c for c in self.capabilities if c not in CAPABILITY_NAMES]
        if unknown:
            raise ValueError(f"Unknown capability filter(s): {', '.join(unknown)}")
        if self.sort_field is not None and self.sort_field not in SORT_FIELDS:
            raise ValueError(f"Unknown sort field: {self.sort_field}")

    @property
    def type_tag(self) -> Optional[str]:
        if self.category is None:
            return None
        tab = resolve_category(self.category)
        return tab.type if tab else self.category

    def is_empty(self) -> bool:
        return (
            self.category is None
            and not self.search
            and not self.capabilities
            and self.sort_field is None
        )


def _matches_search(model: NormalizedModel, needle: str) -> bool:
    return needle in model.name.lower() or needle in model.provider_id.lower()


def _has_capabilities(model: NormalizedModel, capabilities: Sequence[str]) -> bool:
    return all(getattr(model.capabilities, name) for name in capabilities)


def sort_models(
    models: Sequence[NormalizedModel],
    field: str,
    ascending: bool = True
) -> List[NormalizedModel]:
    """Sort by a column; rows without a value go last in either direction."""
    getter = SORT_FIELDS[field]
    present = [m for m in models if getter(m) is not None]
    missing = [m for m in models if getter(m) is None]

    def key(model: NormalizedModel):
        value = getter(model)
        return value.casefold() if isinstance(value, str) else value

    return sorted(present, key=key, reverse=not ascending) + missing


def apply_query(models: Sequence[NormalizedModel], query: CatalogQuery) -> List[NormalizedModel]:
    """Apply a ``CatalogQuery`` to a normalized listing."""
    rows = list(models)

    type_tag = query.type_tag
    if type_tag is not None:
        rows = [m for m in rows if m.type == type_tag]

    needle = query.search.strip().lower()
    if needle:
        rows = [m for m in rows if _matches_search(m, needle)]

    if query.capabilities:
        rows = [m for m in rows if _has_capabilities(m, query.capabilities)]

    if query.sort_field is not None:
        rows = sort_models(rows, query.sort_field, query.ascending)

    return rows


@dataclass(frozen=True)
class CategoryView:
    """One category page: measured models ranked by uptime plus a summary."""
    tab: CategoryTab
    models: Tuple[NormalizedModel, ...]

    @property
    def summary(self) -> Dict[str, Any]:
        return {
            "total": len(self.models),
            "best_uptime": self.models[0].uptime if self.models else None,
            "with_function_calling": sum(1 for m in self.models if m.capabilities.function_calling),
            "with_vision": sum(1 for m in self.models if m.capabilities.vision),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.tab.key,
            "label": self.tab.label,
            "type": self.tab.type,
            "models": [m.to_dict() for m in self.models],
            "summary": self.summary,
        }


def category_view(models: Sequence[NormalizedModel], key: str) -> CategoryView:
    """Build the category page for ``key``.

    Models without uptime data, or with zero uptime, are left out; the rest are ordered by uptime,
    highest first.

    Raises
    - KeyError: ``key`` does not name a category
    """
    tab = resolve_category(key)
    if tab is None:
        raise KeyError(key)
    measured = [m for m in models if m.type == tab.type and m.uptime]
    ranked = sort_models(measured, "uptime", ascending=False)
    return CategoryView(tab=tab, models=tuple(ranked))
