"""Tests for lenient parsing of raw listing entries."""

import pytest
from libs.catalog.base import (
    UNKNOWN_PROVIDER,
    Capabilities,
    RawModel,
    RawProvider,
    parse_context_window,
    parse_latency,
    parse_uptime,
)


@pytest.mark.parametrize("value,expected", [
    ("99.5", 99.5),
    ("99.5%", 99.5),
    (" 97 ", 97.0),
    (98, 98.0),
    (96.25, 96.25),
    ("0", 0.0),
    ("N/A", None),
    (None, None),
    ("", None),
    ("unknown", None),
    (True, None),
    (float("nan"), None),
])
def test_parse_uptime(value, expected):
    """Test uptime parsing."""
    assert parse_uptime(value) == expected


@pytest.mark.parametrize("value,expected", [
    ("1.2s", 1.2),
    ("~0.45 seconds", 0.45),
    ("latency: 300ms", 300.0),
    (".5s", 0.5),
    (2, 2.0),
    ("0s", 0.0),
    (0, None),
    (0.0, None),
    ("N/A", None),
    ("", None),
    (None, None),
    (["1.2s"], None),
])
def test_parse_latency(value, expected):
    """Test latency parsing."""
    assert parse_latency(value) == expected


def test_parse_context_window():
    """Test context window parsing."""
    assert parse_context_window(128000) == 128000
    assert parse_context_window(8192.0) == 8192
    assert parse_context_window("4096") == 4096
    assert parse_context_window(1.5) is None
    assert parse_context_window("big") is None
    assert parse_context_window(None) is None


def test_capabilities_from_features():
    """Test capability flags from feature lists."""
    caps = Capabilities.from_features(["vision"], ["function_calling"])
    assert caps.to_dict() == {
        "function_calling": True,
        "vision": True,
        "audio": False,
        "reasoning": False,
    }


@pytest.mark.parametrize("tag", ["reasoning", "hybrid-reasoning"])
def test_reasoning_aliases(tag):
    """Test reasoning feature aliases."""
    assert Capabilities.from_features([], [tag]).reasoning is True


def test_raw_provider_tolerates_missing_metrics():
    """Test provider parsing with missing fields."""
    provider = RawProvider.from_dict({"prefix": "p1", "performance_metrics": None})
    assert provider == RawProvider(prefix="p1")
    assert RawProvider.from_dict({"features": "vision"}).prefix == UNKNOWN_PROVIDER
    assert RawProvider.from_dict({"features": "vision"}).features == ()
    assert RawProvider.from_dict("provider-1") is None


def test_raw_model_skips_bad_providers():
    """Test model parsing skips bad providers."""
    model = RawModel.from_dict({
        "name": "m",
        "features": ["vision", 7, None],
        "context_window": "n/a",
        "proxy_providers": [None, "x", {"prefix": "ok"}],
    })
    assert model.features == ("vision",)
    assert model.context_window is None
    assert [p.prefix for p in model.providers] == ["ok"]


@pytest.mark.parametrize("entry", [None, [], "gpt-4o", {"type": "embeddings"}, {"name": ""}])
def test_raw_model_without_name_is_rejected(entry):
    """Test entries without a name are rejected."""
    assert RawModel.from_dict(entry) is None
