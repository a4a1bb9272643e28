"""Tests for provider selection and listing order."""

import pytest
from libs.catalog import (
    BestUptimeThenLatency,
    FastestLatencyWithFallback,
    RawModel,
    SelectionMode,
    create_normalizer,
    create_selection_strategy,
)
from tests.factories import raw_model, raw_provider


def _model(*providers, **kwargs):
    return RawModel.from_dict(raw_model("m", providers=providers, **kwargs))


class TestBestUptimeThenLatency:
    strategy = BestUptimeThenLatency()

    def test_uptime_dominates_latency(self):
        """Test uptime outranks latency."""
        model = _model(
            raw_provider("a", uptime="98", latency="1.2s"),
            raw_provider("b", uptime="97", latency="0.3s"),
        )
        assert self.strategy.select(model).prefix == "a"

    def test_equal_uptime_prefers_lower_latency(self):
        """Test latency breaks uptime ties."""
        model = _model(
            raw_provider("a", uptime="95", latency="2.0s"),
            raw_provider("b", uptime="95", latency="1.0s"),
        )
        assert self.strategy.select(model).prefix == "b"

    def test_missing_latency_loses_tie(self):
        """Test missing latency loses a tie."""
        model = _model(
            raw_provider("a", uptime="95"),
            raw_provider("b", uptime="95", latency="5s"),
        )
        assert self.strategy.select(model).prefix == "b"

    def test_full_tie_keeps_first(self):
        """Test full ties keep the first provider."""
        model = _model(
            raw_provider("a", uptime="95", latency="1s"),
            raw_provider("b", uptime="95", latency="1s"),
        )
        assert self.strategy.select(model).prefix == "a"

    @pytest.mark.parametrize("uptime", ["N/A", "0", 0, None, "n/a"])
    def test_unmeasured_providers_never_selected(self, uptime):
        """Test unmeasured providers are never selected."""
        model = _model(
            raw_provider("bad", uptime=uptime, latency="0.01s"),
            raw_provider("good", uptime="50", latency="9s"),
        )
        assert self.strategy.select(model).prefix == "good"

    def test_no_qualifying_provider(self):
        """Test models with no qualifying provider."""
        assert self.strategy.select(_model(raw_provider("a", uptime="N/A"))) is None
        assert self.strategy.select(_model()) is None


class TestFastestLatencyWithFallback:
    strategy = FastestLatencyWithFallback()

    def test_picks_lowest_latency(self):
        """Test the lowest latency wins."""
        model = _model(
            raw_provider("a", latency="1.5s"),
            raw_provider("b", latency="0.7s"),
            raw_provider("c", latency="0.9s"),
        )
        assert self.strategy.select(model).prefix == "b"

    def test_first_provider_without_latency_is_replaced(self):
        """Test a first provider without latency is replaced."""
        model = _model(raw_provider("a"), raw_provider("b", latency="3s"))
        assert self.strategy.select(model).prefix == "b"

    def test_falls_back_to_first_provider(self):
        """Test fallback to the first provider."""
        model = _model(raw_provider("a", latency="N/A"), raw_provider("b"))
        assert self.strategy.select(model).prefix == "a"

    def test_ignores_uptime(self):
        """Test uptime is ignored."""
        model = _model(
            raw_provider("a", uptime="N/A", latency="0.2s"),
            raw_provider("b", uptime="99.9", latency="0.4s"),
        )
        assert self.strategy.select(model).prefix == "a"

    def test_numeric_zero_latency_is_missing(self):
        """Test numeric zero latency counts as missing."""
        model = _model(raw_provider("a", latency=0), raw_provider("b", latency="0.4s"))
        assert self.strategy.select(model).prefix == "b"

    def test_zero_second_reading_is_fastest(self):
        """Test a zero second reading wins."""
        model = _model(raw_provider("a", latency="0.4s"), raw_provider("b", latency="0s"))
        assert self.strategy.select(model).prefix == "b"

    def test_no_providers(self):
        """Test models without providers."""
        assert self.strategy.select(_model()) is None


def test_best_performance_final_order():
    """Test best performance listing order."""
    raw = [
        raw_model("m90", providers=[raw_provider("p", uptime="90", latency="1.0s")]),
        raw_model("m95-slow", providers=[raw_provider("p", uptime="95", latency="2.0s")]),
        raw_model("m95-fast", providers=[raw_provider("p", uptime="95", latency="0.5s")]),
    ]
    models = create_normalizer(SelectionMode.BEST_PERFORMANCE).normalize(raw)
    assert [(m.uptime, m.latency) for m in models] == [(95.0, 0.5), (95.0, 2.0), (90.0, 1.0)]


def test_best_performance_missing_latency_sorts_last():
    """Test missing latency sorts last."""
    raw = [
        raw_model("no-latency", providers=[raw_provider("p", uptime="95")]),
        raw_model("slow", providers=[raw_provider("p", uptime="95", latency="30s")]),
    ]
    models = create_normalizer("best_performance").normalize(raw)
    assert [m.name for m in models] == ["slow", "no-latency"]
    assert models[1].latency is None


def test_fastest_preserves_upstream_order():
    """Test fastest mode keeps upstream order."""
    raw = [
        raw_model("z", providers=[raw_provider("p", uptime="10", latency="9s")]),
        raw_model("a", providers=[raw_provider("p", uptime="99", latency="1s")]),
    ]
    models = create_normalizer("fastest").normalize(raw)
    assert [m.name for m in models] == ["z", "a"]


def test_factory_resolves_modes():
    """Test strategy factory."""
    assert isinstance(create_selection_strategy("best_performance"), BestUptimeThenLatency)
    assert isinstance(create_selection_strategy(SelectionMode.FASTEST), FastestLatencyWithFallback)


def test_factory_rejects_unknown_mode():
    """Test strategy factory with an unknown mode."""
    with pytest.raises(ValueError, match="Unsupported selection mode"):
        create_selection_strategy("cheapest")
