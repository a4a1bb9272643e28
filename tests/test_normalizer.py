"""Tests for the model normalizer."""

import json

from libs.catalog import SelectionMode, create_normalizer, to_payload
from tests.factories import raw_model, raw_provider


def test_capabilities_merge_model_and_chosen_provider():
    """Test capabilities merge model and provider features."""
    raw = [raw_model(
        "gpt-4o",
        features=["vision"],
        providers=[raw_provider("p1", uptime="99", latency="1s", features=["function_calling"])],
    )]
    for mode in SelectionMode:
        (model,) = create_normalizer(mode).normalize(raw)
        assert model.capabilities.to_dict() == {
            "function_calling": True,
            "vision": True,
            "audio": False,
            "reasoning": False,
        }


def test_capabilities_ignore_providers_not_chosen():
    """Test unchosen providers do not add capabilities."""
    raw = [raw_model("m", providers=[
        raw_provider("fast", latency="0.1s"),
        raw_provider("slow", latency="5s", features=["audio", "reasoning"]),
    ])]
    (model,) = create_normalizer("fastest").normalize(raw)
    assert model.provider_id == "fast/m"
    assert model.capabilities.audio is False
    assert model.capabilities.reasoning is False


def test_zero_providers_per_mode():
    """Test models without providers in each mode."""
    raw = [raw_model("lonely", features=["vision"])]
    assert create_normalizer("best_performance").normalize(raw) == []

    (model,) = create_normalizer("fastest").normalize(raw)
    assert model.provider_id == "unknown/lonely"
    assert model.uptime is None
    assert model.latency is None
    assert model.capabilities.vision is True


def test_fastest_mode_fields(listing):
    """Test fastest mode output fields."""
    models = create_normalizer("fastest").normalize(listing["models"])
    by_name = {m.name: m for m in models}

    gpt = by_name["gpt-4o"]
    assert gpt.provider_id == "provider-1/gpt-4o"
    assert gpt.display_name == "GPT-4o"
    assert gpt.type == "chat/completion"
    assert gpt.context_window == 128000
    assert gpt.latency == 1.2
    assert gpt.uptime == 99.1

    whisper = by_name["whisper-1"]
    assert whisper.display_name == "whisper-1"
    assert whisper.latency is None
    assert whisper.uptime == 97.0

    assert by_name["text-embedding-ada"].uptime is None
    assert by_name["o3-mini"].capabilities.reasoning is True


def test_best_mode_rounds_metrics():
    """Test best mode rounds halves up."""
    raw = [raw_model("m", providers=[raw_provider("p", uptime="99.96", latency="0.12345s")])]
    (model,) = create_normalizer("best_performance").normalize(raw)
    assert model.uptime == 100.0
    assert model.latency == 0.12

    raw = [raw_model("half", providers=[raw_provider("p", uptime="99.25", latency="0.125s")])]
    (model,) = create_normalizer("best_performance").normalize(raw)
    assert model.uptime == 99.3
    assert model.latency == 0.13


def test_best_mode_orders_by_rounded_uptime():
    """Test best mode orders by rounded uptime."""
    raw = [
        raw_model("steady", providers=[raw_provider("p", uptime="99.3", latency="2s")]),
        raw_model("quick", providers=[raw_provider("p", uptime="99.25", latency="1s")]),
    ]
    models = create_normalizer("best_performance").normalize(raw)
    assert [m.name for m in models] == ["quick", "steady"]
    assert [m.uptime for m in models] == [99.3, 99.3]


def test_category_filter(listing):
    """Test filtering by type tag."""
    models = create_normalizer("best_performance").normalize(listing["models"], category="embeddings")
    assert [m.provider_id for m in models] == ["provider-2/text-embedding-3-small"]


def test_malformed_entries_are_skipped():
    """Test malformed entries are skipped."""
    raw = [None, "junk", {"name": None}, raw_model("ok", providers=[raw_provider("p")])]
    models = create_normalizer("fastest").normalize(raw)
    assert [m.name for m in models] == ["ok"]


def test_normalizer_is_deterministic(listing):
    """Test normalization is deterministic."""
    for mode in SelectionMode:
        normalizer = create_normalizer(mode)
        first = json.dumps(to_payload(normalizer.normalize(listing["models"])), sort_keys=True)
        second = json.dumps(to_payload(normalizer.normalize(listing["models"])), sort_keys=True)
        assert first == second


def test_wire_format(listing):
    """Test the JSON wire format."""
    payload = to_payload(create_normalizer("fastest").normalize(listing["models"][:1]))
    assert payload == [{
        "name": "gpt-4o",
        "display_name": "GPT-4o",
        "providerId": "provider-1/gpt-4o",
        "type": "chat/completion",
        "capabilities": {
            "function_calling": True,
            "vision": True,
            "audio": False,
            "reasoning": False,
        },
        "context_window": 128000,
        "latency": 1.2,
        "uptime": 99.1,
    }]
