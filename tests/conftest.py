"""Shared fixtures."""

import pytest

from tests.factories import raw_model, raw_provider


@pytest.fixture
def listing():
    """A small upstream body covering every category and the awkward cases."""
    return {
        "models": [
            raw_model(
                "gpt-4o",
                type="chat/completion",
                features=["vision"],
                context_window=128000,
                display_name="GPT-4o",
                providers=[
                    raw_provider("provider-1", uptime="99.1", latency="1.20s", features=["function_calling"]),
                    raw_provider("provider-3", uptime="N/A", latency="1.9s"),
                ],
            ),
            raw_model(
                "whisper-1",
                type="audio/transcriptions",
                features=["audio"],
                providers=[raw_provider("provider-2", uptime="97.0", latency="N/A")],
            ),
            raw_model(
                "text-embedding-3-small",
                type="embeddings",
                context_window=8191,
                providers=[
                    raw_provider("provider-1", uptime="95", latency="0.30s"),
                    raw_provider("provider-2", uptime="99.5", latency="0.80s"),
                ],
            ),
            raw_model(
                "text-embedding-ada",
                type="embeddings",
                providers=[raw_provider("provider-4", uptime="N/A", latency="0.1s")],
            ),
            raw_model("dall-e-3", type="images/generations", providers=[]),
            raw_model(
                "o3-mini",
                type="chat/completion",
                features=["hybrid-reasoning"],
                providers=[raw_provider("provider-5", uptime=98, latency="2.5 seconds")],
            ),
        ]
    }
