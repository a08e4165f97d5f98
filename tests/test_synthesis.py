import pytest
import requests

from Livestock_RAG_Backend.core.errors import AuthenticationError, GenerationError
from Livestock_RAG_Backend.services.synthesis import (
    ProviderAttempt,
    SynthesisOrchestrator,
    build_provider_matrix,
    order_regions,
)
from fakes import StaticTokenProvider

ANSWER = "Common cattle diseases include anthrax, mastitis and foot and mouth disease."


class ScriptedGenerator:
    """Returns (or raises) one scripted outcome per call, keyed by model."""

    def __init__(self, outcomes=None, default=None):
        self.outcomes = outcomes or {}
        self.default = default
        self.calls = []
        self.max_tokens = 2000
        self.temperature = 0.7
        self.top_p = 0.95

    def _outcome(self, key):
        outcome = self.outcomes.get(key, self.default)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def generate(self, prompt, *, model, timeout, project_id=None, region=None, token=None):
        self.calls.append((region, model))
        return self._outcome((region, model) if region else model)


def make_orchestrator(primary, tokens=None, regions=("europe-west3", "us-central1"),
                      models=("gemini-pro", "gemini-flash"), secondary=None,
                      secondary_models=("gemini-2.5-flash",)):
    return SynthesisOrchestrator(
        primary=primary,
        token_provider=tokens or StaticTokenProvider(),
        regions=regions,
        models=models,
        secondary_models=secondary_models,
        timeout=5,
        secondary_factory=(lambda key: secondary) if secondary else None,
    )


def test_matrix_is_region_major():
    assert build_provider_matrix(["r1", "r2"], ["m1", "m2"]) == [
        ProviderAttempt("r1", "m1"),
        ProviderAttempt("r1", "m2"),
        ProviderAttempt("r2", "m1"),
        ProviderAttempt("r2", "m2"),
    ]


def test_corpus_region_moved_first():
    assert order_regions(["us-central1", "europe-west3", "us-east1"], "europe-west3") == [
        "europe-west3",
        "us-central1",
        "us-east1",
    ]
    assert order_regions(["us-central1", "us-central1"], "asia-east1") == ["us-central1"]


def test_first_success_wins():
    primary = ScriptedGenerator(
        {
            ("europe-west3", "gemini-pro"): GenerationError("404 - not found"),
            ("europe-west3", "gemini-flash"): requests.Timeout("slow"),
            ("us-central1", "gemini-pro"): "   ",
            ("us-central1", "gemini-flash"): ANSWER,
        }
    )
    text = make_orchestrator(primary).synthesize("q", ["ctx"], "demo-project", "us-central1")

    assert text == ANSWER
    # corpus region first, so us-central1/gemini-flash is the second attempt
    assert primary.calls == [("us-central1", "gemini-pro"), ("us-central1", "gemini-flash")]


def test_stops_after_success():
    primary = ScriptedGenerator(default=ANSWER)
    make_orchestrator(primary).synthesize("q", ["ctx"], "demo-project", "europe-west3")
    assert primary.calls == [("europe-west3", "gemini-pro")]


def test_secondary_provider_after_exhaustion():
    primary = ScriptedGenerator(default=GenerationError("500 - internal"))
    secondary = ScriptedGenerator({"gemini-2.5-flash": ANSWER})

    text = make_orchestrator(primary, secondary=secondary).synthesize(
        "q", ["ctx"], "demo-project", "europe-west3", api_key="key"
    )

    assert text == ANSWER
    assert len(primary.calls) == 4
    assert secondary.calls == [(None, "gemini-2.5-flash")]


def test_secondary_skipped_without_key():
    primary = ScriptedGenerator(default=GenerationError("500 - internal"))
    secondary = ScriptedGenerator(default=ANSWER)

    text = make_orchestrator(primary, secondary=secondary).synthesize(
        "q", ["ctx"], "demo-project", "europe-west3"
    )

    assert text is None
    assert secondary.calls == []


def test_token_failure_skips_region_once():
    tokens = StaticTokenProvider(error=AuthenticationError("no credentials"))
    primary = ScriptedGenerator(default=ANSWER)

    text = make_orchestrator(primary, tokens=tokens).synthesize("q", ["ctx"], "p", "europe-west3")

    assert text is None
    assert primary.calls == []
    assert tokens.calls == 2


def test_unexpected_error_returns_none():
    primary = ScriptedGenerator(default=KeyError("candidates"))
    assert make_orchestrator(primary).synthesize("q", ["ctx"], "p", "europe-west3") is None


@pytest.mark.parametrize("caller_context", [None, "Herd of 40 dairy cows"])
def test_prompt_forwarded(caller_context):
    seen = []

    class Recorder(ScriptedGenerator):
        def generate(self, prompt, **kwargs):
            seen.append(prompt)
            return ANSWER

    make_orchestrator(Recorder()).synthesize(
        "How do I treat mastitis?", ["udder ctx"], "p", "europe-west3", caller_context=caller_context
    )

    assert "How do I treat mastitis?" in seen[0]
    assert "udder ctx" in seen[0]
    assert ("Herd of 40 dairy cows" in seen[0]) == bool(caller_context)
