"""Answer synthesis with provider failover.

Attempts run sequentially over a flattened (region, model) matrix and the
first non-empty text wins; the matrix order is the only priority policy.
Any failure of a single attempt (timeout, transport, HTTP, empty output)
just advances to the next cell. When the whole matrix fails and a Gemini
API key is configured, the secondary provider's own model list is tried the
same way. Exhaustion is reported as ``None`` so the caller can fall back to
extractive text; nothing raises out of :meth:`SynthesisOrchestrator.synthesize`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

import requests
import structlog

from Livestock_RAG_Backend.core.errors import AuthenticationError, GenerationError
from Livestock_RAG_Backend.services.generation import GeminiApiGenerator, VertexGenerator
from Livestock_RAG_Backend.services.rag import build_prompt

logger = structlog.get_logger(__name__)

DEFAULT_ATTEMPT_TIMEOUT = 30.0

# errors that only fail the current cell
RECOVERABLE_ERRORS = (requests.RequestException, GenerationError)


@dataclass(frozen=True)
class ProviderAttempt:
    region: str
    model: str


def order_regions(regions: Sequence[str], preferred: str | None = None) -> list[str]:
    """Moves the corpus region to the front when it is a candidate."""
    ordered = list(dict.fromkeys(regions))
    if preferred and preferred in ordered:
        ordered.remove(preferred)
        ordered.insert(0, preferred)
    return ordered


def build_provider_matrix(regions: Sequence[str], models: Sequence[str]) -> list[ProviderAttempt]:
    return [ProviderAttempt(region=r, model=m) for r in regions for m in models]


class SynthesisOrchestrator:
    def __init__(
        self,
        primary: VertexGenerator,
        token_provider,
        regions: Sequence[str],
        models: Sequence[str],
        secondary_models: Sequence[str] = (),
        timeout: float = DEFAULT_ATTEMPT_TIMEOUT,
        secondary_factory: Callable[[str], GeminiApiGenerator] | None = None,
    ):
        self.primary = primary
        self.token_provider = token_provider
        self.regions = list(regions)
        self.models = list(models)
        self.secondary_models = list(secondary_models)
        self.timeout = timeout
        self.secondary_factory = secondary_factory or self._default_secondary

    def _default_secondary(self, api_key: str) -> GeminiApiGenerator:
        return GeminiApiGenerator(
            api_key,
            max_tokens=self.primary.max_tokens,
            temperature=self.primary.temperature,
            top_p=self.primary.top_p,
        )

    def synthesize(
        self,
        query: str,
        contexts: list[str],
        project_id: str,
        location: str,
        *,
        caller_context: str | None = None,
        api_key: str | None = None,
    ) -> str | None:
        logger.info(
            "synthesis_started",
            query=query[:50],
            contexts=len(contexts),
            project_id=project_id,
            location=location,
        )
        try:
            prompt = build_prompt(query, contexts, caller_context)

            matrix = build_provider_matrix(order_regions(self.regions, location), self.models)
            text = self._try_matrix(prompt, matrix, project_id)
            if text:
                return text

            if api_key and self.secondary_models:
                logger.info("synthesis_secondary_provider", models=self.secondary_models)
                text = self._try_secondary(prompt, api_key)
                if text:
                    return text
            elif not api_key:
                logger.warning("synthesis_secondary_skipped", reason="GEMINI_API_KEY not set")

            logger.warning("synthesis_exhausted", attempts=len(matrix))
            return None
        except Exception:
            # the pipeline always has the extractive fallback
            logger.exception("synthesis_unexpected_error")
            return None

    def _try_matrix(self, prompt: str, matrix: list[ProviderAttempt], project_id: str) -> str | None:
        tokens: dict[str, str | None] = {}

        for attempt in matrix:
            if attempt.region not in tokens:
                try:
                    tokens[attempt.region] = self.token_provider.get_token()
                except AuthenticationError as e:
                    logger.warning("synthesis_region_failed", region=attempt.region, error=e.message)
                    tokens[attempt.region] = None
            token = tokens[attempt.region]
            if token is None:
                continue

            try:
                text = self.primary.generate(
                    prompt,
                    project_id=project_id,
                    region=attempt.region,
                    model=attempt.model,
                    token=token,
                    timeout=self.timeout,
                )
            except RECOVERABLE_ERRORS as e:
                logger.warning(
                    "synthesis_attempt_failed",
                    region=attempt.region,
                    model=attempt.model,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue

            if text and text.strip():
                logger.info(
                    "synthesis_succeeded",
                    region=attempt.region,
                    model=attempt.model,
                    length=len(text.strip()),
                )
                return text.strip()
            logger.warning("synthesis_empty_text", region=attempt.region, model=attempt.model)

        return None

    def _try_secondary(self, prompt: str, api_key: str) -> str | None:
        generator = self.secondary_factory(api_key)

        for model in self.secondary_models:
            try:
                text = generator.generate(prompt, model=model, timeout=self.timeout)
            except RECOVERABLE_ERRORS as e:
                logger.warning(
                    "synthesis_attempt_failed",
                    provider="gemini-api",
                    model=model,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue

            if text and text.strip():
                logger.info("synthesis_succeeded", provider="gemini-api", model=model,
                            length=len(text.strip()))
                return text.strip()
            logger.warning("synthesis_empty_text", provider="gemini-api", model=model)

        return None
