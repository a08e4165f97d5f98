from typing import Any, Callable

import structlog

from Livestock_RAG_Backend.core.config import RagConfig, Settings, get_rag_config
from Livestock_RAG_Backend.core.errors import ValidationError
from Livestock_RAG_Backend.schemas.chat import AnswerOut
from Livestock_RAG_Backend.services.auth import GoogleTokenProvider
from Livestock_RAG_Backend.services.confidence import score_confidence
from Livestock_RAG_Backend.services.context_normalizer import normalize_retrieval_response
from Livestock_RAG_Backend.services.fallback import format_contexts_as_answer
from Livestock_RAG_Backend.services.generation import VertexGenerator
from Livestock_RAG_Backend.services.markdown import render_markdown
from Livestock_RAG_Backend.services.retrieval import VertexRagRetriever
from Livestock_RAG_Backend.services.synthesis import SynthesisOrchestrator
from Livestock_RAG_Backend.utils.citations import dedupe_sources

logger = structlog.get_logger(__name__)

MIN_QUERY_CHARS = 3
MAX_QUERY_CHARS = 2000
MIN_SYNTHESIS_CHARS = 50
NO_CONTEXT_CONFIDENCE = 0.0


def validate_query(prompt: Any) -> str:
    if not isinstance(prompt, str) or not prompt.strip():
        raise ValidationError("Prompt is required and must be a string")
    text = prompt.strip()
    if len(text) < MIN_QUERY_CHARS:
        raise ValidationError("Prompt must be at least 3 characters long")
    if len(text) > MAX_QUERY_CHARS:
        raise ValidationError("Prompt must be less than 2000 characters")
    return text


class AnswerPipeline:
    """
    validate -> retrieve -> normalize -> synthesize or fall back
    -> render -> dedupe sources -> score
    """
    def __init__(
        self,
        retriever,
        orchestrator: SynthesisOrchestrator,
        config_loader: Callable[[], RagConfig] = get_rag_config,
    ):
        self.retriever = retriever
        self.orchestrator = orchestrator
        self.config_loader = config_loader

    def ask(self, prompt: Any, context: str | None = None) -> AnswerOut:
        query = validate_query(prompt)
        config = self.config_loader()

        payload = self.retriever.retrieve(config, query)
        result = normalize_retrieval_response(payload)
        texts = result.texts
        logger.info(
            "retrieval_normalized",
            chunks=len(result.chunks),
            scores=len(result.scores),
            total_chars=sum(len(t) for t in texts),
        )

        answer_text = None
        if texts:
            answer_text = self.orchestrator.synthesize(
                query,
                texts,
                config.project_id,
                config.location,
                caller_context=context,
                api_key=config.api_key,
            )

        if not answer_text or len(answer_text) < MIN_SYNTHESIS_CHARS:
            logger.info("fallback_used", synthesized=bool(answer_text), contexts=len(texts))
            answer_text = format_contexts_as_answer(query, texts)

        if texts:
            confidence = score_confidence(result.scores, answer_text, result.confidence)
        else:
            confidence = NO_CONTEXT_CONFIDENCE

        answer = AnswerOut(
            text=render_markdown(answer_text),
            sources=dedupe_sources(result.chunks),
            confidence=confidence,
        )
        logger.info(
            "rag_request_succeeded",
            prompt_length=len(query),
            sources=len(answer.sources),
            confidence=answer.confidence,
        )
        return answer


def build_pipeline(s: Settings) -> AnswerPipeline:
    tokens = GoogleTokenProvider()
    retriever = VertexRagRetriever(
        tokens,
        top_k=s.RETRIEVAL_TOP_K,
        timeout=s.RETRIEVAL_TIMEOUT_SECONDS,
    )
    orchestrator = SynthesisOrchestrator(
        primary=VertexGenerator(
            max_tokens=s.GEN_MAX_OUTPUT_TOKENS,
            temperature=s.GEN_TEMPERATURE,
            top_p=s.GEN_TOP_P,
        ),
        token_provider=tokens,
        regions=s.SYNTHESIS_REGIONS,
        models=s.SYNTHESIS_MODELS,
        secondary_models=s.SECONDARY_MODELS,
        timeout=s.SYNTHESIS_TIMEOUT_SECONDS,
    )
    return AnswerPipeline(retriever, orchestrator)
