"""Flattens retrieval responses of varying shape into ordered context chunks.

The retrieval backend has returned contexts under several field names and
nesting levels over time, so every field is resolved through an ordered
alias chain rather than a fixed schema.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from Livestock_RAG_Backend.utils.citations import resolve_source_fields
from Livestock_RAG_Backend.utils.lookup import first_string, get_path, is_number

CONTEXT_FIELDS = ("contexts", "ragContexts", "contextChunks")

TEXT_PATHS = (
    "text",
    "content",
    "contextText",
    "ragContext.text",
    "ragContext.content",
)

SCORE_ARRAY_PATHS = ("scores", "contexts.scores", "similarityScores")
CHUNK_SCORE_PATHS = ("score", "_score")
MAX_CHUNK_SCORES = 5


@dataclass(frozen=True)
class ContextChunk:
    text: str
    score: float | None = None
    source_uri: str | None = None
    title: str | None = None


@dataclass(frozen=True)
class RetrievalResult:
    chunks: list[ContextChunk] = field(default_factory=list)
    scores: list[float] = field(default_factory=list)
    confidence: float | None = None

    @property
    def texts(self) -> list[str]:
        return [c.text for c in self.chunks]


def _as_dict(payload: Any) -> dict[str, Any]:
    if payload is None:
        return {}
    if isinstance(payload, dict):
        return payload
    # SDK response objects (proto-plus / pydantic) expose one of these
    for attr in ("to_dict", "model_dump", "dict"):
        fn = getattr(payload, attr, None)
        if callable(fn):
            data = fn()
            if isinstance(data, dict):
                return data
    return {}


def extract_raw_contexts(payload: dict[str, Any]) -> list[dict[str, Any]]:
    """
    First field present wins. A list is used as-is, a singly-nested
    {"<field>": {"contexts": [...]}} is unwrapped, and a lone object is
    wrapped into a one-element list.
    """
    for name in CONTEXT_FIELDS:
        value = payload.get(name)
        if not value:
            continue
        if isinstance(value, list):
            items = value
        elif isinstance(value, dict):
            inner = value.get("contexts", value.get(name))
            if isinstance(inner, list):
                items = inner
            elif isinstance(inner, dict):
                items = [inner]
            else:
                items = [value]
        else:
            continue
        return [item for item in items if isinstance(item, dict)]
    return []


def extract_scores(payload: dict[str, Any], raw_contexts: list[dict[str, Any]]) -> list[float]:
    for path in SCORE_ARRAY_PATHS:
        value = get_path(payload, path)
        if isinstance(value, list):
            return [float(s) for s in value if is_number(s)]

    scores: list[float] = []
    for ctx in raw_contexts:
        for path in CHUNK_SCORE_PATHS:
            s = ctx.get(path)
            if is_number(s):
                scores.append(float(s))
                break
    return scores[:MAX_CHUNK_SCORES]


def _parallel_scores(payload: dict[str, Any]) -> list[Any] | None:
    for path in SCORE_ARRAY_PATHS:
        value = get_path(payload, path)
        if isinstance(value, list):
            return value
    return None


def _chunk_score(ctx: dict[str, Any], index: int, parallel: list[Any] | None) -> float | None:
    if parallel is not None and index < len(parallel) and is_number(parallel[index]):
        return float(parallel[index])
    for path in CHUNK_SCORE_PATHS:
        s = ctx.get(path)
        if is_number(s):
            return float(s)
    return None


def normalize_retrieval_response(payload: Any) -> RetrievalResult:
    data = _as_dict(payload)
    raw_contexts = extract_raw_contexts(data)
    parallel = _parallel_scores(data)

    chunks: list[ContextChunk] = []
    for i, ctx in enumerate(raw_contexts):
        text = first_string(ctx, TEXT_PATHS)
        if not text:
            continue
        uri, title = resolve_source_fields(ctx)
        chunks.append(ContextChunk(
            text=text,
            score=_chunk_score(ctx, i, parallel),
            source_uri=uri,
            title=title,
        ))

    reported = data.get("confidence")
    return RetrievalResult(
        chunks=chunks,
        scores=extract_scores(data, raw_contexts),
        confidence=float(reported) if is_number(reported) else None,
    )
