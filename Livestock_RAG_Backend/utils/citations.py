from typing import Any, Iterable
from urllib.parse import quote

from Livestock_RAG_Backend.schemas.chat import SourceOut
from Livestock_RAG_Backend.utils.lookup import first_string

PLACEHOLDER_TITLE = "Reference"
INTERNAL_SOURCE_BASE = "https://rag.istock.local/"
VALID_URI_PREFIXES = ("http://", "https://", "data:")

URI_PATHS = (
    "sourceUri",
    "uri",
    "source.uri",
    "metadata.sourceUri",
    "metadata.source",
    "ragContext.sourceUri",
    "ragContext.uri",
)

TITLE_PATHS = (
    "sourceDisplayName",
    "sourceTitle",
    "title",
    "source.title",
    "metadata.title",
    "ragContext.title",
    "ragContext.sourceTitle",
)


def resolve_source_fields(raw: dict[str, Any]) -> tuple[str | None, str]:
    """
    Pulls (uri, title) out of one raw retrieval context.
    Title falls back to the generic placeholder.
    """
    uri = first_string(raw, URI_PATHS)
    title = first_string(raw, TITLE_PATHS) or PLACEHOLDER_TITLE
    return uri, title


def is_placeholder_title(title: str | None) -> bool:
    return not title or title.strip() == PLACEHOLDER_TITLE


def dedupe_key(title: str | None, uri: str | None) -> str:
    if not is_placeholder_title(title):
        return title.strip().lower()
    return uri or "unknown"


def citation_uri(uri: str | None, title: str) -> str:
    if uri and uri.startswith(VALID_URI_PREFIXES):
        return uri
    # encodeURIComponent-compatible safe set
    return INTERNAL_SOURCE_BASE + quote(title, safe="!~*'()")


def dedupe_sources(chunks: Iterable[Any]) -> list[SourceOut]:
    """
    Builds the citation list from context chunks (anything with
    .title / .source_uri). Keeps first-seen order, one entry per
    normalized title; placeholder titles never become citations.
    """
    seen: dict[str, SourceOut] = {}
    for chunk in chunks:
        title = (getattr(chunk, "title", None) or "").strip()
        uri = getattr(chunk, "source_uri", None)

        if is_placeholder_title(title):
            continue

        key = dedupe_key(title, uri)
        if key in seen:
            continue

        seen[key] = SourceOut(uri=citation_uri(uri, title), title=title)

    return list(seen.values())
