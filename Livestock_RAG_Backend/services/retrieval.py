import json
import time
from typing import Any

import requests
import structlog

from Livestock_RAG_Backend.core.config import RagConfig
from Livestock_RAG_Backend.core.errors import RetrievalError
from Livestock_RAG_Backend.utils.http import read_within_deadline

logger = structlog.get_logger(__name__)


def _error_message(r: requests.Response, body: bytes) -> str:
    try:
        data = json.loads(body)
    except ValueError:
        return r.reason or ""
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
    return r.reason or ""


class VertexRagRetriever:
    """Calls the corpus retrieveContexts endpoint and returns the raw payload."""

    def __init__(self, token_provider, top_k: int = 15, timeout: float = 30.0,
                 session: requests.Session | None = None):
        self.token_provider = token_provider
        self.top_k = top_k
        self.timeout = timeout
        self.session = session or requests.Session()

    def endpoint(self, config: RagConfig) -> str:
        return (
            f"https://{config.location}-aiplatform.googleapis.com/v1/"
            f"projects/{config.project_id}/locations/{config.location}:retrieveContexts"
        )

    def retrieve(self, config: RagConfig, query_text: str) -> dict[str, Any]:
        token = self.token_provider.get_token()

        payload = {
            "vertexRagStore": {"ragResources": [{"ragCorpus": config.corpus_name}]},
            "query": {
                "text": query_text,
                "ragRetrievalConfig": {"topK": self.top_k},
            },
        }

        deadline = time.monotonic() + self.timeout
        try:
            r = self.session.post(
                self.endpoint(config),
                json=payload,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout,
                stream=True,
            )
            body = read_within_deadline(r, deadline)
        except requests.RequestException as e:
            logger.error("retrieval_network_error", error=str(e))
            raise RetrievalError(
                "Network error connecting to RAG Engine. Please try again.", status_code=503
            ) from e

        if not r.ok:
            message = _error_message(r, body)
            logger.error("retrieval_error", status=r.status_code, error=message)
            if r.status_code == 404:
                raise RetrievalError(
                    "RAG Engine not found. Check your RAG_ENGINE_ID configuration.", status_code=404
                )
            if r.status_code == 403:
                raise RetrievalError(
                    "Permission denied. Check service account permissions.", status_code=403
                )
            raise RetrievalError(f"RAG Engine API error ({r.status_code}): {message}", status_code=502)

        try:
            data = json.loads(body)
        except ValueError as e:
            raise RetrievalError("RAG Engine returned a non-JSON response", status_code=502) from e
        return data if isinstance(data, dict) else {}
