import json
import time
from typing import Any

import requests

from Livestock_RAG_Backend.core.errors import GenerationError
from Livestock_RAG_Backend.utils.http import read_within_deadline
from Livestock_RAG_Backend.utils.lookup import get_path

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1"


def generation_payload(prompt: str, max_tokens: int, temperature: float, top_p: float) -> dict:
    return {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": {
            "maxOutputTokens": max_tokens,
            "temperature": temperature,
            "topP": top_p,
        },
    }


def extract_generated_text(data: Any) -> str:
    """
    Text from a generateContent response. Joins all parts of the first
    candidate; older/SDK-shaped payloads put it under text or response.text.
    """
    if not isinstance(data, dict):
        return ""

    candidates = data.get("candidates")
    if isinstance(candidates, list) and candidates:
        parts = get_path(candidates[0], "content.parts")
        if isinstance(parts, list):
            text = "".join(
                p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)
            )
            if text.strip():
                return text.strip()

    for path in ("text", "response.text"):
        value = get_path(data, path)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _post(session: requests.Session, url: str, payload: dict, headers: dict, timeout: float) -> str:
    # requests.RequestException (timeouts included) propagates to the orchestrator
    deadline = time.monotonic() + timeout
    r = session.post(url, json=payload, headers=headers, timeout=timeout, stream=True)
    body = read_within_deadline(r, deadline)
    if not r.ok:
        raise GenerationError(f"{r.status_code} - {body[:300].decode('utf-8', 'replace')}")
    try:
        data = json.loads(body)
    except ValueError as e:
        raise GenerationError("non-JSON generation response") from e
    return extract_generated_text(data)



class VertexGenerator:
    """Publisher-model generateContent on Vertex AI, one region per call."""

    def __init__(self, max_tokens: int = 2000, temperature: float = 0.7, top_p: float = 0.95,
                 session: requests.Session | None = None):
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.top_p = top_p
        self.session = session or requests.Session()

    def url(self, project_id: str, region: str, model: str) -> str:
        return (
            f"https://{region}-aiplatform.googleapis.com/v1/projects/{project_id}"
            f"/locations/{region}/publishers/google/models/{model}:generateContent"
        )

    def generate(self, prompt: str, *, project_id: str, region: str, model: str,
                 token: str, timeout: float) -> str:
        payload = generation_payload(prompt, self.max_tokens, self.temperature, self.top_p)
        return _post(
            self.session,
            self.url(project_id, region, model),
            payload,
            {"Authorization": f"Bearer {token}"},
            timeout,
        )


class GeminiApiGenerator:
    """Secondary provider: the public Gemini API keyed by GEMINI_API_KEY."""

    def __init__(self, api_key: str, max_tokens: int = 2000, temperature: float = 0.7,
                 top_p: float = 0.95, session: requests.Session | None = None):
        self.api_key = api_key
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.top_p = top_p
        self.session = session or requests.Session()

    def generate(self, prompt: str, *, model: str, timeout: float) -> str:
        payload = generation_payload(prompt, self.max_tokens, self.temperature, self.top_p)
        return _post(
            self.session,
            f"{GEMINI_API_BASE}/models/{model}:generateContent",
            payload,
            {"x-goog-api-key": self.api_key},
            timeout,
        )
