import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic_settings import BaseSettings

from Livestock_RAG_Backend.core.errors import ConfigurationError


class Settings(BaseSettings):
    APP_NAME: str = "livestock-rag-backend"
    ENV: str = "production"

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # direct deployment values (take precedence over the legacy file)
    RAG_ENGINE_PROJECT_ID: str | None = None
    RAG_ENGINE_LOCATION: str | None = None
    RAG_ENGINE_ID: str | None = None
    GEMINI_API_KEY: str | None = None

    # legacy nested runtime config: {"rag": {...}, "gemini": {...}}
    LEGACY_CONFIG_PATH: str = ".runtimeconfig.json"

    RETRIEVAL_TOP_K: int = 15
    RETRIEVAL_TIMEOUT_SECONDS: float = 30.0

    SYNTHESIS_REGIONS: list[str] = ["europe-west3", "us-central1", "us-east1"]
    SYNTHESIS_MODELS: list[str] = [
        "gemini-1.5-pro-002",
        "gemini-1.5-flash-002",
        "gemini-1.5-pro",
        "gemini-1.5-flash",
        "gemini-1.0-pro",
        "gemini-pro",
    ]
    SECONDARY_MODELS: list[str] = [
        "gemini-2.5-pro",
        "gemini-2.5-flash",
        "gemini-2.0-flash",
        "gemini-2.0-flash-001",
    ]
    SYNTHESIS_TIMEOUT_SECONDS: float = 30.0

    GEN_MAX_OUTPUT_TOKENS: int = 2000
    GEN_TEMPERATURE: float = 0.7
    GEN_TOP_P: float = 0.95

    LOG_LEVEL: str = "INFO"
    LOG_PRETTY: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def is_development(self) -> bool:
        # tracebacks in error bodies are opt-in
        return self.ENV.lower() in ("dev", "development")


settings = Settings()


@dataclass(frozen=True)
class RagConfig:
    project_id: str
    location: str
    corpus_id: str
    api_key: str | None = None

    @property
    def corpus_name(self) -> str:
        return (
            f"projects/{self.project_id}/locations/{self.location}"
            f"/ragCorpora/{self.corpus_id}"
        )


def load_legacy_config(path: str | Path) -> dict[str, Any]:
    """
    Reads the legacy runtime config file. A missing or unreadable file is
    treated as an empty source.
    """
    p = Path(path)
    if not p.is_file():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _nested(cfg: dict[str, Any], section: str, key: str) -> str | None:
    block = cfg.get(section)
    value = block.get(key) if isinstance(block, dict) else None
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def resolve_rag_config(
    s: Settings,
    legacy: dict[str, Any] | None = None,
) -> RagConfig:
    """
    Direct settings win; the legacy nested config only fills the gaps.
    """
    project_id = s.RAG_ENGINE_PROJECT_ID
    location = s.RAG_ENGINE_LOCATION
    corpus_id = s.RAG_ENGINE_ID
    api_key = s.GEMINI_API_KEY

    if not (project_id and location and corpus_id and api_key):
        if legacy is None:
            legacy = load_legacy_config(s.LEGACY_CONFIG_PATH)
        project_id = project_id or _nested(legacy, "rag", "engine_project_id")
        location = location or _nested(legacy, "rag", "engine_location")
        corpus_id = corpus_id or _nested(legacy, "rag", "engine_id")
        api_key = api_key or _nested(legacy, "gemini", "api_key")

    if not project_id:
        raise ConfigurationError("RAG_ENGINE_PROJECT_ID environment variable is not set")
    if not location:
        raise ConfigurationError("RAG_ENGINE_LOCATION environment variable is not set")
    if not corpus_id:
        raise ConfigurationError("RAG_ENGINE_ID environment variable is not set")

    return RagConfig(
        project_id=project_id,
        location=location,
        corpus_id=corpus_id,
        api_key=api_key or None,
    )


@lru_cache(maxsize=1)
def get_rag_config() -> RagConfig:
    # deployment values are static for the life of the process
    return resolve_rag_config(settings)
