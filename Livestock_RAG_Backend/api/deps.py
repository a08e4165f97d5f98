from functools import lru_cache

from fastapi import HTTPException, Request

from Livestock_RAG_Backend.core.config import settings
from Livestock_RAG_Backend.services.pipeline import AnswerPipeline, build_pipeline


@lru_cache(maxsize=1)
def get_pipeline() -> AnswerPipeline:
    # one set of clients (sessions, cached credentials) per process
    return build_pipeline(settings)


def check_origin(request: Request) -> None:
    """
    Preflight is answered by CORSMiddleware; this rejects the actual
    request when the browser origin is not on the allow-list.
    """
    origin = request.headers.get("origin")
    if not origin:
        return
    allowed = settings.CORS_ORIGINS
    if "*" in allowed or origin in allowed:
        return
    raise HTTPException(status_code=403, detail="Origin not allowed by CORS policy")
