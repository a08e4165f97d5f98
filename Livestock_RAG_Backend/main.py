import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from Livestock_RAG_Backend.api import router as api_router
from Livestock_RAG_Backend.api.errors import catch_unhandled_errors, register_exception_handlers
from Livestock_RAG_Backend.core.config import settings
from Livestock_RAG_Backend.core.logging_config import bind_request_context, configure_logging

configure_logging(settings.LOG_LEVEL, settings.LOG_PRETTY)

app = FastAPI(title=settings.APP_NAME)

# added first so it sits inside CORSMiddleware
app.middleware("http")(catch_unhandled_errors)

# answers OPTIONS preflight before any route logic runs
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(api_router)


@app.middleware("http")
async def request_context(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    bind_request_context(request_id=request_id)
    response = await call_next(request)
    response.headers["x-request-id"] = request_id
    return response


@app.get("/health")
def health():
    return {"status": "ok"}
