from fastapi import APIRouter
from Livestock_RAG_Backend.api.routes import ask

router = APIRouter()
router.include_router(ask.router, tags=["rag"])
