from fastapi import APIRouter
from ..config import settings
from ..llm.provider import credentials_configured

router = APIRouter(tags=["health"])

@router.get("/health")
def health():
    # Liveness only; a missing key is reported, not treated as unhealthy
    return {
        "status": "ok",
        "vector_store": settings.vector_store_backend,
        "ai_configured": credentials_configured(settings),
    }
