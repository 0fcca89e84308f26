from datetime import datetime, timezone

from fastapi import APIRouter

from inventory_ai.config import get_settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check():
    settings = get_settings()
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "ai_configured": bool((settings.GEMINI_API_KEY or "").strip()),
        "persistence": settings.PERSISTENCE_BACKEND,
        "time": datetime.now(timezone.utc).isoformat(),
    }
