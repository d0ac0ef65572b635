from fastapi import APIRouter, Request

from mediagrab.core.state import state
from mediagrab.i18n import i18n

router = APIRouter()


@router.get("/")
async def root(request: Request):
    """Root endpoint"""
    config = request.app.state.config
    return {
        "status": i18n.get("response.status_running"),
        "service": config.api.title,
        "version": config.api.version,
        "ytdlp_version": state.ytdlp_version,
    }


@router.get("/health")
async def health_check():
    """Lightweight health check"""
    return {
        "status": i18n.get("health.status"),
        "ytdlp_available": state.ytdlp_available,
    }
