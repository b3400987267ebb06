"""
Version management for the gateway
"""
from typing import Optional

from ..__version__ import __version__
from .config import Settings, get_settings


def get_features(settings: Optional[Settings] = None) -> dict:
    """Feature flags derived from the current settings"""
    settings = settings or get_settings()
    return {
        "kv_backend": settings.KV_BACKEND,
        "fake_thinking": settings.ENABLE_FAKE_THINKING,
        "real_thinking": settings.ENABLE_REAL_THINKING,
        "auto_model_switching": settings.ENABLE_AUTO_MODEL_SWITCHING,
        "native_tools": settings.ENABLE_GEMINI_NATIVE_TOOLS,
        "google_search": settings.ENABLE_GOOGLE_SEARCH,
        "url_context": settings.ENABLE_URL_CONTEXT,
        "inline_citations": settings.ENABLE_INLINE_CITATIONS,
    }


def get_version_info(settings: Optional[Settings] = None):
    """Get version and feature information"""
    return {
        "version": __version__,
        "features": get_features(settings),
    }
