"""
Environment bindings handed to the route handlers.

Mirrors the bindings a Cloudflare worker receives, so handlers written
against the worker environment run unchanged on a plain server.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from ..kv import KVNamespace, create_kv_namespace
from .config import ModerationThreshold, Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class Env:
    GCP_SERVICE_ACCOUNT: str
    GEMINI_CLI_KV: KVNamespace
    GEMINI_PROJECT_ID: Optional[str] = None
    OPENAI_API_KEY: Optional[str] = None
    ENABLE_FAKE_THINKING: bool = False
    ENABLE_REAL_THINKING: bool = False
    STREAM_THINKING_AS_CONTENT: bool = False
    ENABLE_AUTO_MODEL_SWITCHING: bool = False
    GEMINI_MODERATION_HARASSMENT_THRESHOLD: Optional[ModerationThreshold] = None
    GEMINI_MODERATION_HATE_SPEECH_THRESHOLD: Optional[ModerationThreshold] = None
    GEMINI_MODERATION_SEXUALLY_EXPLICIT_THRESHOLD: Optional[ModerationThreshold] = None
    GEMINI_MODERATION_DANGEROUS_CONTENT_THRESHOLD: Optional[ModerationThreshold] = None
    ENABLE_GEMINI_NATIVE_TOOLS: bool = False
    ENABLE_GOOGLE_SEARCH: bool = False
    ENABLE_URL_CONTEXT: bool = False
    GEMINI_TOOLS_PRIORITY: Optional[str] = None
    DEFAULT_TO_NATIVE_TOOLS: bool = False
    ALLOW_REQUEST_TOOL_CONTROL: bool = False
    ENABLE_INLINE_CITATIONS: bool = False
    INCLUDE_GROUNDING_METADATA: bool = False
    INCLUDE_SEARCH_ENTRY_POINT: bool = False


def load_env(settings: Optional[Settings] = None) -> Env:
    """
    Build the worker bindings from settings, including the KV namespace.

    Args:
        settings: Settings to use (defaults to the cached process settings)

    Returns:
        Env with every binding populated
    """
    settings = settings or get_settings()

    if not settings.GCP_SERVICE_ACCOUNT:
        logger.warning("GCP_SERVICE_ACCOUNT is not set, Gemini requests will fail until OAuth credentials are provided")

    return Env(
        GCP_SERVICE_ACCOUNT=settings.GCP_SERVICE_ACCOUNT,
        GEMINI_CLI_KV=create_kv_namespace(settings),
        GEMINI_PROJECT_ID=settings.GEMINI_PROJECT_ID,
        OPENAI_API_KEY=settings.OPENAI_API_KEY,
        ENABLE_FAKE_THINKING=settings.ENABLE_FAKE_THINKING,
        ENABLE_REAL_THINKING=settings.ENABLE_REAL_THINKING,
        STREAM_THINKING_AS_CONTENT=settings.STREAM_THINKING_AS_CONTENT,
        ENABLE_AUTO_MODEL_SWITCHING=settings.ENABLE_AUTO_MODEL_SWITCHING,
        GEMINI_MODERATION_HARASSMENT_THRESHOLD=settings.GEMINI_MODERATION_HARASSMENT_THRESHOLD,
        GEMINI_MODERATION_HATE_SPEECH_THRESHOLD=settings.GEMINI_MODERATION_HATE_SPEECH_THRESHOLD,
        GEMINI_MODERATION_SEXUALLY_EXPLICIT_THRESHOLD=settings.GEMINI_MODERATION_SEXUALLY_EXPLICIT_THRESHOLD,
        GEMINI_MODERATION_DANGEROUS_CONTENT_THRESHOLD=settings.GEMINI_MODERATION_DANGEROUS_CONTENT_THRESHOLD,
        ENABLE_GEMINI_NATIVE_TOOLS=settings.ENABLE_GEMINI_NATIVE_TOOLS,
        ENABLE_GOOGLE_SEARCH=settings.ENABLE_GOOGLE_SEARCH,
        ENABLE_URL_CONTEXT=settings.ENABLE_URL_CONTEXT,
        GEMINI_TOOLS_PRIORITY=settings.GEMINI_TOOLS_PRIORITY,
        DEFAULT_TO_NATIVE_TOOLS=settings.DEFAULT_TO_NATIVE_TOOLS,
        ALLOW_REQUEST_TOOL_CONTROL=settings.ALLOW_REQUEST_TOOL_CONTROL,
        ENABLE_INLINE_CITATIONS=settings.ENABLE_INLINE_CITATIONS,
        INCLUDE_GROUNDING_METADATA=settings.INCLUDE_GROUNDING_METADATA,
        INCLUDE_SEARCH_ENTRY_POINT=settings.INCLUDE_SEARCH_ENTRY_POINT,
    )
