"""
Configuration settings for the application.
"""
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional, Union

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Load environment variables from .env in the working directory if it exists
env_path = Path.cwd() / ".env"
if env_path.exists():
    load_dotenv(dotenv_path=env_path)
    logger.info(f"[ENV] Loaded .env from: {env_path}")

ModerationThreshold = Literal[
    "BLOCK_NONE",
    "BLOCK_FEW",
    "BLOCK_SOME",
    "BLOCK_ONLY_HIGH",
    "HARM_BLOCK_THRESHOLD_UNSPECIFIED",
]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # Server configuration
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8787)
    LOG_LEVEL: str = Field(default="INFO")

    # CORS configuration
    CORS_ORIGINS: Union[str, List[str]] = Field(default="*", validate_default=True)

    # KV namespace backend
    KV_BACKEND: Literal["local", "cloudflare"] = Field(default="local")
    KV_STORAGE_PATH: str = Field(default="./.local-kv")
    CF_ACCOUNT_ID: Optional[str] = Field(default=None)
    CF_KV_NAMESPACE_ID: Optional[str] = Field(default=None)
    CF_API_TOKEN: Optional[str] = Field(default=None)
    CF_API_BASE_URL: str = Field(default="https://api.cloudflare.com/client/v4")

    # Gemini credentials
    GCP_SERVICE_ACCOUNT: str = Field(default="")
    GEMINI_PROJECT_ID: Optional[str] = Field(default=None)

    # Optional bearer token required on /v1 routes
    OPENAI_API_KEY: Optional[str] = Field(default=None)

    # Thinking / reasoning behaviour
    ENABLE_FAKE_THINKING: bool = Field(default=False)
    ENABLE_REAL_THINKING: bool = Field(default=False)
    STREAM_THINKING_AS_CONTENT: bool = Field(default=False)
    ENABLE_AUTO_MODEL_SWITCHING: bool = Field(default=False)

    # Safety thresholds
    GEMINI_MODERATION_HARASSMENT_THRESHOLD: Optional[ModerationThreshold] = Field(default=None)
    GEMINI_MODERATION_HATE_SPEECH_THRESHOLD: Optional[ModerationThreshold] = Field(default=None)
    GEMINI_MODERATION_SEXUALLY_EXPLICIT_THRESHOLD: Optional[ModerationThreshold] = Field(default=None)
    GEMINI_MODERATION_DANGEROUS_CONTENT_THRESHOLD: Optional[ModerationThreshold] = Field(default=None)

    # Native tools (Google Search, URL context)
    ENABLE_GEMINI_NATIVE_TOOLS: bool = Field(default=False)
    ENABLE_GOOGLE_SEARCH: bool = Field(default=False)
    ENABLE_URL_CONTEXT: bool = Field(default=False)
    GEMINI_TOOLS_PRIORITY: Optional[str] = Field(default=None)
    DEFAULT_TO_NATIVE_TOOLS: bool = Field(default=False)
    ALLOW_REQUEST_TOOL_CONTROL: bool = Field(default=False)

    # Citations and grounding
    ENABLE_INLINE_CITATIONS: bool = Field(default=False)
    INCLUDE_GROUNDING_METADATA: bool = Field(default=False)
    INCLUDE_SEARCH_ENTRY_POINT: bool = Field(default=False)

    @field_validator("CORS_ORIGINS", mode="before")
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """
        Parse a comma-separated string into a list of CORS origins.
        """
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("KV_BACKEND", mode="before")
    def normalize_kv_backend(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v

    @property
    def requires_auth(self) -> bool:
        return bool(self.OPENAI_API_KEY)


@lru_cache()
def get_settings() -> Settings:
    return Settings()


# Create settings object
settings = get_settings()
