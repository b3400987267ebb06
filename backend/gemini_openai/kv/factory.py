"""
Selects the KV namespace backend from settings.
"""
import logging

from ..core.config import Settings
from .base import KVNamespace
from .local import LocalKVStorage
from .remote import CloudflareKVNamespace

logger = logging.getLogger(__name__)


def create_kv_namespace(settings: Settings) -> KVNamespace:
    """
    Build the namespace configured by ``KV_BACKEND``.

    Args:
        settings: Application settings

    Returns:
        A LocalKVStorage for "local", a CloudflareKVNamespace for "cloudflare"

    Raises:
        ValueError: If the Cloudflare backend is selected without its credentials
    """
    if settings.KV_BACKEND == "cloudflare":
        required = {
            "CF_ACCOUNT_ID": settings.CF_ACCOUNT_ID,
            "CF_KV_NAMESPACE_ID": settings.CF_KV_NAMESPACE_ID,
            "CF_API_TOKEN": settings.CF_API_TOKEN,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ValueError(f"KV_BACKEND=cloudflare requires: {', '.join(missing)}")

        logger.info(f"Using Cloudflare KV namespace {settings.CF_KV_NAMESPACE_ID}")
        return CloudflareKVNamespace(
            account_id=settings.CF_ACCOUNT_ID,
            namespace_id=settings.CF_KV_NAMESPACE_ID,
            api_token=settings.CF_API_TOKEN,
            base_url=settings.CF_API_BASE_URL,
        )

    logger.info(f"Using local KV storage at {settings.KV_STORAGE_PATH}")
    return LocalKVStorage(settings.KV_STORAGE_PATH)
