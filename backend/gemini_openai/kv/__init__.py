"""
Key-value namespace storage.

This module provides functionality for:
- A file-backed local namespace for Node-less / VPS deployments
- A remote Cloudflare Workers KV namespace over the REST API
- Backend selection from settings
"""
from .base import KVGetType, KVKey, KVListResult, KVNamespace, KVNamespaceError
from .factory import create_kv_namespace
from .local import LocalKVStorage
from .remote import CloudflareKVNamespace

__all__ = [
    "CloudflareKVNamespace",
    "KVGetType",
    "KVKey",
    "KVListResult",
    "KVNamespace",
    "KVNamespaceError",
    "LocalKVStorage",
    "create_kv_namespace",
]
