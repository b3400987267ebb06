"""
Common contract for key-value namespaces.

Both the local file-backed store and the remote Cloudflare namespace satisfy
``KVNamespace``, so route handlers never need to know which one is bound.
"""
import json
from typing import Any, AsyncIterator, List, Literal, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, Field

KVGetType = Literal["text", "json", "arrayBuffer", "stream"]
KV_GET_TYPES = ("text", "json", "arrayBuffer", "stream")

KVValue = Union[str, bytes, bytearray, memoryview]


class KVNamespaceError(Exception):
    """Raised when a remote namespace operation fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class KVKey(BaseModel):
    """A single key returned by ``list``."""
    name: str = Field(..., description="Key name")
    expiration: Optional[int] = Field(None, description="Absolute expiry in epoch seconds")


class KVListResult(BaseModel):
    """Result of a ``list`` call."""
    keys: List[KVKey] = Field(default_factory=list, description="Matching keys")
    list_complete: bool = Field(True, description="Whether every matching key was returned")
    cursor: Optional[str] = Field(None, description="Continuation cursor when incomplete")


@runtime_checkable
class KVNamespace(Protocol):
    """Capability set shared by every namespace backend."""

    async def get(self, key: str, type: KVGetType = "text") -> Any:
        ...

    async def put(
        self,
        key: str,
        value: KVValue,
        expiration_ttl: Optional[int] = None,
        expiration: Optional[int] = None,
    ) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...

    async def list(self, prefix: Optional[str] = None) -> KVListResult:
        ...


def encode_value(value: KVValue) -> str:
    """
    Normalize a put payload to the stored string form.

    Byte buffers are decoded as UTF-8; anything that is not valid UTF-8
    raises ``UnicodeDecodeError``.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8")
    raise TypeError(f"KV values must be str or bytes, got {type(value).__name__}")


async def _single_chunk(payload: bytes) -> AsyncIterator[bytes]:
    yield payload


def decode_value(payload: bytes, type: KVGetType = "text") -> Any:
    """
    Convert a stored payload into the representation requested by ``type``.

    Args:
        payload: UTF-8 bytes of the stored value
        type: One of ``text``, ``json``, ``arrayBuffer`` or ``stream``

    Returns:
        ``str`` for text, the parsed object for json, ``bytes`` for
        arrayBuffer, or an async iterator yielding the bytes once for stream.

    Raises:
        json.JSONDecodeError: If ``type`` is json and the payload is not JSON
        ValueError: If ``type`` is not a supported get type
    """
    if type == "text":
        return payload.decode("utf-8")
    if type == "json":
        return json.loads(payload)
    if type == "arrayBuffer":
        return bytes(payload)
    if type == "stream":
        return _single_chunk(bytes(payload))
    raise ValueError(f"Unsupported KV get type '{type}', expected one of {', '.join(KV_GET_TYPES)}")
