"""
File-backed key-value storage.

Drop-in replacement for a Cloudflare KV namespace when the gateway runs on a
plain server. The whole namespace lives in memory and is mirrored to a single
JSON file after every mutation.
"""
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from pydantic import BaseModel, ValidationError

from .base import KVGetType, KVKey, KVListResult, KVValue, decode_value, encode_value

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_PATH = "./.local-kv"


class KVEntry(BaseModel):
    """Stored payload plus optional absolute expiry in epoch milliseconds."""
    value: str
    expiry: Optional[int] = None

    def is_expired(self, now_ms: int) -> bool:
        return self.expiry is not None and self.expiry < now_ms


def _now_ms() -> int:
    return int(time.time() * 1000)


class LocalKVStorage:
    """
    Simple file-based key-value storage mimicking a Cloudflare KV namespace.

    Expired entries are evicted lazily: every ``get`` and ``list`` scans the
    mapping first and rewrites the file if anything was removed. Disk errors
    are logged and never raised; the in-memory mapping stays authoritative.

    Not safe for several processes sharing one storage path.
    """

    def __init__(
        self,
        storage_path: Union[str, Path] = DEFAULT_STORAGE_PATH,
        clock: Optional[Callable[[], int]] = None,
    ):
        """
        Args:
            storage_path: JSON file backing this namespace
            clock: Returns the current time in epoch milliseconds (wall clock by default)
        """
        self.storage_path = Path(storage_path)
        self._clock = clock or _now_ms
        self._data: Dict[str, KVEntry] = {}
        self._ensure_storage_directory()
        self._load_from_disk()

    def __len__(self) -> int:
        return len(self._data)

    def _ensure_storage_directory(self) -> None:
        try:
            self.storage_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create KV storage directory {self.storage_path.parent}: {e}")

    def _load_from_disk(self) -> None:
        if not self.storage_path.exists():
            logger.info(f"No KV storage file at {self.storage_path}, starting empty")
            return

        try:
            with open(self.storage_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            if not isinstance(raw, dict):
                raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
            self._data = {key: KVEntry.model_validate(item) for key, item in raw.items()}
            logger.info(f"Loaded {len(self._data)} KV entries from {self.storage_path}")
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Failed to load KV storage from disk: {e}")
            self._data = {}

    def _save_to_disk(self) -> None:
        snapshot = {key: entry.model_dump(exclude_none=True) for key, entry in self._data.items()}
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=self.storage_path.parent,
                prefix=f".{self.storage_path.name}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, indent=2)
            os.replace(tmp_path, self.storage_path)
            tmp_path = None
        except OSError as e:
            logger.error(f"Failed to save KV storage to disk: {e}")
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def _cleanup_expired(self) -> None:
        now = self._clock()
        expired = [key for key, entry in self._data.items() if entry.is_expired(now)]
        if not expired:
            return

        for key in expired:
            del self._data[key]
        logger.debug(f"Evicted {len(expired)} expired KV entries")
        self._save_to_disk()

    def _resolve_expiry(self, expiration_ttl: Optional[int], expiration: Optional[int]) -> Optional[int]:
        if expiration_ttl is not None and expiration_ttl > 0:
            return self._clock() + int(expiration_ttl * 1000)
        if expiration_ttl is not None and expiration_ttl < 0:
            logger.warning(f"Ignoring negative expiration_ttl {expiration_ttl}")
        if expiration is not None and expiration > 0:
            return int(expiration * 1000)
        return None

    async def get(self, key: str, type: KVGetType = "text") -> Any:
        """
        Read a value.

        Returns:
            The value in the requested representation, or None if the key is
            missing or expired.

        Raises:
            json.JSONDecodeError: If ``type`` is json and the value is not JSON
        """
        self._cleanup_expired()

        entry = self._data.get(key)
        if entry is None:
            return None
        return decode_value(entry.value.encode("utf-8"), type)

    async def put(
        self,
        key: str,
        value: KVValue,
        expiration_ttl: Optional[int] = None,
        expiration: Optional[int] = None,
    ) -> None:
        """
        Store a value, replacing any previous one.

        Args:
            key: Key to write
            value: String payload, or UTF-8 bytes
            expiration_ttl: Seconds until expiry; ignored unless positive
            expiration: Absolute expiry in epoch seconds (ignored when a positive TTL is given)
        """
        self._data[key] = KVEntry(
            value=encode_value(value),
            expiry=self._resolve_expiry(expiration_ttl, expiration),
        )
        self._save_to_disk()

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)
        self._save_to_disk()

    async def list(self, prefix: Optional[str] = None) -> KVListResult:
        self._cleanup_expired()

        keys = [
            KVKey(name=key, expiration=entry.expiry // 1000 if entry.expiry is not None else None)
            for key, entry in self._data.items()
            if not prefix or key.startswith(prefix)
        ]
        return KVListResult(keys=keys, list_complete=True)
