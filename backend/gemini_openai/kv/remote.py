"""
Cloudflare Workers KV namespace accessed through the Cloudflare REST API.

Used when the gateway should share its token cache with a deployed worker
instead of keeping it in a local file.
"""
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from .base import KVGetType, KVKey, KVListResult, KVNamespaceError, KVValue, decode_value, encode_value

logger = logging.getLogger(__name__)

CLOUDFLARE_API_BASE_URL = "https://api.cloudflare.com/client/v4"
DEFAULT_TIMEOUT_SECONDS = 10.0


class CloudflareKVNamespace:
    """
    Remote KV namespace with the same contract as ``LocalKVStorage``.

    Unlike the local store, failures are not absorbed: any unexpected API
    response or transport error raises ``KVNamespaceError``.
    """

    def __init__(
        self,
        account_id: str,
        namespace_id: str,
        api_token: str,
        base_url: str = CLOUDFLARE_API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.account_id = account_id
        self.namespace_id = namespace_id
        self._api_token = api_token
        self._base_url = f"{base_url.rstrip('/')}/accounts/{account_id}/storage/kv/namespaces/{namespace_id}"
        self._timeout = timeout
        self._transport = transport

    def _get_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._api_token}"}

    def _value_url(self, key: str) -> str:
        return f"{self._base_url}/values/{quote(key, safe='')}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=self._get_headers(),
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"[CF_KV] {method} {url} failed: {e}")
            raise KVNamespaceError(f"Cloudflare KV request failed: {e}") from e

    @staticmethod
    def _raise_for_status(response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        logger.error(f"[CF_KV] {action} failed with status {response.status_code}: {response.text[:200]}")
        raise KVNamespaceError(
            f"Cloudflare KV {action} failed with status {response.status_code}",
            status_code=response.status_code,
        )

    async def get(self, key: str, type: KVGetType = "text") -> Any:
        response = await self._request("GET", self._value_url(key))
        if response.status_code == 404:
            return None
        self._raise_for_status(response, f"get '{key}'")
        return decode_value(response.content, type)

    async def put(
        self,
        key: str,
        value: KVValue,
        expiration_ttl: Optional[int] = None,
        expiration: Optional[int] = None,
    ) -> None:
        params: Dict[str, int] = {}
        if expiration_ttl is not None and expiration_ttl > 0:
            params["expiration_ttl"] = int(expiration_ttl)
        elif expiration is not None and expiration > 0:
            params["expiration"] = int(expiration)

        response = await self._request(
            "PUT",
            self._value_url(key),
            params=params,
            content=encode_value(value).encode("utf-8"),
            headers={"Content-Type": "text/plain; charset=utf-8"},
        )
        self._raise_for_status(response, f"put '{key}'")

    async def delete(self, key: str) -> None:
        response = await self._request("DELETE", self._value_url(key))
        if response.status_code == 404:
            return
        self._raise_for_status(response, f"delete '{key}'")

    async def list(self, prefix: Optional[str] = None) -> KVListResult:
        """Return every key matching ``prefix``, following pagination cursors."""
        keys: List[KVKey] = []
        cursor: Optional[str] = None

        while True:
            params: Dict[str, str] = {}
            if prefix:
                params["prefix"] = prefix
            if cursor:
                params["cursor"] = cursor

            response = await self._request("GET", f"{self._base_url}/keys", params=params)
            self._raise_for_status(response, "list")

            data = response.json()
            if not data.get("success", True):
                raise KVNamespaceError(f"Cloudflare KV list returned errors: {data.get('errors')}")

            keys.extend(
                KVKey(name=item["name"], expiration=item.get("expiration"))
                for item in data.get("result", [])
            )
            cursor = (data.get("result_info") or {}).get("cursor")
            if not cursor:
                break

        return KVListResult(keys=keys, list_complete=True)
