"""
Tests for the Cloudflare KV namespace against a mocked REST API.
"""
import json
from urllib.parse import unquote

import httpx
import pytest

from gemini_openai.kv import CloudflareKVNamespace, KVNamespace, KVNamespaceError


class FakeCloudflare:
    """In-memory stand-in for the Workers KV REST endpoints."""

    def __init__(self, page_size: int = 1000):
        self.values = {}
        self.requests = []
        self.page_size = page_size

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        assert request.headers["Authorization"] == "Bearer secret"

        path = request.url.path
        prefix = "/client/v4/accounts/acc/storage/kv/namespaces/ns"
        assert path.startswith(prefix)
        path = path[len(prefix):]

        if path.startswith("/values/"):
            raw_path = request.url.raw_path.decode().split("?", 1)[0]
            key = unquote(raw_path.split("/values/", 1)[1])
            if request.method == "GET":
                if key not in self.values:
                    return httpx.Response(404, json={"success": False})
                return httpx.Response(200, content=self.values[key])
            if request.method == "PUT":
                self.values[key] = request.content
                return httpx.Response(200, json={"success": True})
            if request.method == "DELETE":
                if key not in self.values:
                    return httpx.Response(404, json={"success": False})
                del self.values[key]
                return httpx.Response(200, json={"success": True})

        if path == "/keys":
            wanted = request.url.params.get("prefix", "")
            names = sorted(k for k in self.values if k.startswith(wanted))
            start = int(request.url.params.get("cursor", "0") or 0)
            page = names[start:start + self.page_size]
            next_start = start + self.page_size
            cursor = str(next_start) if next_start < len(names) else ""
            return httpx.Response(200, json={
                "success": True,
                "result": [{"name": name} for name in page],
                "result_info": {"count": len(page), "cursor": cursor},
            })

        return httpx.Response(400)


@pytest.fixture
def cloudflare():
    return FakeCloudflare()


@pytest.fixture
def namespace(cloudflare):
    return CloudflareKVNamespace(
        account_id="acc",
        namespace_id="ns",
        api_token="secret",
        transport=httpx.MockTransport(cloudflare.handler),
    )


async def test_put_then_get(namespace):
    await namespace.put("oauth:token:abc", json.dumps({"access_token": "t"}))
    assert await namespace.get("oauth:token:abc") == '{"access_token": "t"}'
    assert await namespace.get("oauth:token:abc", "json") == {"access_token": "t"}
    assert await namespace.get("oauth:token:abc", "arrayBuffer") == b'{"access_token": "t"}'


async def test_get_missing_returns_none(namespace):
    assert await namespace.get("nope") is None


async def test_keys_are_percent_encoded(namespace, cloudflare):
    await namespace.put("a/b c", "v")
    assert cloudflare.requests[-1].url.raw_path.decode().endswith("/values/a%2Fb%20c")
    assert await namespace.get("a/b c") == "v"


async def test_put_sends_ttl(namespace, cloudflare):
    await namespace.put("k", "v", expiration_ttl=120)
    assert cloudflare.requests[-1].url.params["expiration_ttl"] == "120"


async def test_put_without_positive_ttl_sends_no_expiry(namespace, cloudflare):
    await namespace.put("k", "v", expiration_ttl=0)
    assert "expiration_ttl" not in cloudflare.requests[-1].url.params
    assert "expiration" not in cloudflare.requests[-1].url.params


async def test_put_sends_absolute_expiration(namespace, cloudflare):
    await namespace.put("k", b"v", expiration=1900000000)
    request = cloudflare.requests[-1]
    assert request.url.params["expiration"] == "1900000000"
    assert request.content == b"v"


async def test_put_non_positive_ttl_falls_back_to_expiration(namespace, cloudflare):
    await namespace.put("k", "v", expiration_ttl=0, expiration=1750000010)
    params = cloudflare.requests[-1].url.params
    assert "expiration_ttl" not in params
    assert params["expiration"] == "1750000010"


async def test_delete_is_idempotent(namespace):
    await namespace.put("k", "v")
    await namespace.delete("k")
    await namespace.delete("k")
    assert await namespace.get("k") is None


async def test_list_follows_cursor(cloudflare):
    cloudflare.page_size = 2
    namespace = CloudflareKVNamespace(
        account_id="acc",
        namespace_id="ns",
        api_token="secret",
        transport=httpx.MockTransport(cloudflare.handler),
    )
    for i in range(5):
        await namespace.put(f"session:{i}", "v")
    await namespace.put("other", "v")

    result = await namespace.list("session:")
    assert [k.name for k in result.keys] == [f"session:{i}" for i in range(5)]
    assert result.list_complete is True


async def test_server_error_raises():
    namespace = CloudflareKVNamespace(
        account_id="acc",
        namespace_id="ns",
        api_token="secret",
        transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom")),
    )
    with pytest.raises(KVNamespaceError) as exc_info:
        await namespace.get("k")
    assert exc_info.value.status_code == 500


async def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    namespace = CloudflareKVNamespace(
        account_id="acc",
        namespace_id="ns",
        api_token="secret",
        transport=httpx.MockTransport(handler),
    )
    with pytest.raises(KVNamespaceError):
        await namespace.put("k", "v")


def test_satisfies_namespace_protocol(namespace):
    assert isinstance(namespace, KVNamespace)
