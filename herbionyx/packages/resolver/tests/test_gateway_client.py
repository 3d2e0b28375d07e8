"""IpfsGatewayClient 单元测试

httpx.MockTransport 注入网关响应，验证 fetch() 返回 MetadataResult、
404 / 5xx / 非 JSON 的错误映射、连接失败抛 GatewayUnreachableError、
health_check() 返回 bool 且不抛异常。
"""

import httpx
import pytest
from herbionyx.core.models import CollectionMetadata
from herbionyx.resolver.exceptions import (
    GatewayUnreachableError,
    InvalidMetadataError,
    MetadataNotFoundError,
    ResolverError,
)
from herbionyx.resolver.gateway_client import HEALTH_CHECK_CID, IpfsGatewayClient
from herbionyx.resolver.models import MetadataResult


def _client(handler) -> IpfsGatewayClient:
    return IpfsGatewayClient(
        gateway_url="https://gateway.test/",
        timeout_s=5,
        transport=httpx.MockTransport(handler),
    )


class TestFetch:
    """fetch() 行为"""

    async def test_fetch_returns_result(self, collection_document):
        """200 + JSON 对象 -> MetadataResult"""
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json=collection_document)

        result = await _client(handler).fetch("QmHash1")

        assert isinstance(result, MetadataResult)
        assert seen == ["https://gateway.test/ipfs/QmHash1"]
        assert result.raw == collection_document
        assert result.source == "https://gateway.test"
        assert result.is_fallback is False
        assert isinstance(result.metadata, CollectionMetadata)

    async def test_not_found(self):
        client = _client(lambda request: httpx.Response(404))
        with pytest.raises(MetadataNotFoundError):
            await client.fetch("QmMissing")

    async def test_server_error_is_recoverable(self):
        client = _client(lambda request: httpx.Response(502))
        with pytest.raises(ResolverError) as exc_info:
            await client.fetch("QmHash")
        assert exc_info.value.recoverable is True

    async def test_client_error_not_recoverable(self):
        client = _client(lambda request: httpx.Response(403))
        with pytest.raises(ResolverError) as exc_info:
            await client.fetch("QmHash")
        assert exc_info.value.recoverable is False

    async def test_non_json_body(self):
        client = _client(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(InvalidMetadataError):
            await client.fetch("QmHash")

    async def test_json_array_rejected(self):
        client = _client(lambda request: httpx.Response(200, json=[1, 2]))
        with pytest.raises(InvalidMetadataError) as exc_info:
            await client.fetch("QmHash")
        assert exc_info.value.recoverable is False

    async def test_connection_error(self):
        """连接失败 -> GatewayUnreachableError"""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(GatewayUnreachableError) as exc_info:
            await _client(handler).fetch("QmHash")
        assert exc_info.value.gateway_url == "https://gateway.test"
        assert exc_info.value.recoverable is True

    async def test_unknown_shape_keeps_raw(self):
        client = _client(lambda request: httpx.Response(200, json={"foo": "bar"}))
        result = await client.fetch("QmHash")
        assert result.raw == {"foo": "bar"}
        assert result.metadata is None


class TestHealthCheck:
    """health_check() 行为"""

    async def test_healthy(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        assert await _client(handler).health_check() is True
        assert seen[0].method == "HEAD"
        assert seen[0].url.path == f"/ipfs/{HEALTH_CHECK_CID}"

    async def test_not_found_still_reachable(self):
        assert await _client(lambda request: httpx.Response(404)).health_check() is True

    async def test_server_error_unhealthy(self):
        assert await _client(lambda request: httpx.Response(503)).health_check() is False

    async def test_connection_error_returns_false(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        assert await _client(handler).health_check() is False
