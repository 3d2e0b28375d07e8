"""IpfsGatewayClient -- IPFS HTTP 网关读取封装

GET {gateway_url}/ipfs/{content_hash}，返回 JSON 元数据。
连接类错误抛 GatewayUnreachableError（触发 FallbackResolver 降级），
HTTP 错误抛 ResolverError，响应不是 JSON 对象抛 InvalidMetadataError。
"""

import time

import httpx
import structlog

from .exceptions import (
    GatewayUnreachableError,
    InvalidMetadataError,
    MetadataNotFoundError,
    ResolverError,
)
from .models import MetadataResult

log = structlog.get_logger()

# 健康检查超时（硬编码，应快速响应）
HEALTH_CHECK_TIMEOUT_S = 5

# 网关健康检查使用的公开 CID（空目录）
HEALTH_CHECK_CID = "bafybeiczsscdsbs7ffqz55asqdf3smv6klcw3gofszvwlyarci47bgf354"


class IpfsGatewayClient:
    """IPFS 网关客户端"""

    def __init__(
        self,
        gateway_url: str = "https://gateway.pinata.cloud",
        timeout_s: int = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """初始化网关客户端

        Args:
            gateway_url: 网关基础 URL
            timeout_s: 请求超时（秒）
            transport: 自定义 httpx transport（测试注入 MockTransport）
        """
        self._gateway_url = gateway_url.rstrip("/")
        self._timeout_s = timeout_s
        self._transport = transport

    @property
    def gateway_url(self) -> str:
        return self._gateway_url

    async def fetch(self, content_hash: str) -> MetadataResult:
        """按内容哈希读取元数据

        Args:
            content_hash: IPFS CID

        Returns:
            MetadataResult

        Raises:
            GatewayUnreachableError: 网关连接失败或超时
            MetadataNotFoundError: 网关返回 404
            InvalidMetadataError: 响应不是 JSON 对象
            ResolverError: 其他 HTTP 错误
        """
        url = f"{self._gateway_url}/ipfs/{content_hash}"
        start_time = time.monotonic()

        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self._timeout_s,
            ) as http_client:
                resp = await http_client.get(url)
        except httpx.TransportError as e:
            duration_ms = int((time.monotonic() - start_time) * 1000)
            log.error(
                "ipfs_fetch_failed",
                content_hash=content_hash,
                gateway_url=self._gateway_url,
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=duration_ms,
            )
            raise GatewayUnreachableError(self._gateway_url, e) from e

        duration_ms = int((time.monotonic() - start_time) * 1000)

        if resp.status_code == 404:
            raise MetadataNotFoundError(content_hash, self._gateway_url)
        if resp.status_code >= 400:
            raise ResolverError(
                f"IPFS 网关返回 {resp.status_code}: {content_hash}",
                recoverable=resp.status_code >= 500,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise InvalidMetadataError(content_hash, "不是合法 JSON") from e

        if not isinstance(data, dict):
            raise InvalidMetadataError(content_hash, f"JSON 顶层为 {type(data).__name__}")

        log.debug(
            "ipfs_fetch_completed",
            content_hash=content_hash,
            gateway_url=self._gateway_url,
            duration_ms=duration_ms,
        )

        return MetadataResult(
            content_hash=content_hash,
            raw=data,
            source=self._gateway_url,
            duration_ms=duration_ms,
        )

    async def health_check(self) -> bool:
        """检查网关可达性

        注意: 此方法不抛出异常，所有异常内部捕获并返回 False。
        """
        url = f"{self._gateway_url}/ipfs/{HEALTH_CHECK_CID}"
        try:
            async with httpx.AsyncClient(transport=self._transport) as http_client:
                resp = await http_client.head(url, timeout=HEALTH_CHECK_TIMEOUT_S)
                return resp.status_code < 500
        except Exception as e:
            log.debug("health_check_failed", url=url, error=str(e))
            return False
