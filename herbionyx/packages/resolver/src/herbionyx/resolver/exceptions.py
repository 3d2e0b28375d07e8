"""Resolver 异常体系"""


class ResolverError(Exception):
    """Resolver 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过重试或降级恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class GatewayUnreachableError(ResolverError):
    """IPFS 网关不可达（连接失败、超时、DNS 解析失败等）

    此异常触发 FallbackResolver 的降级逻辑。
    """

    def __init__(self, gateway_url: str, original_error: Exception) -> None:
        """
        Args:
            gateway_url: 尝试连接的网关地址
            original_error: 原始异常
        """
        super().__init__(
            f"IPFS 网关不可达: {gateway_url} -- {original_error}",
            recoverable=True,
        )
        self.gateway_url = gateway_url
        self.original_error = original_error


class InvalidMetadataError(ResolverError):
    """内容可以取到，但不是 JSON 对象

    CID 内容在所有网关上相同，不可通过降级恢复。
    """

    def __init__(self, content_hash: str, reason: str) -> None:
        super().__init__(f"元数据不合法: {content_hash} ({reason})", recoverable=False)
        self.content_hash = content_hash


class MetadataNotFoundError(ResolverError):
    """内容哈希在解析源中不存在"""

    def __init__(self, content_hash: str, source: str) -> None:
        super().__init__(
            f"元数据不存在: {content_hash} ({source})",
            recoverable=True,
        )
        self.content_hash = content_hash
        self.source = source
