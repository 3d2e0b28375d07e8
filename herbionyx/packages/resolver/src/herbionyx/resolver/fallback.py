"""FallbackResolver -- 主网关失败时切换备用解析源

每次调用都先问主网关（lazy probe），不记录"已降级"状态；主网关恢复后自动回到主路径。
内容寻址保证同一 CID 在任何网关上字节相同，所以元数据本身不合法
（InvalidMetadataError）时换网关没有意义，直接抛出。
"""

import structlog

from .exceptions import InvalidMetadataError, ResolverError
from .models import MetadataResult

log = structlog.get_logger()


class FallbackResolver:
    """主网关 -> 备用解析源（备用网关或 StaticMetadataAdapter）"""

    def __init__(self, primary, fallback=None) -> None:
        self._primary = primary
        self._fallback = fallback

    @property
    def primary(self):
        return self._primary

    async def fetch_with_fallback(self, content_hash: str) -> MetadataResult:
        """按内容哈希读取元数据

        Returns:
            主源成功时 is_fallback=False；
            备用源成功时 is_fallback=True，fallback_reason 记录主源错误

        Raises:
            InvalidMetadataError: 元数据内容不合法（不尝试备用源）
            ResolverError: 主源失败且没有备用源，或两者均失败
        """
        try:
            return await self._primary.fetch(content_hash)
        except InvalidMetadataError:
            raise
        except Exception as primary_error:
            log.warning(
                "primary_resolver_failed",
                content_hash=content_hash,
                error=str(primary_error),
                error_type=type(primary_error).__name__,
            )
            if self._fallback is None:
                raise ResolverError(
                    f"元数据解析失败且未配置备用源: {primary_error}",
                    recoverable=False,
                ) from primary_error
            return await self._fetch_fallback(content_hash, primary_error)

    async def _fetch_fallback(
        self, content_hash: str, primary_error: Exception
    ) -> MetadataResult:
        try:
            result = await self._fallback.fetch(content_hash)
        except Exception as fallback_error:
            log.error(
                "all_resolvers_failed",
                content_hash=content_hash,
                primary_error=str(primary_error),
                fallback_error=str(fallback_error),
            )
            raise ResolverError(
                f"主源与备用源均失败 ({content_hash}): "
                f"primary={primary_error}; fallback={fallback_error}",
                recoverable=False,
            ) from fallback_error

        log.info(
            "resolver_fallback_used",
            content_hash=content_hash,
            source=result.source,
        )
        return result.model_copy(
            update={
                "is_fallback": True,
                "fallback_reason": f"Primary 失败: {primary_error}",
            }
        )
