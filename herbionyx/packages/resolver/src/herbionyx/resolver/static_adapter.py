"""StaticMetadataAdapter -- 静态元数据解析（mock 模式）

内存中的 content_hash -> 元数据映射，接口与 IpfsGatewayClient 一致。
演示环境与测试使用，不访问网络。
"""

import copy
from typing import Any

from .exceptions import MetadataNotFoundError
from .models import MetadataResult

STATIC_SOURCE = "static"


class StaticMetadataAdapter:
    """静态元数据解析源"""

    def __init__(self, documents: dict[str, dict[str, Any]] | None = None) -> None:
        self._documents: dict[str, dict[str, Any]] = dict(documents or {})

    def put(self, content_hash: str, document: dict[str, Any]) -> None:
        """登记一份元数据"""
        self._documents[content_hash] = document

    async def fetch(self, content_hash: str) -> MetadataResult:
        """返回登记的元数据

        Raises:
            MetadataNotFoundError: 哈希未登记
        """
        document = self._documents.get(content_hash)
        if document is None:
            raise MetadataNotFoundError(content_hash, STATIC_SOURCE)

        return MetadataResult(
            content_hash=content_hash,
            raw=copy.deepcopy(document),
            source=STATIC_SOURCE,
            duration_ms=0,
        )

    async def health_check(self) -> bool:
        return True
