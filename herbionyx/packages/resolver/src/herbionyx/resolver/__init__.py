"""HerbionYX Resolver -- 链下元数据与参与者解析

溯源引擎之外的外部协作方：IPFS 网关元数据解析、静态 mock 解析、
网关降级管理、参与者目录。
"""

# 配置
from .config import ResolverConfig, load_resolver_config
from .directory import ParticipantDirectory

# 异常
from .exceptions import (
    GatewayUnreachableError,
    InvalidMetadataError,
    MetadataNotFoundError,
    ResolverError,
)
from .fallback import FallbackResolver

# 核心组件
from .gateway_client import IpfsGatewayClient

# 数据模型
from .models import MetadataResult, ParticipantProfile
from .static_adapter import StaticMetadataAdapter

__all__ = [
    "MetadataResult",
    "ParticipantProfile",
    "IpfsGatewayClient",
    "StaticMetadataAdapter",
    "FallbackResolver",
    "ParticipantDirectory",
    "ResolverConfig",
    "load_resolver_config",
    "ResolverError",
    "GatewayUnreachableError",
    "InvalidMetadataError",
    "MetadataNotFoundError",
]
