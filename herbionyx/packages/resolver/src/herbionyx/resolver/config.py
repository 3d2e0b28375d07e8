"""ResolverConfig -- 元数据解析配置加载

从环境变量加载配置，不硬编码网关凭据。
"""

import os
from typing import Literal

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()

_DEFAULT_TIMEOUT_S = 10


class ResolverConfig(BaseModel):
    """Resolver 包配置 -- 从环境变量加载

    环境变量:
        HERBIONYX_IPFS_GATEWAY_URL: 主网关（默认 https://gateway.pinata.cloud）
        HERBIONYX_IPFS_FALLBACK_URL: 降级网关（默认 https://ipfs.io，空串表示不降级）
        HERBIONYX_RESOLVER_MODE: 解析模式（gateway/static）
        HERBIONYX_RESOLVER_TIMEOUT_S: 请求超时（秒，默认 10）
        HERBIONYX_PARTICIPANTS_FILE: 参与者目录 JSON 文件
    """

    gateway_url: str = Field(
        default="https://gateway.pinata.cloud",
        description="主 IPFS 网关基础 URL",
    )
    fallback_gateway_url: str = Field(
        default="https://ipfs.io",
        description="降级 IPFS 网关基础 URL，空串表示不降级",
    )
    resolver_mode: Literal["gateway", "static"] = Field(
        default="gateway",
        description="解析模式：gateway / static",
    )
    timeout_s: int = Field(
        default=_DEFAULT_TIMEOUT_S,
        ge=1,
        description="网关请求超时（秒）",
    )
    participants_file: str = Field(
        default="",
        description="参与者目录 JSON 文件路径，空串表示空目录",
    )


def load_resolver_config() -> ResolverConfig:
    """从环境变量加载 Resolver 配置

    Returns:
        ResolverConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("HERBIONYX_IPFS_GATEWAY_URL"):
        kwargs["gateway_url"] = val

    # 允许显式设为空串以关闭降级
    if (val := os.environ.get("HERBIONYX_IPFS_FALLBACK_URL")) is not None:
        kwargs["fallback_gateway_url"] = val

    if val := os.environ.get("HERBIONYX_RESOLVER_MODE"):
        kwargs["resolver_mode"] = val

    if val := os.environ.get("HERBIONYX_RESOLVER_TIMEOUT_S"):
        try:
            kwargs["timeout_s"] = int(val)
        except ValueError:
            log.warning(
                "invalid_timeout_config",
                env_var="HERBIONYX_RESOLVER_TIMEOUT_S",
                value=val,
                fallback=_DEFAULT_TIMEOUT_S,
            )

    if val := os.environ.get("HERBIONYX_PARTICIPANTS_FILE"):
        kwargs["participants_file"] = val

    return ResolverConfig(**kwargs)
