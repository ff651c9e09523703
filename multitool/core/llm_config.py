"""
LLM 配置模型定义

使用 Pydantic v2 定义创建路由链 Chat Model 所需的配置。

使用示例:
    from multitool.core.llm_config import LLMConfig

    config = LLMConfig(provider="deepseek", model_name="deepseek-chat", api_key="sk-xxx")
"""

from typing import Optional

from pydantic import BaseModel, Field, SecretStr, field_validator

from multitool.core.llm_providers import LLM_PROVIDER_INFO, LLMProvider


class LLMConfig(BaseModel):
    """
    LLM 配置模型

    Attributes:
        provider: LLM 提供商
        model_name: 模型名称
        api_key: API 密钥
        base_url: API 基础 URL（留空使用提供商默认值）
        temperature: 温度参数；工具路由场景默认 0
        max_tokens: 最大输出 token 数
        timeout: 请求超时时间（秒）
    """

    provider: LLMProvider = Field(
        default=LLMProvider.OPENAI,
        description="LLM 提供商",
    )
    model_name: str = Field(
        default="gpt-4o-mini",
        description="模型名称",
    )
    api_key: Optional[SecretStr] = Field(
        default=None,
        description="API 密钥",
    )
    base_url: Optional[str] = Field(
        default=None,
        description="API 基础 URL（留空使用提供商默认值）",
    )
    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=2.0,
        description="温度参数（0-2）",
    )
    max_tokens: Optional[int] = Field(
        default=None,
        ge=1,
        description="最大输出 token 数",
    )
    timeout: Optional[float] = Field(
        default=60.0,
        ge=1.0,
        description="请求超时时间（秒）",
    )

    @field_validator("provider", mode="before")
    @classmethod
    def validate_provider(cls, v):
        """验证并转换 provider"""
        if isinstance(v, str):
            return LLMProvider.from_string(v)
        return v

    def get_api_key_value(self) -> Optional[str]:
        """获取 API Key 的明文值，未设置时返回 None"""
        if self.api_key is None:
            return None
        return self.api_key.get_secret_value()

    def resolved_base_url(self) -> str:
        """实际使用的 Base URL"""
        return self.base_url or LLM_PROVIDER_INFO[self.provider]["default_base_url"]

    def model_dump_safe(self) -> dict:
        """
        安全导出配置（隐藏敏感信息）

        Returns:
            dict: 不包含 API Key 的配置字典
        """
        data = self.model_dump(exclude={"api_key"}, mode="json")
        data["has_api_key"] = self.api_key is not None
        return data


__all__ = [
    "LLMConfig",
]
