"""
应用配置管理模块

使用 Pydantic Settings 实现类型安全的配置管理，支持从环境变量和 .env 文件读取配置。

使用示例:
    from multitool.config.settings import get_settings

    settings = get_settings()
    print(settings.log_level)
    print(settings.get_api_key("OPENAI_API_KEY"))
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    应用配置类

    所有配置项均可通过环境变量或 .env 文件设置。
    环境变量名称为大写形式（如 LOG_LEVEL、DEEPSEEK_API_KEY）。
    未设置的项为 None，由 llm.yaml / logger.yaml 中的值生效。

    Attributes:
        openai_api_key: OpenAI API 密钥
        deepseek_api_key: DeepSeek API 密钥
        dashscope_api_key: DashScope API 密钥
        default_llm_provider: 覆盖 llm.yaml default 段的提供商
        default_llm_model: 覆盖配置文件中的模型名
        log_level: 覆盖 logger.yaml 中所有日志器的级别
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # 忽略未定义的环境变量
    )

    # -------------------------------------------------------------------------
    # LLM 提供商配置
    # -------------------------------------------------------------------------
    openai_api_key: Optional[SecretStr] = Field(default=None, description="OpenAI API 密钥")
    openai_base_url: Optional[str] = Field(default=None, description="OpenAI API 地址")
    deepseek_api_key: Optional[SecretStr] = Field(default=None, description="DeepSeek API 密钥")
    deepseek_base_url: Optional[str] = Field(default=None, description="DeepSeek API 地址")
    dashscope_api_key: Optional[SecretStr] = Field(
        default=None,
        description="DashScope API 密钥（阿里通义千问）",
    )
    dashscope_base_url: Optional[str] = Field(default=None, description="DashScope API 地址")

    # -------------------------------------------------------------------------
    # 默认 LLM 配置
    # -------------------------------------------------------------------------
    default_llm_provider: Optional[str] = Field(
        default=None,
        description="默认使用的 LLM 提供商 (openai/deepseek/dashscope)",
    )
    default_llm_model: Optional[str] = Field(
        default=None,
        description="默认使用的 LLM 模型",
    )

    # -------------------------------------------------------------------------
    # 日志配置
    # -------------------------------------------------------------------------
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR"]] = Field(
        default=None,
        description="日志级别",
    )

    def get_api_key(self, api_key_env: str) -> Optional[SecretStr]:
        """按环境变量名（如 DEEPSEEK_API_KEY）取 API 密钥"""
        return getattr(self, api_key_env.lower(), None)

    def get_base_url(self, base_url_env: str) -> Optional[str]:
        """按环境变量名（如 DEEPSEEK_BASE_URL）取 API 地址"""
        return getattr(self, base_url_env.lower(), None)


@lru_cache
def get_settings() -> Settings:
    """
    获取应用配置单例

    使用 lru_cache 确保配置只加载一次。

    Returns:
        Settings: 应用配置实例
    """
    return Settings()


def reset_settings_cache() -> None:
    """
    重置配置缓存

    在配置变更后调用此方法清除缓存，使新配置生效。
    """
    get_settings.cache_clear()


__all__ = [
    "Settings",
    "get_settings",
    "reset_settings_cache",
]
