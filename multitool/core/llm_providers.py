"""
LLM 提供商枚举定义

定义路由链可使用的 LLM 提供商及其元数据（默认 Base URL、环境变量名）。
所有提供商均通过 OpenAI 兼容接口调用，支持工具调用（tool calling）。

使用示例:
    from multitool.core.llm_providers import LLMProvider

    provider = LLMProvider.from_string("DeepSeek")
    print(provider.value)  # "deepseek"
"""

from enum import Enum
from typing import Any, Dict


class LLMProvider(str, Enum):
    """
    支持的 LLM 提供商

    Attributes:
        OPENAI: OpenAI (gpt-4o, gpt-4o-mini)
        DEEPSEEK: DeepSeek (deepseek-chat)
        DASHSCOPE: 阿里通义千问 (qwen-max, qwen-plus)
    """

    OPENAI = "openai"
    DEEPSEEK = "deepseek"
    DASHSCOPE = "dashscope"

    @classmethod
    def from_string(cls, value: str) -> "LLMProvider":
        """
        从字符串创建枚举值（不区分大小写）

        Raises:
            ValueError: 如果提供商不支持
        """
        value_lower = value.strip().lower()
        for provider in cls:
            if provider.value == value_lower:
                return provider
        raise ValueError(f"不支持的 LLM 提供商: {value}")


# 提供商元数据
LLM_PROVIDER_INFO: Dict[LLMProvider, Dict[str, Any]] = {
    LLMProvider.OPENAI: {
        "name": "OpenAI",
        "models": ["gpt-4o", "gpt-4o-mini"],
        "default_base_url": "https://api.openai.com/v1",
        "api_key_env": "OPENAI_API_KEY",
        "base_url_env": "OPENAI_BASE_URL",
    },
    LLMProvider.DEEPSEEK: {
        "name": "DeepSeek",
        "models": ["deepseek-chat"],
        "default_base_url": "https://api.deepseek.com",
        "api_key_env": "DEEPSEEK_API_KEY",
        "base_url_env": "DEEPSEEK_BASE_URL",
    },
    LLMProvider.DASHSCOPE: {
        "name": "DashScope (阿里通义千问)",
        "models": ["qwen-max", "qwen-plus"],
        "default_base_url": "https://dashscope.aliyuncs.com/compatible-mode/v1",
        "api_key_env": "DASHSCOPE_API_KEY",
        "base_url_env": "DASHSCOPE_BASE_URL",
    },
}


__all__ = [
    "LLMProvider",
    "LLM_PROVIDER_INFO",
]
