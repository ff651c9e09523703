"""
LLM 工厂模块

为工具路由链创建 Chat Model。所有提供商都走 OpenAI 兼容接口，
因此统一使用 langchain-openai 的 ChatOpenAI，只有 Base URL 与模型名不同。

使用示例:
    from multitool.core import LLMFactory, load_llm_config

    llm = LLMFactory.create_llm(load_llm_config())
    llm_with_tools = llm.bind_tools(registry.as_openai_tools())
"""

import logging
from typing import Dict

from langchain_core.language_models.chat_models import BaseChatModel

from multitool.core.llm_config import LLMConfig

logger = logging.getLogger(__name__)


class LLMFactory:
    """
    LLM 工厂类

    Example:
        >>> llm = LLMFactory.create_llm(LLMConfig(api_key="sk-xxx"))
        >>> llm.invoke("Hello!")
    """

    # LLM 实例缓存
    _llm_cache: Dict[str, BaseChatModel] = {}

    @classmethod
    def create_llm(cls, config: LLMConfig) -> BaseChatModel:
        """
        根据配置创建 LLM 实例

        Args:
            config: LLM 配置

        Returns:
            BaseChatModel: ChatOpenAI 实例
        """
        from langchain_openai import ChatOpenAI

        logger.info(f"创建 LLM: provider={config.provider.value}, model={config.model_name}")

        return ChatOpenAI(
            model=config.model_name,
            api_key=config.get_api_key_value(),
            base_url=config.resolved_base_url(),
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout,
        )

    @classmethod
    def create_llm_cached(cls, config: LLMConfig) -> BaseChatModel:
        """
        创建或获取缓存的 LLM 实例

        相同提供商、模型、Base URL 与温度返回同一实例；缓存键不含 API Key。
        """
        cache_key = (
            f"{config.provider.value}:{config.model_name}:"
            f"{config.resolved_base_url()}:{config.temperature}"
        )

        if cache_key not in cls._llm_cache:
            cls._llm_cache[cache_key] = cls.create_llm(config)

        return cls._llm_cache[cache_key]

    @classmethod
    def clear_cache(cls) -> None:
        """清除所有缓存的 LLM 实例"""
        cls._llm_cache.clear()
        logger.info("LLM 缓存已清除")


__all__ = [
    "LLMFactory",
]
