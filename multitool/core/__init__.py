"""
Core 模块

提供 LLM 工厂、配置管理与工具层错误类型。
分发器与调用上下文位于 multitool.core.dispatcher / multitool.core.tool_context，需显式导入。

主要组件:
    - LLMFactory: LLM 实例创建工厂
    - LLMConfig: LLM 配置模型
    - LLMProvider: LLM 提供商枚举
    - load_llm_config: 配置加载函数
    - ToolError 及其子类: 工具层异常

使用示例:
    from multitool.core import LLMFactory, load_llm_config

    config = load_llm_config()
    llm = LLMFactory.create_llm(config)
"""

from multitool.core.llm_factory import LLMFactory
from multitool.core.llm_config import LLMConfig
from multitool.core.llm_providers import LLMProvider, LLM_PROVIDER_INFO
from multitool.core.config_loader import load_llm_config, load_yaml_config
from multitool.core.tool_errors import (
    DuplicateToolError,
    ToolArgumentsError,
    ToolError,
    ToolTimeoutError,
    UnknownToolError,
)

__all__ = [
    "LLMFactory",
    "LLMConfig",
    "LLMProvider",
    "LLM_PROVIDER_INFO",
    "load_llm_config",
    "load_yaml_config",
    "ToolError",
    "UnknownToolError",
    "DuplicateToolError",
    "ToolArgumentsError",
    "ToolTimeoutError",
]
