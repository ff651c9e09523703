"""
配置加载器模块

从 YAML 配置文件和环境变量加载 LLM 配置。

设计约束:
    - 基础配置（模型、温度、超时）来自 llm.yaml
    - 敏感信息（API Key）与 Base URL 只从 Settings（环境变量 / .env）读取

使用示例:
    from multitool.core.config_loader import load_llm_config

    config = load_llm_config()                     # 使用 default 段
    config = load_llm_config(provider="deepseek")  # 使用指定提供商段
"""

from pathlib import Path
from typing import Optional

import yaml

from multitool.config.settings import Settings, get_settings
from multitool.core.llm_config import LLMConfig
from multitool.core.llm_providers import LLM_PROVIDER_INFO, LLMProvider

# 配置文件路径
CONFIG_DIR = Path(__file__).parent.parent / "config"
LLM_CONFIG_FILE = CONFIG_DIR / "llm.yaml"


def load_yaml_config(config_path: Optional[Path] = None) -> dict:
    """
    从 YAML 文件加载配置

    Raises:
        FileNotFoundError: 如果配置文件不存在
    """
    path = Path(config_path) if config_path else LLM_CONFIG_FILE
    if not path.exists():
        raise FileNotFoundError(f"配置文件不存在: {path}")

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_llm_config(
    provider: Optional[str] = None,
    config_path: Optional[Path] = None,
    settings: Optional[Settings] = None,
) -> LLMConfig:
    """
    加载 LLM 配置

    提供商优先级: 参数 provider -> DEFAULT_LLM_PROVIDER -> llm.yaml default 段。
    模型名优先级: DEFAULT_LLM_MODEL -> 配置段 model_name -> 提供商首个模型。

    Args:
        provider: 提供商名称（openai/deepseek/dashscope），默认使用配置文件中的 default 段
        config_path: 配置文件路径，默认 config/llm.yaml
        settings: 应用配置，默认 get_settings()

    Returns:
        LLMConfig: LLM 配置对象

    Raises:
        ValueError: 如果提供商不支持或配置文件中缺少该提供商
    """
    settings = settings or get_settings()
    yaml_config = load_yaml_config(config_path)

    provider = provider or settings.default_llm_provider
    if provider is None:
        config_data = yaml_config.get("default", {})
        provider = config_data.get("provider", LLMProvider.OPENAI.value)
    else:
        config_data = yaml_config.get(provider, {})
        if not config_data:
            raise ValueError(f"配置文件中未找到提供商 '{provider}' 的配置")

    llm_provider = LLMProvider.from_string(provider)
    info = LLM_PROVIDER_INFO[llm_provider]

    api_key = settings.get_api_key(info["api_key_env"])

    return LLMConfig(
        provider=llm_provider,
        model_name=settings.default_llm_model or config_data.get("model_name", info["models"][0]),
        api_key=api_key if api_key and api_key.get_secret_value() else None,
        base_url=settings.get_base_url(info["base_url_env"]) or None,
        temperature=config_data.get("temperature", 0.0),
        max_tokens=config_data.get("max_tokens"),
        timeout=config_data.get("timeout", 60.0),
    )


__all__ = [
    "load_llm_config",
    "load_yaml_config",
]
