"""
工具配置管理模块

从 tool.yaml 读取工具的超时时间与分发并发度配置。
超时查找优先级：
1. 工具级别配置（tools.<tool_name>.timeout）
2. 全局默认配置（global_defaults.timeout）
3. 硬编码默认值（timeout=60.0）

特性：
- 配置文件缺失或解析失败时回退到硬编码默认值
- 支持热重载配置
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

# 硬编码默认值（最后的兜底）
HARDCODED_TIMEOUT = 60.0
HARDCODED_MAX_CONCURRENCY = None

# 配置文件路径
CONFIG_FILE = Path(__file__).parent / "tool.yaml"


def _default_config() -> Dict[str, Any]:
    return {
        "global_defaults": {"timeout": HARDCODED_TIMEOUT},
        "dispatcher": {"max_concurrency": HARDCODED_MAX_CONCURRENCY},
        "tools": {},
    }


class ToolConfig:
    """工具配置管理类"""

    def __init__(self, config_path: Optional[Path] = None):
        """
        初始化工具配置

        Args:
            config_path: 配置文件路径，如果为 None 则使用默认路径
        """
        self.config_path = Path(config_path) if config_path else CONFIG_FILE
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """从 YAML 文件加载配置"""
        if not self.config_path.exists():
            logger.warning(f"工具配置文件不存在: {self.config_path}，使用硬编码默认值")
            self._config = _default_config()
            return

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                self._config = yaml.safe_load(f) or {}
            logger.info(f"成功加载工具配置: {self.config_path}")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"加载工具配置失败: {e}，使用硬编码默认值", exc_info=True)
            self._config = _default_config()

    def get_tool_timeout(self, tool_name: str) -> Optional[float]:
        """
        获取工具的超时时间

        Args:
            tool_name: 工具名称

        Returns:
            Optional[float]: 超时时间（秒），配置为 null 表示不限制
        """
        tool_config = (self._config.get("tools") or {}).get(tool_name) or {}
        if "timeout" in tool_config:
            return _as_timeout(tool_config["timeout"])

        global_defaults = self._config.get("global_defaults") or {}
        if "timeout" in global_defaults:
            return _as_timeout(global_defaults["timeout"])

        return HARDCODED_TIMEOUT

    def get_max_concurrency(self) -> Optional[int]:
        """
        获取批量分发的最大并发数

        Returns:
            Optional[int]: 最大并发数，None 表示不限制
        """
        value = (self._config.get("dispatcher") or {}).get("max_concurrency")
        if value is None:
            return None
        value = int(value)
        if value < 1:
            raise ValueError(f"dispatcher.max_concurrency 必须为正整数: {value}")
        return value

    def reload(self) -> None:
        """重新加载配置文件（支持热更新）"""
        logger.info("重新加载工具配置...")
        self._load_config()


def _as_timeout(value: Any) -> Optional[float]:
    return None if value is None else float(value)


# 全局单例
_tool_config_instance: Optional[ToolConfig] = None


def get_tool_config() -> ToolConfig:
    """
    获取全局工具配置实例（单例模式）

    Returns:
        ToolConfig: 工具配置实例
    """
    global _tool_config_instance
    if _tool_config_instance is None:
        _tool_config_instance = ToolConfig()
    return _tool_config_instance


def reload_tool_config() -> None:
    """重新加载工具配置（用于热更新）"""
    get_tool_config().reload()


__all__ = [
    "ToolConfig",
    "get_tool_config",
    "reload_tool_config",
    "HARDCODED_TIMEOUT",
]
