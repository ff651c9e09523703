"""
日志配置管理模块

读取和解析 config/logger.yaml 配置文件，提供配置访问接口，
并按配置初始化 multitool 包的日志处理器。

使用示例:
    from multitool.core.logger_config import get_logger_config, setup_logging

    config = get_logger_config("tool")
    print(config["enable_file"])

    setup_logging()
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

LOGGER_TYPES = ("router", "dispatcher", "tool")

# logger_type -> 对应的 logging 命名空间
_LOGGER_NAMESPACES = {
    "router": "multitool.agents",
    "dispatcher": "multitool.core",
    "tool": "multitool.core.tool_context",
}

_CONSOLE_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class LoggerConfig:
    """
    日志配置管理器

    单例模式，负责读取和解析 logger.yaml 配置文件。
    """

    _instance: Optional["LoggerConfig"] = None
    _config: Dict[str, Any] = {}
    _config_path: Path = Path(__file__).parent.parent / "config" / "logger.yaml"

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._load_config()
        return cls._instance

    def _load_config(self) -> None:
        """加载配置文件，失败时使用默认配置"""
        if not self._config_path.exists():
            logger.warning(f"日志配置文件不存在: {self._config_path}，使用默认配置")
            self._config = self._get_default_config()
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                self._config = yaml.safe_load(f) or {}
            logger.debug(f"成功加载日志配置: {self._config_path}")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"加载日志配置失败: {e}，使用默认配置", exc_info=True)
            self._config = self._get_default_config()

    def _get_default_config(self) -> Dict[str, Any]:
        return {
            "global": {
                "log_dir": "Logs",
                "default_level": "INFO",
                "enable_console": True,
                "enable_file": False,
            },
            "router": {"level": "INFO"},
            "dispatcher": {"level": "INFO"},
            "tool": {
                "level": "DEBUG",
                "log_dir": "Logs/tool_logs",
                "enable_console": False,
                "enable_file": False,
            },
        }

    def reload_config(self) -> None:
        """重新加载配置并清除缓存"""
        self._load_config()
        LoggerConfig.get_logger_config.cache_clear()
        LoggerConfig.get_global_config.cache_clear()
        logger.info("日志配置已重新加载")

    @classmethod
    @lru_cache(maxsize=4)
    def get_logger_config(cls, logger_type: str) -> Dict[str, Any]:
        """
        获取指定类型的日志器配置（类型配置优先，全局配置兜底）

        Args:
            logger_type: 日志器类型 ("router" | "dispatcher" | "tool")

        Raises:
            ValueError: 如果 logger_type 无效
        """
        instance = cls()

        if logger_type not in LOGGER_TYPES:
            raise ValueError(f"无效的日志器类型: {logger_type}")

        logger_config = instance._config.get(logger_type) or {}
        global_config = instance.get_global_config()

        return {
            "enabled": logger_config.get("enabled", True),
            "level": logger_config.get("level", global_config.get("default_level", "INFO")),
            "log_dir": logger_config.get("log_dir", global_config.get("log_dir", "Logs")),
            "enable_console": logger_config.get(
                "enable_console", global_config.get("enable_console", True)
            ),
            "enable_file": logger_config.get("enable_file", global_config.get("enable_file", False)),
        }

    @classmethod
    @lru_cache(maxsize=1)
    def get_global_config(cls) -> Dict[str, Any]:
        """获取全局配置"""
        instance = cls()
        return instance._config.get("global") or {}


def get_logger_config(logger_type: str) -> Dict[str, Any]:
    """便捷函数：获取日志器配置"""
    return LoggerConfig.get_logger_config(logger_type)


def get_global_config() -> Dict[str, Any]:
    """便捷函数：获取全局配置"""
    return LoggerConfig.get_global_config()


def setup_logging(level: Optional[str] = None) -> None:
    """
    按 logger.yaml 初始化各命名空间的日志级别与控制台输出

    Args:
        level: 覆盖所有日志器的级别（例如来自 Settings.log_level），None 时使用 logger.yaml 中各自的级别
    """
    for logger_type in LOGGER_TYPES:
        config = get_logger_config(logger_type)
        target = logging.getLogger(_LOGGER_NAMESPACES[logger_type])
        if not config["enabled"]:
            target.disabled = True
            continue
        target.setLevel(level or config["level"])
        if config["enable_console"] and not any(
            isinstance(h, logging.StreamHandler) for h in target.handlers
        ):
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
            target.addHandler(handler)


__all__ = [
    "LOGGER_TYPES",
    "LoggerConfig",
    "get_logger_config",
    "get_global_config",
    "setup_logging",
]
