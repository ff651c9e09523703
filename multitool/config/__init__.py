"""配置模块：应用设置与工具执行配置"""

from multitool.config.settings import Settings, get_settings, reset_settings_cache
from multitool.config.tool_config import ToolConfig, get_tool_config, reload_tool_config

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings_cache",
    "ToolConfig",
    "get_tool_config",
    "reload_tool_config",
]
