"""工具定义与注册表"""

from multitool.tools.tool_spec import ToolSpec
from multitool.tools.registry import ToolRegistry
from multitool.tools.math_tools import build_math_registry

__all__ = ["ToolSpec", "ToolRegistry", "build_math_registry"]
