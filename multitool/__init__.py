"""
multitool

把多个工具绑定到 Chat Model，并把模型产生的工具调用分发到对应的处理函数。

使用示例:
    from multitool import ToolDispatcher, build_math_registry

    dispatcher = ToolDispatcher(build_math_registry())
    dispatcher.dispatch({"type": "add", "args": {"firstInt": 1, "secondInt": 2}}).output  # "3"
"""

from multitool.core.tool_errors import (
    DuplicateToolError,
    ToolArgumentsError,
    ToolError,
    ToolTimeoutError,
    UnknownToolError,
)
from multitool.tools import ToolRegistry, ToolSpec, build_math_registry
from multitool.core.dispatcher import AnnotatedResult, InvocationRecord, ToolDispatcher

__version__ = "0.1.0"

__all__ = [
    "ToolError",
    "UnknownToolError",
    "DuplicateToolError",
    "ToolArgumentsError",
    "ToolTimeoutError",
    "ToolSpec",
    "ToolRegistry",
    "build_math_registry",
    "InvocationRecord",
    "AnnotatedResult",
    "ToolDispatcher",
]
