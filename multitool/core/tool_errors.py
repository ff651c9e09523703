"""
工具错误类型定义模块。

提供 ToolError 作为工具层统一异常类型，以及注册、分发阶段使用的具体子类。
设计约束：
- ToolError 的 message 必须可读且非空；
- cause 仅用于日志记录；
- 处理函数自身抛出的异常不会被包装为 ToolError，原样向上传递。
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class ToolError(Exception):
    """
    工具层统一异常类型。

    重要不变量（invariants）：
    - message 为非空字符串；
    - details 始终为字典对象（无信息时为空字典）。
    """

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        """
        初始化 ToolError。

        Args:
            message: 错误说明（简明可读）
            code: 稳定的机器可识别错误码（用于分支逻辑）
            details: 结构化附加信息（用于日志或排查）
            cause: 原始异常（仅用于日志）
        """
        safe_message = message.strip() if isinstance(message, str) else ""
        if not safe_message:
            safe_message = "Unknown tool error"
        super().__init__(safe_message)
        self.message = safe_message
        self.code = code
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """
        转换为可序列化的错误结构（不包含 cause）。

        Returns:
            Dict[str, Any]: 错误结构
        """
        return {
            "error": self.message,
            "code": self.code,
            "details": self.details,
            "error_type": self.__class__.__name__,
        }

    def to_log_dict(self) -> Dict[str, Any]:
        """
        转换为日志用错误结构（包含 cause）。

        Returns:
            Dict[str, Any]: 适合写入日志的错误结构
        """
        payload = self.to_dict()
        if self.cause is not None:
            payload["cause"] = repr(self.cause)
        return payload

    def __str__(self) -> str:
        return f"{self.message} (code={self.code})" if self.code else self.message


class UnknownToolError(ToolError):
    """请求的工具名没有注册对应的处理函数（不可重试）"""

    def __init__(self, tool_name: str) -> None:
        super().__init__(
            f"Unknown tool: {tool_name}",
            code="unknown_tool",
            details={"tool_name": tool_name},
        )
        self.tool_name = tool_name


class DuplicateToolError(ToolError):
    """同名工具重复注册"""

    def __init__(self, tool_name: str) -> None:
        super().__init__(
            f"Tool already registered: {tool_name}",
            code="duplicate_tool",
            details={"tool_name": tool_name},
        )
        self.tool_name = tool_name


class ToolArgumentsError(ToolError):
    """调用参数未通过工具声明的参数 Schema 校验"""

    def __init__(
        self,
        tool_name: str,
        errors: List[Dict[str, Any]],
        *,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            f"Invalid arguments for tool: {tool_name}",
            code="invalid_tool_arguments",
            details={"tool_name": tool_name, "errors": errors},
            cause=cause,
        )
        self.tool_name = tool_name
        self.errors = errors


class ToolTimeoutError(ToolError):
    """工具执行超时"""

    def __init__(self, tool_name: str, timeout: float) -> None:
        super().__init__(
            f"Tool {tool_name} timed out after {timeout}s",
            code="tool_timeout",
            details={"tool_name": tool_name, "timeout": timeout},
        )
        self.tool_name = tool_name
        self.timeout = timeout


__all__ = [
    "ToolError",
    "UnknownToolError",
    "DuplicateToolError",
    "ToolArgumentsError",
    "ToolTimeoutError",
]
