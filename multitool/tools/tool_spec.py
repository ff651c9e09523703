"""
工具规范定义模块。

用途：
- 提供轻量的 ToolSpec 结构，用于描述工具元数据、参数 Schema 与处理函数；
- 负责把工具转换为可绑定到 Chat Model 的 OpenAI tool 定义。

设计约束：
- 仅承载元数据与参数校验，不做注册、发现或执行逻辑。
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Type

from langchain_core.utils.function_calling import convert_to_openai_tool
from pydantic import BaseModel, ValidationError

from multitool.core.tool_errors import ToolArgumentsError


@dataclass(frozen=True)
class ToolSpec:
    """
    工具元数据规范。

    重要不变量：
    - name 为非空字符串，在注册表内唯一；
    - handler 可调用（同步或异步）；
    - args_schema 为 None 时，参数原样作为关键字参数传给 handler。
    """

    name: str
    description: str
    handler: Callable[..., Any]
    args_schema: Optional[Type[BaseModel]] = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("工具名称不能为空")
        if not callable(self.handler):
            raise TypeError(f"工具 {self.name} 的 handler 不可调用")

    @property
    def is_async(self) -> bool:
        """处理函数是否为协程函数"""
        return inspect.iscoroutinefunction(self.handler)

    def validate_args(self, args: Mapping[str, Any]) -> Dict[str, Any]:
        """
        校验调用参数，返回传给 handler 的关键字参数。

        Args:
            args: 调用记录中的原始参数

        Returns:
            Dict[str, Any]: 关键字参数（有 Schema 时为校验后的字段值）

        Raises:
            ToolArgumentsError: 参数未通过 Schema 校验
        """
        if self.args_schema is None:
            return dict(args)
        try:
            validated = self.args_schema.model_validate(dict(args))
        except ValidationError as e:
            raise ToolArgumentsError(
                self.name,
                e.errors(include_url=False, include_context=False),
                cause=e,
            ) from e
        return validated.model_dump()

    def to_openai_tool(self) -> Dict[str, Any]:
        """
        转换为 OpenAI tool 定义，可直接传给 ``bind_tools``。

        Returns:
            Dict[str, Any]: {"type": "function", "function": {...}}
        """
        source = self.args_schema if self.args_schema is not None else self.handler
        definition = convert_to_openai_tool(source)
        definition["function"]["name"] = self.name
        definition["function"]["description"] = self.description
        return definition


__all__ = ["ToolSpec"]
