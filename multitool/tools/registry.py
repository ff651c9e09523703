"""
工具注册表模块

维护工具名到 ToolSpec 的映射，提供注册、查找和绑定到 Chat Model 所需的工具定义。

使用示例:
    from multitool.tools.registry import ToolRegistry

    registry = ToolRegistry()

    @registry.tool(description="两数相乘")
    def multiply(a: int, b: int) -> str:
        return str(a * b)

    spec = registry.lookup("multiply")
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Type

from pydantic import BaseModel

from multitool.core.tool_errors import DuplicateToolError, UnknownToolError
from multitool.tools.tool_spec import ToolSpec

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    工具注册表

    配置阶段一次性构建，之后只读；接口不禁止后续追加注册。
    """

    def __init__(self, specs: Optional[Iterable[ToolSpec]] = None):
        self._tools: Dict[str, ToolSpec] = {}
        for spec in specs or []:
            self.register(spec)

    def register(self, spec: ToolSpec) -> ToolSpec:
        """
        注册工具

        Raises:
            DuplicateToolError: 工具名已存在
        """
        if spec.name in self._tools:
            raise DuplicateToolError(spec.name)
        self._tools[spec.name] = spec
        logger.info(f"注册工具: {spec.name}")
        return spec

    def tool(
        self,
        name: Optional[str] = None,
        *,
        description: Optional[str] = None,
        args_schema: Optional[Type[BaseModel]] = None,
    ):
        """
        装饰器：把普通函数（同步或异步）注册为工具

        Args:
            name: 工具名称，默认使用函数名
            description: 工具描述，默认使用函数 docstring 的首行
            args_schema: 参数 Schema（可选）
        """

        def decorator(func: Callable[..., Any]):
            doc = (func.__doc__ or "").strip()
            self.register(
                ToolSpec(
                    name=name or func.__name__,
                    description=description or (doc.splitlines()[0] if doc else ""),
                    handler=func,
                    args_schema=args_schema,
                )
            )
            return func

        return decorator

    def lookup(self, name: str) -> ToolSpec:
        """
        按名称查找工具

        Raises:
            UnknownToolError: 工具未注册
        """
        spec = self._tools.get(name)
        if spec is None:
            raise UnknownToolError(name)
        return spec

    def get(self, name: str) -> Optional[ToolSpec]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools)

    def specs(self) -> List[ToolSpec]:
        return list(self._tools.values())

    def as_openai_tools(self) -> List[Dict[str, Any]]:
        """生成绑定到 Chat Model 的工具定义列表（按注册顺序）"""
        return [spec.to_openai_tool() for spec in self._tools.values()]

    def describe(self) -> str:
        """生成工具列表说明，用于系统提示词或命令行展示"""
        lines = []
        for spec in self._tools.values():
            params = spec.to_openai_tool()["function"].get("parameters", {})
            props = ", ".join(params.get("properties", {})) or "none"
            lines.append(f"- {spec.name}: {spec.description} | params: {props}")
        return "\n".join(lines)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


__all__ = ["ToolRegistry"]
