"""
数学工具模块

提供 multiply / add / exponentiate 三个整数运算工具，返回值统一为十进制字符串。
参数 Schema 使用模型看到的 camelCase 字段名（firstInt / secondInt）。

使用示例:
    from multitool.tools.math_tools import build_math_registry

    registry = build_math_registry()
    registry.lookup("multiply").handler(first_int=23, second_int=7)  # "161"
"""

import math

from pydantic import BaseModel, ConfigDict, Field, model_validator

from multitool.tools.registry import ToolRegistry
from multitool.tools.tool_spec import ToolSpec

# 结果十进制位数上限，低于 int -> str 的默认转换限制（4300 位）
MAX_RESULT_DIGITS = 4000


class TwoIntegersInput(BaseModel):
    """两个整数参数"""

    model_config = ConfigDict(populate_by_name=True)

    first_int: int = Field(alias="firstInt", description="第一个整数")
    second_int: int = Field(alias="secondInt", description="第二个整数")


class ExponentiateInput(BaseModel):
    """底数与指数"""

    model_config = ConfigDict(populate_by_name=True)

    base: int = Field(description="底数")
    exponent: int = Field(ge=0, description="非负整数指数")

    @model_validator(mode="after")
    def _check_result_size(self) -> "ExponentiateInput":
        magnitude = abs(self.base)
        if magnitude > 1 and self.exponent * math.log10(magnitude) >= MAX_RESULT_DIGITS:
            raise ValueError(f"结果超过 {MAX_RESULT_DIGITS} 位十进制数")
        return self


def multiply(first_int: int, second_int: int) -> str:
    return str(first_int * second_int)


def add(first_int: int, second_int: int) -> str:
    return str(first_int + second_int)


def exponentiate(base: int, exponent: int) -> str:
    return str(base**exponent)


MATH_TOOLS = [
    ToolSpec(
        name="multiply",
        description="Multiply two integers together.",
        handler=multiply,
        args_schema=TwoIntegersInput,
    ),
    ToolSpec(
        name="add",
        description="Add two integers together.",
        handler=add,
        args_schema=TwoIntegersInput,
    ),
    ToolSpec(
        name="exponentiate",
        description="Raise a base integer to a non-negative integer exponent.",
        handler=exponentiate,
        args_schema=ExponentiateInput,
    ),
]


def build_math_registry() -> ToolRegistry:
    """创建包含全部数学工具的注册表"""
    return ToolRegistry(MATH_TOOLS)


__all__ = [
    "TwoIntegersInput",
    "MAX_RESULT_DIGITS",
    "ExponentiateInput",
    "multiply",
    "add",
    "exponentiate",
    "MATH_TOOLS",
    "build_math_registry",
]
