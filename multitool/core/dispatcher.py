"""
工具分发模块

根据调用记录中的 type 在注册表中查找工具并执行，返回附带输出的结果。

数据流:
    模型输出 -> JsonOutputToolsParser -> [InvocationRecord] -> adispatch_all -> [AnnotatedResult]

批量策略（fail-fast）:
    - 在启动任何处理函数之前先解析全部 type 并校验参数，未知工具或非法参数直接失败，不产生副作用；
    - 任一处理函数失败时取消其余仍在执行的调用，并原样抛出第一个错误；
    - 调用方取消批量时，所有进行中的调用一并取消。

使用示例:
    from multitool.core.dispatcher import ToolDispatcher
    from multitool.tools.math_tools import build_math_registry

    dispatcher = ToolDispatcher(build_math_registry())
    results = dispatcher.dispatch_all([{"type": "multiply", "args": {"firstInt": 23, "secondInt": 7}}])
    print(results[0].output)  # "161"
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from multitool.config.tool_config import ToolConfig, get_tool_config
from multitool.core.tool_context import ensure_call_log, invoke_tool
from multitool.tools.registry import ToolRegistry
from multitool.tools.tool_spec import ToolSpec

logger = logging.getLogger(__name__)


class InvocationRecord(BaseModel):
    """
    一次工具调用请求

    与 JsonOutputToolsParser 的输出结构一致：{"type": 工具名, "args": 参数, "id": 可选调用 ID}
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str
    args: Dict[str, Any] = Field(default_factory=dict)
    id: Optional[str] = None


class AnnotatedResult(InvocationRecord):
    """调用记录 + 处理函数输出；type / args / id 原样来自输入记录"""

    output: Any = None


RecordLike = Union[InvocationRecord, Mapping[str, Any]]


def _as_record(record: RecordLike) -> InvocationRecord:
    if isinstance(record, InvocationRecord):
        return record
    return InvocationRecord.model_validate(dict(record))


class ToolDispatcher:
    """
    工具分发器

    注册表之外不持有可变状态，可在多个协程间共享。
    """

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        tool_config: Optional[ToolConfig] = None,
        max_concurrency: Optional[int] = None,
    ):
        """
        Args:
            registry: 工具注册表
            tool_config: 工具配置（超时、并发度），默认使用全局 tool.yaml
            max_concurrency: 批量分发最大并发数，默认读取 tool.yaml
        """
        self.registry = registry
        self.tool_config = tool_config or get_tool_config()
        if max_concurrency is None:
            max_concurrency = self.tool_config.get_max_concurrency()
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError(f"max_concurrency 必须为正整数: {max_concurrency}")
        self.max_concurrency = max_concurrency

    async def adispatch(self, record: RecordLike) -> AnnotatedResult:
        """
        分发单条调用记录

        Raises:
            UnknownToolError: type 未注册
            ToolArgumentsError: 参数未通过工具 Schema 校验
            ToolTimeoutError: 执行超时
            Exception: 处理函数抛出的异常原样抛出
        """
        return await self._run(*self._prepare(record))

    async def adispatch_all(self, records: Sequence[RecordLike]) -> List[AnnotatedResult]:
        """
        并发分发多条调用记录，结果顺序与输入一致

        Raises:
            UnknownToolError: 任一记录的 type 未注册（此时不会执行任何处理函数）
            ToolArgumentsError: 任一记录的参数未通过校验（此时不会执行任何处理函数）
        """
        prepared = [self._prepare(r) for r in records]
        if not prepared:
            return []

        logger.info(f"批量分发 {len(prepared)} 个工具调用: {[r.type for _, r, _ in prepared]}")
        ensure_call_log()

        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

        async def run_one(
            spec: ToolSpec, record: InvocationRecord, kwargs: Dict[str, Any]
        ) -> AnnotatedResult:
            if semaphore is None:
                return await self._run(spec, record, kwargs)
            async with semaphore:
                return await self._run(spec, record, kwargs)

        tasks = [asyncio.ensure_future(run_one(*item)) for item in prepared]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    def dispatch(self, record: RecordLike) -> AnnotatedResult:
        """adispatch 的同步版本（不能在运行中的事件循环内调用）"""
        # asyncio.run 在上下文副本中执行，先在调用方上下文创建日志列表
        ensure_call_log()
        return asyncio.run(self.adispatch(record))

    def dispatch_all(self, records: Sequence[RecordLike]) -> List[AnnotatedResult]:
        """adispatch_all 的同步版本（不能在运行中的事件循环内调用）"""
        ensure_call_log()
        return asyncio.run(self.adispatch_all(records))

    def _prepare(self, record: RecordLike) -> Tuple[ToolSpec, InvocationRecord, Dict[str, Any]]:
        """查找工具并校验参数，返回 (spec, record, 处理函数关键字参数)"""
        record = _as_record(record)
        spec = self.registry.lookup(record.type)
        return spec, record, spec.validate_args(record.args)

    async def _run(
        self, spec: ToolSpec, record: InvocationRecord, kwargs: Dict[str, Any]
    ) -> AnnotatedResult:
        logger.info(f"执行工具: {spec.name}({record.args})")
        output = await invoke_tool(
            spec,
            kwargs,
            raw_args=record.args,
            timeout=self.tool_config.get_tool_timeout(spec.name),
        )
        return AnnotatedResult(type=record.type, args=record.args, id=record.id, output=output)


__all__ = [
    "InvocationRecord",
    "AnnotatedResult",
    "ToolDispatcher",
]
