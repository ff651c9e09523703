"""
工具调用上下文模块

为每次工具调用提供统一的执行外壳：
- 超时保护（同步处理函数在线程中执行）
- 调用日志记录（内存上下文 + 可选 NDJSON 持久化）

与分发器的约定：错误一律向上抛出，日志只做记录，不吞异常。

使用示例:
    from multitool.core.tool_context import invoke_tool, get_call_logs

    output = await invoke_tool(spec, {"first_int": 2, "second_int": 3}, raw_args=args, timeout=5.0)
    print(get_call_logs()[-1]["duration"])
"""

import asyncio
import concurrent.futures
import json
import logging
import time
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID

from pydantic import BaseModel

from multitool.core.logger_config import get_logger_config
from multitool.core.logging_context import get_request_id
from multitool.core.tool_errors import ToolError, ToolTimeoutError
from multitool.tools.tool_spec import ToolSpec

logger = logging.getLogger(__name__)

# ================================
# 上下文变量定义（线程/协程安全）
# ================================
_call_logs: ContextVar[Optional[List[Dict[str, Any]]]] = ContextVar("call_logs", default=None)

# 日志持久化使用单个后台线程，保证同一文件按调用顺序追加
_persist_executor = concurrent.futures.ThreadPoolExecutor(
    max_workers=1, thread_name_prefix="tool-log"
)


# =================================
# 调用日志
# =================================


def ensure_call_log() -> List[Dict[str, Any]]:
    """
    确保当前上下文拥有调用日志列表并返回它

    批量分发在创建子任务前调用，使子任务写入的记录对调用方可见。
    """
    logs = _call_logs.get()
    if logs is None:
        logs = []
        _call_logs.set(logs)
    return logs


def get_call_logs() -> List[Dict[str, Any]]:
    """获取当前上下文下的所有工具调用日志记录"""
    return list(_call_logs.get() or [])


def reset_call_logs() -> None:
    """清空当前上下文的调用日志"""
    _call_logs.set([])


def _json_default(obj: Any) -> Any:
    """JSON 序列化兜底：UUID -> str，BaseModel -> dict，其他 -> repr"""
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    return repr(obj)


def _persist_log_sync(log_entry: Dict[str, Any]) -> None:
    """
    同步持久化日志到 {log_dir}/{tool_name}/log_{hour}.json（NDJSON，按小时分文件）

    在后台线程中执行；写入失败只记录错误，不影响工具调用结果。
    """
    try:
        config = get_logger_config("tool")
        tool_log_dir = Path(config["log_dir"]) / log_entry.get("tool_name", "unknown")
        tool_log_dir.mkdir(parents=True, exist_ok=True)

        timestamp = int(time.time())
        hour_timestamp = timestamp - (timestamp % 3600)
        log_file = tool_log_dir / f"log_{hour_timestamp}.json"

        log_line = json.dumps(log_entry, ensure_ascii=False, default=_json_default) + "\n"
        with open(log_file, "a", encoding="utf-8") as f:
            f.write(log_line)
    except OSError as e:
        logger.error(f"持久化工具调用日志失败: {e}", exc_info=True)


def record_call(
    tool_name: str,
    args: Mapping[str, Any],
    *,
    output: Any = None,
    error: Optional[BaseException] = None,
    duration: Optional[float] = None,
) -> Dict[str, Any]:
    """
    追加一条工具调用日志（内存上下文，按配置持久化到文件）

    Args:
        tool_name: 工具名称
        args: 调用记录中的原始参数
        output: 处理函数返回值（失败时为 None）
        error: 失败时的异常
        duration: 执行时长（秒）

    Returns:
        Dict[str, Any]: 写入的日志条目
    """
    is_success = error is None
    if isinstance(error, ToolError):
        error_payload: Any = error.to_log_dict()
    elif error is not None:
        error_payload = repr(error)
    else:
        error_payload = None

    log_entry: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": "DEBUG" if is_success else "ERROR",
        "logger": "tool",
        "tool_name": tool_name,
        "request_id": get_request_id(),
        "input_params": dict(args),
        "output_result": output,
        "error": error_payload,
        "is_success": is_success,
        "duration": round(duration, 6) if duration is not None else None,
    }

    ensure_call_log().append(log_entry)

    if get_logger_config("tool")["enable_file"]:
        _persist_executor.submit(_persist_log_sync, log_entry)

    return log_entry


# =================================
# 执行外壳
# =================================


async def invoke_tool(
    spec: ToolSpec,
    kwargs: Mapping[str, Any],
    *,
    raw_args: Optional[Mapping[str, Any]] = None,
    timeout: Optional[float] = None,
) -> Any:
    """
    执行工具处理函数

    异步处理函数直接 await；同步处理函数通过 asyncio.to_thread 执行。
    超时后同步函数所在线程无法被中断，会在后台自然结束。

    Args:
        spec: 工具规范
        kwargs: 传给处理函数的关键字参数
        raw_args: 写入日志的原始参数，默认同 kwargs
        timeout: 超时时间（秒），None 表示不限制

    Returns:
        处理函数返回值

    Raises:
        ToolTimeoutError: 执行超时
        Exception: 处理函数抛出的异常原样抛出
    """
    log_args = raw_args if raw_args is not None else kwargs
    start = time.perf_counter()
    try:
        if spec.is_async:
            call = spec.handler(**kwargs)
        else:
            call = asyncio.to_thread(spec.handler, **kwargs)
        output = await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError as e:
        error = ToolTimeoutError(spec.name, timeout)
        record_call(spec.name, log_args, error=error, duration=time.perf_counter() - start)
        logger.error(f"工具 {spec.name} 执行超时: {timeout}s")
        raise error from e
    except asyncio.CancelledError:
        record_call(
            spec.name,
            log_args,
            error=asyncio.CancelledError(),
            duration=time.perf_counter() - start,
        )
        logger.info(f"工具 {spec.name} 已取消")
        raise
    except Exception as e:
        record_call(spec.name, log_args, error=e, duration=time.perf_counter() - start)
        logger.error(f"工具 {spec.name} 执行失败: {e!r}")
        raise

    duration = time.perf_counter() - start
    record_call(spec.name, log_args, output=output, duration=duration)
    logger.debug(f"工具 {spec.name} 执行完成: {duration:.3f}s")
    return output


__all__ = [
    "ensure_call_log",
    "get_call_logs",
    "reset_call_logs",
    "record_call",
    "invoke_tool",
]
