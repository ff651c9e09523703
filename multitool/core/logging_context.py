"""
日志上下文管理模块

提供线程/协程安全的上下文变量，用于在工具调用日志中记录 request_id。
"""

from contextvars import ContextVar
from typing import Optional

# 上下文变量定义（线程/协程安全）
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def set_request_id(request_id: Optional[str]) -> None:
    """设置当前请求 ID，传入 None 表示清除"""
    request_id_var.set(request_id)


def get_request_id() -> Optional[str]:
    """获取当前请求 ID"""
    return request_id_var.get()


__all__ = [
    "request_id_var",
    "set_request_id",
    "get_request_id",
]
