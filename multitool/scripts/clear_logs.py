#!/usr/bin/env python3
"""
日志清理脚本

清理日志目录下的 .log 和 .json 文件（工具调用 NDJSON 日志等）。

注意：
    - 只删除文件，不删除任何目录（即使目录变为空目录）

使用方法:
    # 预览要删除的文件（不实际删除）
    python -m multitool.scripts.clear_logs --dry-run

    # 删除指定目录下 7 天前的日志文件，不再询问确认
    python -m multitool.scripts.clear_logs --dir Logs/tool_logs --days 7 --yes

    # 删除大于 100MB 的日志文件
    python -m multitool.scripts.clear_logs --size 100MB
"""

import argparse
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional, Tuple

from multitool.core.logger_config import get_global_config

LOG_SUFFIXES = ("*.log", "*.json")


def parse_size(size_str: str) -> int:
    """
    解析大小字符串（如 "100MB", "1GB", "512"）为字节数

    Raises:
        ValueError: 格式无效
    """
    size_str = size_str.upper().strip()

    if size_str.endswith("B"):
        size_str = size_str[:-1]

    multipliers = {
        "K": 1024,
        "M": 1024**2,
        "G": 1024**3,
    }

    for suffix, multiplier in multipliers.items():
        if size_str.endswith(suffix):
            return int(float(size_str[:-1]) * multiplier)

    # 默认单位为字节
    return int(size_str)


def format_size(size: float) -> str:
    """格式化文件大小"""
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0
    return f"{size:.2f} TB"


def find_log_files(
    log_dir: Path,
    days: Optional[int] = None,
    min_size: Optional[int] = None,
) -> List[Tuple[Path, dict]]:
    """
    查找日志文件

    Args:
        log_dir: 日志目录
        days: 只查找指定天数之前修改的文件（None 表示不限制）
        min_size: 只查找不小于指定大小的文件（None 表示不限制）

    Returns:
        List[Tuple[Path, dict]]: 文件路径与 {"size", "modified"} 信息，按路径排序
    """
    log_files: List[Tuple[Path, dict]] = []

    if not log_dir.exists():
        return log_files

    cutoff_time = datetime.now() - timedelta(days=days) if days is not None else None

    for pattern in LOG_SUFFIXES:
        for file_path in log_dir.rglob(pattern):
            if not file_path.is_file():
                continue

            try:
                stat = file_path.stat()
            except OSError as e:
                print(f"警告: 无法读取文件 {file_path}: {e}", file=sys.stderr)
                continue

            file_info = {
                "size": stat.st_size,
                "modified": datetime.fromtimestamp(stat.st_mtime),
            }
            if cutoff_time and file_info["modified"] > cutoff_time:
                continue
            if min_size and file_info["size"] < min_size:
                continue

            log_files.append((file_path, file_info))

    return sorted(log_files, key=lambda item: item[0])


def delete_files(log_files: List[Tuple[Path, dict]]) -> Tuple[int, int, List[str]]:
    """
    删除文件（只删除文件，不删除目录）

    Returns:
        Tuple[int, int, List[str]]: (已删除数量, 释放字节数, 错误信息列表)
    """
    deleted_count = 0
    deleted_size = 0
    errors: List[str] = []

    for file_path, file_info in log_files:
        if not file_path.is_file():
            errors.append(f"跳过（不是文件）: {file_path}")
            continue
        try:
            file_path.unlink()
        except OSError as e:
            errors.append(f"删除失败: {file_path} - {e}")
            continue
        deleted_count += 1
        deleted_size += file_info["size"]

    return deleted_count, deleted_size, errors


def main(argv: Optional[List[str]] = None) -> int:
    """主函数，返回进程退出码"""
    parser = argparse.ArgumentParser(description="清理日志目录下的 .log / .json 文件")
    parser.add_argument(
        "--dir",
        type=str,
        default=None,
        help="日志目录路径（默认: logger.yaml 中的 global.log_dir）",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="只删除指定天数之前的文件",
    )
    parser.add_argument(
        "--size",
        type=str,
        default=None,
        help="只删除大于指定大小的文件（例如: --size 100MB）",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="预览模式，只显示要删除的文件",
    )
    parser.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="跳过删除确认",
    )
    args = parser.parse_args(argv)

    log_dir = Path(args.dir or get_global_config().get("log_dir", "Logs"))
    if not log_dir.exists():
        print(f"错误: 日志目录不存在: {log_dir}", file=sys.stderr)
        return 1

    min_size = None
    if args.size:
        try:
            min_size = parse_size(args.size)
        except ValueError:
            print(f"错误: 无效的大小格式: {args.size}（支持 100B, 100KB, 100MB, 1GB）", file=sys.stderr)
            return 1

    print(f"正在扫描日志目录: {log_dir}")
    log_files = find_log_files(log_dir, days=args.days, min_size=min_size)
    if not log_files:
        print("未找到符合条件的日志文件")
        return 0

    total_size = sum(info["size"] for _, info in log_files)
    print(f"\n找到 {len(log_files)} 个日志文件，总大小: {format_size(total_size)}\n")
    for file_path, file_info in log_files:
        time_str = file_info["modified"].strftime("%Y-%m-%d %H:%M:%S")
        print(f"  {file_path} ({format_size(file_info['size'])}, {time_str})")

    if args.dry_run:
        print("\n[预览模式] 未删除任何文件")
        return 0

    if not args.yes:
        try:
            confirmation = input(f"\n确认删除 {len(log_files)} 个文件? (yes/no): ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            print("\n操作已取消")
            return 0
        if confirmation not in ("yes", "y"):
            print("操作已取消")
            return 0

    deleted_count, deleted_size, errors = delete_files(log_files)
    print(f"\n已删除: {deleted_count} 个文件，释放空间: {format_size(deleted_size)}")
    for error in errors:
        print(f"  {error}", file=sys.stderr)
    return 1 if errors else 0


if __name__ == "__main__":
    sys.exit(main())
