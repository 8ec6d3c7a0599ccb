"""
路径工具

提供路径处理相关的工具函数。
"""

import os
import posixpath
from pathlib import Path, PurePath
from typing import Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """确保目录存在（并发创建时同样安全）

    Args:
        path: 目录路径

    Returns:
        Path: 目录路径
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def to_posix_path(path: Union[str, PurePath], sep: str = os.sep) -> str:
    """将相对路径统一为正斜杠形式

    只转换本机路径分隔符；在 POSIX 上反斜杠是文件名的一部分。``.`` 段会被折叠。

    Args:
        path: 相对路径
        sep: 需要转换为正斜杠的分隔符

    Returns:
        str: 规范化后的正斜杠路径

    Raises:
        ValueError: 路径为空、为绝对路径或试图越出根目录
    """
    raw = str(path)
    if sep != '/':
        raw = raw.replace(sep, '/')
    if not raw or raw.startswith('/'):
        raise ValueError(f"无效的相对路径: {path}")

    normalized = posixpath.normpath(raw)
    if normalized == '.' or normalized == '..' or normalized.startswith('../'):
        raise ValueError(f"无效的相对路径: {path}")

    return normalized


def safe_path_join(*parts: Union[str, Path]) -> Path:
    """安全的路径拼接（防止目录穿越）

    Args:
        *parts: 路径部分

    Returns:
        Path: 拼接后的路径

    Raises:
        ValueError: 检测到目录穿越尝试
    """
    if not parts:
        return Path(".")

    result = Path(parts[0])

    for part in parts[1:]:
        part_path = Path(part)

        if any(p == ".." for p in part_path.parts):
            raise ValueError(f"检测到目录穿越尝试: {part}")

        if part_path.is_absolute():
            raise ValueError(f"不允许使用绝对路径: {part}")

        result = result / part_path

    return result


def is_within(path: Path, root: Path) -> bool:
    """判断 ``path`` 解析后是否位于 ``root`` 之内"""
    try:
        path.resolve().relative_to(root.resolve())
        return True
    except (ValueError, OSError, RuntimeError):
        # 符号链接循环在不同版本中分别抛出 RuntimeError 和 OSError
        return False


def format_size(size_bytes: int) -> str:
    """格式化文件大小

    Args:
        size_bytes: 字节数

    Returns:
        str: 格式化的大小字符串
    """
    if size_bytes == 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB"]
    unit_index = 0
    size = float(size_bytes)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    return f"{size:.1f} {units[unit_index]}"
