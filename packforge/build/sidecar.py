"""
附属文件读取

``<name>.url`` 中保存一个外部 URL，用来替代该文件在对象库中的存储位置。
"""

from pathlib import Path
from typing import Optional

from pydantic import AnyUrl, TypeAdapter, ValidationError

from .walker import URL_FILE_SUFFIX

_url_adapter = TypeAdapter(AnyUrl)


class SidecarError(ValueError):
    """附属文件内容无效"""
    pass


def url_sidecar_path(file_path: Path) -> Path:
    """同目录下的 URL 重定向文件路径"""
    return file_path.parent / (file_path.name + URL_FILE_SUFFIX)


def read_url_redirect(sidecar: Path) -> str:
    """读取重定向 URL

    取第一个非空行作为 URL，必须是带协议和主机名的绝对地址。

    Raises:
        OSError: 文件读取失败
        SidecarError: 内容不是 UTF-8 文本或不是有效 URL
    """
    try:
        text = sidecar.read_text(encoding='utf-8-sig')
    except UnicodeDecodeError as e:
        raise SidecarError(f"重定向文件不是有效的 UTF-8 文本: {sidecar}") from e
    url = next((line.strip() for line in text.splitlines() if line.strip()), "")
    if not url:
        raise SidecarError(f"重定向文件为空: {sidecar}")

    try:
        parsed = _url_adapter.validate_python(url)
    except ValidationError as e:
        raise SidecarError(f"重定向文件中的 URL 无效: {sidecar}: {url}") from e

    if not parsed.host:
        raise SidecarError(f"重定向 URL 缺少主机名: {sidecar}: {url}")

    return url


def find_url_redirect(file_path: Path) -> Optional[str]:
    """存在重定向文件时返回其中的 URL，否则返回 None"""
    sidecar = url_sidecar_path(file_path)
    if not sidecar.is_file():
        return None
    return read_url_redirect(sidecar)
