"""
内容哈希

计算文件内容摘要，并由摘要推导对象库中的存储地址。
"""

import hashlib
from pathlib import Path
from typing import Optional, Union

from ..config.schema import HashAlgorithm


class ContentHasher:
    """内容哈希计算器"""

    CHUNK_SIZE = 256 * 1024

    def __init__(self, algorithm: Union[HashAlgorithm, str] = HashAlgorithm.SHA1):
        """初始化哈希计算器

        Args:
            algorithm: 哈希算法
        """
        self.algorithm = HashAlgorithm(algorithm)
        self._hasher = hashlib.new(self.algorithm.value)

    def update(self, data: Union[bytes, str]) -> None:
        """更新哈希数据"""
        if isinstance(data, str):
            data = data.encode('utf-8')
        self._hasher.update(data)

    def update_from_file(self, file_path: Path, chunk_size: int = CHUNK_SIZE) -> int:
        """从文件更新哈希

        Args:
            file_path: 文件路径
            chunk_size: 读取块大小

        Returns:
            int: 读取的字节数

        Raises:
            OSError: 文件读取失败
        """
        total = 0
        with open(file_path, 'rb') as f:
            while True:
                chunk = f.read(chunk_size)
                if not chunk:
                    break
                self._hasher.update(chunk)
                total += len(chunk)
        return total

    def hexdigest(self) -> str:
        """获取十六进制哈希值"""
        return self._hasher.hexdigest()

    @classmethod
    def hash_data(cls, data: Union[bytes, str], algorithm: Union[HashAlgorithm, str] = HashAlgorithm.SHA1) -> str:
        """便捷方法：计算数据哈希"""
        calculator = cls(algorithm)
        calculator.update(data)
        return calculator.hexdigest()

    @classmethod
    def hash_file(cls, file_path: Path, algorithm: Union[HashAlgorithm, str] = HashAlgorithm.SHA1) -> str:
        """便捷方法：计算文件哈希"""
        calculator = cls(algorithm)
        calculator.update_from_file(file_path)
        return calculator.hexdigest()


def object_location(digest: str, algorithm: Optional[Union[HashAlgorithm, str]] = None) -> str:
    """由摘要推导对象库相对路径：``ab/cd/abcd...``

    给定算法时，摘要长度必须与该算法一致。

    两级扇出保证即使有十万级文件，单个目录下的条目数也有上限。
    """
    if len(digest) < 4:
        raise ValueError(f"摘要过短: {digest!r}")
    if algorithm is not None and len(digest) != HashAlgorithm(algorithm).digest_length:
        raise ValueError(f"摘要长度与算法 {HashAlgorithm(algorithm).value} 不符: {digest!r}")
    return f"{digest[0:2]}/{digest[2:4]}/{digest}"
