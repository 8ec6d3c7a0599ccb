"""
内容寻址对象库

布局：``<root>/<hash[0:2]>/<hash[2:4]>/<hash>``，内容为原始字节。
同一内容只会写入一次，多个清单可以共享同一个对象库。
"""

import os
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Union

from ..utils.paths import ensure_directory, safe_path_join


class ObjectStore:
    """对象库

    写入先落到同目录的临时文件再原子重命名，读者不会看到半个文件；
    按位置分段加锁，同一进程内两个线程同时发现同一新对象时只写一次。
    """

    LOCK_STRIPES = 64

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self._locks = [threading.Lock() for _ in range(self.LOCK_STRIPES)]

    def path_for(self, location: str) -> Path:
        """对象的本地路径"""
        return safe_path_join(self.root, location)

    def contains(self, location: str) -> bool:
        return self.path_for(location).is_file()

    def publish(self, source: Path, location: str) -> bool:
        """把源文件写入对象库

        Args:
            source: 源文件
            location: 对象库相对路径

        Returns:
            bool: 是否发生了实际写入（已存在时返回 False）

        Raises:
            OSError: 创建目录或复制失败
        """
        dest = self.path_for(location)

        with self._locks[hash(location) % self.LOCK_STRIPES]:
            if self.contains(location):
                return False

            ensure_directory(dest.parent)

            fd, tmp_name = tempfile.mkstemp(prefix=".tmp-", dir=dest.parent)
            try:
                with os.fdopen(fd, 'wb') as out, open(source, 'rb') as src:
                    shutil.copyfileobj(src, out)
                os.replace(tmp_name, dest)
            except BaseException:
                try:
                    os.unlink(tmp_name)
                except FileNotFoundError:
                    pass
                raise

        return True
