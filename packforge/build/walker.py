"""
目录遍历器

按目录名分类决定是否进入目录，并为每个常规文件计算有效相对路径。
"""

import os
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from ..config.schema import DEFAULT_DIRECTORY_TABLE, DirectoryBehavior
from ..utils.logging import warning, error, LogStage
from ..utils.paths import is_within

# 附属文件后缀：它们描述的是旁边的另一个文件，本身从不发布
URL_FILE_SUFFIX = ".url"
INFO_FILE_SUFFIX = ".info.json"
SIDECAR_SUFFIXES = (URL_FILE_SUFFIX, INFO_FILE_SUFFIX)


def is_sidecar(name: str) -> bool:
    return name.endswith(SIDECAR_SUFFIXES)


@dataclass(frozen=True)
class Candidate:
    """待处理文件"""
    path: Path  # 绝对路径
    relative_path: PurePosixPath  # 去掉透明目录段后的相对路径


class DirectoryClassifier:
    """目录分类器

    以点开头的目录名一律跳过，其余名称查表，表中没有的正常进入。
    """

    def __init__(self, table: Optional[Mapping[str, DirectoryBehavior]] = None):
        self.table: Dict[str, DirectoryBehavior] = dict(
            DEFAULT_DIRECTORY_TABLE if table is None else table
        )

    def __call__(self, name: str) -> DirectoryBehavior:
        if name.startswith("."):
            return DirectoryBehavior.SKIP
        return self.table.get(name, DirectoryBehavior.CONTINUE)


@dataclass
class WalkError:
    path: Path
    message: str


@dataclass
class DirectoryWalker:
    """目录遍历器

    使用显式栈遍历，嵌套深度不受递归限制。符号链接指向根目录之外时跳过；
    根目录内的目录链接不跟随，其目标会在真实位置被遍历。
    """
    classifier: DirectoryClassifier = field(default_factory=DirectoryClassifier)
    errors: List[WalkError] = field(default_factory=list)

    def walk(self, root: Path) -> Iterator[Candidate]:
        """遍历目录

        Args:
            root: 源目录

        Yields:
            Candidate: 每个需要处理的常规文件
        """
        root = Path(root)
        if not root.is_dir():
            raise NotADirectoryError(f"源目录不存在或不是目录: {root}")

        resolved_root = root.resolve()
        self.errors.clear()

        stack: List[Tuple[Path, PurePosixPath]] = [(root, PurePosixPath())]
        while stack:
            directory, rel_dir = stack.pop()

            try:
                with os.scandir(directory) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as e:
                self._record(Path(directory), f"无法读取目录: {e}")
                continue

            for entry in entries:
                path = Path(entry.path)

                try:
                    is_link = entry.is_symlink()
                    if is_link and not is_within(path, resolved_root):
                        warning(f"跳过指向源目录之外的符号链接: {path}", stage=LogStage.COLLECT)
                        continue

                    if entry.is_dir(follow_symlinks=False):
                        behavior = self.classifier(entry.name)
                        if behavior is DirectoryBehavior.SKIP:
                            continue
                        if behavior is DirectoryBehavior.IGNORE:
                            stack.append((path, rel_dir))
                        else:
                            stack.append((path, rel_dir / entry.name))
                    elif is_link and path.is_dir():
                        continue
                    elif entry.is_file():
                        if is_sidecar(entry.name):
                            continue
                        yield Candidate(path=path.absolute(), relative_path=rel_dir / entry.name)
                except OSError as e:
                    self._record(path, f"无法访问: {e}")

    def _record(self, path: Path, message: str) -> None:
        error(f"{path}: {message}", stage=LogStage.COLLECT)
        self.errors.append(WalkError(path=path, message=message))


def walk_tree(root: Path, table: Optional[Mapping[str, DirectoryBehavior]] = None) -> List[Candidate]:
    """便捷函数：遍历目录并返回候选文件列表"""
    walker = DirectoryWalker(DirectoryClassifier(table))
    return list(walker.walk(root))
