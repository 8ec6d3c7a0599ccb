"""
构建上下文模块

定义构建过程中的共享数据结构和异常类。
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

from ..config.schema import PackConfig

if TYPE_CHECKING:
    from ..model.manifest import Manifest
    from .applicator import PropertiesApplicator
    from .walker import Candidate, WalkError

# 进度回调类型
ProgressCallback = Callable[[str, int, int, str], None]

DEFAULT_OBJECTS_LOCATION = "objects"
DEFAULT_LIBRARIES_LOCATION = "libraries"


@dataclass
class BuildOptions:
    """命令行层面的构建选项（与整合包配置无关的部分）"""
    source_dir: Path
    output_dir: Path
    manifest_path: Optional[Path] = None
    version: Optional[str] = None
    base_url: Optional[str] = None
    objects_location: str = DEFAULT_OBJECTS_LOCATION
    libraries_location: str = DEFAULT_LIBRARIES_LOCATION
    pretty_print: bool = False

    @property
    def objects_dir(self) -> Path:
        return self.output_dir / self.objects_location

    def resolve_manifest_path(self, name: str) -> Path:
        return self.manifest_path or (self.output_dir / f"{name}.json")


@dataclass
class BuildContext:
    """构建上下文，包含构建过程中的共享数据"""
    config: PackConfig
    options: BuildOptions
    progress_callback: Optional[ProgressCallback] = None

    # 构建过程中生成的数据
    manifest: Optional['Manifest'] = None
    applicator: Optional['PropertiesApplicator'] = None
    candidates: List['Candidate'] = field(default_factory=list)
    walk_errors: List['WalkError'] = field(default_factory=list)
    manifest_path: Optional[Path] = None

    # 统计信息
    build_stats: Dict[str, Any] = field(default_factory=lambda: {
        'start_time': 0,
        'end_time': 0,
        'total_files': 0,
        'total_size': 0,
        'copied': 0,
        'deduplicated': 0,
        'redirected': 0,
        'failed': 0,
    })

    def report(self, stage: str, progress: int, message: str = "") -> None:
        if self.progress_callback:
            self.progress_callback(stage, progress, 100, message)


class BuildError(Exception):
    """构建错误"""
    pass


class FileCollectionError(BuildError):
    """部分文件处理失败

    已成功的条目仍保留在清单中；错误本身只给出数量，详情见日志。
    """

    def __init__(self, failed_count: int, total: int):
        super().__init__(f"{failed_count}/{total} 个文件处理失败，请检查日志获取详细信息")
        self.failed_count = failed_count
        self.total = total
