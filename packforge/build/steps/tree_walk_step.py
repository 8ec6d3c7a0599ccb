"""
目录遍历步骤模块

遍历源目录，收集候选文件。
"""

from packforge.build.build_context import BuildContext, BuildError
from packforge.build.walker import DirectoryClassifier, DirectoryWalker
from ...utils import format_size
from ...utils.logging import info, success, debug, LogStage
from .build_step import BuildStep


class TreeWalkStep(BuildStep):
    """目录遍历步骤"""

    def __init__(self):
        super().__init__("walk", "遍历源目录")

    def get_progress_range(self) -> tuple[int, int]:
        return (5, 20)

    def execute(self, context: BuildContext) -> None:
        source_dir = context.options.source_dir
        info(f"扫描源目录: {source_dir}", stage=LogStage.COLLECT)

        walker = DirectoryWalker(DirectoryClassifier(context.config.directories))
        try:
            candidates = list(walker.walk(source_dir))
        except NotADirectoryError as e:
            raise BuildError(str(e)) from e

        context.candidates = candidates
        context.walk_errors = list(walker.errors)

        total_size = 0
        for candidate in candidates:
            try:
                total_size += candidate.path.stat().st_size
            except OSError:
                # 此处只做统计，错误在哈希阶段记录
                pass
        context.build_stats['total_files'] = len(candidates)
        context.build_stats['total_size'] = total_size

        success(f"找到 {len(candidates)} 个文件 ({format_size(total_size)})", stage=LogStage.COLLECT)

        for idx, candidate in enumerate(candidates[:20]):
            debug(f"文件[{idx}]: {candidate.relative_path}", stage=LogStage.COLLECT)
        if len(candidates) > 20:
            debug(f"... 还有 {len(candidates) - 20} 个文件未列出", stage=LogStage.COLLECT)

        context.report("遍历", self.get_progress_range()[1], f"找到 {len(candidates)} 个文件")
