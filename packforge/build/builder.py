"""
构建器主类

负责整个构建流程的协调，使用管道模式组织构建步骤。
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..config.schema import PackConfig
from .build_context import BuildContext, BuildError, BuildOptions, ProgressCallback
from .build_pipeline import BuildPipeline


@dataclass
class BuildResult:
    """构建结果"""
    success: bool
    manifest_path: Optional[Path] = None
    task_count: int = 0
    failed_count: int = 0
    build_time: Optional[float] = None
    error: Optional[str] = None


class Builder:
    """整合包构建器

    使用管道模式协调构建步骤，提供统一的构建接口。
    配置错误不会被转换为失败结果，而是直接抛给调用者。
    """

    def __init__(self):
        self.pipeline = BuildPipeline()
        self.last_context: Optional[BuildContext] = None

    def build(
        self,
        config: PackConfig,
        options: BuildOptions,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> BuildResult:
        """构建整合包

        Args:
            config: 整合包配置
            options: 构建选项
            progress_callback: 进度回调函数

        Returns:
            BuildResult: 构建结果
        """
        try:
            context = self.pipeline.execute(config, options, progress_callback)
        except BuildError as e:
            return BuildResult(
                success=False,
                failed_count=getattr(e, 'failed_count', 0),
                error=str(e),
            )

        self.last_context = context
        stats = context.build_stats
        return BuildResult(
            success=True,
            manifest_path=context.manifest_path,
            task_count=len(context.manifest.tasks),
            build_time=stats['end_time'] - stats['start_time'],
        )

    def get_pipeline(self) -> BuildPipeline:
        """获取构建管道，用于自定义构建流程"""
        return self.pipeline

    def validate_build_pipeline(self) -> List[str]:
        """验证构建管道的完整性"""
        return self.pipeline.validate_pipeline()
