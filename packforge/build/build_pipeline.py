"""
构建管道模块

使用管道模式协调构建步骤的执行。
"""

import time
from typing import List, Optional

from ..config.loader import ConfigError
from ..config.schema import PackConfig
from ..utils import format_size
from ..utils.logging import info, success, error, debug, LogStage
from .build_context import BuildContext, BuildError, BuildOptions, ProgressCallback
from .steps.build_step import BuildStep
from .steps.configuration_step import ConfigurationStep
from .steps.tree_walk_step import TreeWalkStep
from .steps.publish_step import PublishStep
from .steps.manifest_write_step import ManifestWriteStep


class BuildPipeline:
    """构建管道，负责协调构建步骤的执行"""

    def __init__(self):
        self._steps: List[BuildStep] = []
        self._init_default_steps()

    def _init_default_steps(self):
        """初始化默认的构建步骤"""
        self._steps = [
            ConfigurationStep(),
            TreeWalkStep(),
            PublishStep(),
            ManifestWriteStep(),
        ]

    def add_step(self, step: BuildStep, position: Optional[int] = None):
        """添加构建步骤"""
        if position is None:
            self._steps.append(step)
        else:
            self._steps.insert(position, step)

    def remove_step(self, step_name: str):
        """移除构建步骤"""
        self._steps = [step for step in self._steps if step.name != step_name]

    def get_steps(self) -> List[BuildStep]:
        """获取所有构建步骤"""
        return self._steps.copy()

    def execute(
        self,
        config: PackConfig,
        options: BuildOptions,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> BuildContext:
        """执行构建管道

        Args:
            config: 整合包配置
            options: 构建选项
            progress_callback: 进度回调函数

        Returns:
            BuildContext: 构建上下文，包含所有构建结果

        Raises:
            ConfigError: 配置错误（在访问文件系统之前抛出）
            BuildError: 构建失败
        """
        context = BuildContext(
            config=config,
            options=options,
            progress_callback=progress_callback,
        )

        context.build_stats['start_time'] = time.time()

        try:
            info(f"开始构建: {options.source_dir} -> {options.output_dir}", stage=LogStage.BUILD)
            debug(
                f"构建配置: algorithm={config.hash.algorithm.value} workers={config.publish.workers} "
                f"url_redirects={config.publish.url_redirects}",
                stage=LogStage.BUILD,
            )

            for step in self._steps:
                info(f"执行步骤: {step.description}", stage=LogStage.BUILD)
                step.execute(context)

            context.build_stats['end_time'] = time.time()
            build_time = context.build_stats['end_time'] - context.build_stats['start_time']

            success("构建成功", stage=LogStage.DONE)
            info(f"构建时间: {build_time:.1f}秒")
            info(f"文件总数: {context.build_stats['total_files']}")
            info(f"原始大小: {format_size(context.build_stats['total_size'])}")

            return context

        except (BuildError, ConfigError) as e:
            context.build_stats['end_time'] = time.time()
            error(f"构建失败: {e}", stage=LogStage.BUILD)
            raise

        except Exception as e:
            context.build_stats['end_time'] = time.time()
            error(f"构建失败: {e}", stage=LogStage.BUILD)
            raise BuildError(f"构建失败: {e}") from e

    def validate_pipeline(self) -> List[str]:
        """验证构建管道的完整性

        Returns:
            List[str]: 验证错误列表，空列表表示验证通过
        """
        errors = []

        if not self._steps:
            errors.append("构建管道中没有步骤")
            return errors

        # 检查步骤的进度范围是否连续
        prev_end = 0
        for step in self._steps:
            start, end = step.get_progress_range()
            if start != prev_end:
                errors.append(f"步骤 '{step.name}' 的进度范围不连续: 期望起始 {prev_end}%, 实际 {start}%")
            if start >= end:
                errors.append(f"步骤 '{step.name}' 的进度范围无效: {start}% - {end}%")
            prev_end = end

        if prev_end != 100:
            errors.append(f"构建管道的总进度范围不是100%: {prev_end}%")

        return errors
