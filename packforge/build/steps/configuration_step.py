"""
配置步骤模块

根据配置创建清单并注册功能模式。此步骤不访问文件系统，
配置错误在任何哈希工作开始之前就会终止构建。
"""

from packforge.build.applicator import PropertiesApplicator
from packforge.build.build_context import BuildContext
from packforge.model.manifest import LaunchModifier, Manifest
from ...utils.logging import info, debug, LogStage
from .build_step import BuildStep


class ConfigurationStep(BuildStep):
    """配置步骤"""

    def __init__(self):
        super().__init__("configure", "准备清单并注册功能模式")

    def get_progress_range(self) -> tuple[int, int]:
        return (0, 5)

    def execute(self, context: BuildContext) -> None:
        config = context.config
        options = context.options

        info(f"整合包: {config.name} (游戏版本 {config.game_version})", stage=LogStage.CONFIG)

        applicator = PropertiesApplicator.from_config(config)
        for pattern in applicator.patterns:
            debug(f"功能模式: {pattern.feature} <- {pattern.files.include}", stage=LogStage.CONFIG)

        manifest = Manifest(
            version=options.version,
            base_url=options.base_url,
            libraries_location=options.libraries_location,
            objects_location=options.objects_location,
            hash_algorithm=config.hash.algorithm.value,
            launch_modifier=LaunchModifier(flags=list(config.launch.flags)),
            default_heap_allocation=config.default_heap_allocation,
            default_jvm_arguments=config.default_jvm_arguments,
            is_preview=config.is_preview,
        )
        manifest.update_name(config.name)
        manifest.update_title(config.get_title())
        manifest.update_game_version(config.game_version)

        context.manifest = manifest
        context.applicator = applicator
        context.report("配置", self.get_progress_range()[1], f"已注册 {len(applicator.patterns)} 个功能模式")
