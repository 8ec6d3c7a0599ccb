"""
清单写入步骤模块

补全功能列表并把清单写为 JSON。
"""

from packforge.build.build_context import BuildContext, BuildError
from ...utils.logging import success, LogStage
from .build_step import BuildStep


class ManifestWriteStep(BuildStep):
    """清单写入步骤"""

    def __init__(self):
        super().__init__("manifest", "写入清单")

    def get_progress_range(self) -> tuple[int, int]:
        return (90, 100)

    def execute(self, context: BuildContext) -> None:
        manifest = context.manifest
        manifest.features = context.applicator.features_in_use(manifest.tasks)

        path = context.options.resolve_manifest_path(manifest.name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(manifest.to_json(pretty=context.options.pretty_print), encoding='utf-8')
        except OSError as e:
            raise BuildError(f"写入清单失败 {path}: {e}") from e

        context.manifest_path = path
        success(f"清单已写入: {path} ({len(manifest.tasks)} 个条目)", stage=LogStage.MANIFEST)
        context.report("清单", self.get_progress_range()[1], str(path))
