"""
发布步骤模块

计算哈希、写入对象库并生成清单条目。
"""

from packforge.build.build_context import BuildContext
from packforge.build.collector import ClientFileCollector
from packforge.build.store import ObjectStore
from ...utils import format_size
from ...utils.logging import info, success, LogStage
from .build_step import BuildStep


class PublishStep(BuildStep):
    """发布步骤"""

    def __init__(self):
        super().__init__("publish", "计算哈希并写入对象库")

    def get_progress_range(self) -> tuple[int, int]:
        return (20, 90)

    def execute(self, context: BuildContext) -> None:
        publish = context.config.publish
        store = ObjectStore(context.options.objects_dir)
        info(
            f"对象库: {store.root} (算法={context.config.hash.algorithm.value} 线程={publish.workers})",
            stage=LogStage.PUBLISH,
        )

        collector = ClientFileCollector(
            context.manifest,
            context.applicator,
            store,
            algorithm=context.config.hash.algorithm,
            url_redirects=publish.url_redirects,
            workers=publish.workers,
        )

        start, end = self.get_progress_range()

        def on_progress(done: int, total: int) -> None:
            context.report("发布", start + int(done / max(1, total) * (end - start)), f"{done}/{total}")

        try:
            collector.collect(
                context.candidates,
                prior_failures=len(context.walk_errors),
                progress=on_progress,
            )
        finally:
            context.build_stats.update({
                'copied': collector.stats['copied'],
                'deduplicated': collector.stats['deduplicated'],
                'redirected': collector.stats['redirected'],
                'failed': collector.stats['failed'] + len(context.walk_errors),
            })

        stats = collector.stats
        success(
            f"已处理 {stats['files']} 个文件 ({format_size(stats['bytes'])}): "
            f"新写入 {stats['copied']}，已存在 {stats['deduplicated']}，重定向 {stats['redirected']}",
            stage=LogStage.PUBLISH,
        )
