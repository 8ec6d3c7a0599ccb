"""
客户端文件收集器

对每个候选文件计算哈希、解析 URL 重定向、写入对象库并生成清单条目。
每个文件在线程池中独立处理，单个文件失败不会中断其余文件；
工作线程只返回结果，由调用线程统一汇总进清单。
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Union

from ..config.schema import HashAlgorithm
from ..model.manifest import FileInstall, Manifest
from ..utils.logging import debug, get_stage_logger, LogStage
from ..utils.paths import to_posix_path
from .applicator import PropertiesApplicator
from .build_context import FileCollectionError
from .hashing import ContentHasher, object_location
from .sidecar import find_url_redirect
from .store import ObjectStore
from .walker import Candidate

_log = get_stage_logger(LogStage.HASH)

# (已完成数量, 总数)
CollectProgress = Callable[[int, int], None]


@dataclass
class PublishResult:
    """单个候选文件的处理结果"""
    candidate: Candidate
    entry: Optional[FileInstall] = None
    written: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.entry is not None


class ClientFileCollector:
    """客户端文件收集器"""

    def __init__(
        self,
        manifest: Manifest,
        applicator: PropertiesApplicator,
        store: ObjectStore,
        algorithm: Union[HashAlgorithm, str] = HashAlgorithm.SHA1,
        url_redirects: bool = True,
        workers: int = 8,
    ):
        """创建收集器

        Args:
            manifest: 接收条目的清单
            applicator: 为条目标记功能/用户文件属性
            store: 对象库
            algorithm: 内容哈希算法
            url_redirects: 是否启用 .url 重定向文件
            workers: 线程池大小
        """
        self.manifest = manifest
        self.applicator = applicator
        self.store = store
        self.algorithm = HashAlgorithm(algorithm)
        self.url_redirects = url_redirects
        self.workers = max(1, workers)
        self.stats: Dict[str, int] = {}
        self._reset_stats()

    def _reset_stats(self) -> None:
        self.stats = {
            'files': 0,
            'bytes': 0,
            'copied': 0,
            'deduplicated': 0,
            'redirected': 0,
            'failed': 0,
        }

    def process(self, candidate: Candidate) -> PublishResult:
        """处理单个候选文件（在工作线程中执行）

        I/O 错误、无法解码或无效的重定向文件、无法规范化的目标路径
        都会被记录为失败结果；
        ConfigError 会直接抛出并终止整个构建。
        """
        try:
            digest = ContentHasher.hash_file(candidate.path, self.algorithm)
            to = to_posix_path(candidate.relative_path)

            url = find_url_redirect(candidate.path) if self.url_redirects else None
            if url is not None:
                location = url
                copy = False
            else:
                location = object_location(digest, self.algorithm)
                copy = True

            entry = FileInstall(
                hash=digest,
                location=location,
                to=to,
                size=candidate.path.stat().st_size,
                copy_to_store=copy,
            )
            self.applicator.apply(entry)

            written = self.store.publish(candidate.path, location) if copy else False
            return PublishResult(candidate=candidate, entry=entry, written=written)

        except (OSError, ValueError) as e:
            _log.error(f"处理文件失败 {candidate.path}: {e}")
            return PublishResult(candidate=candidate, error=str(e))

    def collect(
        self,
        candidates: Iterable[Candidate],
        prior_failures: int = 0,
        progress: Optional[CollectProgress] = None,
    ) -> List[FileInstall]:
        """处理全部候选文件并把成功的条目追加到清单

        Args:
            candidates: 候选文件
            prior_failures: 之前阶段（如目录遍历）已发生的失败数，计入汇总结果
            progress: 进度回调

        Returns:
            List[FileInstall]: 追加到清单的条目

        Raises:
            FileCollectionError: 任一文件失败（已成功的条目仍保留在清单中）
            ConfigError: 配置错误，立即终止
        """
        candidates = list(candidates)
        self._reset_stats()
        results = self._run(candidates, progress)

        entries = self._fold(results)
        self.manifest.add_tasks(entries)

        failed = self.stats['failed'] + prior_failures
        if failed:
            raise FileCollectionError(failed, len(candidates) + prior_failures)

        return entries

    def _run(self, candidates: List[Candidate], progress: Optional[CollectProgress]) -> List[PublishResult]:
        results: List[PublishResult] = []
        total = len(candidates)

        executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="publish")
        try:
            futures = [executor.submit(self.process, c) for c in candidates]
            for future in as_completed(futures):
                results.append(future.result())
                if progress:
                    progress(len(results), total)
        except BaseException:
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        executor.shutdown(wait=True)

        return results

    def _fold(self, results: List[PublishResult]) -> List[FileInstall]:
        """单线程汇总：统计、检查目标路径唯一性"""
        entries: List[FileInstall] = []
        seen: Dict[str, Candidate] = {}

        succeeded = [r for r in results if r.ok]
        self.stats['failed'] = len(results) - len(succeeded)

        # 同一目标路径出现多次时，源路径排序靠前的保留
        succeeded.sort(key=lambda r: (r.entry.to, str(r.candidate.path)))
        for result in succeeded:
            entry = result.entry
            if entry.to in seen:
                _log.error(f"目标路径重复: {entry.to} ({seen[entry.to].path} 与 {result.candidate.path})")
                self.stats['failed'] += 1
                continue

            seen[entry.to] = result.candidate
            entries.append(entry)

            self.stats['files'] += 1
            self.stats['bytes'] += entry.size
            if not entry.copy_to_store:
                self.stats['redirected'] += 1
            elif result.written:
                self.stats['copied'] += 1
            else:
                self.stats['deduplicated'] += 1
                debug(f"对象已存在，跳过复制: {entry.to} -> {entry.location}", stage=LogStage.PUBLISH)

        return entries
