"""构建服务模块

提供整合包清单构建的核心功能。
"""

from .builder import Builder, BuildResult
from .build_context import BuildContext, BuildError, BuildOptions, FileCollectionError
from .build_pipeline import BuildPipeline
from .walker import (
    Candidate,
    DirectoryClassifier,
    DirectoryWalker,
    walk_tree,
    URL_FILE_SUFFIX,
    INFO_FILE_SUFFIX,
)
from .hashing import ContentHasher, object_location
from .store import ObjectStore
from .sidecar import SidecarError, read_url_redirect
from .applicator import FeaturePattern, PathPatternList, PropertiesApplicator
from .collector import ClientFileCollector, PublishResult

__all__ = [
    # 主构建器
    "Builder",
    "BuildResult",
    "BuildPipeline",
    "BuildContext",
    "BuildOptions",
    "BuildError",
    "FileCollectionError",

    # 目录遍历
    "Candidate",
    "DirectoryClassifier",
    "DirectoryWalker",
    "walk_tree",
    "URL_FILE_SUFFIX",
    "INFO_FILE_SUFFIX",

    # 哈希与发布
    "ContentHasher",
    "object_location",
    "ObjectStore",
    "SidecarError",
    "read_url_redirect",
    "ClientFileCollector",
    "PublishResult",

    # 属性
    "FeaturePattern",
    "PathPatternList",
    "PropertiesApplicator",
]
