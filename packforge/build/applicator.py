"""
属性应用器

按路径模式为清单条目标记所属的可选功能，以及是否为需要保留本地修改的用户文件。
"""

import fnmatch
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from ..config.loader import ConfigError
from ..config.schema import FeaturePatternModel, PackConfig, PathPatternsModel
from ..model.manifest import Feature, FileInstall


def match_pattern(path: str, pattern: str) -> bool:
    """匹配单个 glob 模式

    支持的写法：
    - 普通 glob：``mods/*.jar``
    - 目录前缀（以 / 结尾）：``config/``
    - 扩展名：``*.cfg``，对任意层级生效
    - 路径片段：``mods/*/extra.jar``，可匹配路径中的任意连续片段

    Args:
        path: 正斜杠形式的相对路径
        pattern: glob 模式

    Returns:
        bool: 是否匹配
    """
    if fnmatch.fnmatchcase(path, pattern):
        return True

    if pattern.endswith('/'):
        dir_pattern = pattern.rstrip('/')
        if fnmatch.fnmatchcase(path, dir_pattern):
            return True
        if path.startswith(dir_pattern + '/'):
            return True
        return False

    if pattern.startswith('*.') and '/' not in pattern:
        return path.endswith(pattern[1:])

    if '/' in pattern:
        path_parts = path.split('/')
        pattern_parts = pattern.split('/')

        for i in range(len(path_parts) - len(pattern_parts) + 1):
            if all(
                fnmatch.fnmatchcase(path_parts[i + j], pattern_parts[j])
                for j in range(len(pattern_parts))
            ):
                return True

    return False


@dataclass
class PathPatternList:
    """路径谓词：命中任一包含模式且不命中任何排除模式"""
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)

    @classmethod
    def from_model(cls, model: PathPatternsModel) -> 'PathPatternList':
        return cls(include=list(model.include), exclude=list(model.exclude))

    def matches(self, path: str) -> bool:
        if not any(match_pattern(path, p) for p in self.include):
            return False
        return not any(match_pattern(path, p) for p in self.exclude)


@dataclass
class FeaturePattern:
    """功能与路径谓词的绑定"""
    feature: str
    files: PathPatternList

    @classmethod
    def from_model(cls, model: FeaturePatternModel) -> 'FeaturePattern':
        return cls(feature=model.feature, files=PathPatternList.from_model(model.files))


class PropertiesApplicator:
    """属性应用器

    所有模式都在哈希开始前注册；``apply`` 只读取已注册的模式，
    可以被多个工作线程并发调用。
    """

    def __init__(self, features: Iterable[Feature] = ()):
        self._features: List[Feature] = list(features)
        self._known = {f.name for f in self._features}
        self._patterns: List[FeaturePattern] = []
        self._user_files = PathPatternList()

    @property
    def features(self) -> List[Feature]:
        return list(self._features)

    @property
    def patterns(self) -> List[FeaturePattern]:
        return list(self._patterns)

    def register(self, pattern: FeaturePattern) -> None:
        """注册功能模式

        Raises:
            ConfigError: 功能名为空或未声明
        """
        if not pattern.feature or not pattern.feature.strip():
            raise ConfigError("发现空的功能名称")
        if pattern.feature not in self._known:
            raise ConfigError(f"路径模式引用了未声明的功能: {pattern.feature}")
        self._patterns.append(pattern)

    def set_user_files(self, user_files: PathPatternList) -> None:
        self._user_files = user_files

    def match_feature(self, path: str) -> Optional[str]:
        """按注册顺序返回第一个命中的功能名"""
        for pattern in self._patterns:
            if pattern.files.matches(path):
                return pattern.feature
        return None

    def apply(self, entry: FileInstall) -> None:
        """为条目标记功能和用户文件属性"""
        feature = self.match_feature(entry.to)
        if feature is not None:
            entry.feature = feature

        if self._user_files.matches(entry.to):
            entry.user_file = True

    def features_in_use(self, entries: Sequence[FileInstall]) -> List[Feature]:
        """被至少一个条目引用的功能，保持声明顺序"""
        used = {e.feature for e in entries if e.feature is not None}
        return [f for f in self._features if f.name in used]

    @classmethod
    def from_config(cls, config: PackConfig) -> 'PropertiesApplicator':
        """根据配置创建并注册全部模式"""
        applicator = cls(Feature(**f.model_dump()) for f in config.features)
        for pattern in config.feature_patterns:
            applicator.register(FeaturePattern.from_model(pattern))
        applicator.set_user_files(PathPatternList.from_model(config.user_files))
        return applicator
