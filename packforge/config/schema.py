"""
配置 Schema 定义

使用 Pydantic 定义严格的 YAML 构建配置模型，支持验证和类型检查。
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class HashAlgorithm(str, Enum):
    """内容哈希算法

    对象库的存储地址由摘要决定，更换算法会使已有地址全部失效，
    因此算法必须显式配置并写入清单。
    """
    SHA1 = "sha1"
    SHA256 = "sha256"

    @property
    def digest_length(self) -> int:
        """十六进制摘要长度"""
        return {"sha1": 40, "sha256": 64}[self.value]


class DirectoryBehavior(str, Enum):
    """目录处理方式

    - SKIP: 整个目录（含子目录）被排除
    - IGNORE: 进入目录，但目录名不计入相对路径（透明覆盖层）
    - CONTINUE: 正常进入，目录名保留在相对路径中
    """
    SKIP = "skip"
    IGNORE = "ignore"
    CONTINUE = "continue"


DEFAULT_DIRECTORY_TABLE: Dict[str, DirectoryBehavior] = {
    "_SERVER": DirectoryBehavior.SKIP,
    "_OPTIONAL": DirectoryBehavior.IGNORE,
    "_CLIENT": DirectoryBehavior.IGNORE,
}


class FeatureModel(BaseModel):
    """可选功能声明"""
    name: str = Field(..., description="功能名称", min_length=1, max_length=100)
    description: str = Field("", description="功能描述", max_length=500)
    recommended: bool = Field(False, description="是否默认推荐启用")


class PathPatternsModel(BaseModel):
    """路径模式列表（glob 格式）"""
    include: List[str] = Field(default_factory=list, description="包含模式")
    exclude: List[str] = Field(default_factory=list, description="排除模式")

    @field_validator('include', 'exclude')
    @classmethod
    def validate_patterns(cls, v: List[str]) -> List[str]:
        """去除空白和空模式，统一使用正斜杠"""
        cleaned = []
        for pattern in v:
            pattern = pattern.strip().replace('\\', '/')
            if pattern:
                cleaned.append(pattern)
        return cleaned


class FeaturePatternModel(BaseModel):
    """功能与路径模式的绑定"""
    feature: str = Field(..., description="引用的功能名称")
    files: PathPatternsModel = Field(default_factory=PathPatternsModel, description="匹配的文件")

    @field_validator('feature')
    @classmethod
    def validate_feature(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("功能名称不能为空")
        return v.strip()


class LaunchModel(BaseModel):
    """启动参数修饰"""
    flags: List[str] = Field(default_factory=list, description="附加的启动参数")


class HashModel(BaseModel):
    """哈希配置"""
    algorithm: HashAlgorithm = Field(HashAlgorithm.SHA1, description="内容哈希算法")


class PublishModel(BaseModel):
    """发布配置"""
    workers: int = Field(8, description="并行工作线程数", ge=1, le=64)
    url_redirects: bool = Field(True, description="是否启用 .url 重定向文件")


class ConfigModel(BaseModel):
    """配置元信息模型"""
    version: int = Field(1, description="配置 schema 版本", ge=1)

    @field_validator('version')
    @classmethod
    def validate_config_version(cls, v: int) -> int:
        """验证配置版本"""
        SUPPORTED_VERSIONS = [1]
        if v not in SUPPORTED_VERSIONS:
            raise ValueError(f"不支持的配置版本 {v}，支持的版本: {SUPPORTED_VERSIONS}")
        return v


class PackConfig(BaseModel):
    """整合包构建主配置模型

    这是整个配置文件的根模型，包含所有配置部分。
    """

    # 元信息
    config: ConfigModel = Field(default_factory=ConfigModel, description="配置元信息")

    # 必填部分
    name: str = Field(..., description="整合包名称", min_length=1, max_length=100)
    game_version: str = Field(..., description="游戏版本", min_length=1, max_length=50)

    # 可选部分
    title: Optional[str] = Field(None, description="显示标题", max_length=200)
    launch: LaunchModel = Field(default_factory=LaunchModel, description="启动参数修饰")
    features: List[FeatureModel] = Field(default_factory=list, description="可选功能声明")
    feature_patterns: List[FeaturePatternModel] = Field(default_factory=list, description="功能路径模式")
    user_files: PathPatternsModel = Field(default_factory=PathPatternsModel, description="需保留本地修改的文件")
    default_jvm_arguments: str = Field("", description="默认 JVM 参数")
    default_heap_allocation: int = Field(1024, description="默认堆内存 (MB)")
    is_preview: bool = Field(False, description="是否为预览版")
    hash: HashModel = Field(default_factory=HashModel, description="哈希配置")
    publish: PublishModel = Field(default_factory=PublishModel, description="发布配置")
    directories: Dict[str, DirectoryBehavior] = Field(
        default_factory=lambda: dict(DEFAULT_DIRECTORY_TABLE),
        description="保留目录名到处理方式的映射"
    )

    model_config = {
        "extra": "forbid",  # 禁止额外字段
        "validate_assignment": True,  # 启用赋值验证
        "str_strip_whitespace": True,  # 自动去除字符串空白
    }

    @field_validator('default_heap_allocation')
    @classmethod
    def clamp_heap_allocation(cls, v: int) -> int:
        return max(1, v)

    @field_validator('default_jvm_arguments', mode='before')
    @classmethod
    def default_jvm_arguments_not_none(cls, v: Optional[str]) -> str:
        return "" if v is None else v

    @field_validator('directories')
    @classmethod
    def validate_directories(cls, v: Dict[str, DirectoryBehavior]) -> Dict[str, DirectoryBehavior]:
        """目录表只接受单个目录名"""
        for name in v:
            if not name or '/' in name or '\\' in name:
                raise ValueError(f"目录表中的名称必须是单个目录名: {name!r}")
        return v

    @model_validator(mode='after')
    def validate_feature_references(self) -> 'PackConfig':
        """功能名唯一，且每个路径模式都引用已声明的功能"""
        declared = set()
        for feature in self.features:
            if feature.name in declared:
                raise ValueError(f"功能名称重复: {feature.name}")
            declared.add(feature.name)

        for pattern in self.feature_patterns:
            if pattern.feature not in declared:
                raise ValueError(f"路径模式引用了未声明的功能: {pattern.feature}")

        return self

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式（枚举转为字符串）"""
        return self.model_dump(mode='json', exclude_none=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PackConfig':
        """从字典创建配置实例"""
        return cls.model_validate(data)

    def get_title(self) -> str:
        """获取显示标题"""
        return self.title or self.name
