"""
清单数据模型

描述一个分发版本的全部文件、可选功能和默认启动参数。
安装器按 ``tasks`` 逐项比对哈希并下载，字段名使用 camelCase 序列化。
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urljoin

from pydantic import BaseModel, Field

# 安装器能理解的最低协议版本
MIN_PROTOCOL_VERSION = 5
DEFAULT_SPLASH_DISMISSALS = "OpenGL Vendor\nLWJGL Version\nEARLYDISPLAY"


class Feature(BaseModel):
    """用户可切换的可选功能"""
    name: str
    description: str = ""
    recommended: bool = False


class LaunchModifier(BaseModel):
    """启动参数修饰"""
    flags: List[str] = Field(default_factory=list)


class FileInstall(BaseModel):
    """文件安装任务（清单条目）

    ``location`` 要么是对象库中的相对路径，要么是外部 URL；
    后者不会在对象库中留下副本（``copy_to_store`` 为 False）。
    """
    type: str = "file"
    hash: str
    location: str
    to: str
    size: int = Field(0, ge=0)
    feature: Optional[str] = None
    user_file: bool = Field(False, alias="userFile")
    copy_to_store: bool = Field(True, exclude=True)

    model_config = {"populate_by_name": True}

    @property
    def optional(self) -> bool:
        """属于某个可选功能的条目即为可选条目"""
        return self.feature is not None


class Manifest(BaseModel):
    """分发清单"""
    name: Optional[str] = None
    title: Optional[str] = None
    version: Optional[str] = None
    minimum_version: int = Field(MIN_PROTOCOL_VERSION, alias="minimumVersion")
    base_url: Optional[str] = Field(None, alias="baseUrl")
    libraries_location: Optional[str] = Field(None, alias="librariesLocation")
    objects_location: Optional[str] = Field(None, alias="objectsLocation")
    game_version: Optional[str] = Field(None, alias="gameVersion")
    launch_modifier: LaunchModifier = Field(default_factory=LaunchModifier, alias="launch")
    features: List[Feature] = Field(default_factory=list)
    tasks: List[FileInstall] = Field(default_factory=list)
    loaders: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    hash_algorithm: Optional[str] = Field(None, alias="hashAlgorithm")
    default_heap_allocation: int = Field(1024, alias="defaultHeapAllocation")
    default_jvm_arguments: str = Field("", alias="defaultJVMArguments")
    splash_screen_dismissals: Optional[str] = Field(None, alias="splashScreenDismissals")
    is_preview: bool = Field(False, alias="isPreview")

    model_config = {"populate_by_name": True}

    def update_name(self, name: Optional[str]) -> None:
        if name is not None:
            self.name = name

    def update_title(self, title: Optional[str]) -> None:
        if title is not None:
            self.title = title

    def update_game_version(self, game_version: Optional[str]) -> None:
        if game_version is not None:
            self.game_version = game_version

    @property
    def effective_splash_screen_dismissals(self) -> str:
        """未设置时使用固定的默认列表"""
        if self.splash_screen_dismissals is None:
            return DEFAULT_SPLASH_DISMISSALS
        return self.splash_screen_dismissals

    @property
    def libraries_url(self) -> Optional[str]:
        if not self.base_url or not self.libraries_location:
            return None
        return urljoin(self.base_url, self.libraries_location + "/")

    @property
    def objects_url(self) -> Optional[str]:
        if not self.objects_location:
            return self.base_url
        if not self.base_url:
            return None
        return urljoin(self.base_url, self.objects_location + "/")

    def add_tasks(self, entries: Iterable[FileInstall]) -> None:
        """追加构建完成的条目（只在单线程汇总阶段调用）"""
        self.tasks.extend(entries)

    def find_task(self, to: str) -> Optional[FileInstall]:
        for task in self.tasks:
            if task.to == to:
                return task
        return None

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True)
        data["splashScreenDismissals"] = self.effective_splash_screen_dismissals
        return data

    def to_json(self, pretty: bool = False) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)

    @classmethod
    def from_json(cls, text: str) -> 'Manifest':
        return cls.model_validate(json.loads(text))
