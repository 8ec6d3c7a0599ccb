"""
清单模型单元测试
"""

import json

from packforge.model.manifest import (
    DEFAULT_SPLASH_DISMISSALS,
    MIN_PROTOCOL_VERSION,
    Feature,
    FileInstall,
    LaunchModifier,
    Manifest,
)


def _entry(to: str = "mods/a.jar", **kwargs) -> FileInstall:
    data = dict(hash="a" * 40, location="aa/aa/" + "a" * 40, to=to, size=10)
    data.update(kwargs)
    return FileInstall(**data)


class TestFileInstall:
    """FileInstall 测试"""

    def test_defaults(self):
        entry = _entry()

        assert entry.type == "file"
        assert entry.feature is None
        assert not entry.user_file
        assert not entry.optional
        assert entry.copy_to_store

    def test_serialized_with_camel_case(self):
        """测试序列化字段名"""
        data = _entry(user_file=True).model_dump(by_alias=True)

        assert data["userFile"] is True
        assert "user_file" not in data
        assert "copy_to_store" not in data

    def test_populate_by_alias(self):
        entry = FileInstall.model_validate({
            "hash": "b" * 40, "location": "x", "to": "y", "userFile": True,
        })
        assert entry.user_file


class TestManifest:
    """Manifest 测试"""

    def test_defaults(self):
        manifest = Manifest()

        assert manifest.minimum_version == MIN_PROTOCOL_VERSION
        assert manifest.default_heap_allocation == 1024
        assert manifest.default_jvm_arguments == ""
        assert manifest.tasks == []
        assert manifest.effective_splash_screen_dismissals == DEFAULT_SPLASH_DISMISSALS

    def test_update_ignores_none(self):
        """测试 update_* 只接受非空值"""
        manifest = Manifest(name="pack", title="Pack", gameVersion="1.20.1")

        manifest.update_name(None)
        manifest.update_title(None)
        manifest.update_game_version(None)
        assert (manifest.name, manifest.title, manifest.game_version) == ("pack", "Pack", "1.20.1")

        manifest.update_name("other")
        manifest.update_game_version("1.21")
        assert manifest.name == "other"
        assert manifest.game_version == "1.21"

    def test_object_and_library_urls(self):
        """测试由 base_url 解析对象库/库文件地址"""
        manifest = Manifest(
            base_url="https://example.com/packs/",
            objects_location="objects",
            libraries_location="libraries",
        )

        assert manifest.objects_url == "https://example.com/packs/objects/"
        assert manifest.libraries_url == "https://example.com/packs/libraries/"

    def test_urls_without_base(self):
        manifest = Manifest(objects_location="objects")

        assert manifest.objects_url is None
        assert manifest.libraries_url is None

    def test_find_task(self):
        manifest = Manifest()
        manifest.add_tasks([_entry("a.txt"), _entry("b.txt")])

        assert manifest.find_task("b.txt").to == "b.txt"
        assert manifest.find_task("c.txt") is None

    def test_to_json_field_names(self):
        """测试 JSON 输出使用安装器期望的字段名"""
        manifest = Manifest(
            name="pack",
            game_version="1.20.1",
            hash_algorithm="sha1",
            launch_modifier=LaunchModifier(flags=["-Dfoo=bar"]),
            features=[Feature(name="Shaders")],
        )
        manifest.add_tasks([_entry(feature="Shaders")])

        data = json.loads(manifest.to_json())

        for key in [
            "minimumVersion", "gameVersion", "hashAlgorithm", "launch",
            "defaultHeapAllocation", "defaultJVMArguments",
            "splashScreenDismissals", "isPreview", "tasks", "features",
        ]:
            assert key in data
        assert data["launch"]["flags"] == ["-Dfoo=bar"]
        assert data["splashScreenDismissals"] == DEFAULT_SPLASH_DISMISSALS
        assert data["tasks"][0]["feature"] == "Shaders"

    def test_explicit_splash_dismissals_kept(self):
        manifest = Manifest(splash_screen_dismissals="Custom")
        assert manifest.to_dict()["splashScreenDismissals"] == "Custom"

    def test_pretty_json(self):
        assert "\n" in Manifest(name="pack").to_json(pretty=True)
        assert "\n" not in Manifest(name="pack").to_json()

    def test_json_reload(self):
        """测试输出的 JSON 能被重新读取"""
        manifest = Manifest(name="整合包", version="1.0.0")
        manifest.add_tasks([_entry("mods/a.jar", user_file=True)])

        loaded = Manifest.from_json(manifest.to_json())

        assert loaded.name == "整合包"
        assert loaded.version == "1.0.0"
        assert loaded.tasks[0].to == "mods/a.jar"
        assert loaded.tasks[0].user_file
