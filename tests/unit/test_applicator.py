"""
属性应用器单元测试

测试路径模式匹配、功能标记的优先级、用户文件标记和注册时的配置检查。
"""

import pytest

from packforge.build.applicator import (
    FeaturePattern,
    PathPatternList,
    PropertiesApplicator,
    match_pattern,
)
from packforge.config.loader import ConfigError
from packforge.config.schema import PackConfig
from packforge.model.manifest import Feature, FileInstall


def _entry(to: str) -> FileInstall:
    return FileInstall(hash="ab" * 20, location="ab/ab/" + "ab" * 20, to=to, size=1)


class TestMatchPattern:
    """match_pattern 测试"""

    def test_glob(self):
        assert match_pattern("mods/foo.jar", "mods/*.jar")
        assert not match_pattern("config/foo.jar", "mods/*.jar")

    def test_directory_prefix(self):
        assert match_pattern("config/a.cfg", "config/")
        assert match_pattern("config/sub/b.cfg", "config/")
        assert not match_pattern("configs/a.cfg", "config/")

    def test_extension_any_depth(self):
        assert match_pattern("a.cfg", "*.cfg")
        assert match_pattern("config/deep/a.cfg", "*.cfg")
        assert not match_pattern("config/a.cfg.bak", "*.cfg")

    def test_path_segments(self):
        assert match_pattern("mods/extra/x.jar", "mods/*/x.jar")
        assert match_pattern("a/mods/extra/x.jar", "mods/*/x.jar")
        assert not match_pattern("mods/x.jar", "mods/*/x.jar")

    def test_case_sensitive(self):
        assert not match_pattern("Mods/foo.jar", "mods/*.jar")


class TestPathPatternList:
    """PathPatternList 测试"""

    def test_empty_matches_nothing(self):
        assert not PathPatternList().matches("anything.txt")

    def test_include_exclude(self):
        patterns = PathPatternList(include=["config/"], exclude=["config/generated/"])

        assert patterns.matches("config/a.cfg")
        assert not patterns.matches("config/generated/b.cfg")
        assert not patterns.matches("mods/a.jar")


class TestPropertiesApplicator:
    """PropertiesApplicator 测试"""

    def _applicator(self) -> PropertiesApplicator:
        return PropertiesApplicator([
            Feature(name="Shaders", description="光影"),
            Feature(name="Minimap", recommended=True),
        ])

    def test_register_unknown_feature(self):
        """测试引用未声明的功能时立即报错"""
        applicator = self._applicator()
        with pytest.raises(ConfigError):
            applicator.register(FeaturePattern("Unknown", PathPatternList(include=["*"])))

    def test_register_empty_feature(self):
        """测试空的功能名称"""
        applicator = self._applicator()
        with pytest.raises(ConfigError):
            applicator.register(FeaturePattern("  ", PathPatternList(include=["*"])))

    def test_apply_feature(self):
        """测试命中模式的条目被标记为可选"""
        applicator = self._applicator()
        applicator.register(FeaturePattern("Shaders", PathPatternList(include=["mods/*shader*.jar"])))

        shader = _entry("mods/cool-shader.jar")
        plain = _entry("mods/core.jar")
        applicator.apply(shader)
        applicator.apply(plain)

        assert shader.feature == "Shaders"
        assert shader.optional
        assert plain.feature is None
        assert not plain.optional

    def test_first_registered_match_wins(self):
        """测试多个模式命中时按注册顺序取第一个"""
        applicator = self._applicator()
        applicator.register(FeaturePattern("Minimap", PathPatternList(include=["mods/*.jar"])))
        applicator.register(FeaturePattern("Shaders", PathPatternList(include=["mods/shader.jar"])))

        entry = _entry("mods/shader.jar")
        applicator.apply(entry)

        assert entry.feature == "Minimap"

    def test_user_files(self):
        """测试用户文件标记"""
        applicator = self._applicator()
        applicator.set_user_files(PathPatternList(include=["options.txt", "config/"]))

        options = _entry("options.txt")
        cfg = _entry("config/a.cfg")
        mod = _entry("mods/a.jar")
        for e in (options, cfg, mod):
            applicator.apply(e)

        assert options.user_file
        assert cfg.user_file
        assert not mod.user_file

    def test_features_in_use_keeps_declaration_order(self):
        """测试只返回被引用的功能，并保持声明顺序"""
        applicator = PropertiesApplicator([
            Feature(name="A"), Feature(name="B"), Feature(name="C"),
        ])
        entries = [_entry("x"), _entry("y"), _entry("z")]
        entries[0].feature = "C"
        entries[1].feature = "A"

        assert [f.name for f in applicator.features_in_use(entries)] == ["A", "C"]

    def test_from_config(self):
        """测试从配置创建"""
        config = PackConfig(
            name="pack",
            game_version="1.20.1",
            features=[{"name": "Shaders", "description": "光影"}],
            feature_patterns=[{"feature": "Shaders", "files": {"include": ["shaderpacks/"]}}],
            user_files={"include": ["options.txt"]},
        )
        applicator = PropertiesApplicator.from_config(config)

        assert [p.feature for p in applicator.patterns] == ["Shaders"]
        assert applicator.features[0].description == "光影"

        entry = _entry("shaderpacks/BSL.zip")
        applicator.apply(entry)
        assert entry.feature == "Shaders"
