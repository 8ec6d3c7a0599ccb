"""
构建管道单元测试

测试构建管道、构建步骤、构建上下文以及完整的构建流程。
"""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from packforge.build.applicator import PropertiesApplicator
from packforge.build.build_context import (
    BuildContext,
    BuildError,
    BuildOptions,
    FileCollectionError,
)
from packforge.build.build_pipeline import BuildPipeline
from packforge.build.builder import Builder
from packforge.build.hashing import ContentHasher
from packforge.build.steps.build_step import BuildStep
from packforge.config.loader import ConfigError
from packforge.config.schema import PackConfig


class MockBuildStep(BuildStep):
    """模拟构建步骤"""

    def __init__(self, name="MockStep", description="Mock step", progress_range=(0, 10)):
        super().__init__(name, description)
        self._progress_range = progress_range
        self.execute_called = False
        self.execute_context = None

    def get_progress_range(self):
        return self._progress_range

    def execute(self, context):
        self.execute_called = True
        self.execute_context = context
        context.build_stats['mock_processed'] = True


class FailingBuildStep(MockBuildStep):
    """抛出指定异常的构建步骤"""

    def __init__(self, exc, **kwargs):
        super().__init__(**kwargs)
        self.exc = exc

    def execute(self, context):
        raise self.exc


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding='utf-8')
    return path


@pytest.fixture
def config():
    return PackConfig(
        name="testpack",
        title="测试整合包",
        game_version="1.20.1",
        launch={"flags": ["-Dfml.ignoreInvalidMinecraftCertificates=true"]},
        features=[
            {"name": "Shaders", "description": "光影"},
            {"name": "Unused"},
        ],
        feature_patterns=[{"feature": "Shaders", "files": {"include": ["shaderpacks/"]}}],
        user_files={"include": ["options.txt"]},
    )


@pytest.fixture
def source(tmp_path):
    src = tmp_path / "src"
    _write(src / "mods" / "foo.jar", "ABC")
    _write(src / "config" / "a.cfg", "same")
    _write(src / "backup" / "a.cfg", "same")
    _write(src / "shaderpacks" / "BSL.zip", "shader")
    _write(src / "options.txt", "fov:70")
    _write(src / "_SERVER" / "server.properties", "motd=hi")
    _write(src / ".git" / "HEAD", "ref")
    _write(src / "_OPTIONAL" / "extra.jar", "extra")
    _write(src / "_OPTIONAL" / "extra.jar.url", "https://cdn.example.com/extra.jar")
    return src


@pytest.fixture
def options(tmp_path, source):
    return BuildOptions(
        source_dir=source,
        output_dir=tmp_path / "out",
        version="1.0.0",
        base_url="https://example.com/packs/",
    )


class TestBuildStep:
    """BuildStep 基类测试"""

    def test_build_step_interface(self):
        step = MockBuildStep()

        assert step.name == "MockStep"
        assert step.description == "Mock step"
        assert step.get_progress_range() == (0, 10)
        assert not step.execute_called

    def test_build_step_execute(self):
        step = MockBuildStep()
        context = MagicMock()

        step.execute(context)

        assert step.execute_called
        assert step.execute_context == context


class TestBuildContext:
    """BuildContext 测试"""

    def test_init(self, config, options):
        context = BuildContext(config=config, options=options)

        assert context.manifest is None
        assert context.candidates == []
        assert context.build_stats['total_files'] == 0
        assert context.build_stats['failed'] == 0

    def test_report(self, config, options):
        callback = MagicMock()
        context = BuildContext(config=config, options=options, progress_callback=callback)

        context.report("遍历", 20, "消息")

        callback.assert_called_once_with("遍历", 20, 100, "消息")

    def test_report_without_callback(self, config, options):
        BuildContext(config=config, options=options).report("遍历", 20)

    def test_default_manifest_path(self, options):
        assert options.resolve_manifest_path("testpack") == options.output_dir / "testpack.json"
        assert options.objects_dir == options.output_dir / "objects"

    def test_explicit_manifest_path(self, tmp_path, options):
        options.manifest_path = tmp_path / "custom.json"
        assert options.resolve_manifest_path("testpack") == tmp_path / "custom.json"


class TestBuildPipeline:
    """BuildPipeline 测试"""

    def test_default_steps(self):
        names = [step.name for step in BuildPipeline().get_steps()]
        assert names == ["configure", "walk", "publish", "manifest"]

    def test_default_pipeline_valid(self):
        assert BuildPipeline().validate_pipeline() == []

    def test_add_and_remove_step(self):
        pipeline = BuildPipeline()
        step = MockBuildStep(name="extra")

        pipeline.add_step(step, position=0)
        assert pipeline.get_steps()[0] is step

        pipeline.remove_step("extra")
        assert step not in pipeline.get_steps()

    def test_get_steps_returns_copy(self):
        pipeline = BuildPipeline()
        pipeline.get_steps().clear()
        assert len(pipeline.get_steps()) == 4

    def test_validate_empty_pipeline(self):
        pipeline = BuildPipeline()
        for step in pipeline.get_steps():
            pipeline.remove_step(step.name)

        assert pipeline.validate_pipeline() == ["构建管道中没有步骤"]

    def test_validate_gap_and_total(self):
        """测试进度范围不连续以及总进度不足 100%"""
        pipeline = BuildPipeline()
        for step in pipeline.get_steps():
            pipeline.remove_step(step.name)
        pipeline.add_step(MockBuildStep(name="a", progress_range=(0, 10)))
        pipeline.add_step(MockBuildStep(name="b", progress_range=(20, 20)))

        errors = pipeline.validate_pipeline()

        assert any("不连续" in e for e in errors)
        assert any("无效" in e for e in errors)
        assert any("不是100%" in e for e in errors)

    def test_execute_runs_steps_in_order(self, config, options):
        pipeline = BuildPipeline()
        for step in pipeline.get_steps():
            pipeline.remove_step(step.name)
        first = MockBuildStep(name="first", progress_range=(0, 50))
        second = MockBuildStep(name="second", progress_range=(50, 100))
        pipeline.add_step(first)
        pipeline.add_step(second)

        context = pipeline.execute(config, options)

        assert first.execute_called and second.execute_called
        assert first.execute_context is context
        assert context.build_stats['mock_processed']
        assert context.build_stats['end_time'] >= context.build_stats['start_time']

    def test_unexpected_error_wrapped(self, config, options):
        """测试未预期的异常被包装为 BuildError"""
        pipeline = BuildPipeline()
        for step in pipeline.get_steps():
            pipeline.remove_step(step.name)
        pipeline.add_step(FailingBuildStep(RuntimeError("boom"), progress_range=(0, 100)))

        with pytest.raises(BuildError, match="boom"):
            pipeline.execute(config, options)

    def test_config_error_not_wrapped(self, config, options):
        pipeline = BuildPipeline()
        for step in pipeline.get_steps():
            pipeline.remove_step(step.name)
        pipeline.add_step(FailingBuildStep(ConfigError("bad"), progress_range=(0, 100)))

        with pytest.raises(ConfigError):
            pipeline.execute(config, options)


class TestBuilder:
    """Builder 端到端测试"""

    def test_successful_build(self, config, options):
        """测试完整构建流程"""
        progress = []
        builder = Builder()

        result = builder.build(config, options, lambda stage, cur, total, msg: progress.append(cur))

        assert result.success
        assert result.error is None
        assert result.task_count == 6
        assert result.manifest_path == options.output_dir / "testpack.json"

        data = json.loads(result.manifest_path.read_text(encoding='utf-8'))
        assert data["name"] == "testpack"
        assert data["title"] == "测试整合包"
        assert data["version"] == "1.0.0"
        assert data["gameVersion"] == "1.20.1"
        assert data["hashAlgorithm"] == "sha1"
        assert data["objectsLocation"] == "objects"
        assert data["launch"]["flags"] == ["-Dfml.ignoreInvalidMinecraftCertificates=true"]
        assert [f["name"] for f in data["features"]] == ["Shaders"]

        tasks = {t["to"]: t for t in data["tasks"]}
        assert sorted(tasks) == [
            "backup/a.cfg",
            "config/a.cfg",
            "extra.jar",
            "mods/foo.jar",
            "options.txt",
            "shaderpacks/BSL.zip",
        ]
        assert tasks["shaderpacks/BSL.zip"]["feature"] == "Shaders"
        assert tasks["options.txt"]["userFile"] is True
        assert tasks["extra.jar"]["location"] == "https://cdn.example.com/extra.jar"
        assert tasks["config/a.cfg"]["location"] == tasks["backup/a.cfg"]["location"]

        digest = ContentHasher.hash_data(b"ABC")
        stored = options.objects_dir / digest[0:2] / digest[2:4] / digest
        assert stored.read_bytes() == b"ABC"

        objects = [p for p in options.objects_dir.rglob("*") if p.is_file()]
        assert len(objects) == 4

        assert progress[-1] == 100
        assert progress == sorted(progress)

        stats = builder.last_context.build_stats
        assert stats['copied'] == 4
        assert stats['deduplicated'] == 1
        assert stats['redirected'] == 1

    def test_rebuild_reuses_store(self, config, options):
        """测试重复构建时不再写入已有对象"""
        Builder().build(config, options)
        builder = Builder()

        result = builder.build(config, options)

        assert result.success
        assert builder.last_context.build_stats['copied'] == 0

    def test_partial_failure_writes_no_manifest(self, config, options):
        """测试部分文件失败时构建失败且不写清单"""
        real_hash_file = ContentHasher.hash_file.__func__

        def flaky(cls, path, algorithm="sha1"):
            if Path(path).name == "foo.jar":
                raise PermissionError("Access denied")
            return real_hash_file(cls, path, algorithm)

        with patch.object(ContentHasher, "hash_file", classmethod(flaky)):
            result = Builder().build(config, options)

        assert not result.success
        assert result.failed_count == 1
        assert "1/6" in result.error
        assert not (options.output_dir / "testpack.json").exists()

    def test_missing_source_directory(self, config, options, tmp_path):
        options.source_dir = tmp_path / "missing"

        result = Builder().build(config, options)

        assert not result.success
        assert "missing" in result.error

    def test_config_error_before_filesystem(self, config, options):
        """测试配置错误直接抛出，且不会创建输出目录"""
        with patch.object(PropertiesApplicator, "from_config", side_effect=ConfigError("bad pattern")):
            with pytest.raises(ConfigError):
                Builder().build(config, options)

        assert not options.output_dir.exists()

    def test_file_collection_error_is_build_error(self):
        error = FileCollectionError(2, 10)
        assert isinstance(error, BuildError)
        assert error.failed_count == 2
        assert "2/10" in str(error)

    def test_validate_build_pipeline(self):
        assert Builder().validate_build_pipeline() == []
