"""
Build 命令实现

遍历源目录，写入对象库并生成清单。
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ...config import find_config, load_config, ConfigError, ConfigValidationError
from ...utils.logging import set_log_level, set_log_file, OutputLevel


console = Console()


def resolve_source_dir(input_dir: Path) -> Path:
    """源文件位于 ``<input>/src`` 时使用该目录，否则直接使用输入目录"""
    src = input_dir / "src"
    return src if src.is_dir() else input_dir


def build_command(
    input_dir: str = typer.Option(..., "--input", "-i", help="整合包输入目录"),
    output_dir: str = typer.Option(..., "--output", "-o", help="输出目录（对象库和清单）"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="配置文件路径（默认 <input>/modpack.yaml）"),
    version: Optional[str] = typer.Option(None, "--version", help="写入清单的版本号"),
    manifest_dest: Optional[str] = typer.Option(None, "--manifest-dest", help="清单输出路径（默认 <output>/<name>.json）"),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="分发根 URL"),
    objects_location: str = typer.Option("objects", "--objects-location", help="对象库相对位置"),
    libraries_location: str = typer.Option("libraries", "--libraries-location", help="依赖库相对位置"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, max=64, help="并行线程数（覆盖配置）"),
    no_url_redirects: bool = typer.Option(False, "--no-url-redirects", help="忽略 .url 重定向文件"),
    pretty: bool = typer.Option(False, "--pretty", help="格式化输出清单 JSON"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="日志输出文件"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出详细调试日志 (DEBUG 级别)"),
) -> None:
    """构建清单和对象库

    示例:
        packforge build -i modpack -o upload
        packforge build -i modpack -o upload --version 1.2.0 --pretty
    """
    from ...build.build_context import BuildOptions
    from ...build.builder import Builder

    set_log_level(OutputLevel.DEBUG if verbose else OutputLevel.INFO)
    if log_file:
        set_log_file(log_file)

    input_path = Path(input_dir)
    if not input_path.is_dir():
        console.print(f"[red]输入目录不存在: {input_path}[/red]")
        raise typer.Exit(1)

    config_path = Path(config) if config else find_config(input_path)
    if config_path is None:
        console.print(f"[red]未找到配置文件，请使用 --config 指定或在 {input_path} 中创建 modpack.yaml[/red]")
        raise typer.Exit(1)

    try:
        console.print(f"[cyan]正在加载配置文件[/cyan]: {config_path}")
        config_obj = load_config(config_path)

        if workers is not None:
            config_obj.publish.workers = workers
        if no_url_redirects:
            config_obj.publish.url_redirects = False

        options = BuildOptions(
            source_dir=resolve_source_dir(input_path),
            output_dir=Path(output_dir),
            manifest_path=Path(manifest_dest) if manifest_dest else None,
            version=version,
            base_url=base_url,
            objects_location=objects_location,
            libraries_location=libraries_location,
            pretty_print=pretty,
        )

        result = Builder().build(config_obj, options)

    except ConfigValidationError as e:
        console.print("[red]配置验证失败:[/red]")
        console.print(e.format_errors())
        raise typer.Exit(1)
    except ConfigError as e:
        console.print(f"[red]配置错误[/red]: {e}")
        raise typer.Exit(1)

    if not result.success:
        console.print(f"[red]✗ 构建失败[/red]: {result.error}")
        if log_file:
            console.print(f"[yellow]请检查日志文件 {log_file} 获取详细信息。[/yellow]")
        raise typer.Exit(1)

    console.print(f"[green]✓ 构建完成[/green]: {result.manifest_path}")
    console.print(f"[blue]条目数量[/blue]: {result.task_count}")
