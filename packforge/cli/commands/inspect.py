"""
Inspect 命令实现

读取已生成的清单，显示摘要、功能和条目。
"""

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ...model.manifest import Manifest
from ...utils import format_size


console = Console()


def inspect_command(
    manifest: str = typer.Argument(..., help="清单文件路径"),
    json_output: bool = typer.Option(False, "--json", help="输出 JSON 格式"),
    show_tasks: bool = typer.Option(False, "--tasks", help="显示条目列表"),
) -> None:
    """查看清单信息

    示例:
        packforge inspect upload/example-pack.json
        packforge inspect upload/example-pack.json --tasks
    """
    manifest_path = Path(manifest)

    if not manifest_path.is_file():
        console.print(f"[red]清单文件不存在: {manifest_path}[/red]")
        raise typer.Exit(1)

    try:
        data = Manifest.from_json(manifest_path.read_text(encoding='utf-8'))
    except (OSError, ValueError, ValidationError) as e:
        console.print(f"[red]读取清单失败: {e}[/red]")
        raise typer.Exit(1)

    if json_output:
        console.print_json(data.to_json())
        return

    _display_summary(data)
    if data.features:
        _display_features(data)
    if show_tasks:
        _display_tasks(data)


def _display_summary(manifest: Manifest) -> None:
    table = Table(title="清单信息")
    table.add_column("字段", style="cyan")
    table.add_column("值", style="green")

    total_size = sum(t.size for t in manifest.tasks)
    redirected = sum(1 for t in manifest.tasks if "://" in t.location)

    table.add_row("名称", manifest.name or "-")
    table.add_row("标题", manifest.title or "-")
    table.add_row("版本", manifest.version or "-")
    table.add_row("游戏版本", manifest.game_version or "-")
    table.add_row("协议版本", str(manifest.minimum_version))
    table.add_row("哈希算法", manifest.hash_algorithm or "-")
    table.add_row("条目数量", str(len(manifest.tasks)))
    table.add_row("外部 URL 条目", str(redirected))
    table.add_row("总大小", format_size(total_size))
    table.add_row("默认堆内存", f"{manifest.default_heap_allocation} MB")
    table.add_row("预览版", "是" if manifest.is_preview else "否")

    console.print(table)


def _display_features(manifest: Manifest) -> None:
    table = Table(title="可选功能")
    table.add_column("名称", style="cyan")
    table.add_column("推荐", style="green")
    table.add_column("条目", style="yellow")
    table.add_column("描述")

    for feature in manifest.features:
        count = sum(1 for t in manifest.tasks if t.feature == feature.name)
        table.add_row(feature.name, "是" if feature.recommended else "否", str(count), feature.description)

    console.print(table)


def _display_tasks(manifest: Manifest) -> None:
    table = Table(title="条目")
    table.add_column("目标路径", style="cyan")
    table.add_column("大小", style="green")
    table.add_column("功能", style="yellow")
    table.add_column("用户文件")
    table.add_column("位置", style="dim")

    for task in sorted(manifest.tasks, key=lambda t: t.to):
        table.add_row(
            task.to,
            format_size(task.size),
            task.feature or "-",
            "是" if task.user_file else "",
            task.location,
        )

    console.print(table)
