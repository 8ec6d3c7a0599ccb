"""
packforge CLI 主入口

提供命令行接口，支持 build/validate/inspect/example/info 等命令。
"""

import sys
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..utils import configure_logging, OutputLevel
from .commands import build, validate, inspect


app = typer.Typer(
    name="packforge",
    help="packforge - 整合包内容寻址清单构建器",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """显示版本信息"""
    if value:
        console.print(f"packforge v{__version__}")
        raise typer.Exit()


def verbose_callback(verbose: bool) -> None:
    """配置详细输出"""
    configure_logging(level=OutputLevel.DEBUG if verbose else OutputLevel.INFO)


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="显示版本信息"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        callback=verbose_callback,
        help="启用详细输出"
    )
) -> None:
    """packforge - 整合包内容寻址清单构建器

    使用 --help 查看可用命令的详细信息。
    """
    pass


# 注册子命令
app.command("build", help="构建清单和对象库")(build.build_command)
app.command("validate", help="验证配置文件")(validate.validate_command)
app.command("inspect", help="查看清单信息")(inspect.inspect_command)


@app.command("info")
def info_command() -> None:
    """显示系统信息"""
    from ..config.schema import HashAlgorithm
    from ..model.manifest import MIN_PROTOCOL_VERSION

    table = Table(title="版本信息")
    table.add_column("组件", style="cyan")
    table.add_column("版本", style="green")

    table.add_row("packforge", __version__)
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("清单协议", str(MIN_PROTOCOL_VERSION))

    console.print(table)

    algo_table = Table(title="支持的哈希算法")
    algo_table.add_column("算法", style="cyan")
    algo_table.add_column("摘要长度", style="green")

    for algo in HashAlgorithm:
        algo_table.add_row(algo.value, str(algo.digest_length))

    console.print(algo_table)


@app.command("example")
def example_command(
    output: str = typer.Option(
        "modpack.yaml",
        "--output", "-o",
        help="输出配置文件路径"
    )
) -> None:
    """生成示例配置文件"""
    from ..config import save_config, ConfigError
    from ..config.schema import (
        FeatureModel,
        FeaturePatternModel,
        LaunchModel,
        PackConfig,
        PathPatternsModel,
    )

    config = PackConfig(
        name="example-pack",
        title="Example Pack",
        game_version="1.20.1",
        launch=LaunchModel(flags=["-Dfml.ignoreInvalidMinecraftCertificates=true"]),
        features=[
            FeatureModel(name="Shaders", description="可选的光影模组", recommended=False),
        ],
        feature_patterns=[
            FeaturePatternModel(
                feature="Shaders",
                files=PathPatternsModel(include=["mods/*shader*.jar"]),
            ),
        ],
        user_files=PathPatternsModel(include=["options.txt", "config/"]),
        default_heap_allocation=4096,
    )

    try:
        save_config(config, output)
    except ConfigError as e:
        console.print(f"[red]生成示例配置失败: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"✓ 示例配置文件已生成: [green]{output}[/green]")
    console.print("请根据需要修改配置文件，然后运行:")
    console.print(f"  [cyan]packforge build -i . -o upload -c {output}[/cyan]")


if __name__ == "__main__":
    app()
