# tansaku CLI - Main Application
"""
tansaku CLI

探索エンジンの動作確認用コマンド。
"""

import asyncio
import json
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tansaku.config import ConfigManager, EngineSettings
from tansaku.errors import TansakuError
from tansaku.frontier import FifoFrontier, LifoFrontier
from tansaku.observability import LogLevel, ObservabilityConfig, SearchMetrics, setup_logging
from tansaku.search import AsyncSearch, collect, take, when, which

# === アプリケーション初期化 ===

app = typer.Typer(
    name="tansaku",
    help="tansaku - lazy batched state-space search",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


# === 出力フォーマット ===

class OutputFormat(str, Enum):
    """出力フォーマット"""
    text = "text"
    json = "json"


class FrontierKind(str, Enum):
    """フロンティア種別"""
    fifo = "fifo"
    lifo = "lifo"


# === ユーティリティ関数 ===

def get_settings(config_path: Optional[Path] = None) -> EngineSettings:
    """設定を取得

    Args:
        config_path: 設定ファイルパス（Noneの場合はカレントディレクトリを探索）
    """
    search_paths = [
        config_path,
        Path("./tansaku.yaml"),
        Path("./tansaku.yml"),
    ]

    for path in search_paths:
        if path and path.exists():
            return ConfigManager.from_yaml(path).settings

    return EngineSettings()


def print_error(message: str):
    """エラーメッセージを表示"""
    console.print(f"[red]✗ Error:[/red] {message}")


def build_sequence_search(
    items: list[str],
    length: int,
    kind: FrontierKind,
    settings: EngineSettings,
    metrics: SearchMetrics | None = None,
):
    """長さ length の系列を列挙する探索パイプラインを構築"""

    def extend(path: tuple[str, ...]) -> list[tuple[str, ...]]:
        if kind is FrontierKind.lifo and len(path) >= length:
            return []
        return [path + (item,) for item in items]

    frontier = FifoFrontier() if kind is FrontierKind.fifo else LifoFrontier()
    search = (
        AsyncSearch()
        .from_candidates(())
        .through(extend)
        .via(frontier)
        .configure(settings)
        .observe(metrics)
    )

    if kind is FrontierKind.fifo:
        # 幅優先では長い系列が現れた時点で列挙は完了している
        stream = when(search, lambda path: len(path) > length)
    else:
        stream = search
    return which(stream, lambda path: len(path) == length)


# === バージョンコマンド ===

@app.command()
def version():
    """Show version information"""
    from tansaku import __version__

    console.print(Panel.fit(
        f"[bold cyan]tansaku[/bold cyan] v{__version__}\n"
        "[dim]Lazy batched state-space search[/dim]",
        border_style="cyan"
    ))


# === exploreコマンド ===

@app.command()
def explore(
    items: str = typer.Option("A,B,C", "--items", "-i", help="Comma separated alphabet"),
    length: int = typer.Option(2, "--length", "-n", min=0, help="Sequence length to accept"),
    frontier: FrontierKind = typer.Option(
        FrontierKind.fifo, "--frontier", help="Exploration order"
    ),
    cores: Optional[int] = typer.Option(None, "--cores", "-c", min=1, help="Candidates expanded per round"),
    max_size: Optional[int] = typer.Option(None, "--max-size", "-m", min=0, help="Frontier cap"),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", min=0, help="Maximum results"),
    output_format: OutputFormat = typer.Option(
        OutputFormat.text, "--format", "-f", help="Output format"
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Enumerate every sequence of LENGTH items over an alphabet"""
    try:
        settings = get_settings(config)
    except TansakuError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if cores is not None:
        settings.cores = cores
    if max_size is not None:
        settings.max_size = max_size
    if verbose:
        settings.log_level = LogLevel.DEBUG
    setup_logging(ObservabilityConfig(log_level=settings.log_level))

    alphabet = [item.strip() for item in items.split(",") if item.strip()]
    if not alphabet:
        print_error("--items must name at least one item")
        raise typer.Exit(1)

    metrics = SearchMetrics()
    stream = build_sequence_search(alphabet, length, frontier, settings, metrics)
    if limit is not None:
        stream = take(stream, limit)

    try:
        results = asyncio.run(collect(stream))
    except TansakuError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if output_format == OutputFormat.json:
        console.print_json(json.dumps({
            "results": [list(path) for path in results],
            "count": len(results),
            "rounds": int(metrics.get_counter("rounds")),
        }))
        return

    table = Table(title=f"Sequences of length {length}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Sequence", style="cyan")
    for index, path in enumerate(results, 1):
        table.add_row(str(index), " ".join(path))
    console.print(table)
    console.print(
        f"[green]✓[/green] {len(results)} sequences "
        f"in {int(metrics.get_counter('rounds'))} rounds"
    )


def main():
    """エントリーポイント"""
    app()


if __name__ == "__main__":
    main()
