import argparse
import asyncio
import json
import os
import sys
from typing import List, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)
from rich.table import Table

from mediagrab.client.api import DEFAULT_SERVER, DownloadError, MediaGrabClient
from mediagrab.client.playlist import PlaylistSelection, parse_positions
from mediagrab.client.progress import BatchReport, SavedFile

console = Console()


def _progress() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    )


class _ProgressBar:
    """Adapts client progress callbacks to a rich task"""

    def __init__(self, progress: Progress, description: str):
        self.progress = progress
        # total=None renders as a pulsing, indeterminate bar
        self.task = progress.add_task(description, total=None)

    def __call__(self, percent: Optional[int], received: int) -> None:
        if percent is None:
            self.progress.update(self.task, total=None, completed=received)
        else:
            self.progress.update(self.task, total=100, completed=percent)


def _report_saved(saved: SavedFile) -> None:
    console.print(f"[green]✓ Saved {saved.path} ({saved.size} bytes)[/green]")


async def _preview(client: MediaGrabClient, args) -> int:
    data = await client.preview(args.url, args.type)

    if args.json:
        console.print_json(json.dumps(data))
        return 0

    if data.get("type") == "playlist":
        table = Table(title=f"{data.get('title')} ({data.get('totalItems', 0)} items)")
        table.add_column("#", justify="right")
        table.add_column("Title")
        table.add_column("Duration")
        for position, item in enumerate(data.get("items") or [], start=1):
            table.add_row(str(position), item.get("title") or "", item.get("duration") or "")
        console.print(table)
        return 0

    console.print(f"[bold]{data.get('title')}[/bold]")
    if data.get("author"):
        console.print(f"by {data['author']}")
    console.print(f"platform: {data.get('platform')}  duration: {data.get('duration') or '?'}")
    for option in data.get("audioFormats") or []:
        console.print(f"  [{option['formatId']}] {option['label']}")
    return 0


async def _get(client: MediaGrabClient, args) -> int:
    with _progress() as progress:
        saved = await client.download(
            args.url,
            directory=args.output_dir,
            kind=args.kind,
            format_id=args.format_id,
            on_progress=_ProgressBar(progress, "Downloading"),
        )
    _report_saved(saved)
    return 0


def _print_batch(report: BatchReport) -> None:
    console.print(
        f"Downloaded {len(report.saved)}/{report.total}"
        + (f", {len(report.failed)} failed" if report.failed else "")
    )
    for link in report.failed:
        console.print(f"[red]✗ {link}[/red]")


async def _batch(client: MediaGrabClient, args) -> int:
    with _progress() as progress:
        task = progress.add_task("Batch", total=None)

        def on_item(report: BatchReport) -> None:
            progress.update(task, total=report.total, completed=report.completed)

        report = await client.download_links_file(
            args.file,
            directory=args.output_dir,
            kind=args.kind,
            on_item=on_item,
        )

    _print_batch(report)
    return 1 if report.failed and not report.saved else 0


async def _playlist(client: MediaGrabClient, args) -> int:
    data = await client.preview(args.url)
    if data.get("type") != "playlist":
        console.print("[yellow]Not a playlist, downloading single item[/yellow]")
        return await _get(client, args)

    selection = PlaylistSelection(data)
    if args.all:
        selection.select_all()
    elif args.select:
        selection.select_positions(parse_positions(args.select))

    urls = selection.selected_urls
    if not urls:
        console.print("[red]No items selected. Use --all or --select.[/red]")
        return 2

    if args.individual or len(urls) == 1:
        report = await client.download_batch(urls, directory=args.output_dir, kind=args.kind)
        _print_batch(report)
        return 1 if report.failed and not report.saved else 0

    with _progress() as progress:
        saved = await client.download_zip(
            urls,
            directory=args.output_dir,
            kind=args.kind,
            on_progress=_ProgressBar(progress, f"Archiving {len(urls)} items"),
        )
    _report_saved(saved)
    return 0


COMMANDS = {
    "preview": _preview,
    "get": _get,
    "batch": _batch,
    "playlist": _playlist,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mediagrab-client", description="Client for a mediagrab server")
    parser.add_argument(
        "--server",
        default=os.environ.get("MEDIAGRAB_SERVER", DEFAULT_SERVER),
        help="Server base URL (env MEDIAGRAB_SERVER)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    preview = subparsers.add_parser("preview", help="Show metadata for a URL")
    preview.add_argument("url")
    preview.add_argument("--type", choices=["video", "audio"], default=None)
    preview.add_argument("--json", action="store_true", help="Print the raw response")

    def add_download_options(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--kind", choices=["video", "audio"], default="video")
        sub.add_argument("-o", "--output-dir", default=".")

    get = subparsers.add_parser("get", help="Download one item")
    get.add_argument("url")
    get.add_argument("--format-id", default=None)
    add_download_options(get)

    batch = subparsers.add_parser("batch", help="Download every link in a text file")
    batch.add_argument("file")
    add_download_options(batch)

    playlist = subparsers.add_parser("playlist", help="Download selected playlist entries")
    playlist.add_argument("url")
    playlist.add_argument("--select", help="1-based positions, e.g. 1,3,5-7")
    playlist.add_argument("--all", action="store_true")
    playlist.add_argument("--individual", action="store_true", help="One file per entry instead of a ZIP")
    playlist.set_defaults(format_id=None)
    add_download_options(playlist)

    return parser


async def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    async with MediaGrabClient(args.server) as client:
        try:
            return await COMMANDS[args.command](client, args)
        except (DownloadError, IndexError, ValueError) as e:
            console.print(f"[red]✗ {e}[/red]")
            return 1


def main() -> None:
    sys.exit(asyncio.run(run()))
