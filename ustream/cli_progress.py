"""Console rendering and progress helpers for the ustream CLI."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence

from rich import filesize
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)
from rich.table import Table

from .models import ClientConfig
from .use_cases.upload import DEFAULT_PROTECT

console = Console()

_PHASE_LABELS = {
    "initiated": "[cyan]Slot reserved[/cyan]",
    "transferred": "[cyan]Bytes transferred[/cyan]",
    "completed": "[green]Upload completed[/green]",
}


def _describe_source(source: Path) -> str:
    try:
        return f"{source.name} ({filesize.decimal(source.stat().st_size)})"
    except OSError:
        return f"{source} [red](unreadable)[/red]"


def render_upload_summary(
    channel_id: str,
    source: Path,
    options: Dict[str, Any],
    env_file: Optional[Path] = None,
    log_mode: str = "silent",
) -> None:
    """Show what is about to be uploaded and where."""
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(style="bold cyan")
    table.add_column(overflow="fold")

    table.add_row("file", _describe_source(Path(source)))
    for key, value in options.items():
        if value:
            table.add_row(key, str(value))
    if not options.get("protect"):
        table.add_row("protect", f"{DEFAULT_PROTECT} [dim](default)[/dim]")
    table.add_row("api", os.getenv("USTREAM_API_URL") or ClientConfig.api_url)
    if env_file is not None:
        table.add_row("env", str(env_file))
    table.add_row("logging", log_mode)

    console.print(Panel.fit(table, title=f"[bold]upload to channel {channel_id}[/bold]", border_style="cyan"))


def render_items(title: str, items: Iterable[Dict[str, Any]], columns: Sequence[str]) -> int:
    """Print records as a table; returns how many rows were printed."""
    table = Table(title=title)
    for column in columns:
        table.add_column(column, overflow="fold")

    count = 0
    for item in items:
        table.add_row(*("" if item.get(c) is None else str(item.get(c)) for c in columns))
        count += 1

    if count:
        console.print(table)
    else:
        console.print(f"[dim]No {title.lower()} found.[/dim]")
    return count


class UploadProgress:
    """Progress bar for the transfer phase plus one line per upload phase."""

    def __init__(self, file_path: Path):
        self.file_path = Path(file_path)
        self.filename = self.file_path.name
        try:
            self.file_size = self.file_path.stat().st_size
        except OSError:
            self.file_size = 0

        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold cyan]{task.fields[filename]}", justify="left"),
            BarColumn(bar_width=42),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            expand=False,
            console=console,
        )
        self._task_id: Optional[TaskID] = None

    def start(self) -> None:
        if self._task_id is not None:
            return
        console.print(f"[cyan]Uploading:[/cyan] {self.filename} ({filesize.decimal(self.file_size)})")
        self._progress.start()
        self._task_id = self._progress.add_task(
            "upload",
            filename=self.filename[:60],
            total=self.file_size or None,
        )

    def update(self, sent_bytes: int) -> None:
        if self._task_id is None:
            self.start()
        self._progress.update(self._task_id, completed=sent_bytes)

    def stop(self) -> None:
        self._progress.stop()

    def on_phase(self, event_name: str):
        def callback(session) -> None:
            if event_name == "transferred":
                self.stop()
            label = _PHASE_LABELS.get(event_name, event_name)
            console.print(f"{label} file_id={session.file_id}")

        return callback

    def on_failed(self, session, exc: BaseException) -> None:
        self.stop()
        console.print(f"[red]Failed:[/red] {self.filename} - {exc}")

    def attach(self, events) -> None:
        for name in _PHASE_LABELS:
            events.on(name, self.on_phase(name))
        events.on("failed", self.on_failed)
