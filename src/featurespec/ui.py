"""Rich-based console output for the featurespec command.

Status, events and errors go to stderr so the resolved document can be
piped from stdout.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

FEATURESPEC_THEME = Theme({
    "accent": "bold bright_green",
    "path": "bright_cyan",
    "info": "dim",
    "success": "bold bright_green",
    "warn": "bold bright_yellow",
    "error": "bold bright_red",
})


class FeatureSpecPrinter:
    """Console printer used by the CLI modes."""

    def __init__(self, console: Optional[Console] = None, verbose: bool = False) -> None:
        self.console = console or Console(theme=FEATURESPEC_THEME, stderr=True)
        self.verbose = verbose

    def show_step(self, icon: str, message: str) -> None:
        """Print a step-by-step status line."""
        self.console.print(f"  {icon}  {message}")

    def header(self, info: Dict[str, Any]) -> None:
        body = "\n".join(f"[info]{key}:[/info] {escape(str(value))}" for key, value in info.items())
        self.console.print(Panel(body, title="[accent]featurespec[/accent]", border_style="accent"))

    def event(self, event: str, data: Dict[str, Any]) -> None:
        """``on_event`` callback for the preprocessor; prints only when verbose."""
        if not self.verbose:
            return
        if event == "background":
            state = "[success]kept[/success]" if data["kept"] else "[warn]dropped[/warn]"
            self.show_step("▸", f"@background([bold]{escape(data['flag'])}[/]) {state}")
        elif event == "include":
            kind = "outline" if data.get("outline") else "scenario"
            self.show_step(
                "▸",
                f"@include [path]{escape(data['feature'])}[/path] {kind} "
                f"[bold]{escape(data['scenario'])}[/] ({data['lines']} lines)",
            )
        elif event == "ignore":
            self.show_step("▸", f"ignoring scenario [bold]{escape(data['scenario'])}[/]")

    def file_written(self, path: Path) -> None:
        self.show_step("💾", f"Wrote [path]{escape(str(path))}[/path]")

    def warning(self, message: str) -> None:
        self.console.print(f"[warn]Warning:[/warn] {escape(message)}", soft_wrap=True)

    def error(self, message: str) -> None:
        self.console.print(f"[error]Error:[/error] {escape(message)}", soft_wrap=True)

    def summary(self, ok: int, failed: int, elapsed: float) -> None:
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_row("Resolved", f"[success]{ok}[/success]")
        table.add_row("Failed", f"[error]{failed}[/error]" if failed else "0")
        table.add_row("Elapsed", f"{elapsed:.2f}s")
        self.console.print(table)
