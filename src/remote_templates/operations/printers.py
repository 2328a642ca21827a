"""
Human-readable output formatting.

Centralizes all CLI output formatting so that commands stay thin and a JSON
mode can be added in one place.
"""
from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..models import DownloadResult
from ..uri import ParsedURI

_console = Console(soft_wrap=True)


def print_download_summary(result: DownloadResult, verbose: bool = False) -> None:
    """
    Print download summary.

    Args:
        result: Result of download_template()
        verbose: Also show archive URL, cache location and subdirectory
    """
    info = result.info
    label = f"{info.name}@{info.version}" if info.version else info.name

    _console.print(f"[bold]Downloaded[/] {escape(label)} to {escape(str(result.dir))}")
    _console.print(f"[bold]Source:[/] {escape(result.source)} [dim]({escape(result.provider)})[/]")

    if verbose:
        table = Table(title="Template")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="yellow")
        table.add_row("Archive", escape(info.tar_url))
        table.add_row("Cached at", escape(str(result.archive_path)))
        table.add_row("Subdirectory", escape(info.subdir or "/"))
        if info.url:
            table.add_row("URL", escape(info.url))
        _console.print(table)


def print_verify_result(source: str, ok: bool) -> None:
    """
    Print verification outcome.

    Args:
        source: Identifier that was verified
        ok: Verification result
    """
    if ok:
        _console.print(f"[green]✓[/] Template {escape(source)} is available")
    else:
        _console.print(f"[red]✗[/] Template {escape(source)} was not found")


def print_parsed_uri(parsed: ParsedURI) -> None:
    """Print the components of a parsed identifier."""
    _console.print(f"[bold]Repo:[/] {escape(parsed.repo) or '[dim](none)[/]'}")
    _console.print(f"[bold]Subdir:[/] {escape(parsed.subdir)}")
    _console.print(f"[bold]Ref:[/] {escape(parsed.ref) if parsed.ref else '[dim](default)[/]'}")
