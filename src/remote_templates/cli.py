"""
Remote templates CLI

Implements 3 CLI verbs with Operations facade integration:
- download: Download a template into a directory
- verify: Check that a template exists without downloading it
- parse: Show how an identifier is parsed
"""
from __future__ import annotations

import logging
import os
from typing import Optional

import typer

from .cli_context import CLIContext
from .operations import Operations, OpsConfig, run_and_exit
from .operations.printers import print_download_summary, print_parsed_uri, print_verify_result

app = typer.Typer(name="remote-templates", help="Download project templates from git hosts and URLs")


def _configure_logging(verbose: bool) -> None:
    if verbose or os.getenv("REMOTE_TEMPLATES_DEBUG"):
        logging.basicConfig(level=logging.DEBUG, format="[remote-templates] %(levelname)s %(name)s: %(message)s")


@app.command()
def download(
    source: str = typer.Argument(..., help="Template identifier, e.g. owner/repo, gitlab:owner/repo/sub#v1, or a URL"),
    dir: Optional[str] = typer.Argument(None, help="Destination directory (default: template name)"),
    provider: Optional[str] = typer.Option(None, "--provider", help="Provider for identifiers without a prefix"),
    force: bool = typer.Option(False, "--force", help="Write into a non-empty destination"),
    force_clean: bool = typer.Option(False, "--force-clean", help="Remove the destination before extracting"),
    offline: bool = typer.Option(False, "--offline", help="Use the cached archive only"),
    prefer_offline: bool = typer.Option(False, "--prefer-offline", help="Use the cached archive when present"),
    auth: Optional[str] = typer.Option(None, "--auth", envvar="REMOTE_TEMPLATES_AUTH", help="Bearer token for private templates"),
    cwd: Optional[str] = typer.Option(None, "--cwd", help="Base directory for the destination"),
    verbose: bool = typer.Option(False, "--verbose", help="Show detailed output"),
) -> None:
    """Download a template into a directory."""
    _configure_logging(verbose)
    if offline and prefer_offline:
        raise typer.BadParameter("--offline and --prefer-offline are mutually exclusive")

    def _download() -> None:
        offline_mode = "prefer" if prefer_offline else offline
        force_mode = "clean" if force_clean else force

        context = CLIContext.from_env()
        try:
            ops = Operations(
                config=OpsConfig(offline=offline_mode, verbose=verbose),
                settings=context.settings,
                http=context.http,
            )
            result = ops.download(source, dir, provider=provider, force=force_mode, cwd=cwd, auth=auth)
        finally:
            context.close()

        print_download_summary(result, verbose=verbose)

    run_and_exit(_download)


@app.command()
def verify(
    source: str = typer.Argument(..., help="Template identifier"),
    provider: Optional[str] = typer.Option(None, "--provider", help="Provider for identifiers without a prefix"),
    auth: Optional[str] = typer.Option(None, "--auth", envvar="REMOTE_TEMPLATES_AUTH", help="Bearer token for private templates"),
    verbose: bool = typer.Option(False, "--verbose", help="Show detailed output"),
) -> None:
    """Check that a template exists without downloading it."""
    _configure_logging(verbose)

    def _verify() -> None:
        context = CLIContext.from_env()
        try:
            ops = Operations(config=OpsConfig(verbose=verbose), settings=context.settings, http=context.http)
            ok = ops.verify(source, provider=provider, auth=auth)
        finally:
            context.close()

        print_verify_result(source, ok)
        if not ok:
            raise typer.Exit(code=1)

    run_and_exit(_verify)


@app.command()
def parse(
    source: str = typer.Argument(..., help="Template identifier"),
) -> None:
    """Show how an identifier is split into repo, subdir and ref."""

    def _parse() -> None:
        ops = Operations(config=OpsConfig(), settings=CLIContext.from_env().settings)
        print_parsed_uri(ops.parse(source))

    run_and_exit(_parse)


if __name__ == "__main__":
    app()
