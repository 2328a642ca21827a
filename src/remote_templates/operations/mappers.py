"""
Error mapping and CLI utilities.

Provides centralized exception-to-exit-code mapping and CLI command wrappers
to ensure consistent error handling across all Typer commands.
"""
from __future__ import annotations

import typer
from typing import Callable, TypeVar

T = TypeVar('T')

EXIT_CODES = {
    "TemplateResolutionError": 1,
    "ProviderFailedError": 1,
    "UnsupportedProviderError": 2,
    "ValueError": 2,
    "DownloadFailedError": 3,
    "TemplateNetworkError": 3,
    "TarballNotFoundError": 4,
    "SubdirNotFoundError": 5,
    "CorruptArchiveError": 6,
    "DirectoryExistsError": 12,
}

FALLBACK_EXIT_CODE = 3


def exit_code_for(exc: BaseException) -> int:
    """
    Map exception to standardized exit code.

    Returns exit codes:
    - 0: Success
    - 1: Identifier could not be resolved (TemplateResolutionError, ProviderFailedError)
    - 2: Unsupported provider or invalid input (UnsupportedProviderError, ValueError)
    - 3: Network/download error (DownloadFailedError) or unknown error
    - 4: Offline and not cached (TarballNotFoundError)
    - 5: Subdirectory missing from the archive (SubdirNotFoundError)
    - 6: Unreadable archive (CorruptArchiveError)
    - 12: Destination not empty (DirectoryExistsError)

    Args:
        exc: Exception to map

    Returns:
        Exit code (3 as fallback for unknown exceptions)
    """
    return EXIT_CODES.get(type(exc).__name__, FALLBACK_EXIT_CODE)


def run_and_exit(func: Callable[[], T]) -> T:
    """
    Unified error wrapper for CLI commands.

    Executes the given function and maps any exceptions to appropriate
    exit codes using typer.Exit. The error message is printed to stderr.

    Args:
        func: Function to execute

    Returns:
        Function result if successful

    Raises:
        typer.Exit: With appropriate exit code if function raises exception
    """
    try:
        return func()
    except typer.Exit:
        raise
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=exit_code_for(e)) from e
