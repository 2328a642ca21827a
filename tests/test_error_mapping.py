"""
Test error mapping and CLI exit code functionality.

Validates that exceptions are correctly mapped to exit codes and that
the run_and_exit wrapper handles errors appropriately for CLI commands.
"""
from __future__ import annotations

import pytest
import typer
from pydantic import ValidationError

from remote_templates.errors import (
    CorruptArchiveError,
    DirectoryExistsError,
    DownloadFailedError,
    ProviderFailedError,
    SubdirNotFoundError,
    TarballNotFoundError,
    TemplateError,
    TemplateNetworkError,
    TemplateResolutionError,
    UnsupportedProviderError,
)
from remote_templates.operations.mappers import EXIT_CODES, FALLBACK_EXIT_CODE, exit_code_for, run_and_exit
from remote_templates.providers.base import ProviderOptions
from remote_templates.providers.registry import resolve_template, select_provider


class TestExitCodeMapping:
    """Test exception to exit code mapping."""

    @pytest.mark.parametrize("exc,code", [
        (TemplateResolutionError("x"), 1),
        (ProviderFailedError("x", provider="github"), 1),
        (UnsupportedProviderError("x"), 2),
        (ValueError("x"), 2),
        (DownloadFailedError("x"), 3),
        (TemplateNetworkError("x"), 3),
        (TarballNotFoundError("x", path="/c/a.tar.gz", offline=True), 4),
        (SubdirNotFoundError("x", subdir="docs/"), 5),
        (CorruptArchiveError("x"), 6),
        (DirectoryExistsError("x", path="/d"), 12),
    ])
    def test_known_exceptions_mapped_correctly(self, exc, code):
        assert exit_code_for(exc) == code

    def test_invalid_descriptor_maps_to_provider_failure(self, http):
        """Pydantic validation errors surface wrapped in ProviderFailedError."""
        def incomplete(source, options):
            return {"name": "starter"}

        selection = select_provider("custom:x", providers={"custom": incomplete})
        with pytest.raises(ProviderFailedError) as exc_info:
            resolve_template(selection, ProviderOptions(http=http))

        assert isinstance(exc_info.value.__cause__, ValidationError)
        assert exit_code_for(exc_info.value) == 1
        assert "ValidationError" not in EXIT_CODES

    def test_unknown_exception_maps_to_fallback(self):
        """Test that unknown exceptions map to fallback exit code."""
        assert exit_code_for(RuntimeError("test")) == FALLBACK_EXIT_CODE == 3
        assert exit_code_for(PermissionError("test")) == 3

    def test_exit_codes_are_nonzero(self):
        assert all(code > 0 for code in EXIT_CODES.values())


class TestErrorHierarchy:

    def test_all_errors_share_base(self):
        for cls in (UnsupportedProviderError, TemplateResolutionError, DownloadFailedError,
                    TemplateNetworkError, ProviderFailedError, TarballNotFoundError,
                    SubdirNotFoundError, CorruptArchiveError, DirectoryExistsError):
            assert issubclass(cls, TemplateError)

    def test_provider_failed_is_both_kinds(self):
        err = ProviderFailedError("boom", provider="gitlab")
        assert isinstance(err, TemplateResolutionError)
        assert isinstance(err, DownloadFailedError)
        assert err.provider == "gitlab"

    def test_network_error_is_download_failure(self):
        assert issubclass(TemplateNetworkError, DownloadFailedError)


class TestRunAndExit:
    """Test run_and_exit wrapper function."""

    def test_successful_function_returns_result(self):
        assert run_and_exit(lambda: "ok") == "ok"

    def test_exception_mapped_to_exit(self, capsys):
        def failing():
            raise TarballNotFoundError("Tarball not found: /c/a.tar.gz (offline: True)")

        with pytest.raises(typer.Exit) as exc_info:
            run_and_exit(failing)

        assert exc_info.value.exit_code == 4
        assert "Error: Tarball not found" in capsys.readouterr().err

    def test_typer_exit_passes_through(self):
        def exiting():
            raise typer.Exit(code=1)

        with pytest.raises(typer.Exit) as exc_info:
            run_and_exit(exiting)

        assert exc_info.value.exit_code == 1

    def test_cause_preserved(self):
        def corrupt():
            raise CorruptArchiveError("bad")

        with pytest.raises(typer.Exit) as exc_info:
            run_and_exit(corrupt)

        assert isinstance(exc_info.value.__cause__, CorruptArchiveError)
