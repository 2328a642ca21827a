"""
CLI smoke tests with a fake host.

Tests basic CLI functionality and command wiring without network access.
Validates that all commands can be invoked, produce the expected output and
map failures to the documented exit codes.
"""
from __future__ import annotations

import pytest
from typer.testing import CliRunner

from remote_templates.cli import app
from remote_templates.cli_context import CLIContext
from tests.helpers.archives import build_tar, github_style_entries

TARBALL_V1 = "https://api.github.com/repos/unjs/template/tarball/v1"


@pytest.fixture(autouse=True)
def fake_context(monkeypatch, host, settings):
    """Route every CLI command through the fake host."""
    def from_env(cls):
        return cls(settings=settings, _http=host.client(settings))

    monkeypatch.setattr(CLIContext, "from_env", classmethod(from_env))


class TestCLISmokeTests:
    """Smoke tests for CLI commands with the fake host."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def test_help_lists_commands(self):
        result = self.runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("download", "verify", "parse"):
            assert command in result.output

    def test_download_command_basic(self, host, work_dir):
        host.serve_archive(TARBALL_V1, build_tar(github_style_entries()))

        result = self.runner.invoke(app, ["download", "unjs/template#v1", "--cwd", str(work_dir)])

        assert result.exit_code == 0, result.output
        assert "Downloaded unjs-template@v1" in result.output
        assert "Source: unjs/template#v1" in result.output
        assert (work_dir / "unjs-template" / "README.md").exists()

    def test_download_command_verbose(self, host, work_dir):
        host.serve_archive(TARBALL_V1, build_tar(github_style_entries()))

        result = self.runner.invoke(app, [
            "download", "unjs/template/playground#v1", "app",
            "--cwd", str(work_dir),
            "--verbose",
        ])

        assert result.exit_code == 0, result.output
        assert "Archive" in result.output
        assert "/playground" in result.output
        assert (work_dir / "app" / "app.ts").exists()

    def test_download_into_non_empty_dir(self, host, work_dir):
        host.serve_archive(TARBALL_V1, build_tar(github_style_entries()))
        (work_dir / "unjs-template").mkdir()
        (work_dir / "unjs-template" / "mine.txt").write_text("mine")

        result = self.runner.invoke(app, ["download", "unjs/template#v1", "--cwd", str(work_dir)])

        assert result.exit_code == 12
        assert "Error:" in result.output

    def test_download_force_clean(self, host, work_dir):
        host.serve_archive(TARBALL_V1, build_tar(github_style_entries()))
        (work_dir / "unjs-template").mkdir()
        (work_dir / "unjs-template" / "mine.txt").write_text("mine")

        result = self.runner.invoke(app, [
            "download", "unjs/template#v1", "--cwd", str(work_dir), "--force-clean",
        ])

        assert result.exit_code == 0, result.output
        assert not (work_dir / "unjs-template" / "mine.txt").exists()

    def test_download_offline_without_cache(self, work_dir):
        result = self.runner.invoke(app, ["download", "unjs/template#v1", "--cwd", str(work_dir), "--offline"])

        assert result.exit_code == 4
        assert "Tarball not found" in result.output

    def test_download_missing_subdir(self, host, work_dir):
        host.serve_archive(TARBALL_V1, build_tar(github_style_entries()))

        result = self.runner.invoke(app, ["download", "unjs/template/nope#v1", "--cwd", str(work_dir)])

        assert result.exit_code == 5

    def test_download_unsupported_provider(self, work_dir):
        result = self.runner.invoke(app, ["download", "nope:org/repo", "--cwd", str(work_dir)])

        assert result.exit_code == 2
        assert "Unsupported provider: nope" in result.output

    def test_download_http_error(self, host, work_dir):
        host.route("GET", TARBALL_V1, status=404)

        result = self.runner.invoke(app, ["download", "unjs/template#v1", "--cwd", str(work_dir)])

        assert result.exit_code == 3

    def test_offline_flags_are_exclusive(self, work_dir):
        result = self.runner.invoke(app, [
            "download", "unjs/template#v1", "--offline", "--prefer-offline",
        ])

        assert result.exit_code == 2

    def test_verify_command(self, host):
        host.route("HEAD", "https://github.com/unjs/template/tree/v1/")

        result = self.runner.invoke(app, ["verify", "unjs/template#v1"])

        assert result.exit_code == 0
        assert "is available" in result.output

    def test_verify_command_not_found(self):
        result = self.runner.invoke(app, ["verify", "unjs/missing#v1"])

        assert result.exit_code == 1
        assert "was not found" in result.output

    def test_parse_command(self):
        result = self.runner.invoke(app, ["parse", "gh:unjs/template/sub/dir#v1.2.0"])

        assert result.exit_code == 0
        assert "Repo: unjs/template" in result.output
        assert "Subdir: /sub/dir" in result.output
        assert "Ref: v1.2.0" in result.output

    def test_parse_command_invalid(self):
        result = self.runner.invoke(app, ["parse", "not-a-repo"])

        assert result.exit_code == 0
        assert "(none)" in result.output
