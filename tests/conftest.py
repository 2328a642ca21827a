"""Root pytest configuration for remote-templates tests."""
import pytest

from remote_templates.settings import Settings

from tests.fakes.fake_host import FakeHost

_ENV_VARS = (
    "REMOTE_TEMPLATES_CACHE_DIR",
    "REMOTE_TEMPLATES_HTTP_TIMEOUT",
    "REMOTE_TEMPLATES_HTTP_RETRY",
    "REMOTE_TEMPLATES_AUTH",
    "REMOTE_TEMPLATES_INSECURE",
    "REMOTE_TEMPLATES_DEBUG",
)


# Set up test environment variables
@pytest.fixture(autouse=True)
def test_env(monkeypatch, tmp_path):
    """Isolate tests from the user's environment and cache."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))


# Standardized test fixtures
@pytest.fixture
def settings(tmp_path):
    """Standard test settings with the cache under tmp_path."""
    return Settings(cache_dir=str(tmp_path / "cache"))


@pytest.fixture
def host():
    """Fake HTTP host; register routes, then hand out clients."""
    return FakeHost()


@pytest.fixture
def http(host, settings):
    """HTTP client wired to the fake host."""
    client = host.client(settings)
    yield client
    client.close()


@pytest.fixture
def work_dir(tmp_path):
    """Directory used as ``cwd`` for downloads."""
    path = tmp_path / "work"
    path.mkdir()
    return path
