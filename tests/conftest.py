import pytest
from bs4 import BeautifulSoup

from chat_exporter.config import load_config
from chat_exporter.errors import Diagnostics
from chat_exporter.preferences import PreferenceStore
from chat_exporter.profiles import Profile


@pytest.fixture
def profile():
    """The built-in DeepSeek locators."""
    return Profile(name="deepseek", version="2025.03", is_default=True)


@pytest.fixture
def diagnostics():
    return Diagnostics()


@pytest.fixture
def soup_of():
    """Parse an HTML string and return its first element."""
    def _parse(markup):
        soup = BeautifulSoup(markup, "html.parser")
        return soup.find(True)
    return _parse


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Keep config and preference lookups inside tmp_path."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("APPDATA", str(tmp_path / "appdata"))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    return tmp_path


@pytest.fixture
def config(isolated_env):
    return load_config()


@pytest.fixture
def preferences(tmp_path):
    return PreferenceStore(tmp_path / "prefs" / "preferences.yaml")
