"""
Pytest configuration and fixtures for testing pagetrans.
"""

import os

# Quiet, file-free logging and no project config file for the whole test run
os.environ["PAGETRANS_LOG_MODE"] = "off"
os.environ["PAGETRANS_CONFIG"] = os.path.join(os.path.dirname(__file__), "_no_such_config.json")

import pytest

from pagetrans.config import DEFAULT_CONFIG, clear_config_cache, merge_config
from pagetrans.translation.cache import TranslationCache
from pagetrans.web import create_app


SCENARIO_MARKUP = "<title>Home</title><h1>Welcome</h1><p>Body text</p>"
SCENARIO_SELECTORS = ["title", "h1", "p"]
SCENARIO_TRANSLATIONS = ["Accueil", "Bienvenue", "Texte du corps"]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeRemote:
    """Stands in for TranslationClient and records every call."""

    def __init__(self, translations=None, error=None):
        self.calls = []
        self.translations = translations
        self.error = error

    def translate(self, texts, source_language, target_language):
        self.calls.append((list(texts), source_language, target_language))
        if self.error is not None:
            raise self.error
        if self.translations is not None:
            return list(self.translations)
        return [f"[{target_language}] {text}" for text in texts]


@pytest.fixture(autouse=True)
def fresh_config(tmp_path, monkeypatch):
    """Each test starts from defaults with its own (absent) config file."""
    monkeypatch.setenv("PAGETRANS_CONFIG", str(tmp_path / "config.json"))
    monkeypatch.delenv("PAGETRANS_API_KEY", raising=False)
    monkeypatch.delenv("PAGETRANS_PROVIDER", raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def test_config():
    return merge_config(DEFAULT_CONFIG, {
        "deepl": {"api_key": "test-key"},
        "log_mode": "off",
    })


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TranslationCache(max_entries=100, clock=clock)


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def app(test_config, remote, cache):
    """Create application for testing."""
    app = create_app(config=test_config, client=remote, cache=cache)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    """Create test client for each test function."""
    return app.test_client()
