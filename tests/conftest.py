import pytest


_ENV_VARS = (
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "GNEWS_API_KEY",
    "YOUTUBE_API_KEY",
    "INSTAGRAM_ACCESS_TOKEN",
    "INSTAGRAM_USER_ID",
    "RSS_FEEDS",
    "MAX_RESULTS",
    "MAX_IMAGES",
    "MAX_TURNS",
    "REQUEST_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Start every test without credentials and with a private memory dir."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("MEMORY_DIR", str(tmp_path / "memory"))
