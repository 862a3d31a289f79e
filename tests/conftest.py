"""Shared fixtures for site_batch tests."""

import pytest


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested waits instead of sleeping."""

    def __init__(self):
        self.waits: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.waits.append(seconds)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture(autouse=True)
def isolated_settings_env(monkeypatch, tmp_path):
    """Keep Settings away from the developer's environment and .env file."""
    import os

    for key in list(os.environ):
        if key.startswith("SITE_BATCH_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SITE_BATCH_LOG_FILE", "")
