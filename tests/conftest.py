"""Shared fixtures for lifemap tests."""

import pytest

from lifemap.constants import Constants

from helpers import RecordingRegistry


@pytest.fixture(autouse=True)
def restore_constants():
    """Snapshot and restore mutable Constants around each test."""
    names = [
        "LOCAL_REPOSITORY",
        "REMOTE_REPOSITORIES",
        "OFFLINE",
        "REGISTRY_FILE",
        "REQUEST_TIMEOUT",
        "HTTP_RETRY_MAX",
        "HTTP_RETRY_BASE_DELAY_SEC",
    ]
    saved = {name: getattr(Constants, name) for name in names}
    yield
    for name, value in saved.items():
        setattr(Constants, name, value)


@pytest.fixture
def recording_registry():
    return RecordingRegistry()
