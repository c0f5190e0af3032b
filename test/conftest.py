import logging

import pytest

from helpers import RecordingMemoryBackend


@pytest.fixture
def recording_backend():
    return RecordingMemoryBackend()


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Configure logging for tests."""
    logging.basicConfig(level=logging.INFO)
