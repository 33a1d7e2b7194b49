import os

import pytest

# Keep tunables at their defaults regardless of the caller's environment
for _name in (
    "LIVE_WINDOW_SIZE",
    "LIVE_DEBOUNCE_SECONDS",
    "SESSION_MAX_USERS",
    "SESSION_IDLE_SECONDS",
    "DEBUG",
    "CHAT_DUMPER_REGISTRY",
    "TWITCH_IRC_WS_URL",
    "CHAT_DUMPER_EVENT_TEMPLATES",
    "CHAT_DUMPER_LOG_FILE",
):
    os.environ.pop(_name, None)

from tests.fixtures.chat_lines import DummyClient, EventRecorder  # noqa: E402


@pytest.fixture
def client() -> DummyClient:
    return DummyClient()


@pytest.fixture
def events(client: DummyClient) -> EventRecorder:
    return EventRecorder(client)
