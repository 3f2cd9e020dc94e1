from datetime import datetime, timezone

import pytest


FIXED_NOW = datetime(2025, 1, 31, 12, 0, 0, tzinfo=timezone.utc)


class RecordingPublisher:
    """Collects publish() calls instead of sending them."""

    def __init__(self):
        self.messages = []

    def publish(self, topic, payload, qos=1, retain=True):
        self.messages.append((topic, payload, qos, retain))

    @property
    def topics(self):
        return [m[0] for m in self.messages]


class FailingPublisher:
    def publish(self, topic, payload, qos=1, retain=True):
        raise ConnectionError("broker gone")


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW
