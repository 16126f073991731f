"""Shared test helpers: a controllable clock and mock httpx responses."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock


class FakeClock:
    """Controllable clock for cache expiry tests."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


def make_http_response(payload):
    """Mock httpx response returning payload from .json()."""
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status = MagicMock()
    return response
