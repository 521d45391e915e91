import json
import logging
from datetime import datetime, timezone
from typing import AsyncGenerator, Callable, List

import pytest
import structlog
from httpx import ASGITransport, AsyncClient
from structlog.testing import CapturingLogger

from logger_json.core.config import Settings
from logger_json.core.logging import build_request_sink
from logger_json.main import create_application
from logger_json.services.clock import Clock
from logger_json.services.emitter import Emitter

FROZEN_NOW = datetime(2016, 5, 31, 18, 0, 13, tzinfo=timezone.utc)


class FakeTicks:
    """Monotonic source that advances by a fixed step on every read."""

    def __init__(self, step_ns: int) -> None:
        self.step_ns = step_ns
        self.now = 0
        self.reads = 0

    def __call__(self) -> int:
        value = self.now
        self.now += self.step_ns
        self.reads += 1
        return value


@pytest.fixture
def settings() -> Settings:
    return Settings(
        APP_NAME="reaction",
        APP_ENV="development",
        SERVER_NAME="localhost",
        FILTERED_KEYS=["authorization", "password"],
    )


@pytest.fixture
def ticks() -> FakeTicks:
    # 670 ms between request start and finalize
    return FakeTicks(step_ns=670_000_000)


@pytest.fixture
def clock(ticks: FakeTicks) -> Clock:
    return Clock(monotonic_ns=ticks, utcnow=lambda: FROZEN_NOW)


@pytest.fixture
def capture() -> CapturingLogger:
    return CapturingLogger()


@pytest.fixture
def emitter(capture: CapturingLogger) -> Emitter:
    return Emitter(build_request_sink(logging.INFO, capture))


@pytest.fixture(autouse=True)
def clear_contextvars() -> None:
    structlog.contextvars.clear_contextvars()


@pytest.fixture
async def client(
    settings: Settings, emitter: Emitter, clock: Clock
) -> AsyncGenerator[AsyncClient, None]:
    application = create_application(settings=settings, emitter=emitter, clock=clock)
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def records(capture: CapturingLogger) -> Callable[[], List[dict]]:
    """Decode every JSON line written to the capturing sink."""
    return lambda: [json.loads(call.args[0]) for call in capture.calls]
