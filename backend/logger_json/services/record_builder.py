"""
Builds the structured log record for a finished request/response exchange.
"""

from typing import Any, Mapping, Optional

import structlog

from logger_json.core.config import NOT_AVAILABLE, Settings
from logger_json.core.exchange import Exchange
from logger_json.schemas.schemas import LogRecord
from logger_json.services import sanitizer
from logger_json.services.clock import Clock, default_clock, duration_seconds, iso8601

LOG_TYPE = "http"


def connection_state(exchange: Exchange) -> str:
    return "Chunked" if exchange.chunked else "Sent"


def client_ip(req_headers: Mapping[str, Any]) -> str:
    """First address of the X-Forwarded-For chain, or N/A when absent."""
    forwarded_for = req_headers.get("x-forwarded-for", NOT_AVAILABLE)
    if forwarded_for == NOT_AVAILABLE:
        return NOT_AVAILABLE
    return str(forwarded_for).split(", ")[0]


def current_request_id() -> Optional[str]:
    """Correlation id bound to the current request context, if any."""
    request_id = structlog.contextvars.get_contextvars().get("request_id")
    return None if request_id is None else str(request_id)


class RecordBuilder:
    """Derives every record field from the exchange, settings and request timing."""

    def __init__(self, settings: Settings, clock: Clock = default_clock) -> None:
        self.settings = settings
        self.clock = clock

    def build(
        self,
        exchange: Exchange,
        level: str,
        start: int,
        request_id: Optional[str] = None,
    ) -> LogRecord:
        micros = self.clock.elapsed_micros(start)
        filtered_keys = self.settings.FILTERED_KEYS
        req_headers = sanitizer.collect(exchange.req_headers, filtered_keys)
        params = sanitizer.collect(exchange.params, filtered_keys)
        routing = exchange.routing

        return LogRecord(
            status=str(exchange.status),
            state=connection_state(exchange),
            request_id=request_id,
            path=exchange.path,
            params=params,
            req_headers=req_headers,
            server=self.settings.SERVER_NAME,
            method=exchange.method,
            log_type=LOG_TYPE,
            level=level,
            environment=self.settings.APP_ENV,
            duration=duration_seconds(micros),
            date_time=iso8601(self.clock.now()),
            client_version=str(req_headers.get("client_version", NOT_AVAILABLE)),
            client_ip=client_ip(req_headers),
            app=self.settings.APP_NAME,
            api_version=str(req_headers.get("api_version", NOT_AVAILABLE)),
            format=routing.format if routing else NOT_AVAILABLE,
            handler=routing.handler if routing else NOT_AVAILABLE,
        )
