"""
JSON request log middleware.
Writes one structured record per request just before the response starts going out.

Implemented as pure ASGI middleware so the record is produced from the response
start message, after the status is fixed and before the server writes any bytes.
"""

from typing import Optional

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from logger_json.core.config import Settings, get_settings, normalize_level
from logger_json.core.exchange import Exchange
from logger_json.core.logging import build_request_sink
from logger_json.services.clock import Clock, default_clock
from logger_json.services.emitter import Emitter
from logger_json.services.record_builder import RecordBuilder, current_request_id


class LoggerJSONMiddleware:
    """
    Logs request information as a JSON object, e.g.:

        {"status": "200", "state": "Sent", "request_id": "d90jcl66vp09r8tke3ut",
         "path": "/", "params": {"user": "jkelly", "password": "[FILTERED]"},
         "req_headers": {"authorization": "[FILTERED]", "accept": "*/*"},
         "server": "localhost", "method": "POST", "log_type": "http",
         "level": "info", "environment": "development", "duration": 0.67,
         "date_time": "2016-05-31T18:00:13Z", "client_version": "N/A",
         "client_ip": "127.0.0.1", "app": "reaction", "api_version": "N/A",
         "format": "json", "handler": "pages#index"}

    Usage:
        app.add_middleware(LoggerJSONMiddleware, log="debug")

    Options:
        log: Severity of the records. Defaults to REQUEST_LOG_LEVEL ("info").
        settings: Static settings; defaults to the process-wide settings.
        emitter: Record output; defaults to stdout filtered at LOG_LEVEL.
        clock: Time source used for durations and timestamps.
    """

    def __init__(
        self,
        app: ASGIApp,
        log: Optional[str] = None,
        settings: Optional[Settings] = None,
        emitter: Optional[Emitter] = None,
        clock: Clock = default_clock,
    ) -> None:
        self.app = app
        self.settings = settings or get_settings()
        self.level = normalize_level(log or self.settings.REQUEST_LOG_LEVEL)
        self.emitter = emitter or Emitter(
            build_request_sink(self.settings.log_level_number)
        )
        self.clock = clock
        self.builder = RecordBuilder(self.settings, clock)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = self.clock.start()
        exchange = Exchange(scope, receive, self.settings.MAX_BODY_BYTES)
        exchange.register_before_send(lambda ex: self._log(ex, start))

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                exchange.response_started(message)
            await send(message)

        await self.app(scope, exchange.receive, send_wrapper)

    def _log(self, exchange: Exchange, start: int) -> None:
        self.emitter.emit(
            self.level,
            lambda: self.builder.build(
                exchange, self.level, start, current_request_id()
            ),
        )
