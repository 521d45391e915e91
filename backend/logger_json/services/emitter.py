"""
Writes serialized request records to the request log sink.
"""

from typing import Any, Callable

import structlog

from logger_json.core.config import level_number
from logger_json.schemas.schemas import LogRecord

logger = structlog.get_logger(__name__)


class Emitter:
    """
    Emits one JSON line per request at a given severity.

    The record is passed as a zero-argument factory so that nothing is timed,
    derived or serialized when the sink would drop the line anyway.
    """

    def __init__(self, sink: Any) -> None:
        self.sink = sink

    def enabled_for(self, level: str) -> bool:
        return self.sink.is_enabled_for(level_number(level))

    def emit(self, level: str, build: Callable[[], LogRecord]) -> bool:
        """
        Build, serialize and write a record if `level` passes the sink threshold.

        Returns:
            True if a line was handed to the sink.
        """
        if not self.enabled_for(level):
            return False

        text = build().model_dump_json()
        try:
            self.sink.log(level_number(level), text)
        except Exception:
            logger.exception("Request log sink failed", level=level)
            return False
        return True
