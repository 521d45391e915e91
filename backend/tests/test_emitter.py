import json
import logging
from unittest.mock import MagicMock

import pytest
from pydantic_core import PydanticSerializationError
from structlog.testing import CapturingLogger

from logger_json.core.logging import build_request_sink
from logger_json.schemas.schemas import LogRecord
from logger_json.services.emitter import Emitter


def sample_record(**overrides) -> LogRecord:
    fields = dict(
        status="200",
        state="Sent",
        request_id="abc123",
        path="/",
        params={"user": "jkelly", "password": "[FILTERED]"},
        req_headers={"authorization": "[FILTERED]", "accept": "*/*"},
        server="localhost",
        method="POST",
        log_type="http",
        level="info",
        environment="development",
        duration=0.670,
        date_time="2016-05-31T18:00:13Z",
        client_version="N/A",
        client_ip="127.0.0.1",
        app="reaction",
        api_version="N/A",
        format="json",
        handler="PageController#index",
    )
    fields.update(overrides)
    return LogRecord(**fields)


class TestEmitter:
    def test_writes_one_json_line_at_the_given_level(self):
        capture = CapturingLogger()
        emitter = Emitter(build_request_sink(logging.INFO, capture))

        assert emitter.emit("warning", sample_record) is True

        assert len(capture.calls) == 1
        call = capture.calls[0]
        assert call.method_name == "warning"
        assert json.loads(call.args[0]) == sample_record().model_dump()

    def test_serialized_keys_follow_the_record_schema(self):
        capture = CapturingLogger()
        Emitter(build_request_sink(logging.DEBUG, capture)).emit("info", sample_record)
        keys = list(json.loads(capture.calls[0].args[0]))
        assert keys == list(LogRecord.model_fields)
        assert len(keys) == 19

    def test_suppressed_level_builds_nothing(self):
        capture = CapturingLogger()
        emitter = Emitter(build_request_sink(logging.WARNING, capture))
        build = MagicMock(side_effect=sample_record)

        assert emitter.emit("info", build) is False

        build.assert_not_called()
        assert capture.calls == []

    def test_unserializable_record_fails_loudly(self):
        capture = CapturingLogger()
        emitter = Emitter(build_request_sink(logging.INFO, capture))
        with pytest.raises(PydanticSerializationError):
            emitter.emit("info", lambda: sample_record(params={"blob": object()}))
        assert capture.calls == []

    def test_sink_failure_does_not_propagate(self):
        sink = MagicMock()
        sink.is_enabled_for.return_value = True
        sink.log.side_effect = OSError("disk full")

        assert Emitter(sink).emit("info", sample_record) is False
        sink.log.assert_called_once()

    def test_unknown_level_is_rejected(self):
        emitter = Emitter(build_request_sink(logging.INFO, CapturingLogger()))
        with pytest.raises(ValueError):
            emitter.emit("verbose", sample_record)
