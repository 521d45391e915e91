"""
ASGI view of a single request/response exchange.
Exposes what the request logger reads, plus a before-send hook list.
"""

import json
from typing import Any, Callable, List, Optional, Tuple
from urllib.parse import parse_qsl

from starlette.datastructures import QueryParams
from starlette.types import Message, Receive, Scope

from logger_json.schemas.schemas import RoutingMetadata

BeforeSend = Callable[["Exchange"], None]

# Statuses whose responses never carry a body
_BODYLESS_STATUSES = {204, 304}

_JSON_TYPE = "application/json"
_FORM_TYPE = "application/x-www-form-urlencoded"


def _decode_headers(raw: List[Tuple[bytes, bytes]]) -> List[Tuple[str, str]]:
    return [(k.decode("latin-1"), v.decode("latin-1")) for k, v in raw]


def _media_type(headers: List[Tuple[str, str]]) -> Optional[str]:
    for key, value in headers:
        if key.lower() == "content-type":
            return value.split(";", 1)[0].strip().lower() or None
    return None


class Exchange:
    """
    Read-only wrapper around an ASGI HTTP scope and its response start message.

    The application's request body is teed while it is being read so body
    parameters can be logged once the response starts.
    """

    def __init__(self, scope: Scope, receive: Receive, max_body_bytes: int = 0) -> None:
        self.scope = scope
        self._receive = receive
        self._max_body_bytes = max_body_bytes
        self._body = bytearray()
        self._body_complete = False
        self._body_overflow = False
        self._before_send: List[BeforeSend] = []
        self._sent = False
        self.status: Optional[int] = None
        self.resp_headers: List[Tuple[str, str]] = []

    # --- Request side -----------------------------------------------------

    @property
    def method(self) -> str:
        return self.scope["method"]

    @property
    def path(self) -> str:
        return self.scope["path"]

    @property
    def req_headers(self) -> List[Tuple[str, str]]:
        return _decode_headers(self.scope.get("headers", []))

    @property
    def params(self) -> List[Tuple[str, Any]]:
        """Path parameters, then query parameters, then parsed body parameters."""
        pairs: List[Tuple[str, Any]] = list(self.scope.get("path_params", {}).items())
        pairs.extend(QueryParams(self.scope.get("query_string", b"")).multi_items())
        pairs.extend(self._body_params())
        return pairs

    async def receive(self) -> Message:
        message = await self._receive()
        if message["type"] == "http.request" and not self._body_overflow:
            self._body.extend(message.get("body", b""))
            if len(self._body) > self._max_body_bytes:
                self._body_overflow = True
                self._body.clear()
            elif not message.get("more_body", False):
                self._body_complete = True
        return message

    def _body_params(self) -> List[Tuple[str, Any]]:
        if not self._body_complete or not self._body:
            return []
        media_type = _media_type(self.req_headers)
        try:
            text = self._body.decode("utf-8")
        except UnicodeDecodeError:
            return []
        if media_type == _FORM_TYPE:
            return parse_qsl(text, keep_blank_values=True)
        if media_type == _JSON_TYPE:
            try:
                payload = json.loads(text)
            except ValueError:
                return []
            if isinstance(payload, dict):
                return list(payload.items())
        return []

    # --- Response side ----------------------------------------------------

    @property
    def chunked(self) -> bool:
        """True when the response body is streamed without a declared length."""
        has_length = False
        for key, value in self.resp_headers:
            name = key.lower()
            if name == "transfer-encoding" and "chunked" in value.lower():
                return True
            if name == "content-length":
                has_length = True
        if self.status is None or self.status < 200 or self.status in _BODYLESS_STATUSES:
            return False
        return not has_length

    @property
    def routing(self) -> Optional[RoutingMetadata]:
        """Route metadata, present only when endpoint and response format are both known."""
        endpoint = self.scope.get("endpoint")
        media_type = _media_type(self.resp_headers)
        if endpoint is None or media_type is None or "/" not in media_type:
            return None
        controller = getattr(endpoint, "__module__", None)
        action = getattr(endpoint, "__name__", None)
        response_format = media_type.split("/", 1)[1]
        if not controller or not action or not response_format:
            return None
        return RoutingMetadata(
            format=response_format,
            controller=controller.rsplit(".", 1)[-1],
            action=action,
        )

    # --- Hooks ------------------------------------------------------------

    def register_before_send(self, callback: BeforeSend) -> None:
        """Run `callback` once the response status is fixed, before any bytes go out."""
        self._before_send.append(callback)

    def response_started(self, message: Message) -> None:
        """Record the response start message and run the before-send callbacks."""
        if self._sent:
            return
        self._sent = True
        self.status = message["status"]
        self.resp_headers = _decode_headers(message.get("headers", []))
        for callback in reversed(self._before_send):
            callback(self)
