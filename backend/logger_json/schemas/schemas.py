"""
Pydantic schemas for request log records.
Field order matches the emitted JSON object.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class RoutingMetadata(BaseModel):
    """Route information supplied by the framework for a dispatched request."""
    model_config = ConfigDict(frozen=True)

    format: str
    controller: str
    action: str

    @property
    def handler(self) -> str:
        return f"{self.controller}#{self.action}"


class LogRecord(BaseModel):
    """One structured record describing a completed request/response exchange."""
    model_config = ConfigDict(frozen=True)

    status: str
    state: str
    request_id: Optional[str] = None
    path: str
    params: Dict[str, Any]
    req_headers: Dict[str, Any]
    server: str
    method: str
    log_type: str = "http"
    level: str
    environment: str
    duration: float
    date_time: str
    client_version: str
    client_ip: str
    app: str
    api_version: str
    format: str
    handler: str
