from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
from fastapi import FastAPI

from logger_json.api.v1.router import api_router
from logger_json.core.config import Settings, get_settings
from logger_json.core.logging import configure_logging
from logger_json.middleware.request_id import RequestIdMiddleware
from logger_json.middleware.request_log import LoggerJSONMiddleware
from logger_json.services.clock import Clock, default_clock
from logger_json.services.emitter import Emitter

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = app.state.settings
    configure_logging(settings)
    logger.info(
        "Request logging enabled",
        level=settings.REQUEST_LOG_LEVEL,
        filtered_keys=sorted(settings.FILTERED_KEYS),
        server=settings.SERVER_NAME,
    )

    yield

    logger.info("Shutdown complete")


def create_application(
    settings: Optional[Settings] = None,
    emitter: Optional[Emitter] = None,
    log: Optional[str] = None,
    clock: Clock = default_clock,
) -> FastAPI:
    settings = settings or get_settings()

    application = FastAPI(
        title="JSON request logger",
        description="Example service that writes one JSON record per request.",
        lifespan=lifespan,
    )
    application.state.settings = settings

    # Last added runs first: the request id must be bound before records are built
    application.add_middleware(
        LoggerJSONMiddleware, log=log, settings=settings, emitter=emitter, clock=clock
    )
    application.add_middleware(RequestIdMiddleware)

    application.include_router(api_router)

    return application


app = create_application()
