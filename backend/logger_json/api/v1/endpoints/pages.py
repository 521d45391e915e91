"""
Example pages used to exercise the request logger.
"""

from typing import AsyncIterator

from fastapi import APIRouter, Body
from fastapi.responses import StreamingResponse

router = APIRouter()


@router.get("/")
@router.post("/")
async def index() -> dict:
    return {"message": "ok"}


@router.post("/sessions")
async def create_session(credentials: dict = Body(...)) -> dict:
    return {"user": credentials.get("user")}


@router.get("/pages/stream")
async def stream() -> StreamingResponse:
    """Streams its body without a Content-Length, so it is sent chunked."""

    async def lines() -> AsyncIterator[bytes]:
        for n in range(3):
            yield f"line {n}\n".encode()

    return StreamingResponse(lines(), media_type="text/plain")


@router.get("/pages/{page_id}")
async def show(page_id: int) -> dict:
    return {"id": page_id}
