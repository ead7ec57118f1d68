"""Controllers for chat endpoints."""

import json

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from loguru import logger

from ..services.chat_service import ChatService, get_chat_service
from ..utils.error_handler import NO_CACHE_HEADERS

router = APIRouter(prefix="/api", tags=["Chat"])


@router.post("/chat")
async def chat_endpoint(
    request: Request,
    service: ChatService = Depends(get_chat_service),
) -> JSONResponse:
    """Accept a student's message and return the guide's structured reply.

    The body is read by hand rather than through a Pydantic model so that
    a missing, blank or oversized message maps to 400/413 instead of the
    framework's 422.
    """
    raw = await request.body()
    try:
        payload = json.loads(raw) if raw else None
    except ValueError:
        logger.info("Chat request body is not valid JSON")
        payload = None

    reply = await service.reply(payload)
    return JSONResponse(content=reply.to_payload(), headers=NO_CACHE_HEADERS)
