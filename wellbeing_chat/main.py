"""FastAPI application entry point.

This module initialises the FastAPI app, configures logging and
registers API routes.  The `uvicorn` ASGI server can point to
``wellbeing_chat.main:create_app`` with ``--factory`` to serve the
application.
"""

from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config.app_config import AppConfig, get_app_config
from .config.llm_config import LlmConfig, get_llm_config
from .controllers.chat_controller import router as chat_router
from .services.chat_service import ChatService
from .utils.error_handler import (
    ChatError,
    chat_error_handler,
    http_exception_handler,
    unhandled_error_handler,
)
from .utils.logger import setup_logging


def create_app(
    app_config: Optional[AppConfig] = None,
    llm_config: Optional[LlmConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Configuration is read from the environment unless passed in;
    ``transport`` replaces the network layer of the completion client.
    """
    app_config = app_config or get_app_config()
    llm_config = llm_config or get_llm_config()
    setup_logging(app_config)

    app = FastAPI(title="Student Wellbeing Chat", version="0.1.0")
    app.state.app_config = app_config
    app.state.chat_service = ChatService(llm_config=llm_config, transport=transport)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_config.cors_origins,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.add_exception_handler(ChatError, chat_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(chat_router)

    @app.get("/health", tags=["Health"])
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        logger.debug("Health check invoked")
        return {"status": "ok"}

    if not llm_config.api_key:
        logger.warning("GEMINI_API_KEY is not set; chat requests will fail with 500")

    return app
