"""Chatbot Agent Builder: FastAPI application."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatbots.store import ChatbotStore
from config import get_settings
from exceptions import register_exception_handlers
from execution_client import ExecutionApiClient

from agents.router import options_router, router as agents_router
from chat.router import router as chat_router
from chatbots.router import router as chatbots_router
from tools.router import files_router, router as tools_router
from widget.router import router as widget_router

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle: opens the chatbot store and the execution API client."""
    app.state.store = ChatbotStore(settings.chatbot_store_path)
    logger.info("Chatbot store at %s", settings.chatbot_store_path)

    client = ExecutionApiClient(
        settings.execution_api_url, timeout=settings.http_timeout_seconds
    )
    app.state.execution_client = client
    logger.info("Execution API client initialised for %s", settings.execution_api_url)

    yield

    client.close()
    logger.info("Execution API client closed")


app = FastAPI(
    title="Chatbot Agent Builder",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Exception handlers
register_exception_handlers(app)

# API routers
app.include_router(chatbots_router)
app.include_router(agents_router)
app.include_router(options_router)
app.include_router(chat_router)
app.include_router(tools_router)
app.include_router(files_router)
app.include_router(widget_router)
