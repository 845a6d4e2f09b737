"""FastAPI server for the TechGear UK support chatbot.

Run with:
    uvicorn techgear_chatbot.server:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from techgear_chatbot.api.routes import router
from techgear_chatbot.config import (
    AZURE_API_VERSION,
    AZURE_OPENAI_ENDPOINT,
    AZURE_OPENAI_KEY,
    AZURE_OPENAI_MODEL,
    CORS_ORIGINS,
    INVENTORY_DB_PATH,
    KNOWLEDGE_BASE_PATH,
    SERVER_HOST,
    SERVER_PORT,
)
from techgear_chatbot.router import create_router
from techgear_chatbot.services.azure_openai_client import AzureOpenAIClient
from techgear_chatbot.tools.inventory import InventoryDatabase
from techgear_chatbot.tools.knowledge_base import KnowledgeBase

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)

SERVICE_NAME = "TechGear UK Support Chatbot"
VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Open the data sources once, share them across requests, close on exit.

    A knowledge file or database that cannot be opened aborts start-up.
    """
    knowledge_base = KnowledgeBase(KNOWLEDGE_BASE_PATH)
    inventory = InventoryDatabase(INVENTORY_DB_PATH)
    client = AzureOpenAIClient(
        endpoint=AZURE_OPENAI_ENDPOINT,
        api_key=AZURE_OPENAI_KEY,
        api_version=AZURE_API_VERSION,
        model=AZURE_OPENAI_MODEL,
    )
    application.state.inventory = inventory
    application.state.router = create_router(knowledge_base, inventory, client=client)
    logger.info("Router ready (deployment %s).", AZURE_OPENAI_MODEL)
    yield
    application.state.router = None
    inventory.close()


app = FastAPI(
    title=SERVICE_NAME,
    description=(
        "Answers TechGear UK customer questions about the company, "
        "product stock and prices."
    ),
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_id(request: Request, call_next) -> Response:
    """Attach a request ID (client-supplied or generated) for log correlation."""
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    request.state.request_id = request_id
    logger.info("[%s] %s %s", request_id, request.method, request.url.path)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "service": SERVICE_NAME,
        "version": VERSION,
        "docs": "/docs",
        "health": "/api/health",
    }


if __name__ == "__main__":
    logger.info("Starting chatbot API server on %s:%d", SERVER_HOST, SERVER_PORT)
    uvicorn.run(
        "techgear_chatbot.server:app",
        host=SERVER_HOST,
        port=SERVER_PORT,
        reload=True,
    )
