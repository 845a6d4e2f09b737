"""FastAPI route definitions for the chatbot API."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Request

from techgear_chatbot.api.schemas import (
    ChatRequest,
    ChatResponse,
    HealthResponse,
    MetricsResponse,
)
from techgear_chatbot.services.metrics import metrics

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_router(request: Request):
    """Retrieve the conversation router created during the lifespan."""
    conversation_router = getattr(request.app.state, "router", None)
    if conversation_router is None:
        raise HTTPException(
            status_code=503,
            detail="The chatbot is still starting up. Please try again in a moment.",
        )
    return conversation_router


# ── Endpoints ────────────────────────────────────────────────────────


@router.get("/health", response_model=HealthResponse)
async def health_check(http_request: Request):
    """Health check endpoint; reports the inventory size when available."""
    inventory = getattr(http_request.app.state, "inventory", None)
    if inventory is None or inventory.closed:
        return HealthResponse()
    rows = await asyncio.to_thread(inventory.row_count)
    return HealthResponse(inventory_rows=rows)


@router.get("/metrics", response_model=MetricsResponse)
async def call_metrics():
    """Per-operation success/failure counts since start-up."""
    return MetricsResponse(calls=metrics.summary())


@router.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, http_request: Request):
    """Answer one customer question.

    ``route`` blocks on the model API for up to two calls, so it runs in a
    worker thread.  It never raises: failures come back as the apology text.
    """
    conversation_router = _get_router(http_request)
    request_id = getattr(http_request.state, "request_id", "?")

    reply = await asyncio.to_thread(conversation_router.route, request.message)
    logger.debug("[%s] Reply: %d chars", request_id, len(reply))
    return ChatResponse(reply=reply)
