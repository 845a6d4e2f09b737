"""Pydantic schemas for the FastAPI endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """One customer question."""

    message: str = Field(..., min_length=1, max_length=2000, description="The customer's question")


class ChatResponse(BaseModel):
    """The chatbot's answer, the fallback message, or the apology."""

    reply: str = Field(..., description="A single line of text for the customer")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    service: str = "techgear-chatbot"
    inventory_rows: int | None = Field(
        None, description="Rows in the inventory table, when the store is open",
    )


class MetricsResponse(BaseModel):
    """Success/failure counts per ``service/operation`` since start-up."""

    calls: dict[str, dict[str, int]] = Field(default_factory=dict)
