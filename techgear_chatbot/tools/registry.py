"""Tool catalogue advertised to the model, and dispatch of its tool calls.

The catalogue is closed: exactly two tools, defined here once and never
loaded from outside.  Dispatch is an explicit branch per tool name.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from functools import partial
from typing import Any

from techgear_chatbot.services.metrics import metrics
from techgear_chatbot.tools.inventory import InventoryDatabase
from techgear_chatbot.tools.knowledge_base import KnowledgeBase

logger = logging.getLogger(__name__)

SEARCH_KNOWLEDGE_BASE = "search_knowledge_base"
QUERY_INVENTORY = "query_inventory"

SIZES = ("S", "M", "L", "XL")


class ToolArgumentError(Exception):
    """A tool call whose arguments cannot be used.

    Raised for unparsable argument payloads, missing required fields and
    fields of the wrong type.
    This is a protocol failure for the whole turn, not a tool result.
    """


@dataclass(frozen=True)
class ToolSpec:
    """Name, description and JSON-Schema parameters of one tool."""

    name: str
    description: str
    parameters: dict[str, Any] = field(default_factory=dict)

    def to_openai(self) -> dict[str, Any]:
        """Render the ``{"type": "function", ...}`` shape the API expects."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


TOOL_SPECS: tuple[ToolSpec, ...] = (
    ToolSpec(
        name=SEARCH_KNOWLEDGE_BASE,
        description=(
            "Search the TechGear UK company knowledge base. Contains: office "
            "address and location, opening hours (weekdays and Saturday), "
            "delivery policy and costs, returns policy, and contact details "
            "(email and phone)."
        ),
        parameters={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The user's question about company information",
                },
            },
            "required": ["query"],
        },
    ),
    ToolSpec(
        name=QUERY_INVENTORY,
        description=(
            "Query the product inventory database for stock availability, "
            "stock count, or price. Available products: Waterproof Commuter "
            "Jacket, Tech-Knit Hoodie, Dry-Fit Running Tee. Available sizes: "
            "S, M, L, XL."
        ),
        parameters={
            "type": "object",
            "properties": {
                "item_name": {
                    "type": "string",
                    "description": (
                        "The product name to look up, e.g. "
                        "'Waterproof Commuter Jacket'"
                    ),
                },
                "size": {
                    "type": "string",
                    "description": (
                        "Optional size filter (S, M, L, or XL). Omit when "
                        "asking about price only."
                    ),
                    "enum": list(SIZES),
                },
            },
            "required": ["item_name"],
        },
    ),
)


def openai_tools() -> list[dict[str, Any]]:
    """The full catalogue in wire format."""
    return [spec.to_openai() for spec in TOOL_SPECS]


def _require_str(args: dict[str, Any], tool_name: str, key: str) -> str:
    value = args.get(key)
    if not isinstance(value, str):
        raise ToolArgumentError(
            f"Tool {tool_name} requires a string '{key}' argument, got {value!r}"
        )
    return value


def _optional_str(args: dict[str, Any], tool_name: str, key: str) -> str | None:
    value = args.get(key)
    if value is None or isinstance(value, str):
        return value
    raise ToolArgumentError(
        f"Tool {tool_name} expects a string '{key}' argument, got {value!r}"
    )


class ToolRegistry:
    """Binds the catalogue to the collaborators that implement it."""

    def __init__(self, knowledge_base: KnowledgeBase, inventory: InventoryDatabase):
        self._knowledge_base = knowledge_base
        self._inventory = inventory

    @property
    def specs(self) -> tuple[ToolSpec, ...]:
        return TOOL_SPECS

    def execute(self, name: str, args: dict[str, Any]) -> str:
        """Run tool *name* with *args* and return its result text.

        An unknown name and any collaborator failure come back as text so
        the model can see them.  Missing required arguments and arguments
        of the wrong type raise ``ToolArgumentError``.
        """
        if not isinstance(args, dict):
            raise ToolArgumentError(f"Tool {name} arguments must be an object, got {args!r}")
        if name == SEARCH_KNOWLEDGE_BASE:
            query = _require_str(args, name, "query")
            call = partial(self._knowledge_base.search, query)
        elif name == QUERY_INVENTORY:
            item_name = _require_str(args, name, "item_name")
            size = _optional_str(args, name, "size")
            call = partial(self._inventory.query, item_name, size)
        else:
            logger.warning("Model requested unknown tool: %s", name)
            metrics.record_failure("tools", name, error_type="UnknownTool")
            return f"Unknown tool: {name}"

        logger.info("Executing tool %s(%s)", name, args)
        t0 = time.perf_counter()
        try:
            result = call()
        except Exception as exc:
            elapsed = (time.perf_counter() - t0) * 1000
            metrics.record_failure(
                "tools", name, error_type=type(exc).__name__, latency_ms=elapsed,
            )
            logger.exception("Tool %s failed", name)
            return f"Tool {name} failed: {exc}"

        elapsed = (time.perf_counter() - t0) * 1000
        metrics.record_success("tools", name, latency_ms=elapsed)
        logger.debug("Tool %s returned %d chars in %.1fms", name, len(result), elapsed)
        return result
