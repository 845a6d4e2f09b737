"""Conversation router: drives one tool-calling exchange per customer query.

Architecture:
  Each query runs through a small LangGraph StateGraph:

    1. **first_reply**  — model call with both tools advertised
                          (``tool_choice="auto"``)
    2. **tools**        — executes every tool call from the first reply, in
                          order, appending one tool message per call
    3. **final_reply**  — model call with *no* tools advertised, so the
                          model must answer in text

  Routing:
    first_reply → (has tool calls?) → tools → final_reply → END
                → (no tool calls?)  → END

  Withholding the tools on the second call caps every query at a single
  round of tool use.

  Memory:
    None.  Every query starts a fresh transcript seeded with the system
    instruction; the graph is compiled without a checkpointer.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Annotated, Protocol

from langchain_core.messages import (
    AIMessage,
    AnyMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)
from langgraph.graph import END, StateGraph
from langgraph.graph.message import add_messages
from typing_extensions import TypedDict

from techgear_chatbot.prompts import ERROR_MESSAGE, FALLBACK_MESSAGE, get_system_prompt
from techgear_chatbot.tools.inventory import InventoryDatabase
from techgear_chatbot.tools.knowledge_base import KnowledgeBase
from techgear_chatbot.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ChatCompletionClient(Protocol):
    """Anything that can turn a transcript into the next assistant message."""

    def complete(
        self, transcript: Sequence[BaseMessage], tools_advertised: bool,
    ) -> AIMessage:
        ...


class RouterState(TypedDict):
    """The transcript for a single query.

    ``add_messages`` appends whatever a node returns, so the list only
    ever grows.
    """

    messages: Annotated[list[AnyMessage], add_messages]


# ── Conditional edge / extraction helpers ────────────────────────────


def should_use_tools(state: RouterState) -> str:
    """Route to the tools node iff the last reply asked for tool calls."""
    last_message = state["messages"][-1]
    if isinstance(last_message, AIMessage) and last_message.tool_calls:
        return "tools"
    return END


def extract_final_text(message: BaseMessage) -> str:
    """Return the reply text, or the fallback message when there is none."""
    content = message.content
    if isinstance(content, str) and content.strip():
        return content
    logger.warning("Final reply had no text content; using fallback message")
    return FALLBACK_MESSAGE


def new_transcript(query: str) -> list[BaseMessage]:
    """System instruction followed by the raw user query."""
    return [SystemMessage(content=get_system_prompt()), HumanMessage(content=query)]


# ── Router ───────────────────────────────────────────────────────────


class ConversationRouter:
    """Answers one query at a time using the model and the tool registry."""

    def __init__(self, client: ChatCompletionClient, registry: ToolRegistry):
        self._client = client
        self._registry = registry
        self._graph = self._build_graph()

    # ── Nodes ────────────────────────────────────────────────────────

    def _first_reply_node(self, state: RouterState) -> dict:
        reply = self._client.complete(state["messages"], tools_advertised=True)
        logger.debug("First reply: %d tool call(s)", len(reply.tool_calls))
        return {"messages": [reply]}

    def _tools_node(self, state: RouterState) -> dict:
        """Execute each requested call once, in order, one reply per call."""
        assistant_message = state["messages"][-1]
        results = [
            ToolMessage(
                content=self._registry.execute(call["name"], call["args"]),
                tool_call_id=call["id"],
            )
            for call in assistant_message.tool_calls
        ]
        return {"messages": results}

    def _final_reply_node(self, state: RouterState) -> dict:
        reply = self._client.complete(state["messages"], tools_advertised=False)
        return {"messages": [reply]}

    def _build_graph(self):
        graph = StateGraph(RouterState)

        graph.add_node("first_reply", self._first_reply_node)
        graph.add_node("tools", self._tools_node)
        graph.add_node("final_reply", self._final_reply_node)

        graph.set_entry_point("first_reply")
        graph.add_conditional_edges(
            "first_reply", should_use_tools, {"tools": "tools", END: END},
        )
        graph.add_edge("tools", "final_reply")
        graph.add_edge("final_reply", END)

        return graph.compile()

    # ── Public API ───────────────────────────────────────────────────

    def run(self, query: str) -> list[BaseMessage]:
        """Run the exchange for *query* and return the finished transcript.

        Transport and protocol errors propagate; use ``route`` for the
        never-raising variant.
        """
        result = self._graph.invoke({"messages": new_transcript(query)})
        return result["messages"]

    def route(self, query: str) -> str:
        """Answer *query* with a single line of text.

        Any failure (network, HTTP status, malformed response, malformed
        tool arguments) is logged and turned into the fixed apology.
        """
        t0 = time.perf_counter()
        try:
            transcript = self.run(query)
        except Exception:
            logger.exception("Failed to route query")
            return ERROR_MESSAGE

        logger.info(
            "Query routed in %.0fms (%d transcript entries)",
            (time.perf_counter() - t0) * 1000, len(transcript),
        )
        return extract_final_text(transcript[-1])


def create_router(
    knowledge_base: KnowledgeBase,
    inventory: InventoryDatabase,
    client: ChatCompletionClient | None = None,
) -> ConversationRouter:
    """Wire a router to the given data sources.

    Without an explicit *client*, an ``AzureOpenAIClient`` is built from
    the process configuration.
    """
    if client is None:
        from techgear_chatbot import config
        from techgear_chatbot.services.azure_openai_client import AzureOpenAIClient

        client = AzureOpenAIClient(
            endpoint=config.AZURE_OPENAI_ENDPOINT,
            api_key=config.AZURE_OPENAI_KEY,
            api_version=config.AZURE_API_VERSION,
            model=config.AZURE_OPENAI_MODEL,
        )
        logger.debug("Azure OpenAI client configured for deployment %s", config.AZURE_OPENAI_MODEL)
    return ConversationRouter(client, ToolRegistry(knowledge_base, inventory))
