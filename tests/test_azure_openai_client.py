"""Tests for the Azure OpenAI chat-completions client."""

from __future__ import annotations

from unittest.mock import MagicMock

import httpx
import openai
import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from techgear_chatbot.services.azure_openai_client import (
    REQUEST_TIMEOUT_SECONDS,
    TEMPERATURE,
    AzureOpenAIClient,
    ChatCompletionError,
    check_tool_arguments,
)
from techgear_chatbot.tools.registry import ToolArgumentError

# ── Helpers ──────────────────────────────────────────────────────────

_REQUEST = httpx.Request(
    "POST", "https://example.openai.azure.com/openai/deployments/gpt-4o-mini/chat/completions",
)

TRANSCRIPT = [SystemMessage(content="be helpful"), HumanMessage(content="hi")]


def _client() -> AzureOpenAIClient:
    return AzureOpenAIClient(
        endpoint="https://example.openai.azure.com",
        api_key="test-key",
        api_version="2025-01-01-preview",
        model="gpt-4o-mini",
    )


def _client_with_mock_models(reply=None, error=None) -> tuple[AzureOpenAIClient, MagicMock, MagicMock]:
    """Swap both runnables for mocks so no request leaves the process."""
    client = _client()
    bare, with_tools = MagicMock(), MagicMock()
    for mock in (bare, with_tools):
        if error is not None:
            mock.invoke.side_effect = error
        else:
            mock.invoke.return_value = reply
    client._llm = bare
    client._llm_with_tools = with_tools
    return client, bare, with_tools


def _status_error(status_code: int) -> openai.APIStatusError:
    response = httpx.Response(status_code, request=_REQUEST, json={"error": {"message": "nope"}})
    return openai.APIStatusError("nope", response=response, body=None)


# ── Model configuration ──────────────────────────────────────────────


class TestClientSetup:
    def test_model_settings(self):
        client = _client()
        assert client.model == "gpt-4o-mini"
        assert client._llm.deployment_name == "gpt-4o-mini"
        assert client._llm.temperature == TEMPERATURE
        assert client._llm.request_timeout == REQUEST_TIMEOUT_SECONDS

    def test_no_retries(self):
        assert _client()._llm.max_retries == 0

    def test_first_turn_runnable_advertises_both_tools_with_auto_choice(self):
        kwargs = _client()._llm_with_tools.kwargs
        assert kwargs["tool_choice"] == "auto"
        assert [t["function"]["name"] for t in kwargs["tools"]] == [
            "search_knowledge_base", "query_inventory",
        ]


# ── complete() ───────────────────────────────────────────────────────


class TestComplete:
    def test_tools_advertised_uses_bound_runnable(self):
        client, bare, with_tools = _client_with_mock_models(AIMessage(content="Hello"))
        reply = client.complete(TRANSCRIPT, tools_advertised=True)

        assert reply.content == "Hello"
        with_tools.invoke.assert_called_once_with(TRANSCRIPT)
        bare.invoke.assert_not_called()

    def test_tools_withheld_uses_bare_model(self):
        client, bare, with_tools = _client_with_mock_models(AIMessage(content="We open at 9am."))
        client.complete(TRANSCRIPT, tools_advertised=False)

        bare.invoke.assert_called_once_with(TRANSCRIPT)
        with_tools.invoke.assert_not_called()

    def test_tool_calls_are_returned(self):
        reply = AIMessage(
            content="",
            tool_calls=[{"name": "query_inventory", "args": {"item_name": "Tee"}, "id": "call_1"}],
        )
        client, _, _ = _client_with_mock_models(reply)
        result = client.complete(TRANSCRIPT, tools_advertised=True)
        assert result.tool_calls[0]["id"] == "call_1"
        assert result.tool_calls[0]["args"] == {"item_name": "Tee"}

    def test_non_success_status_raises_with_status(self):
        client, _, _ = _client_with_mock_models(error=_status_error(429))
        with pytest.raises(ChatCompletionError) as exc_info:
            client.complete(TRANSCRIPT, tools_advertised=True)
        assert exc_info.value.status_code == 429

    def test_timeout_is_transport_failure(self):
        client, _, _ = _client_with_mock_models(error=openai.APITimeoutError(request=_REQUEST))
        with pytest.raises(ChatCompletionError, match="request failed"):
            client.complete(TRANSCRIPT, tools_advertised=False)

    def test_connection_error_is_not_retried(self):
        client, _, with_tools = _client_with_mock_models(
            error=openai.APIConnectionError(request=_REQUEST),
        )
        with pytest.raises(ChatCompletionError):
            client.complete(TRANSCRIPT, tools_advertised=True)
        assert with_tools.invoke.call_count == 1

    def test_unparsable_tool_arguments_raise(self):
        reply = AIMessage(
            content="",
            invalid_tool_calls=[
                {"name": "query_inventory", "args": "{not json", "id": "c", "error": "bad json"},
            ],
        )
        client, _, _ = _client_with_mock_models(reply)
        with pytest.raises(ToolArgumentError, match="query_inventory"):
            client.complete(TRANSCRIPT, tools_advertised=True)


class TestCheckToolArguments:
    def test_clean_message_passes_through(self):
        msg = AIMessage(content="ok")
        assert check_tool_arguments(msg) is msg
