"""Azure OpenAI chat deployment behind a single ``complete`` call.

Two LangChain runnables share one ``AzureChatOpenAI`` model: one bound to the
tool catalogue (``tool_choice="auto"``) for the first turn, and the bare model
for the follow-up turn, which therefore cannot request tools.

There are no retries (``max_retries=0``): the caller is interactive and a
failed attempt is reported straight away.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

import openai
from langchain_core.messages import AIMessage, BaseMessage
from langchain_openai import AzureChatOpenAI

from techgear_chatbot.services.metrics import metrics
from techgear_chatbot.tools.registry import ToolArgumentError, openai_tools

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 120.0
TEMPERATURE = 0.1

_SERVICE = "azure_openai"
_OPERATION = "chat_completions"


class ChatCompletionError(Exception):
    """Transport failure, non-success status or a malformed response."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


def _build_llm(
    endpoint: str, api_key: str, api_version: str, model: str, timeout: float,
) -> AzureChatOpenAI:
    return AzureChatOpenAI(
        azure_endpoint=endpoint,
        api_key=api_key,
        api_version=api_version,
        azure_deployment=model,
        temperature=TEMPERATURE,
        timeout=timeout,
        max_retries=0,
    )


def check_tool_arguments(message: AIMessage) -> AIMessage:
    """Reject replies whose tool-call arguments did not parse.

    LangChain parks unparsable calls in ``invalid_tool_calls``; dropping them
    would leave the model's call without a reply, so the turn fails instead.
    """
    if message.invalid_tool_calls:
        bad = message.invalid_tool_calls[0]
        raise ToolArgumentError(
            f"Tool {bad.get('name')} arguments are not valid JSON: {bad.get('args')!r}"
        )
    return message


class AzureOpenAIClient:
    """One blocking ``complete`` call per model turn."""

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        api_version: str,
        model: str,
        *,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ):
        self._model = model
        self._llm = _build_llm(endpoint, api_key, api_version, model, timeout)
        self._llm_with_tools = self._llm.bind_tools(openai_tools(), tool_choice="auto")

    @property
    def model(self) -> str:
        return self._model

    def complete(
        self, transcript: Sequence[BaseMessage], tools_advertised: bool,
    ) -> AIMessage:
        """Send *transcript* and return the assistant's reply.

        Raises:
            ChatCompletionError: network error, timeout, non-success status
                or a response the SDK could not read.
            ToolArgumentError: a tool call whose arguments do not parse.
        """
        runnable = self._llm_with_tools if tools_advertised else self._llm
        logger.debug(
            "Invoking %s (%d messages, tools=%s)", self._model, len(transcript), tools_advertised,
        )

        t0 = time.perf_counter()
        try:
            reply = runnable.invoke(list(transcript))
        except openai.APIError as exc:
            elapsed = (time.perf_counter() - t0) * 1000
            status_code = getattr(exc, "status_code", None)
            metrics.record_failure(
                _SERVICE, _OPERATION, error_type=type(exc).__name__, latency_ms=elapsed,
            )
            raise ChatCompletionError(
                f"Azure OpenAI API request failed: {exc}", status_code=status_code,
            ) from exc

        elapsed = (time.perf_counter() - t0) * 1000
        metrics.record_success(_SERVICE, _OPERATION, latency_ms=elapsed)
        logger.debug("Azure OpenAI responded in %.0fms", elapsed)
        return check_tool_arguments(reply)
