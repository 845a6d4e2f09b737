"""Tests for the CLI chat loop."""

from __future__ import annotations

import sys
from unittest.mock import MagicMock, patch

import pytest

from techgear_chatbot.main import BANNER, GOODBYE, chat_loop, main


def _scripted_input(*lines):
    remaining = list(lines)

    def _input(prompt):
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    return _input


class TestChatLoop:
    def test_prints_banner_and_one_answer_per_question(self):
        router = MagicMock()
        router.route.side_effect = ["We open at 9am.", "£45.00"]
        output = []

        chat_loop(router, _scripted_input("Opening hours?", "Hoodie price?", "exit"), output.append)

        assert output[0] == BANNER
        assert output[1:] == ["Bot: We open at 9am.\n", "Bot: £45.00\n", f"Bot: {GOODBYE}"]

    def test_blank_lines_are_skipped(self):
        router = MagicMock()
        chat_loop(router, _scripted_input("", "   ", "quit"), lambda _: None)
        router.route.assert_not_called()

    def test_exit_is_case_insensitive(self):
        router = MagicMock()
        output = []
        chat_loop(router, _scripted_input("QUIT"), output.append)
        assert output[-1] == f"Bot: {GOODBYE}"

    def test_eof_ends_loop(self):
        router = MagicMock()
        output = []
        chat_loop(router, _scripted_input(), output.append)
        assert GOODBYE in output[-1]

    def test_input_is_stripped_before_routing(self):
        router = MagicMock()
        router.route.return_value = "ok"
        chat_loop(router, _scripted_input("  Where are you?  ", "exit"), lambda _: None)
        router.route.assert_called_once_with("Where are you?")


class TestMain:
    def test_missing_api_key_exits_with_message(self, capsys):
        missing = OSError("Missing required configuration: AZURE_OPENAI_KEY.")
        with (
            patch.object(sys, "argv", ["techgear-chatbot"]),
            patch("techgear_chatbot.main._load_config", side_effect=missing),
            patch("techgear_chatbot.main.chat_loop") as loop,
        ):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
        assert "AZURE_OPENAI_KEY" in capsys.readouterr().err
        loop.assert_not_called()
