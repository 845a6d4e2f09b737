"""CLI entry point for the TechGear UK support chatbot.

A terminal chat loop: one question per line, one answer per line.  The
FastAPI server (``techgear_chatbot/server.py``) exposes the same router over
HTTP.

Usage:
    python -m techgear_chatbot.main            # normal mode (quiet)
    python -m techgear_chatbot.main --debug    # debug mode (shows API calls)
"""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

BANNER = """\
+----------------------------------------------+
|     TechGear UK - Customer Support Chat      |
+----------------------------------------------+
Type your question below. Type 'exit' to quit.
"""

GOODBYE = "Thank you for chatting with TechGear UK. Goodbye!"

EXIT_COMMANDS = ("exit", "quit")


def _configure_logging(debug: bool = False) -> None:
    """Set up logging: WARNING by default, DEBUG when --debug is passed."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    )

    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger("techgear_chatbot").setLevel(logging.DEBUG if debug else logging.INFO)


def chat_loop(router, input_fn=input, output_fn=print) -> None:
    """Read questions until exit/EOF and print one answer per question."""
    output_fn(BANNER)
    while True:
        try:
            user_input = input_fn("You: ").strip()
        except (KeyboardInterrupt, EOFError):
            output_fn(f"\nBot: {GOODBYE}")
            break

        if not user_input:
            continue

        if user_input.lower() in EXIT_COMMANDS:
            output_fn(f"Bot: {GOODBYE}")
            break

        output_fn(f"Bot: {router.route(user_input)}\n")


def _load_config():
    """Import the config module, which reads the environment on import."""
    from techgear_chatbot import config

    return config


def main():
    """Load config and data sources, then run the interactive chat loop."""
    parser = argparse.ArgumentParser(description="TechGear UK support chatbot CLI")
    parser.add_argument(
        "--debug", action="store_true",
        help="Show all log messages including HTTP requests",
    )
    args = parser.parse_args()

    load_dotenv()
    _configure_logging(debug=args.debug)

    try:
        config = _load_config()
    except OSError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(1)

    from techgear_chatbot.router import create_router
    from techgear_chatbot.tools.inventory import InventoryDatabase
    from techgear_chatbot.tools.knowledge_base import KnowledgeBase

    knowledge_base = KnowledgeBase(config.KNOWLEDGE_BASE_PATH)
    inventory = InventoryDatabase(config.INVENTORY_DB_PATH)
    try:
        router = create_router(knowledge_base, inventory)
        chat_loop(router)
    finally:
        inventory.close()


if __name__ == "__main__":
    main()
