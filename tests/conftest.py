"""Shared test fixtures for the chatbot test suite."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent


def pytest_configure(config):
    """Set test environment variables BEFORE collection starts.

    This runs before any imports, so config.py won't fail on module load.
    """
    os.environ.setdefault("AZURE_OPENAI_KEY", "test-azure-key-123")
    os.environ.setdefault("AZURE_OPENAI_ENDPOINT", "https://example-test.openai.azure.com")
    os.environ.setdefault("KNOWLEDGE_BASE_PATH", str(REPO_ROOT / "knowledge_base.txt"))
    os.environ.setdefault("INVENTORY_DB_PATH", ":memory:")
    os.environ["METRICS_ENABLED"] = "false"


# ── Data sources ─────────────────────────────────────────────────────


@pytest.fixture
def knowledge_text() -> str:
    return (
        "TechGear UK\n"
        "Opening Hours: Monday to Friday 9:00am - 5:30pm\r\n"
        "Standard delivery £4.99, free over £50.00.\n"
    )


@pytest.fixture
def knowledge_file(tmp_path, knowledge_text) -> Path:
    path = tmp_path / "knowledge_base.txt"
    path.write_bytes(knowledge_text.encode("utf-8"))
    return path


@pytest.fixture
def knowledge_base(knowledge_file):
    from techgear_chatbot.tools.knowledge_base import KnowledgeBase

    return KnowledgeBase(knowledge_file)


@pytest.fixture
def inventory():
    """An isolated, seeded in-memory inventory per test."""
    from techgear_chatbot.tools.inventory import InventoryDatabase

    db = InventoryDatabase(":memory:")
    yield db
    db.close()


# ── Scripted model ───────────────────────────────────────────────────


class FakeCompletionClient:
    """Stands in for the Azure client: returns (or raises) scripted replies.

    Every call is recorded as ``(transcript_snapshot, tools_advertised)``.
    """

    def __init__(self, *replies):
        self._replies = list(replies)
        self.calls: list[tuple[list, bool]] = []

    def complete(self, transcript, tools_advertised):
        self.calls.append((list(transcript), tools_advertised))
        if not self._replies:
            raise AssertionError("FakeCompletionClient ran out of scripted replies")
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def fake_client_factory():
    return FakeCompletionClient
