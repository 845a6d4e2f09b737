"""Tests for the knowledge base loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from techgear_chatbot.tools.knowledge_base import KnowledgeBase, KnowledgeBaseError

REPO_ROOT = Path(__file__).resolve().parent.parent


class TestKnowledgeBaseLoading:
    def test_content_is_byte_identical_to_file(self, knowledge_base, knowledge_file):
        assert knowledge_base.content.encode("utf-8") == knowledge_file.read_bytes()

    def test_line_endings_are_preserved(self, knowledge_base):
        assert "\r\n" in knowledge_base.content

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(KnowledgeBaseError, match="Failed to load knowledge base"):
            KnowledgeBase(tmp_path / "missing.txt")

    def test_shipped_knowledge_file_loads(self):
        kb = KnowledgeBase(REPO_ROOT / "knowledge_base.txt")
        assert "TechGear UK" in kb.content
        assert "Opening Hours" in kb.content


class TestSearch:
    @pytest.mark.parametrize(
        "query",
        ["What are your opening hours?", "returns", "delivery cost to Leeds"],
    )
    def test_search_returns_full_text_for_any_query(self, knowledge_base, knowledge_file, query):
        result = knowledge_base.search(query)
        assert result.encode("utf-8") == knowledge_file.read_bytes()
