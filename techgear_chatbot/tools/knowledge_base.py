"""Company knowledge base.

Loads the static knowledge text (address, opening hours, delivery, returns,
contact details) once at startup.  The text is small enough to hand to the
model in full, so ``search`` returns all of it and the model picks out the
relevant part.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class KnowledgeBaseError(Exception):
    """Raised when the knowledge file cannot be read at startup."""


class KnowledgeBase:
    """Read-only, in-memory copy of the knowledge text."""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._content = self._load(self._path)
        logger.info(
            "Knowledge base loaded from %s (%d chars)", self._path, len(self._content),
        )

    @staticmethod
    def _load(path: Path) -> str:
        # newline="" keeps line endings exactly as they are on disk
        try:
            with open(path, encoding="utf-8", newline="") as fh:
                return fh.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise KnowledgeBaseError(
                f"Failed to load knowledge base from: {path}"
            ) from exc

    @property
    def path(self) -> Path:
        return self._path

    @property
    def content(self) -> str:
        return self._content

    def search(self, query: str) -> str:
        """Return the full knowledge text; *query* is deliberately unused."""
        logger.debug("Knowledge base search: %r", query)
        return self._content
