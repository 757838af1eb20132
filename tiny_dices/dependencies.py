"""FastAPI dependencies for Tiny Dices."""

from __future__ import annotations

import logging
import secrets

from fastapi import Depends, HTTPException

from tiny_dices.config import settings
from tiny_dices.rendering import HtmlFaceRenderer
from tiny_dices.session import DiceSession

logger = logging.getLogger(__name__)


class SessionRegistry:
    """In-memory dice tables keyed by an unguessable id.

    Holds at most ``limit`` tables. Creating one past the limit destroys the
    oldest.
    """

    def __init__(self, limit: int | None = None) -> None:
        self.limit = settings.max_sessions if limit is None else limit
        self._tables: dict[str, tuple[DiceSession, HtmlFaceRenderer]] = {}

    def __len__(self) -> int:
        return len(self._tables)

    def create(self) -> str:
        """Start a new table with an HTML renderer and return its id."""
        while len(self._tables) >= self.limit:
            oldest = next(iter(self._tables))
            logger.warning("Table limit %d reached, destroying table %s", self.limit, oldest)
            self.discard(oldest)
        table_id = secrets.token_urlsafe(8)
        renderer = HtmlFaceRenderer()
        self._tables[table_id] = (DiceSession(renderer), renderer)
        return table_id

    def get(self, table_id: str) -> tuple[DiceSession, HtmlFaceRenderer] | None:
        return self._tables.get(table_id)

    def discard(self, table_id: str) -> None:
        """Destroy and forget a table. Unknown ids are ignored."""
        entry = self._tables.pop(table_id, None)
        if entry is not None:
            entry[0].destroy()

    def clear(self) -> None:
        for table_id in list(self._tables):
            self.discard(table_id)


_registry = SessionRegistry()


def get_registry() -> SessionRegistry:
    """Return the process-wide table registry."""
    return _registry


async def get_table(
    table_id: str, registry: SessionRegistry = Depends(get_registry)
) -> tuple[DiceSession, HtmlFaceRenderer]:
    """Return the session and renderer for table_id, or 404."""
    entry = registry.get(table_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Table not found")
    return entry
