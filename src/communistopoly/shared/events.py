"""Audit trail primitives shared across the engine."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from communistopoly.shared.enums import LogCategory  # noqa: TC001

logger = logging.getLogger(__name__)


class LogEntry(BaseModel):
    """Represents a single immutable entry in the game journal."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    round_number: int = Field(..., ge=0)
    category: LogCategory
    message: str = Field(..., min_length=1)
    player_id: str | None = Field(default=None, min_length=1)
    payload: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))


class GameJournal:
    """Append-only collection of :class:`LogEntry` records.

    Entries are never mutated. When ``max_entries`` is set the oldest entries
    are dropped once the limit is exceeded.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries < 1:
            msg = "Journal limit must be positive."
            raise ValueError(msg)
        self._entries: list[LogEntry] = []
        self._max_entries = max_entries
        self._sequence = 0

    def record(
        self,
        category: LogCategory,
        message: str,
        *,
        round_number: int,
        player_id: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> LogEntry:
        """Append a new entry and return it."""
        self._sequence += 1
        entry = LogEntry(
            id=f"log-{self._sequence}",
            round_number=round_number,
            category=category,
            message=message,
            player_id=player_id,
            payload=payload or {},
        )
        self._entries.append(entry)
        if self._max_entries is not None and len(self._entries) > self._max_entries:
            del self._entries[: len(self._entries) - self._max_entries]
        logger.debug("[%s] %s", category.value, message)
        return entry

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        return tuple(self._entries)

    def by_category(self, category: LogCategory) -> tuple[LogEntry, ...]:
        """Return entries recorded under *category*."""
        return tuple(entry for entry in self._entries if entry.category is category)

    def last(self) -> LogEntry | None:
        return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["GameJournal", "LogEntry"]
