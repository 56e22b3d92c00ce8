"""Immutable value objects shared across the domain layer."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict


class Decision(BaseModel):
    """Allowed/denied outcome of a rule check, with a human-readable reason."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls, reason: str | None = None) -> Decision:
        """Return an affirmative decision."""
        return cls(allowed=True, reason=reason)

    @classmethod
    def deny(cls, reason: str) -> Decision:
        """Return a rejection carrying *reason*."""
        return cls(allowed=False, reason=reason)

    def __bool__(self) -> bool:
        return self.allowed


class DiceRoll(BaseModel):
    """Dice kept for a roll; the vodka roll records the discarded die too."""

    model_config = ConfigDict(frozen=True)

    dice: tuple[int, ...] = Field(..., min_length=2, max_length=2)
    discarded: tuple[int, ...] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def _validate_faces(self) -> DiceRoll:
        """Ensure every face lies on a six-sided die."""
        for face in (*self.dice, *self.discarded):
            if not 1 <= face <= 6:  # noqa: PLR2004
                msg = f"Die face {face} is outside 1-6."
                raise ValueError(msg)
        return self

    @property
    def total(self) -> int:
        return sum(self.dice)

    @property
    def is_doubles(self) -> bool:
        return self.dice[0] == self.dice[1]


__all__ = ["Decision", "DiceRoll"]
