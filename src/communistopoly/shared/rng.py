"""Deterministic random helpers used across the game logic."""

from __future__ import annotations

from collections.abc import Iterable, Sequence  # noqa: TC003
from random import Random
from typing import TypeVar

from communistopoly.shared.value_objects import DiceRoll

_T = TypeVar("_T")


class DeterministicRandomService:
    """Thin wrapper around :class:`random.Random` providing deterministic utilities."""

    def __init__(self, seed: int | None = None) -> None:
        self._random = Random(seed)  # noqa: S311

    def roll_die(self) -> int:
        """Return a single uniform 1-6 face."""
        return self._random.randint(1, 6)

    def roll_dice(self) -> DiceRoll:
        """Roll two six-sided dice."""
        return DiceRoll(dice=(self.roll_die(), self.roll_die()))

    def roll_best_two_of_three(self) -> DiceRoll:
        """Roll three dice and keep the two highest."""
        faces = sorted((self.roll_die() for _ in range(3)), reverse=True)
        return DiceRoll(dice=(faces[0], faces[1]), discarded=(faces[2],))

    def random(self) -> float:
        """Return a float in ``[0, 1)``."""
        return self._random.random()

    def choice(self, population: Sequence[_T]) -> _T:
        """Return a deterministic choice from *population*."""
        if not population:
            msg = "Cannot choose from an empty population."
            raise ValueError(msg)
        return population[self._random.randrange(len(population))]

    def shuffle(self, items: Iterable[_T]) -> tuple[_T, ...]:
        """Return a shuffled tuple of *items* using the service RNG."""
        mutable = list(items)
        self._random.shuffle(mutable)
        return tuple(mutable)


__all__ = ["DeterministicRandomService"]
