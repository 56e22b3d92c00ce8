"""Shared enumerations, value objects and cross-cutting helpers for the engine."""

from communistopoly.shared.enums import (
    RANK_ORDER,
    BreadlineResponse,
    CardType,
    EliminationReason,
    EscapeMethod,
    GameEndCondition,
    GulagReason,
    LogCategory,
    PartyRank,
    PieceType,
    PropertyGroup,
    SpaceType,
    SpecialPower,
    TaxChoice,
    TaxType,
    TestDifficulty,
    TribunalPhase,
    Verdict,
    WitnessSide,
    rank_index,
)
from communistopoly.shared.events import GameJournal, LogEntry
from communistopoly.shared.rng import DeterministicRandomService
from communistopoly.shared.value_objects import Decision, DiceRoll

__all__ = [
    "RANK_ORDER",
    "BreadlineResponse",
    "CardType",
    "Decision",
    "DeterministicRandomService",
    "DiceRoll",
    "EliminationReason",
    "EscapeMethod",
    "GameEndCondition",
    "GameJournal",
    "GulagReason",
    "LogCategory",
    "LogEntry",
    "PartyRank",
    "PieceType",
    "PropertyGroup",
    "SpaceType",
    "SpecialPower",
    "TaxChoice",
    "TaxType",
    "TestDifficulty",
    "TribunalPhase",
    "Verdict",
    "WitnessSide",
    "rank_index",
]
