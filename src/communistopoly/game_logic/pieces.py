"""Descriptors for the eight character pieces."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic.config import ConfigDict

from communistopoly.shared.enums import PartyRank, PieceType


class PieceDescriptor(BaseModel):
    """Display metadata and static modifiers of a piece."""

    model_config = ConfigDict(frozen=True)

    piece: PieceType
    name: str
    short_ability: str
    starting_rank: PartyRank = PartyRank.PROLETARIAT


PIECES: dict[PieceType, PieceDescriptor] = {
    descriptor.piece: descriptor
    for descriptor in (
        PieceDescriptor(
            piece=PieceType.HAMMER,
            name="The Hammer",
            short_ability="+50 passing STOY, immune to comrade-initiated Gulag",
        ),
        PieceDescriptor(
            piece=PieceType.SICKLE,
            name="The Sickle",
            short_ability="Half farm quotas, one harvest of a cheap property",
        ),
        PieceDescriptor(
            piece=PieceType.RED_STAR,
            name="The Red Star",
            short_ability="Starts as Party Member, executed if reduced to Proletariat",
            starting_rank=PartyRank.PARTY_MEMBER,
        ),
        PieceDescriptor(
            piece=PieceType.TANK,
            name="The Tank",
            short_ability="Requisition once per lap, first Gulag sentence deflected",
        ),
        PieceDescriptor(
            piece=PieceType.BREAD_LOAF,
            name="The Bread Loaf",
            short_ability="Covers debts for interest, never holds more than 1000",
        ),
        PieceDescriptor(
            piece=PieceType.IRON_CURTAIN,
            name="The Iron Curtain",
            short_ability="Hidden balance, may disappear one property",
        ),
        PieceDescriptor(
            piece=PieceType.VODKA_BOTTLE,
            name="The Vodka Bottle",
            short_ability="Roll three dice and keep two, immune to trick questions",
        ),
        PieceDescriptor(
            piece=PieceType.STATUE_OF_LENIN,
            name="The Statue of Lenin",
            short_ability="Untouchable by lower ranks, one inspiring speech",
        ),
    )
}


def starting_rank_for(piece: PieceType | None) -> PartyRank:
    """Return the rank a player starts on with *piece*."""
    if piece is None:
        return PartyRank.PROLETARIAT
    return PIECES[piece].starting_rank


__all__ = ["PIECES", "PieceDescriptor", "starting_rank_for"]
