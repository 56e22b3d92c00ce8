"""Party Directive card deck."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class DirectiveEffect(StrEnum):
    MOVE = "move"
    MOVE_RELATIVE = "move_relative"
    MONEY = "money"
    GULAG = "gulag"
    RELEASE_TOKEN = "release_token"
    COLLECT_FROM_ALL = "collect_from_all"
    RANK_UP = "rank_up"
    PROPERTY_TAX = "property_tax"
    NEAREST_RAILWAY = "nearest_railway"


class DirectiveCard(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    effect: DirectiveEffect
    destination: int | None = Field(default=None, ge=0, lt=40)
    spaces: int = 0
    amount: int = 0
    per_property: int = Field(default=0, ge=0)
    per_level: int = Field(default=0, ge=0)


DIRECTIVE_DECK: tuple[DirectiveCard, ...] = (
    DirectiveCard(id="pd-1", title="ADVANCE TO STOY", effect=DirectiveEffect.MOVE, destination=0),
    DirectiveCard(
        id="pd-2", title="LABOUR REASSIGNMENT", effect=DirectiveEffect.MOVE, destination=1
    ),
    DirectiveCard(id="pd-3", title="PARTY BONUS", effect=DirectiveEffect.MONEY, amount=200),
    DirectiveCard(
        id="pd-4",
        title="COUNTER-REVOLUTIONARY ACTIVITY DETECTED",
        effect=DirectiveEffect.GULAG,
    ),
    DirectiveCard(
        id="pd-5", title="REHABILITATION COMPLETE", effect=DirectiveEffect.RELEASE_TOKEN
    ),
    DirectiveCard(
        id="pd-6",
        title="PRODUCTION QUOTA MET",
        effect=DirectiveEffect.COLLECT_FROM_ALL,
        amount=50,
    ),
    DirectiveCard(
        id="pd-7", title="VOLUNTARY DONATION", effect=DirectiveEffect.MONEY, amount=-150
    ),
    DirectiveCard(
        id="pd-8",
        title="ADVANCE TO MINISTRY OF LOVE",
        effect=DirectiveEffect.MOVE,
        destination=19,
    ),
    DirectiveCard(
        id="pd-9",
        title="GO BACK THREE SPACES",
        effect=DirectiveEffect.MOVE_RELATIVE,
        spaces=-3,
    ),
    DirectiveCard(
        id="pd-10",
        title="PROPERTY TAX",
        effect=DirectiveEffect.PROPERTY_TAX,
        per_property=25,
        per_level=100,
    ),
    DirectiveCard(id="pd-12", title="PARTY RECOGNITION", effect=DirectiveEffect.RANK_UP),
    DirectiveCard(
        id="pd-13",
        title="ADVANCE TO NEAREST RAILWAY",
        effect=DirectiveEffect.NEAREST_RAILWAY,
    ),
    DirectiveCard(
        id="pd-14", title="BANK ERROR IN YOUR FAVOUR", effect=DirectiveEffect.MONEY, amount=300
    ),
    DirectiveCard(
        id="pd-15", title="GO TO BREADLINE", effect=DirectiveEffect.MOVE, destination=20
    ),
    DirectiveCard(
        id="pd-16", title="STREET REPAIRS", effect=DirectiveEffect.PROPERTY_TAX, per_level=40
    ),
    DirectiveCard(
        id="pd-18",
        title="ADVANCE TO KREMLIN COMPLEX",
        effect=DirectiveEffect.MOVE,
        destination=39,
    ),
    DirectiveCard(
        id="pd-20",
        title="SURPRISE INSPECTION",
        effect=DirectiveEffect.PROPERTY_TAX,
        per_property=15,
        per_level=50,
    ),
)

_CARDS_BY_ID = {card.id: card for card in DIRECTIVE_DECK}


def get_directive(card_id: str) -> DirectiveCard | None:
    return _CARDS_BY_ID.get(card_id)


__all__ = ["DIRECTIVE_DECK", "DirectiveCard", "DirectiveEffect", "get_directive"]
