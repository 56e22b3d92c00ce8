"""Closed set of outstanding requests awaiting a human decision."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from communistopoly.shared.enums import SpecialPower, TaxType


class _PendingBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class PropertyPurchasePending(_PendingBase):
    """State-held property offered to the player who landed on it."""

    kind: Literal["property_purchase"] = "property_purchase"
    player_id: str
    space_id: int
    price: int = Field(..., ge=0)


class QuotaPaymentPending(_PendingBase):
    kind: Literal["quota_payment"] = "quota_payment"
    payer_id: str
    custodian_id: str
    space_id: int
    amount: int = Field(..., ge=0)


class RailwayFeePending(_PendingBase):
    kind: Literal["railway_fee"] = "railway_fee"
    payer_id: str
    custodian_id: str
    space_id: int
    amount: int = Field(..., ge=0)
    stations_held: int = Field(..., ge=1, le=4)


class UtilityFeePending(_PendingBase):
    kind: Literal["utility_fee"] = "utility_fee"
    payer_id: str
    custodian_id: str
    space_id: int
    amount: int = Field(..., ge=0)
    dice_total: int = Field(..., ge=0)


class TaxPaymentPending(_PendingBase):
    kind: Literal["tax_payment"] = "tax_payment"
    player_id: str
    space_id: int
    tax_type: TaxType


class StoyPilferPending(_PendingBase):
    kind: Literal["stoy_pilfer"] = "stoy_pilfer"
    player_id: str


class BreadlinePending(_PendingBase):
    """Contributors still owing the lander a Breadline response."""

    kind: Literal["breadline"] = "breadline"
    landing_player_id: str
    remaining: tuple[str, ...] = Field(default_factory=tuple)


class CommunistTestPending(_PendingBase):
    kind: Literal["communist_test"] = "communist_test"
    player_id: str
    question_id: str


class PartyDirectivePending(_PendingBase):
    kind: Literal["party_directive"] = "party_directive"
    player_id: str


class GulagEscapeChoicePending(_PendingBase):
    kind: Literal["gulag_escape_choice"] = "gulag_escape_choice"
    player_id: str
    turns_served: int = Field(..., ge=0)


class AbilityApprovalPending(_PendingBase):
    """A special power that only takes effect once Stalin approves it."""

    kind: Literal["ability_approval"] = "ability_approval"
    request_id: str
    power: SpecialPower
    requester_id: str
    target_id: str | None = None
    space_id: int | None = None
    note: str | None = None


class BribeReviewPending(_PendingBase):
    kind: Literal["bribe_review"] = "bribe_review"
    bribe_id: str
    player_id: str
    amount: int = Field(..., gt=0)


class ConfessionReviewPending(_PendingBase):
    kind: Literal["confession_review"] = "confession_review"
    confession_id: str
    player_id: str


PendingAction = Annotated[
    PropertyPurchasePending
    | QuotaPaymentPending
    | RailwayFeePending
    | UtilityFeePending
    | TaxPaymentPending
    | StoyPilferPending
    | BreadlinePending
    | CommunistTestPending
    | PartyDirectivePending
    | GulagEscapeChoicePending
    | AbilityApprovalPending
    | BribeReviewPending
    | ConfessionReviewPending,
    Field(discriminator="kind"),
]


__all__ = [
    "AbilityApprovalPending",
    "BreadlinePending",
    "BribeReviewPending",
    "ConfessionReviewPending",
    "CommunistTestPending",
    "GulagEscapeChoicePending",
    "PartyDirectivePending",
    "PendingAction",
    "PropertyPurchasePending",
    "QuotaPaymentPending",
    "RailwayFeePending",
    "StoyPilferPending",
    "TaxPaymentPending",
    "UtilityFeePending",
]
