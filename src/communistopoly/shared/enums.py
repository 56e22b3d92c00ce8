"""Shared enumerations used across the engine."""

from enum import StrEnum


class PartyRank(StrEnum):
    """Seniority ladder gating property groups and accusation immunity."""

    PROLETARIAT = "proletariat"
    PARTY_MEMBER = "party_member"
    COMMISSAR = "commissar"
    INNER_CIRCLE = "inner_circle"


RANK_ORDER: tuple[PartyRank, ...] = (
    PartyRank.PROLETARIAT,
    PartyRank.PARTY_MEMBER,
    PartyRank.COMMISSAR,
    PartyRank.INNER_CIRCLE,
)


def rank_index(rank: PartyRank) -> int:
    """Return the position of *rank* on the ladder (0 is the lowest)."""
    return RANK_ORDER.index(rank)


class PieceType(StrEnum):
    """Character pieces a competing player may choose."""

    HAMMER = "hammer"
    SICKLE = "sickle"
    RED_STAR = "red_star"
    TANK = "tank"
    BREAD_LOAF = "bread_loaf"
    IRON_CURTAIN = "iron_curtain"
    VODKA_BOTTLE = "vodka_bottle"
    STATUE_OF_LENIN = "statue_of_lenin"


class SpaceType(StrEnum):
    CORNER = "corner"
    PROPERTY = "property"
    RAILWAY = "railway"
    UTILITY = "utility"
    CARD = "card"
    TAX = "tax"


class PropertyGroup(StrEnum):
    """Colour groups; railways and utilities form their own groups."""

    SIBERIAN = "siberian"
    COLLECTIVE = "collective"
    INDUSTRIAL = "industrial"
    MINISTRY = "ministry"
    MILITARY = "military"
    MEDIA = "media"
    ELITE = "elite"
    KREMLIN = "kremlin"
    RAILROAD = "railroad"
    UTILITY = "utility"


class CardType(StrEnum):
    PARTY_DIRECTIVE = "party_directive"
    COMMUNIST_TEST = "communist_test"


class TaxType(StrEnum):
    REVOLUTIONARY_CONTRIBUTION = "revolutionary_contribution"
    BOURGEOIS_DECADENCE = "bourgeois_decadence"


class GulagReason(StrEnum):
    """Causes for which a player may be imprisoned."""

    ENEMY_OF_STATE = "enemy_of_state"
    THREE_DOUBLES = "three_doubles"
    DENOUNCEMENT_GUILTY = "denouncement_guilty"
    DEBT_DEFAULT = "debt_default"
    PILFERING_CAUGHT = "pilfering_caught"
    STALIN_DECREE = "stalin_decree"
    RAILWAY_CAPTURE = "railway_capture"
    CAMP_LABOUR = "camp_labour"
    VOUCHER_CONSEQUENCE = "voucher_consequence"


class EscapeMethod(StrEnum):
    ROLL = "roll"
    PAY = "pay"
    CARD = "card"
    VOUCH = "vouch"
    INFORM = "inform"
    BRIBE = "bribe"


class TribunalPhase(StrEnum):
    ACCUSATION = "accusation"
    EVIDENCE = "evidence"
    VERDICT = "verdict"


class Verdict(StrEnum):
    GUILTY = "guilty"
    INNOCENT = "innocent"
    BOTH_GUILTY = "both_guilty"
    INSUFFICIENT_EVIDENCE = "insufficient_evidence"


class WitnessSide(StrEnum):
    """Side a witness testifies on: supporting or opposing the accusation."""

    FOR = "for"
    AGAINST = "against"


class LogCategory(StrEnum):
    MOVEMENT = "movement"
    PAYMENT = "payment"
    GULAG = "gulag"
    RANK = "rank"
    PROPERTY = "property"
    TRIBUNAL = "tribunal"
    SYSTEM = "system"
    DICE = "dice"
    DEBT = "debt"
    TRADE = "trade"
    ABILITY = "ability"


class EliminationReason(StrEnum):
    BANKRUPTCY = "bankruptcy"
    EXECUTION = "execution"
    GULAG_TIMEOUT = "gulag_timeout"
    RED_STAR_DEMOTION = "red_star_demotion"
    UNANIMOUS = "unanimous"


class GameEndCondition(StrEnum):
    SURVIVOR = "survivor"
    STALIN_WINS = "stalin_wins"
    UNANIMOUS = "unanimous"


class TestDifficulty(StrEnum):
    """Communist Test question tiers."""

    __test__ = False

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    TRICK = "trick"


class SpecialPower(StrEnum):
    """One-shot or per-round powers that may need Stalin's approval."""

    CAMP_LABOUR = "camp_labour"
    MINISTRY_REWRITE = "ministry_rewrite"
    MEDIA_REVOTE = "media_revote"
    KGB_PREVIEW = "kgb_preview"
    RAILWAY_CAPTURE = "railway_capture"
    IRON_CURTAIN_DISAPPEAR = "iron_curtain_disappear"
    LENIN_SPEECH = "lenin_speech"


class TaxChoice(StrEnum):
    """Payment option on the Revolutionary Contribution space."""

    PERCENTAGE = "percentage"
    FLAT = "flat"


class BreadlineResponse(StrEnum):
    CONTRIBUTE = "contribute"
    REFUSE = "refuse"


__all__ = [
    "RANK_ORDER",
    "BreadlineResponse",
    "CardType",
    "EliminationReason",
    "EscapeMethod",
    "GameEndCondition",
    "GulagReason",
    "LogCategory",
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
