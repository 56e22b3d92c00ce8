"""Mutable game state containers owned by a single game session."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from communistopoly.game_logic.pending import PendingAction  # noqa: TC001
from communistopoly.shared.enums import (
    EliminationReason,
    GameEndCondition,
    GulagReason,
    LogCategory,
    PartyRank,
    PieceType,
    TribunalPhase,
)
from communistopoly.shared.events import GameJournal, LogEntry
from communistopoly.shared.value_objects import DiceRoll  # noqa: TC001


class HammerCapabilities(BaseModel):
    piece: Literal[PieceType.HAMMER] = PieceType.HAMMER
    immunity_forfeited: bool = False


class SickleCapabilities(BaseModel):
    piece: Literal[PieceType.SICKLE] = PieceType.SICKLE
    harvest_used: bool = False
    motherland_fines: int = 0


class RedStarCapabilities(BaseModel):
    piece: Literal[PieceType.RED_STAR] = PieceType.RED_STAR


class TankCapabilities(BaseModel):
    piece: Literal[PieceType.TANK] = PieceType.TANK
    gulag_immunity_used: bool = False
    requisition_used_this_lap: bool = False


class BreadLoafCapabilities(BaseModel):
    piece: Literal[PieceType.BREAD_LOAF] = PieceType.BREAD_LOAF
    debts_covered: int = 0


class IronCurtainCapabilities(BaseModel):
    piece: Literal[PieceType.IRON_CURTAIN] = PieceType.IRON_CURTAIN
    disappear_used: bool = False
    claimed_rubles: int = 0


class VodkaBottleCapabilities(BaseModel):
    piece: Literal[PieceType.VODKA_BOTTLE] = PieceType.VODKA_BOTTLE
    use_count: int = 0


class LeninCapabilities(BaseModel):
    piece: Literal[PieceType.STATUE_OF_LENIN] = PieceType.STATUE_OF_LENIN
    speech_used: bool = False
    standing_fines: int = 0


PieceCapabilities = Annotated[
    HammerCapabilities
    | SickleCapabilities
    | RedStarCapabilities
    | TankCapabilities
    | BreadLoafCapabilities
    | IronCurtainCapabilities
    | VodkaBottleCapabilities
    | LeninCapabilities,
    Field(discriminator="piece"),
]

_CAPABILITY_TYPES: dict[PieceType, type[BaseModel]] = {
    PieceType.HAMMER: HammerCapabilities,
    PieceType.SICKLE: SickleCapabilities,
    PieceType.RED_STAR: RedStarCapabilities,
    PieceType.TANK: TankCapabilities,
    PieceType.BREAD_LOAF: BreadLoafCapabilities,
    PieceType.IRON_CURTAIN: IronCurtainCapabilities,
    PieceType.VODKA_BOTTLE: VodkaBottleCapabilities,
    PieceType.STATUE_OF_LENIN: LeninCapabilities,
}


def capabilities_for(piece: PieceType | None, starting_rubles: int = 0) -> Any:
    """Return a fresh capability record for *piece* (``None`` for Stalin)."""
    if piece is None:
        return None
    if piece is PieceType.IRON_CURTAIN:
        return IronCurtainCapabilities(claimed_rubles=starting_rubles)
    return _CAPABILITY_TYPES[piece]()


class GroupPowerUsage(BaseModel):
    """Usage flags for powers granted by complete property groups."""

    camp_labour_used: bool = False
    ministry_rewrite_used: bool = False
    media_revote_used: bool = False
    railway_capture_used: bool = False
    kgb_previews_this_round: int = 0


class Debt(BaseModel):
    """Outstanding obligation; ``creditor_id`` of ``None`` means the State."""

    id: str
    debtor_id: str
    creditor_id: str | None = None
    amount: int = Field(..., ge=0)
    created_at_round: int = Field(..., ge=1)
    reason: str
    interest_rate: float = Field(default=0.0, ge=0)


class Player(BaseModel):
    """Participant in the game, including the non-competing Stalin role."""

    id: str
    name: str = Field(..., min_length=1)
    piece: PieceType | None = None
    rank: PartyRank = PartyRank.PROLETARIAT
    rubles: int = Field(default=0, ge=0)
    position: int = Field(default=0, ge=0, lt=40)
    properties: list[int] = Field(default_factory=list)

    in_gulag: bool = False
    gulag_turns: int = Field(default=0, ge=0, le=10)
    gulag_reason: GulagReason | None = None

    is_eliminated: bool = False
    elimination_reason: EliminationReason | None = None
    elimination_round: int | None = None
    is_stalin: bool = False

    under_suspicion: bool = False
    denouncements_this_round: int = 0
    release_tokens: int = Field(default=0, ge=0)
    owes_favour_to: list[str] = Field(default_factory=list)
    vouching_for: str | None = None
    debts: list[Debt] = Field(default_factory=list)

    laps_completed: int = 0
    correct_test_answers: int = 0
    consecutive_failed_tests: int = 0

    abilities: PieceCapabilities | None = None
    group_powers: GroupPowerUsage = Field(default_factory=GroupPowerUsage)

    @property
    def is_active(self) -> bool:
        """Competing and not yet eliminated."""
        return not self.is_eliminated and not self.is_stalin

    @property
    def has_release_token(self) -> bool:
        return self.release_tokens > 0

    @property
    def debt_total(self) -> int:
        return sum(debt.amount for debt in self.debts)

    def find_debt(self, debt_id: str) -> Debt | None:
        for debt in self.debts:
            if debt.id == debt_id:
                return debt
        return None


class PropertyState(BaseModel):
    """Mutable custodianship record of an ownable space."""

    space_id: int = Field(..., ge=0, lt=40)
    custodian_id: str | None = None
    collectivization_level: int = Field(default=0, ge=0, le=5)
    mortgaged: bool = False

    @property
    def is_state_owned(self) -> bool:
        return self.custodian_id is None


class Tribunal(BaseModel):
    """The single active accusation, if any."""

    accuser_id: str
    accused_id: str
    crime: str
    phase: TribunalPhase = TribunalPhase.ACCUSATION
    witnesses_for: list[str] = Field(default_factory=list)
    witnesses_against: list[str] = Field(default_factory=list)
    is_inform: bool = False
    required_witnesses: int = Field(default=0, ge=0)
    opened_at_round: int = Field(default=1, ge=1)


class TradeItems(BaseModel):
    """One side of a trade offer."""

    model_config = ConfigDict(frozen=True)

    rubles: int = Field(default=0, ge=0)
    properties: tuple[int, ...] = Field(default_factory=tuple)
    release_tokens: int = Field(default=0, ge=0)
    favours: int = Field(default=0, ge=0)

    @property
    def is_empty(self) -> bool:
        return not (self.rubles or self.properties or self.release_tokens or self.favours)


class TradeOffer(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    from_player_id: str
    to_player_id: str
    offering: TradeItems = Field(default_factory=TradeItems)
    requesting: TradeItems = Field(default_factory=TradeItems)
    proposed_at_round: int = Field(default=1, ge=1)


class VoucherAgreement(BaseModel):
    """Liability window a voucher accepts by securing a prisoner's release."""

    id: str
    prisoner_id: str
    voucher_id: str
    expires_at_round: int
    is_active: bool = True


class BribeRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    player_id: str
    amount: int = Field(..., gt=0)
    requested_at_round: int = Field(..., ge=1)


class Confession(BaseModel):
    """Rehabilitation plea a prisoner submits to Stalin."""

    id: str
    prisoner_id: str
    text: str = Field(..., min_length=1)
    submitted_at_round: int = Field(..., ge=1)
    reviewed: bool = False
    accepted: bool | None = None


class GreatPurge(BaseModel):
    """Open purge vote; ``votes`` maps each voter to the comrade they point at."""

    votes: dict[str, str] = Field(default_factory=dict)
    opened_at_round: int = Field(..., ge=1)


class FiveYearPlan(BaseModel):
    target: int = Field(..., gt=0)
    collected: int = Field(default=0, ge=0)
    started_at_round: int = Field(..., ge=1)
    deadline_round: int = Field(..., ge=1)
    contributions: dict[str, int] = Field(default_factory=dict)

    @property
    def is_met(self) -> bool:
        return self.collected >= self.target


class HeroAward(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_id: str
    granted_at_round: int = Field(..., ge=1)
    expires_at_round: int = Field(..., ge=1)


class PlayerStatistics(BaseModel):
    """Running tallies kept for one player over the whole game."""

    turns_played: int = 0
    denouncements_made: int = 0
    denouncements_received: int = 0
    tribunals_won: int = 0
    tribunals_lost: int = 0
    gulag_sentences: int = 0
    total_gulag_turns: int = 0
    gulag_escapes: int = 0
    money_earned: int = 0
    money_spent: int = 0
    properties_acquired: int = 0
    max_wealth: int = 0
    tests_passed: int = 0
    tests_failed: int = 0


class GameStatistics(BaseModel):
    total_turns: int = 0
    total_denouncements: int = 0
    total_tribunals: int = 0
    total_gulag_sentences: int = 0
    state_treasury_peak: int = 0
    ended_at_round: int | None = None
    player_stats: dict[str, PlayerStatistics] = Field(default_factory=dict)

    def for_player(self, player_id: str) -> PlayerStatistics:
        """Return the tallies for *player_id*, starting them if needed."""
        return self.player_stats.setdefault(player_id, PlayerStatistics())


class FinalStanding(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_id: str
    rubles: int
    rank: PartyRank
    properties: int
    eliminated: bool
    elimination_reason: EliminationReason | None = None


class GameState(BaseModel):
    """Aggregate container of everything that changes during a game."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    players: list[Player]
    properties: dict[int, PropertyState]
    state_treasury: int = 0

    round_number: int = 1
    turn_order: list[str] = Field(default_factory=list)
    current_turn_index: int = 0
    started: bool = False
    last_roll: DiceRoll | None = None
    doubles_count: int = 0
    has_rolled: bool = False

    tribunal: Tribunal | None = None
    trade_offers: list[TradeOffer] = Field(default_factory=list)
    vouchers: list[VoucherAgreement] = Field(default_factory=list)
    bribes: list[BribeRequest] = Field(default_factory=list)
    confessions: list[Confession] = Field(default_factory=list)
    pending_action: PendingAction | None = None

    directive_deck: list[str] = Field(default_factory=list)
    directive_discard: list[str] = Field(default_factory=list)
    rule_amendments: list[str] = Field(default_factory=list)

    great_purge_used: bool = False
    great_purge: GreatPurge | None = None
    five_year_plan: FiveYearPlan | None = None
    heroes: list[HeroAward] = Field(default_factory=list)
    statistics: GameStatistics = Field(default_factory=GameStatistics)

    end_vote_initiator: str | None = None
    end_votes: dict[str, bool] = Field(default_factory=dict)
    game_end_condition: GameEndCondition | None = None
    winner_id: str | None = None
    final_standings: list[FinalStanding] = Field(default_factory=list)

    journal: GameJournal = Field(default_factory=GameJournal)
    sequence: int = 0

    def next_id(self, prefix: str) -> str:
        """Return a fresh identifier unique within this game."""
        self.sequence += 1
        return f"{prefix}-{self.sequence}"

    def player(self, player_id: str | None) -> Player | None:
        if player_id is None:
            return None
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def property_state(self, space_id: int) -> PropertyState | None:
        return self.properties.get(space_id)

    @property
    def stalin(self) -> Player | None:
        for player in self.players:
            if player.is_stalin:
                return player
        return None

    def active_players(self) -> list[Player]:
        """Non-eliminated, non-Stalin players in seating order."""
        return [player for player in self.players if player.is_active]

    def current_player(self) -> Player | None:
        if not self.turn_order:
            return None
        return self.player(self.turn_order[self.current_turn_index])

    @property
    def is_over(self) -> bool:
        return self.game_end_condition is not None

    def is_hero(self, player_id: str) -> bool:
        """Whether *player_id* holds an unexpired Hero of the Soviet Union award."""
        return any(
            hero.player_id == player_id and hero.expires_at_round > self.round_number
            for hero in self.heroes
        )

    def log(
        self,
        category: LogCategory,
        message: str,
        player_id: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> LogEntry:
        """Append an entry to the game journal for the current round."""
        return self.journal.record(
            category,
            message,
            round_number=self.round_number,
            player_id=player_id,
            payload=payload,
        )


__all__ = [
    "BreadLoafCapabilities",
    "BribeRequest",
    "Confession",
    "Debt",
    "FinalStanding",
    "FiveYearPlan",
    "GameState",
    "GameStatistics",
    "GreatPurge",
    "GroupPowerUsage",
    "HammerCapabilities",
    "HeroAward",
    "IronCurtainCapabilities",
    "LeninCapabilities",
    "PieceCapabilities",
    "Player",
    "PlayerStatistics",
    "PropertyState",
    "RedStarCapabilities",
    "SickleCapabilities",
    "TankCapabilities",
    "TradeItems",
    "TradeOffer",
    "Tribunal",
    "VodkaBottleCapabilities",
    "VoucherAgreement",
    "capabilities_for",
]
