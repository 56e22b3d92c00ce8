"""Single-game facade wiring the rule engines around one owned state."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from communistopoly.game_logic.abilities import AbilityEngine
from communistopoly.game_logic.board import ownable_spaces
from communistopoly.game_logic.configuration import build_rules_configuration
from communistopoly.game_logic.decrees import DecreeEngine
from communistopoly.game_logic.errors import GameSetupError, SessionNotInitializedError
from communistopoly.game_logic.gulag import GulagEngine
from communistopoly.game_logic.landing import LandingEngine
from communistopoly.game_logic.ledger import PlayerLedger
from communistopoly.game_logic.pieces import starting_rank_for
from communistopoly.game_logic.properties import PropertyEngine
from communistopoly.game_logic.state import (
    GameState,
    GameStatistics,
    Player,
    PlayerStatistics,
    PropertyState,
    TradeItems,
    capabilities_for,
)
from communistopoly.game_logic.trade import TradeEngine
from communistopoly.game_logic.tribunal import TribunalEngine
from communistopoly.game_logic.turns import TurnEngine
from communistopoly.settings import EngineSettings, get_settings
from communistopoly.shared.enums import (
    BreadlineResponse,
    EscapeMethod,
    GameEndCondition,
    GulagReason,
    PartyRank,
    PieceType,
    TaxChoice,
    Verdict,
    WitnessSide,
)
from communistopoly.shared.events import GameJournal, LogEntry
from communistopoly.shared.rng import DeterministicRandomService
from communistopoly.shared.value_objects import Decision, DiceRoll

if TYPE_CHECKING:
    from communistopoly.game_logic.configuration import RulesConfiguration
    from communistopoly.game_logic.directives import DirectiveCard
    from communistopoly.game_logic.pending import PendingAction
    from communistopoly.game_logic.state import TradeOffer
    from communistopoly.game_logic.trivia import TestQuestion

logger = logging.getLogger(__name__)


class PlayerSetup(BaseModel):
    """One seat at the table as chosen on the setup screen."""

    name: str = Field(..., min_length=1)
    piece: PieceType | None = None
    is_stalin: bool = False
    rank: PartyRank | None = None


def _validate_setup(setups: list[PlayerSetup]) -> None:
    stalins = [setup for setup in setups if setup.is_stalin]
    if len(stalins) != 1:
        msg = f"Exactly one player must be Stalin, found {len(stalins)}."
        raise GameSetupError(msg)
    if stalins[0].piece is not None:
        msg = "Stalin does not play with a piece."
        raise GameSetupError(msg)
    competitors = [setup for setup in setups if not setup.is_stalin]
    if len(competitors) < 2:  # noqa: PLR2004
        msg = f"At least two competing players are required, found {len(competitors)}."
        raise GameSetupError(msg)
    pieces = [setup.piece for setup in competitors]
    if any(piece is None for piece in pieces):
        msg = "Every competing player needs a piece."
        raise GameSetupError(msg)
    if len(set(pieces)) != len(pieces):
        msg = "Each piece may only be chosen once."
        raise GameSetupError(msg)


class GameSession:
    """Owns one game of Communistopoly and exposes every rule operation.

    The session builds a :class:`GameState` from the setup list and hands it
    to stateless engines. Operations return decisions, values or ``None``;
    only contract violations (bad setup, playing before :meth:`start_game`)
    raise.
    """

    def __init__(
        self,
        setups: Iterable[PlayerSetup],
        *,
        rules: RulesConfiguration | None = None,
        settings: EngineSettings | None = None,
        rng_service: DeterministicRandomService | None = None,
    ) -> None:
        seats = list(setups)
        _validate_setup(seats)
        self._settings = settings or get_settings()
        logging.getLogger("communistopoly").setLevel(self._settings.log_level.upper())
        self._config = rules or build_rules_configuration()
        self._rng = rng_service or DeterministicRandomService(self._settings.rng_seed)
        self._state = self._init_state(seats)

        ledger = PlayerLedger(self._state, self._config)
        properties = PropertyEngine(self._state, self._config, ledger)
        gulag = GulagEngine(self._state, self._config, ledger, self._rng)
        self._ledger = ledger
        self._properties = properties
        self._gulag = gulag
        self._tribunal = TribunalEngine(self._state, self._config, ledger, gulag)
        self._abilities = AbilityEngine(
            self._state, self._config, ledger, properties, gulag, self._rng
        )
        self._landing = LandingEngine(
            self._state, self._config, ledger, properties, gulag, self._rng
        )
        self._trade = TradeEngine(self._state, self._config, ledger, properties)
        self._decrees = DecreeEngine(self._state, self._config, ledger, gulag)
        self._turns = TurnEngine(
            self._state,
            self._config,
            ledger,
            gulag,
            self._landing,
            self._abilities,
            self._decrees,
            self._rng,
        )
        logger.info("Game created with %d competing players", len(self._state.active_players()))

    def _init_state(self, seats: list[PlayerSetup]) -> GameState:
        starting = self._config.starting_rubles
        players: list[Player] = []
        for index, seat in enumerate(seats, start=1):
            if seat.is_stalin:
                players.append(
                    Player(id=f"player-{index}", name=seat.name, is_stalin=True)
                )
                continue
            players.append(
                Player(
                    id=f"player-{index}",
                    name=seat.name,
                    piece=seat.piece,
                    rank=seat.rank or starting_rank_for(seat.piece),
                    rubles=starting,
                    abilities=capabilities_for(seat.piece, starting),
                )
            )
        competitors = sum(1 for player in players if not player.is_stalin)
        statistics = GameStatistics(
            state_treasury_peak=competitors * starting,
            player_stats={
                player.id: PlayerStatistics(max_wealth=player.rubles)
                for player in players
                if not player.is_stalin
            },
        )
        return GameState(
            players=players,
            properties={
                space.id: PropertyState(space_id=space.id) for space in ownable_spaces()
            },
            state_treasury=competitors * starting,
            statistics=statistics,
            journal=GameJournal(max_entries=self._settings.max_log_entries),
        )

    def _require_started(self) -> None:
        if not self._state.started:
            msg = "The game has not been started."
            raise SessionNotInitializedError(msg)

    # Read models -------------------------------------------------------------

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def rules(self) -> RulesConfiguration:
        return self._config

    @property
    def players(self) -> list[Player]:
        return self._state.players

    @property
    def properties(self) -> list[PropertyState]:
        return [self._state.properties[key] for key in sorted(self._state.properties)]

    @property
    def log(self) -> tuple[LogEntry, ...]:
        return self._state.journal.entries

    @property
    def pending_action(self) -> PendingAction | None:
        return self._state.pending_action

    @property
    def statistics(self) -> GameStatistics:
        return self._state.statistics

    @property
    def stalin(self) -> Player:
        stalin = self._state.stalin
        if stalin is None:
            msg = "The game has no Stalin seat."
            raise GameSetupError(msg)
        return stalin

    def player(self, player_id: str) -> Player | None:
        return self._state.player(player_id)

    def player_by_name(self, name: str) -> Player | None:
        return next((p for p in self._state.players if p.name == name), None)

    def current_player(self) -> Player | None:
        return self._state.current_player()

    def total_wealth(self, player_id: str) -> int | None:
        player = self._state.player(player_id)
        return self._ledger.total_wealth(player) if player is not None else None

    # Turns -------------------------------------------------------------------

    def start_game(self) -> None:
        if self._state.started:
            return
        self._turns.start_game()

    def roll_dice(
        self,
        player_id: str,
        *,
        use_vodka: bool = False,
        roll: DiceRoll | None = None,
    ) -> DiceRoll | None:
        self._require_started()
        return self._turns.roll_dice(player_id, use_vodka=use_vodka, roll=roll)

    def end_turn(self, player_id: str) -> Decision:
        self._require_started()
        return self._turns.end_turn(player_id)

    def check_game_end(self) -> GameEndCondition | None:
        return self._ledger.check_game_end()

    def initiate_end_vote(self, player_id: str) -> Decision:
        self._require_started()
        return self._turns.initiate_end_vote(player_id)

    def cast_end_vote(self, player_id: str, *, in_favour: bool) -> Decision:
        self._require_started()
        return self._turns.cast_end_vote(player_id, in_favour=in_favour)

    # Properties --------------------------------------------------------------

    def can_purchase(self, player_id: str, space_id: int) -> Decision:
        return self._properties.can_purchase(player_id, space_id)

    def purchase_property(
        self, player_id: str, space_id: int, price: int | None = None
    ) -> Decision:
        return self._properties.purchase_property(player_id, space_id, price)

    def calculate_quota(
        self, space_id: int, landing_player_id: str, dice_total: int | None = None
    ) -> int:
        return self._properties.calculate_quota(space_id, landing_player_id, dice_total)

    def add_collectivization(self, player_id: str, space_id: int) -> Decision:
        return self._properties.add_collectivization(player_id, space_id)

    def sell_collectivization(self, player_id: str, space_id: int) -> Decision:
        return self._properties.sell_collectivization(player_id, space_id)

    def mortgage_property(self, player_id: str, space_id: int) -> Decision:
        return self._properties.mortgage_property(player_id, space_id)

    def unmortgage_property(self, player_id: str, space_id: int) -> Decision:
        return self._properties.unmortgage_property(player_id, space_id)

    def transfer_property(
        self, space_id: int, to_player_id: str, *, from_player_id: str | None = None
    ) -> Decision:
        return self._properties.transfer_property(
            space_id, to_player_id, from_player_id=from_player_id
        )

    # Landing prompts ----------------------------------------------------------

    def set_purchase_price(self, price: int) -> bool:
        return self._landing.set_purchase_price(price)

    def accept_purchase(self, player_id: str) -> Decision:
        return self._landing.accept_purchase(player_id)

    def decline_purchase(self, player_id: str) -> bool:
        return self._landing.decline_purchase(player_id)

    def pay_quota(self, player_id: str) -> int:
        return self._landing.pay_quota(player_id)

    def pay_tax(self, player_id: str, choice: TaxChoice | None = None) -> int:
        return self._landing.pay_tax(player_id, choice)

    def resolve_pilfer(self, player_id: str, roll: int | None = None) -> bool:
        return self._landing.resolve_pilfer(player_id, roll)

    def contribute_to_breadline(self, player_id: str, response: BreadlineResponse) -> Decision:
        return self._landing.contribute_to_breadline(player_id, response)

    def answer_communist_test(
        self, player_id: str, answer: str, *, stalin_ruling: bool | None = None
    ) -> bool | None:
        return self._landing.answer_communist_test(
            player_id, answer, stalin_ruling=stalin_ruling
        )

    def draw_party_directive(self, player_id: str) -> DirectiveCard | None:
        return self._landing.draw_party_directive(player_id)

    def pay_debt(self, player_id: str, debt_id: str | None = None) -> Decision:
        return self._ledger.pay_debt(player_id, debt_id)

    # Gulag -------------------------------------------------------------------

    def send_to_gulag(
        self,
        player_id: str,
        reason: GulagReason = GulagReason.STALIN_DECREE,
        justification: str | None = None,
    ) -> bool:
        return self._gulag.send_to_gulag(player_id, reason, justification)

    def attempt_gulag_escape(  # noqa: PLR0913
        self,
        player_id: str,
        method: EscapeMethod,
        *,
        roll: DiceRoll | None = None,
        voucher_id: str | None = None,
        amount: int | None = None,
        accused_id: str | None = None,
        crime: str = "Counter-revolutionary activity",
    ) -> Decision:
        """Try one escape route; informing opens a tribunal from inside the Gulag."""
        self._require_started()
        if method is EscapeMethod.INFORM:
            if accused_id is None:
                return Decision.deny("Informing requires naming a comrade")
            player = self._state.player(player_id)
            if player is None or not player.in_gulag:
                return Decision.deny("Only prisoners may inform")
            return self._tribunal.denounce_player(player_id, accused_id, crime)
        if method is EscapeMethod.ROLL:
            current = self._state.current_player()
            if current is None or current.id != player_id or self._state.has_rolled:
                return Decision.deny("Escape rolls are made once, on your own turn")
            decision = self._gulag.attempt_gulag_escape(player_id, method, roll=roll)
            self._turns.mark_escape_roll()
            return decision
        return self._gulag.attempt_gulag_escape(
            player_id, method, voucher_id=voucher_id, amount=amount
        )

    def vouch_for(self, voucher_id: str, prisoner_id: str) -> Decision:
        return self._gulag.vouch_for(voucher_id, prisoner_id)

    def request_bribe(self, player_id: str, amount: int) -> Decision:
        return self._gulag.request_bribe(player_id, amount)

    def resolve_bribe(self, bribe_id: str, *, accepted: bool) -> bool:
        return self._gulag.resolve_bribe(bribe_id, accepted=accepted)

    def submit_confession(self, prisoner_id: str, text: str) -> Decision:
        return self._gulag.submit_confession(prisoner_id, text)

    def review_confession(self, confession_id: str, *, accepted: bool) -> bool:
        return self._gulag.review_confession(confession_id, accepted=accepted)

    def execute_player(self, player_id: str) -> bool:
        return self._turns.execute_player(player_id)

    # Decrees -----------------------------------------------------------------

    def initiate_great_purge(self) -> Decision:
        return self._decrees.initiate_great_purge()

    def vote_in_great_purge(self, voter_id: str, target_id: str) -> Decision:
        return self._decrees.vote_in_great_purge(voter_id, target_id)

    def resolve_great_purge(self) -> list[str]:
        return self._decrees.resolve_great_purge()

    def initiate_five_year_plan(self, target: int, duration_rounds: int = 1) -> Decision:
        return self._decrees.initiate_five_year_plan(target, duration_rounds)

    def contribute_to_five_year_plan(self, player_id: str, amount: int) -> Decision:
        return self._decrees.contribute_to_five_year_plan(player_id, amount)

    def resolve_five_year_plan(self) -> bool | None:
        return self._decrees.resolve_five_year_plan()

    def grant_hero(self, player_id: str) -> Decision:
        return self._decrees.grant_hero(player_id)

    def is_hero(self, player_id: str) -> bool:
        return self._decrees.is_hero(player_id)

    # Tribunal ----------------------------------------------------------------

    def can_denounce(self, accuser_id: str, accused_id: str) -> Decision:
        return self._tribunal.can_denounce(accuser_id, accused_id)

    def denounce_player(self, accuser_id: str, accused_id: str, crime: str) -> Decision:
        return self._tribunal.denounce_player(accuser_id, accused_id, crime)

    def add_witness(self, witness_id: str, side: WitnessSide) -> Decision:
        return self._tribunal.add_witness(witness_id, side)

    def advance_tribunal(self) -> None:
        self._tribunal.advance_phase()

    def has_sufficient_witnesses(self) -> bool:
        return self._tribunal.has_sufficient_witnesses()

    def render_verdict(self, verdict: Verdict) -> bool:
        return self._tribunal.render_verdict(verdict)

    def cancel_tribunal(self) -> bool:
        return self._tribunal.cancel()

    # Abilities ---------------------------------------------------------------

    def sickle_harvest(self, player_id: str, space_id: int) -> Decision:
        return self._abilities.sickle_harvest(player_id, space_id)

    def sickle_motherland_fine(self, player_id: str) -> int:
        return self._abilities.sickle_motherland_fine(player_id)

    def tank_requisition(self, player_id: str, target_id: str) -> int:
        return self._abilities.tank_requisition(player_id, target_id)

    def cover_debt(self, player_id: str, debtor_id: str, debt_id: str | None = None) -> Decision:
        return self._abilities.cover_debt(player_id, debtor_id, debt_id)

    def redeem_favour(self, creditor_id: str, debtor_id: str, request: str) -> Decision:
        return self._abilities.redeem_favour(creditor_id, debtor_id, request)

    def claim_rubles(self, player_id: str, amount: int) -> None:
        self._abilities.claim_rubles(player_id, amount)

    def audit_iron_curtain(self, player_id: str) -> bool:
        return self._abilities.audit_iron_curtain(player_id)

    def lenin_standing_fine(self, player_id: str, offender_id: str) -> int:
        return self._abilities.lenin_standing_fine(player_id, offender_id)

    def request_camp_labour(self, player_id: str, target_id: str) -> Decision:
        return self._abilities.request_camp_labour(player_id, target_id)

    def request_ministry_rewrite(self, player_id: str, new_rule: str) -> Decision:
        return self._abilities.request_ministry_rewrite(player_id, new_rule)

    def media_revote(self, player_id: str, decision: str) -> Decision:
        return self._abilities.media_revote(player_id, decision)

    def kgb_preview(self, player_id: str) -> TestQuestion | None:
        return self._abilities.kgb_preview(player_id)

    def request_railway_capture(self, player_id: str, target_id: str) -> Decision:
        return self._abilities.request_railway_capture(player_id, target_id)

    def request_iron_curtain_disappear(self, player_id: str, space_id: int) -> Decision:
        return self._abilities.request_iron_curtain_disappear(player_id, space_id)

    def request_lenin_speech(self, player_id: str) -> Decision:
        return self._abilities.request_lenin_speech(player_id)

    def resolve_approval(
        self, request_id: str, *, approved: bool, applauders: Iterable[str] = ()
    ) -> bool:
        return self._abilities.resolve_approval(
            request_id, approved=approved, applauders=applauders
        )

    # Trade -------------------------------------------------------------------

    def propose_trade(
        self,
        from_player_id: str,
        to_player_id: str,
        offering: TradeItems | None = None,
        requesting: TradeItems | None = None,
    ) -> TradeOffer | None:
        return self._trade.propose_trade(
            from_player_id,
            to_player_id,
            offering or TradeItems(),
            requesting or TradeItems(),
        )

    def accept_trade(self, offer_id: str) -> Decision:
        return self._trade.accept_trade(offer_id)

    def reject_trade(self, offer_id: str) -> bool:
        return self._trade.reject_trade(offer_id)

    def offers_for(self, player_id: str) -> list[TradeOffer]:
        return self._trade.offers_for(player_id)


__all__ = ["GameSession", "PlayerSetup"]
