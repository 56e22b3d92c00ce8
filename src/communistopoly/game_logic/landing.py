"""What happens on each space, and the resolutions of the prompts it raises."""

from __future__ import annotations

from math import floor
from typing import TYPE_CHECKING

from communistopoly.game_logic.board import (
    BOARD_SIZE,
    BREADLINE_POSITION,
    ENEMY_OF_STATE_POSITION,
    GULAG_POSITION,
    STOY_POSITION,
    get_space,
    next_railway,
)
from communistopoly.game_logic.directives import (
    DIRECTIVE_DECK,
    DirectiveCard,
    DirectiveEffect,
    get_directive,
)
from communistopoly.game_logic.errors import BoardConfigurationError
from communistopoly.game_logic.ledger import EngineBase
from communistopoly.game_logic.pending import (
    BreadlinePending,
    CommunistTestPending,
    PartyDirectivePending,
    PropertyPurchasePending,
    QuotaPaymentPending,
    RailwayFeePending,
    StoyPilferPending,
    TaxPaymentPending,
    UtilityFeePending,
)
from communistopoly.game_logic.state import TankCapabilities
from communistopoly.game_logic.trivia import draw_question, get_question, is_answer_correct
from communistopoly.shared.enums import (
    BreadlineResponse,
    CardType,
    GulagReason,
    LogCategory,
    PieceType,
    PropertyGroup,
    SpaceType,
    TaxChoice,
    TaxType,
    TestDifficulty,
)
from communistopoly.shared.value_objects import Decision

if TYPE_CHECKING:
    from communistopoly.game_logic.configuration import RulesConfiguration
    from communistopoly.game_logic.gulag import GulagEngine
    from communistopoly.game_logic.ledger import PlayerLedger
    from communistopoly.game_logic.pending import PendingAction
    from communistopoly.game_logic.properties import PropertyEngine
    from communistopoly.game_logic.state import GameState, Player
    from communistopoly.game_logic.trivia import TestQuestion
    from communistopoly.shared.rng import DeterministicRandomService


class LandingEngine(EngineBase):
    """Moves pieces and resolves the space they end on."""

    def __init__(  # noqa: PLR0913
        self,
        state: GameState,
        config: RulesConfiguration,
        ledger: PlayerLedger,
        properties: PropertyEngine,
        gulag: GulagEngine,
        rng: DeterministicRandomService,
    ) -> None:
        super().__init__(state, config)
        self._ledger = ledger
        self._properties = properties
        self._gulag = gulag
        self._rng = rng

    # Movement ---------------------------------------------------------------

    def move_player(self, player_id: str, spaces: int) -> int | None:
        """Advance (or, for negative *spaces*, retreat) without resolving the space."""
        player = self._player(player_id)
        if player is None or not player.is_active:
            return None
        old_position = player.position
        new_position = (old_position + spaces) % BOARD_SIZE
        player.position = new_position
        self._log_move(player, old_position)
        if spaces > 0 and old_position + spaces >= BOARD_SIZE:
            self._complete_lap(player, passed=new_position != STOY_POSITION)
        return new_position

    def move_to(self, player_id: str, destination: int) -> None:
        """Advance directly to *destination*, collecting STOY effects on the way."""
        player = self._player(player_id)
        if player is None or not player.is_active:
            return
        old_position = player.position
        player.position = destination % BOARD_SIZE
        self._log_move(player, old_position)
        if player.position < old_position or (
            player.position == STOY_POSITION and old_position != STOY_POSITION
        ):
            self._complete_lap(player, passed=player.position != STOY_POSITION)

    def _log_move(self, player: Player, old_position: int) -> None:
        origin = get_space(old_position)
        target = get_space(player.position)
        self._state.log(
            LogCategory.MOVEMENT,
            f"{player.name} moved from {origin.name if origin else old_position} "
            f"to {target.name if target else player.position}",
            player.id,
            {"from": old_position, "to": player.position},
        )

    def _complete_lap(self, player: Player, *, passed: bool) -> None:
        player.laps_completed += 1
        if isinstance(player.abilities, TankCapabilities):
            player.abilities.requisition_used_this_lap = False
        if passed:
            self.handle_stoy_passing(player.id)

    def handle_stoy_passing(self, player_id: str) -> None:
        """Charge the STOY travel tax; the Hammer earns its bonus back."""
        player = self._player(player_id)
        if player is None:
            return
        tax = self._config.stoy_travel_tax
        if self._ledger.settle(player, None, tax, "STOY travel tax"):
            self._state.log(
                LogCategory.PAYMENT,
                f"{player.name} paid {tax} travel tax at STOY",
                player.id,
                {"amount": tax},
            )
        if player.piece is PieceType.HAMMER and player.is_active:
            bonus = self._config.hammer_stoy_bonus
            self._ledger.receive_from_state(player, bonus)
            self._state.log(
                LogCategory.PAYMENT,
                f"{player.name}'s Hammer earns +{bonus} bonus at STOY!",
                player.id,
                {"amount": bonus},
            )

    # Landing ----------------------------------------------------------------

    def resolve_space(self, player_id: str, dice_total: int | None = None) -> PendingAction | None:
        """Apply the effect of the player's current space, setting any prompt it needs."""
        player = self._player(player_id)
        if player is None or not player.is_active or player.in_gulag:
            return None
        space = get_space(player.position)
        if space is None:
            return None

        if space.space_type is SpaceType.CORNER:
            self._resolve_corner(player)
        elif space.is_ownable:
            self._resolve_ownable(player, dice_total)
        elif space.space_type is SpaceType.TAX and space.tax_type is not None:
            self._state.pending_action = TaxPaymentPending(
                player_id=player.id, space_id=space.id, tax_type=space.tax_type
            )
        elif space.card_type is CardType.COMMUNIST_TEST:
            question = draw_question(self._rng)
            self._state.pending_action = CommunistTestPending(
                player_id=player.id, question_id=question.id
            )
        elif space.card_type is CardType.PARTY_DIRECTIVE:
            self._state.pending_action = PartyDirectivePending(player_id=player.id)
        return self._state.pending_action

    def _resolve_corner(self, player: Player) -> None:
        if player.position == STOY_POSITION:
            self._state.pending_action = StoyPilferPending(player_id=player.id)
        elif player.position == GULAG_POSITION:
            self._state.log(
                LogCategory.MOVEMENT, f"{player.name} is just visiting the Gulag", player.id
            )
        elif player.position == BREADLINE_POSITION:
            contributors = tuple(
                other.id
                for other in self._state.active_players()
                if other.id != player.id and not other.in_gulag
            )
            self._state.log(
                LogCategory.SYSTEM,
                f"{player.name} landed on the Breadline - all comrades must contribute!",
                player.id,
            )
            if contributors:
                self._state.pending_action = BreadlinePending(
                    landing_player_id=player.id, remaining=contributors
                )
        elif player.position == ENEMY_OF_STATE_POSITION:
            self._gulag.send_to_gulag(player.id, GulagReason.ENEMY_OF_STATE)

    def _resolve_ownable(self, player: Player, dice_total: int | None) -> None:
        space = get_space(player.position)
        record = self._state.property_state(player.position)
        if space is None or record is None:
            return
        if record.custodian_id is None:
            eligible = self._properties.eligibility(player, space)
            if not eligible:
                self._state.log(
                    LogCategory.PROPERTY,
                    f"{player.name} may not take {space.name}: {eligible.reason}",
                    player.id,
                )
                return
            self._state.pending_action = PropertyPurchasePending(
                player_id=player.id, space_id=space.id, price=space.base_cost
            )
            return
        if record.custodian_id == player.id:
            return
        if record.mortgaged:
            self._state.log(
                LogCategory.PROPERTY,
                f"{space.name} is mortgaged - no quota is due",
                player.id,
            )
            return
        custodian_id = record.custodian_id
        amount = self._properties.calculate_quota(space.id, player.id, dice_total)
        if space.space_type is SpaceType.RAILWAY:
            self._state.pending_action = RailwayFeePending(
                payer_id=player.id,
                custodian_id=custodian_id,
                space_id=space.id,
                amount=amount,
                stations_held=len(
                    self._properties.holdings_in_group(custodian_id, PropertyGroup.RAILROAD)
                ),
            )
        elif space.space_type is SpaceType.UTILITY:
            self._state.pending_action = UtilityFeePending(
                payer_id=player.id,
                custodian_id=custodian_id,
                space_id=space.id,
                amount=amount,
                dice_total=dice_total or 0,
            )
        else:
            self._state.pending_action = QuotaPaymentPending(
                payer_id=player.id,
                custodian_id=custodian_id,
                space_id=space.id,
                amount=amount,
            )

    # Purchases and quotas ---------------------------------------------------

    def set_purchase_price(self, price: int) -> bool:
        """Stalin names the asking price of the property on offer."""
        pending = self._state.pending_action
        if not isinstance(pending, PropertyPurchasePending) or price < 0:
            return False
        self._state.pending_action = pending.model_copy(update={"price": price})
        self._state.log(
            LogCategory.PROPERTY,
            f"Stalin sets the price at {price}",
            pending.player_id,
            {"space_id": pending.space_id, "price": price},
        )
        return True

    def accept_purchase(self, player_id: str) -> Decision:
        pending = self._state.pending_action
        if not isinstance(pending, PropertyPurchasePending) or pending.player_id != player_id:
            return Decision.deny("No property is on offer")
        decision = self._properties.purchase_property(
            player_id, pending.space_id, pending.price
        )
        if decision:
            self._state.pending_action = None
        return decision

    def decline_purchase(self, player_id: str) -> bool:
        pending = self._state.pending_action
        if not isinstance(pending, PropertyPurchasePending) or pending.player_id != player_id:
            return False
        self._state.pending_action = None
        player = self._player(player_id)
        space = get_space(pending.space_id)
        self._state.log(
            LogCategory.PROPERTY,
            f"{player.name if player else player_id} declined "
            f"{space.name if space else pending.space_id}",
            player_id,
        )
        return True

    def pay_quota(self, player_id: str) -> int:
        """Pay the quota, railway or utility fee currently demanded of the player."""
        pending = self._state.pending_action
        if not isinstance(
            pending, QuotaPaymentPending | RailwayFeePending | UtilityFeePending
        ) or pending.payer_id != player_id:
            return 0
        self._state.pending_action = None
        dice_total = pending.dice_total if isinstance(pending, UtilityFeePending) else None
        return self._properties.pay_quota(player_id, pending.space_id, dice_total)

    # Taxes ------------------------------------------------------------------

    def pay_tax(self, player_id: str, choice: TaxChoice | None = None) -> int:
        """Settle the tax space; Revolutionary Contribution defaults to the cheaper option."""
        pending = self._state.pending_action
        player = self._player(player_id)
        if (
            not isinstance(pending, TaxPaymentPending)
            or pending.player_id != player_id
            or player is None
        ):
            return 0
        self._state.pending_action = None
        if pending.tax_type is TaxType.REVOLUTIONARY_CONTRIBUTION:
            percentage = floor(
                max(self._ledger.total_wealth(player), 0) * self._config.revolutionary_rate
            )
            flat = self._config.revolutionary_flat
            if choice is TaxChoice.PERCENTAGE:
                amount = percentage
            elif choice is TaxChoice.FLAT:
                amount = flat
            else:
                amount = min(percentage, flat)
            label = "Revolutionary Contribution"
            wealthiest = False
        else:
            wealthiest = self.is_wealthiest(player)
            amount = (
                self._config.bourgeois_wealthiest_tax
                if wealthiest
                else self._config.bourgeois_tax
            )
            label = "Bourgeois Decadence tax"
        if self._ledger.settle(player, None, amount, label):
            self._state.log(
                LogCategory.PAYMENT,
                f"{player.name} paid {amount} {label}",
                player.id,
                {"amount": amount},
            )
        if wealthiest:
            self._state.log(
                LogCategory.RANK,
                f"{player.name} is the most decadent comrade and is demoted",
                player.id,
            )
            self._ledger.demote(player.id)
        return amount

    def is_wealthiest(self, player: Player) -> bool:
        own = self._ledger.total_wealth(player)
        return all(
            own >= self._ledger.total_wealth(other)
            for other in self._state.active_players()
            if other.id != player.id
        )

    # STOY -------------------------------------------------------------------

    def resolve_pilfer(self, player_id: str, roll: int | None = None) -> bool:
        """Roll one die: high enough steals from the treasury, otherwise the Gulag."""
        pending = self._state.pending_action
        player = self._player(player_id)
        if not isinstance(pending, StoyPilferPending) or pending.player_id != player_id:
            return False
        if player is None:
            return False
        self._state.pending_action = None
        face = roll if roll is not None else self._rng.roll_die()
        self._state.log(
            LogCategory.DICE, f"{player.name} rolled {face} at the STOY checkpoint", player.id
        )
        if face >= self._config.pilfer_threshold:
            amount = self._config.pilfer_amount
            self._ledger.receive_from_state(player, amount)
            self._state.log(
                LogCategory.PAYMENT,
                f"{player.name} successfully pilfered {amount} from the State Treasury!",
                player.id,
                {"amount": amount},
            )
            return True
        self._gulag.send_to_gulag(player.id, GulagReason.PILFERING_CAUGHT)
        return False

    # Breadline --------------------------------------------------------------

    def contribute_to_breadline(self, player_id: str, response: BreadlineResponse) -> Decision:
        """One comrade's answer to the Breadline lander."""
        pending = self._state.pending_action
        player = self._player(player_id)
        if not isinstance(pending, BreadlinePending) or player is None:
            return Decision.deny("No Breadline collection is open")
        if player_id not in pending.remaining:
            return Decision.deny(f"{player.name} owes no Breadline response")
        lander = self._player(pending.landing_player_id)
        if lander is None:
            return Decision.deny("Breadline lander not found")
        if response is BreadlineResponse.CONTRIBUTE:
            amount = self._config.breadline_contribution
            if not self._ledger.transfer(player, lander, amount):
                return self._deny(
                    LogCategory.PAYMENT,
                    f"{player.name} cannot spare {amount} for the Breadline",
                    player.id,
                )
            self._state.log(
                LogCategory.PAYMENT,
                f"{player.name} gave {amount} to {lander.name} at the Breadline",
                player.id,
                {"amount": amount},
            )
        else:
            player.under_suspicion = True
            self._state.log(
                LogCategory.SYSTEM,
                f"{player.name} refused to help {lander.name} and is now under suspicion",
                player.id,
            )
        remaining = tuple(pid for pid in pending.remaining if pid != player_id)
        self._state.pending_action = (
            pending.model_copy(update={"remaining": remaining}) if remaining else None
        )
        return Decision.allow()

    # Communist Test ---------------------------------------------------------

    def answer_communist_test(
        self,
        player_id: str,
        answer: str,
        *,
        stalin_ruling: bool | None = None,
    ) -> bool | None:
        """Mark the answer; trick questions are decided by *stalin_ruling*."""
        pending = self._state.pending_action
        player = self._player(player_id)
        if not isinstance(pending, CommunistTestPending) or pending.player_id != player_id:
            return None
        question = get_question(pending.question_id)
        if player is None or question is None:
            return None
        is_trick = question.difficulty is TestDifficulty.TRICK
        if is_trick:
            if stalin_ruling is None:
                return None
            correct = stalin_ruling
        else:
            correct = is_answer_correct(question, answer)
        self._state.pending_action = None
        if correct:
            self._reward_test(player, question)
        elif is_trick and player.piece is PieceType.VODKA_BOTTLE:
            self._state.log(
                LogCategory.ABILITY,
                f"{player.name}'s Vodka Bottle shrugs off the trick question",
                player.id,
            )
        else:
            self._penalise_test(player, question)
        return correct

    def _reward_test(self, player: Player, question: TestQuestion) -> None:
        player.correct_test_answers += 1
        self._state.statistics.for_player(player.id).tests_passed += 1
        player.consecutive_failed_tests = 0
        if question.reward:
            self._ledger.receive_from_state(player, question.reward)
        self._state.log(
            LogCategory.PAYMENT,
            f"{player.name} answered correctly and receives {question.reward}",
            player.id,
            {"question_id": question.id, "amount": question.reward},
        )
        if question.grants_rank_up:
            self._ledger.promote(player.id)

    def _penalise_test(self, player: Player, question: TestQuestion) -> None:
        player.consecutive_failed_tests += 1
        self._state.statistics.for_player(player.id).tests_failed += 1
        penalty = question.penalty * (2 if player.piece is PieceType.RED_STAR else 1)
        self._state.log(
            LogCategory.PAYMENT,
            f"{player.name} answered incorrectly (the answer was {question.answer})",
            player.id,
            {"question_id": question.id, "penalty": penalty},
        )
        if penalty:
            self._ledger.settle(player, None, penalty, "Communist Test penalty")
        if player.consecutive_failed_tests >= self._config.failed_tests_before_demotion:
            player.consecutive_failed_tests = 0
            self._ledger.demote(player.id)

    # Party Directives -------------------------------------------------------

    def reset_directive_deck(self) -> None:
        self._state.directive_deck = list(self._rng.shuffle(card.id for card in DIRECTIVE_DECK))
        self._state.directive_discard = []

    def _next_directive(self) -> DirectiveCard:
        if not self._state.directive_deck:
            pool = self._state.directive_discard or [card.id for card in DIRECTIVE_DECK]
            self._state.directive_deck = list(self._rng.shuffle(pool))
            self._state.directive_discard = []
        card_id = self._state.directive_deck.pop(0)
        self._state.directive_discard.append(card_id)
        card = get_directive(card_id)
        if card is None:
            msg = f"Unknown Party Directive {card_id!r} in the deck."
            raise BoardConfigurationError(msg)
        return card

    def draw_party_directive(self, player_id: str) -> DirectiveCard | None:
        pending = self._state.pending_action
        player = self._player(player_id)
        if not isinstance(pending, PartyDirectivePending) or pending.player_id != player_id:
            return None
        if player is None:
            return None
        self._state.pending_action = None
        card = self._next_directive()
        self._state.log(
            LogCategory.SYSTEM,
            f"{player.name} drew Party Directive: {card.title}",
            player.id,
            {"card_id": card.id},
        )
        self.apply_directive(player, card)
        return card

    def apply_directive(self, player: Player, card: DirectiveCard) -> None:  # noqa: C901
        effect = card.effect
        if effect is DirectiveEffect.MOVE and card.destination is not None:
            self.move_to(player.id, card.destination)
            self.resolve_space(player.id)
        elif effect is DirectiveEffect.MOVE_RELATIVE:
            self.move_player(player.id, card.spaces)
            self.resolve_space(player.id)
        elif effect is DirectiveEffect.NEAREST_RAILWAY:
            self.move_to(player.id, next_railway(player.position))
            self.resolve_space(player.id)
        elif effect is DirectiveEffect.MONEY:
            if card.amount >= 0:
                self._ledger.receive_from_state(player, card.amount)
            else:
                self._ledger.settle(player, None, -card.amount, card.title)
        elif effect is DirectiveEffect.GULAG:
            self._gulag.send_to_gulag(
                player.id, GulagReason.STALIN_DECREE, "Party Directive card"
            )
        elif effect is DirectiveEffect.RELEASE_TOKEN:
            player.release_tokens += 1
            self._state.log(
                LogCategory.SYSTEM,
                f"{player.name} received a release-from-Gulag token",
                player.id,
            )
        elif effect is DirectiveEffect.COLLECT_FROM_ALL:
            for other in self._state.active_players():
                if other.id != player.id:
                    self._ledger.transfer(other, player, min(card.amount, other.rubles))
        elif effect is DirectiveEffect.RANK_UP:
            self._ledger.promote(player.id)
        elif effect is DirectiveEffect.PROPERTY_TAX:
            held = [self._state.properties[space_id] for space_id in player.properties]
            levels = sum(record.collectivization_level for record in held)
            total = len(held) * card.per_property + levels * card.per_level
            if self._ledger.settle(player, None, total, card.title):
                self._state.log(
                    LogCategory.PAYMENT,
                    f"{player.name} paid {total} in property taxes",
                    player.id,
                    {"amount": total},
                )


__all__ = ["LandingEngine"]
