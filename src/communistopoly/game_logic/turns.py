"""Turn order, dice, rounds and the end-of-game vote."""

from __future__ import annotations

from typing import TYPE_CHECKING

from communistopoly.game_logic.ledger import EngineBase
from communistopoly.game_logic.pending import GulagEscapeChoicePending
from communistopoly.game_logic.state import VodkaBottleCapabilities
from communistopoly.shared.enums import (
    EliminationReason,
    GameEndCondition,
    GulagReason,
    LogCategory,
)
from communistopoly.shared.value_objects import Decision, DiceRoll

if TYPE_CHECKING:
    from communistopoly.game_logic.abilities import AbilityEngine
    from communistopoly.game_logic.configuration import RulesConfiguration
    from communistopoly.game_logic.decrees import DecreeEngine
    from communistopoly.game_logic.gulag import GulagEngine
    from communistopoly.game_logic.landing import LandingEngine
    from communistopoly.game_logic.ledger import PlayerLedger
    from communistopoly.game_logic.state import GameState, Player
    from communistopoly.shared.rng import DeterministicRandomService


class TurnEngine(EngineBase):
    """Drives whose turn it is and what a roll of the dice does."""

    def __init__(  # noqa: PLR0913
        self,
        state: GameState,
        config: RulesConfiguration,
        ledger: PlayerLedger,
        gulag: GulagEngine,
        landing: LandingEngine,
        abilities: AbilityEngine,
        decrees: DecreeEngine,
        rng: DeterministicRandomService,
    ) -> None:
        super().__init__(state, config)
        self._ledger = ledger
        self._gulag = gulag
        self._landing = landing
        self._abilities = abilities
        self._decrees = decrees
        self._rng = rng

    def start_game(self) -> None:
        """Shuffle the turn order and open the first turn."""
        state = self._state
        state.turn_order = list(self._rng.shuffle(p.id for p in state.active_players()))
        state.round_number = 1
        state.current_turn_index = 0
        state.doubles_count = 0
        state.has_rolled = False
        state.last_roll = None
        state.started = True
        self._landing.reset_directive_deck()
        names = ", ".join(
            player.name for pid in state.turn_order if (player := state.player(pid))
        )
        state.log(
            LogCategory.SYSTEM,
            f"The game begins. Turn order: {names}",
            payload={"turn_order": list(state.turn_order)},
        )
        self._begin_turn()

    def _require_current(self, player_id: str, action: str) -> Player | Decision:
        player = self._player(player_id)
        if player is None:
            return Decision.deny("Player not found")
        if self._state.is_over:
            return Decision.deny("The game is over")
        current = self._state.current_player()
        if current is None or current.id != player.id:
            return self._deny(
                LogCategory.SYSTEM,
                f"It is not {player.name}'s turn to {action}",
                player.id,
            )
        return player

    def _begin_turn(self) -> None:
        player = self._state.current_player()
        if player is None or self._state.is_over:
            return
        self._state.has_rolled = False
        self._state.log(LogCategory.SYSTEM, f"{player.name}'s turn", player.id)
        self._abilities.check_starving(player.id)
        if player.in_gulag and self._gulag.handle_gulag_turn(player.id):
            self._state.pending_action = GulagEscapeChoicePending(
                player_id=player.id, turns_served=player.gulag_turns
            )
        if not player.is_active:
            self._advance()

    # Dice -------------------------------------------------------------------

    def roll_dice(
        self,
        player_id: str,
        *,
        use_vodka: bool = False,
        roll: DiceRoll | None = None,
    ) -> DiceRoll | None:
        """Roll for the current player, then move and resolve the landing space."""
        checked = self._require_current(player_id, "roll")
        if isinstance(checked, Decision):
            return None
        player = checked
        if player.in_gulag:
            self._deny(LogCategory.DICE, f"{player.name} must attempt an escape", player.id)
            return None
        if self._state.has_rolled:
            self._deny(LogCategory.DICE, f"{player.name} has already rolled", player.id)
            return None
        if self._state.pending_action is not None:
            self._deny(LogCategory.DICE, "Resolve the pending action first", player.id)
            return None

        vodka = player.abilities if isinstance(player.abilities, VodkaBottleCapabilities) else None
        if roll is None:
            roll = (
                self._rng.roll_best_two_of_three()
                if use_vodka and vodka is not None
                else self._rng.roll_dice()
            )
        if use_vodka and vodka is not None:
            vodka.use_count += 1
        self._state.last_roll = roll
        self._state.has_rolled = True
        self._state.log(
            LogCategory.DICE,
            f"{player.name} rolled {roll.dice[0]} and {roll.dice[1]} ({roll.total})"
            + (" - doubles!" if roll.is_doubles else ""),
            player.id,
            {"dice": list(roll.dice), "discarded": list(roll.discarded)},
        )

        if roll.is_doubles:
            self._state.doubles_count += 1
            if self._state.doubles_count >= self._config.max_consecutive_doubles:
                self._state.doubles_count = 0
                self._gulag.send_to_gulag(player.id, GulagReason.THREE_DOUBLES)
                return roll
        else:
            self._state.doubles_count = 0

        self._landing.move_player(player.id, roll.total)
        self._landing.resolve_space(player.id, roll.total)
        return roll

    def mark_escape_roll(self) -> None:
        """A roll spent trying to leave the Gulag uses up the turn's roll."""
        self._state.has_rolled = True
        self._state.doubles_count = 0

    # Turn advance -----------------------------------------------------------

    def end_turn(self, player_id: str) -> Decision:
        """Finish the turn: doubles grant another roll, otherwise play passes on."""
        checked = self._require_current(player_id, "end the turn")
        if isinstance(checked, Decision):
            return checked
        player = checked
        pending = self._state.pending_action
        if player.is_active:
            if isinstance(pending, GulagEscapeChoicePending) and pending.player_id == player.id:
                self._state.pending_action = None
            elif pending is not None:
                return self._deny(
                    LogCategory.SYSTEM, "Resolve the pending action first", player.id
                )
            if not self._state.has_rolled and not player.in_gulag:
                return self._deny(
                    LogCategory.SYSTEM, f"{player.name} must roll before ending the turn", player.id
                )
        else:
            self._state.pending_action = None

        roll = self._state.last_roll
        if (
            player.is_active
            and not player.in_gulag
            and roll is not None
            and roll.is_doubles
            and 0 < self._state.doubles_count < self._config.max_consecutive_doubles
        ):
            self._state.has_rolled = False
            self._state.last_roll = None
            self._state.log(LogCategory.DICE, f"{player.name} rolled doubles and goes again", player.id)
            return Decision.allow()

        statistics = self._state.statistics
        statistics.total_turns += 1
        statistics.for_player(player.id).turns_played += 1
        self._state.doubles_count = 0
        self._state.last_roll = None
        self._advance()
        return Decision.allow()

    def _advance(self) -> None:
        state = self._state
        if state.is_over or not state.active_players():
            return
        for _ in range(len(state.turn_order)):
            state.current_turn_index = (state.current_turn_index + 1) % len(state.turn_order)
            if state.current_turn_index == 0:
                self._start_round()
                if state.is_over:
                    return
            current = state.current_player()
            if current is not None and current.is_active:
                break
        self._begin_turn()

    def _start_round(self) -> None:
        state = self._state
        state.round_number += 1
        for player in state.players:
            player.denouncements_this_round = 0
            player.group_powers.kgb_previews_this_round = 0
        state.log(LogCategory.SYSTEM, f"Round {state.round_number} begins")
        self._gulag.expire_vouchers()
        self._ledger.accrue_interest()
        for defaulter in self._ledger.collect_overdue_debts():
            self._gulag.send_to_gulag(defaulter.id, GulagReason.DEBT_DEFAULT)
        self._decrees.start_round()

    # Stalin -----------------------------------------------------------------

    def execute_player(self, player_id: str) -> bool:
        """Stalin's prerogative: remove a comrade from the game outright."""
        return self._ledger.eliminate(player_id, EliminationReason.EXECUTION)

    # End vote ---------------------------------------------------------------

    def initiate_end_vote(self, player_id: str) -> Decision:
        player = self._player(player_id)
        if player is None:
            return Decision.deny("Player not found")
        if self._state.is_over or not player.is_active:
            return Decision.deny("Only active comrades may call a vote")
        if self._state.end_vote_initiator is not None:
            return self._deny(LogCategory.SYSTEM, "A vote is already under way", player.id)
        self._state.end_vote_initiator = player.id
        self._state.end_votes = {player.id: True}
        self._state.log(
            LogCategory.SYSTEM, f"{player.name} calls a vote to end the game", player.id
        )
        self._tally_votes()
        return Decision.allow()

    def cast_end_vote(self, player_id: str, *, in_favour: bool) -> Decision:
        player = self._player(player_id)
        if player is None:
            return Decision.deny("Player not found")
        if self._state.end_vote_initiator is None or not player.is_active:
            return Decision.deny("No vote is open to this comrade")
        self._state.end_votes[player.id] = in_favour
        self._state.log(
            LogCategory.SYSTEM,
            f"{player.name} votes {'to end' if in_favour else 'to continue'}",
            player.id,
        )
        self._tally_votes()
        return Decision.allow()

    def _tally_votes(self) -> None:
        votes = self._state.end_votes
        if not all(votes.values()):
            self._state.end_vote_initiator = None
            self._state.end_votes = {}
            self._state.log(LogCategory.SYSTEM, "The vote to end the game failed")
            return
        if all(votes.get(player.id) for player in self._state.active_players()):
            self._ledger.end_game(GameEndCondition.UNANIMOUS, None)


__all__ = ["TurnEngine"]
