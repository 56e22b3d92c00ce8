"""Rubles, ranks, debts and elimination shared by every engine."""

from __future__ import annotations

from math import floor
from typing import TYPE_CHECKING

from communistopoly.game_logic.board import get_space
from communistopoly.game_logic.state import Debt, FinalStanding, GameState, Player
from communistopoly.shared.enums import (
    RANK_ORDER,
    EliminationReason,
    GameEndCondition,
    LogCategory,
    PieceType,
    rank_index,
)
from communistopoly.shared.value_objects import Decision

if TYPE_CHECKING:
    from communistopoly.game_logic.configuration import RulesConfiguration

_ELIMINATION_MESSAGES: dict[EliminationReason, str] = {
    EliminationReason.BANKRUPTCY: (
        "{name} has been eliminated due to bankruptcy and declared an Enemy of the People."
    ),
    EliminationReason.EXECUTION: "{name} has been executed by order of Stalin.",
    EliminationReason.GULAG_TIMEOUT: "{name} died in the Gulag after {turns} turns.",
    EliminationReason.RED_STAR_DEMOTION: (
        "{name}'s Red Star has fallen to Proletariat - immediate execution!"
    ),
    EliminationReason.UNANIMOUS: "{name} was unanimously voted out by all players.",
}


class EngineBase:
    """Common wiring for engines operating on an owned :class:`GameState`."""

    def __init__(self, state: GameState, config: RulesConfiguration) -> None:
        self._state = state
        self._config = config

    @property
    def state(self) -> GameState:
        return self._state

    def _player(self, player_id: str | None) -> Player | None:
        return self._state.player(player_id)

    def _deny(
        self,
        category: LogCategory,
        reason: str,
        player_id: str | None = None,
    ) -> Decision:
        """Journal a rejected action and return the matching decision."""
        self._state.log(category, f"Rejected: {reason}", player_id, {"rejected": True})
        return Decision.deny(reason)


class PlayerLedger(EngineBase):
    """Owns every change to balances, ranks, debts and player survival."""

    # Rubles -----------------------------------------------------------------

    def credit(self, player: Player, amount: int) -> int:
        """Add *amount* to *player*; a Bread Loaf above its cap donates the excess."""
        if amount <= 0:
            return 0
        player.rubles += amount
        stats = self._state.statistics.for_player(player.id)
        stats.money_earned += amount
        cap = self._config.bread_loaf_cap
        if player.piece is PieceType.BREAD_LOAF and player.rubles > cap:
            excess = player.rubles - cap
            player.rubles = cap
            self._state.state_treasury += excess
            self._note_treasury()
            self._state.log(
                LogCategory.PAYMENT,
                f"{player.name}'s Bread Loaf forces donation of {excess} to the State "
                f"(max {cap})",
                player.id,
                {"excess": excess},
            )
        stats.max_wealth = max(stats.max_wealth, player.rubles)
        return amount

    def debit(self, player: Player, amount: int) -> bool:
        """Remove *amount* from *player* if the balance covers it."""
        if amount <= 0:
            return True
        if player.rubles < amount:
            return False
        player.rubles -= amount
        self._state.statistics.for_player(player.id).money_spent += amount
        return True

    def pay_state(self, player: Player, amount: int) -> bool:
        if not self.debit(player, amount):
            return False
        self._state.state_treasury += max(amount, 0)
        self._note_treasury()
        return True

    def _note_treasury(self) -> None:
        stats = self._state.statistics
        stats.state_treasury_peak = max(stats.state_treasury_peak, self._state.state_treasury)

    def receive_from_state(self, player: Player, amount: int) -> int:
        self._state.state_treasury -= max(amount, 0)
        return self.credit(player, amount)

    def transfer(self, payer: Player, payee: Player, amount: int) -> bool:
        if not self.debit(payer, amount):
            return False
        self.credit(payee, amount)
        return True

    def settle(
        self,
        payer: Player,
        creditor_id: str | None,
        amount: int,
        reason: str,
    ) -> bool:
        """Pay *amount* to a player or the State, or record a debt when short."""
        if amount <= 0:
            return True
        creditor = self._player(creditor_id)
        if creditor is not None and not creditor.is_active:
            creditor_id, creditor = None, None
        if payer.rubles >= amount:
            if creditor is None:
                self.pay_state(payer, amount)
            else:
                self.transfer(payer, creditor, amount)
            return True
        self.create_debt(payer, creditor_id, amount, reason)
        return False

    # Debts ------------------------------------------------------------------

    def create_debt(
        self,
        debtor: Player,
        creditor_id: str | None,
        amount: int,
        reason: str,
        *,
        interest_rate: float = 0.0,
    ) -> Debt:
        """Record a new obligation of *debtor* towards a player or the State."""
        debt = Debt(
            id=self._state.next_id("debt"),
            debtor_id=debtor.id,
            creditor_id=creditor_id,
            amount=amount,
            created_at_round=self._state.round_number,
            reason=reason,
            interest_rate=interest_rate,
        )
        debtor.debts.append(debt)
        creditor = self._player(creditor_id)
        creditor_name = creditor.name if creditor is not None else "the State"
        self._state.log(
            LogCategory.DEBT,
            f"{debtor.name} owes {debt.amount} to {creditor_name} - {reason}. "
            "Must pay within one round or face the Gulag!",
            debtor.id,
            {"debt_id": debt.id, "amount": debt.amount, "creditor_id": creditor_id},
        )
        self.check_bankruptcy(debtor.id)
        return debt

    def pay_debt(self, player_id: str, debt_id: str | None = None) -> Decision:
        """Settle one debt in full: *debt_id*, or the oldest outstanding one."""
        player = self._player(player_id)
        if player is None or not player.debts:
            return Decision.deny("No outstanding debt")
        debt = player.debts[0] if debt_id is None else player.find_debt(debt_id)
        if debt is None:
            return Decision.deny("Debt not found")
        if player.rubles < debt.amount:
            return self._deny(
                LogCategory.DEBT,
                f"{player.name} cannot afford to repay {debt.amount}",
                player.id,
            )
        creditor = self._player(debt.creditor_id)
        if creditor is not None and creditor.is_active:
            self.transfer(player, creditor, debt.amount)
        else:
            self.pay_state(player, debt.amount)
        player.debts.remove(debt)
        self._state.log(
            LogCategory.DEBT,
            f"{player.name} repaid a debt of {debt.amount}",
            player.id,
            {"debt_id": debt.id},
        )
        return Decision.allow()

    def accrue_interest(self) -> None:
        """Grow interest-bearing debts by one round of interest."""
        for player in self._state.active_players():
            for debt in player.debts:
                interest = floor(debt.amount * debt.interest_rate)
                if interest <= 0:
                    continue
                debt.amount += interest
                self._state.log(
                    LogCategory.DEBT,
                    f"Interest of {interest} accrues on {player.name}'s debt",
                    player.id,
                    {"debt_id": debt.id, "amount": debt.amount},
                )

    def collect_overdue_debts(self) -> list[Player]:
        """Clear debts that outlived a full round and return their debtors.

        Interest-bearing favours owed to a Bread Loaf never default.
        """
        defaulters: list[Player] = []
        for player in self._state.active_players():
            overdue = [
                debt
                for debt in player.debts
                if debt.interest_rate == 0
                and self._state.round_number > debt.created_at_round + 1
            ]
            if not overdue:
                continue
            for debt in overdue:
                player.debts.remove(debt)
            defaulters.append(player)
        return defaulters

    # Ranks ------------------------------------------------------------------

    def promote(self, player_id: str) -> bool:
        """Move the player one rank up; saturates at Inner Circle."""
        player = self._player(player_id)
        if player is None or not player.is_active:
            return False
        position = rank_index(player.rank)
        if position >= len(RANK_ORDER) - 1:
            self._state.log(
                LogCategory.RANK,
                f"{player.name} is already at the highest rank",
                player.id,
            )
            return False
        player.rank = RANK_ORDER[position + 1]
        self._state.log(
            LogCategory.RANK,
            f"{player.name} promoted to {player.rank.value}",
            player.id,
            {"rank": player.rank.value},
        )
        return True

    def demote(self, player_id: str) -> bool:
        """Move the player one rank down; saturates at Proletariat.

        A Red Star reaching Proletariat is eliminated on the spot.
        """
        player = self._player(player_id)
        if player is None or not player.is_active:
            return False
        position = rank_index(player.rank)
        if position == 0:
            return False
        if self._state.is_hero(player.id):
            self._state.log(
                LogCategory.RANK,
                f"{player.name} is a Hero of the Soviet Union and keeps their rank",
                player.id,
            )
            return False
        player.rank = RANK_ORDER[position - 1]
        self._state.log(
            LogCategory.RANK,
            f"{player.name} demoted to {player.rank.value}",
            player.id,
            {"rank": player.rank.value},
        )
        if player.piece is PieceType.RED_STAR and position - 1 == 0:
            self.eliminate(player.id, EliminationReason.RED_STAR_DEMOTION)
        return True

    # Wealth and elimination -------------------------------------------------

    def total_wealth(self, player: Player) -> int:
        """Rubles plus property value and improvement spend, minus debt."""
        total = player.rubles
        for space_id in player.properties:
            space = get_space(space_id)
            record = self._state.property_state(space_id)
            if space is None or record is None:
                continue
            total += space.base_cost // 2 if record.mortgaged else space.base_cost
            total += sum(
                self._config.collectivization_cost_for(level)
                for level in range(1, record.collectivization_level + 1)
            )
        total -= player.debt_total
        return total

    def check_bankruptcy(self, player_id: str) -> bool:
        player = self._player(player_id)
        if player is None or not player.is_active or not player.debts:
            return False
        if self.total_wealth(player) < 0:
            self.eliminate(player.id, EliminationReason.BANKRUPTCY)
            return True
        return False

    def eliminate(self, player_id: str, reason: EliminationReason) -> bool:
        """Remove a player from play and return their holdings to the State."""
        player = self._player(player_id)
        if player is None or not player.is_active:
            return False
        for space_id in list(player.properties):
            record = self._state.property_state(space_id)
            if record is not None:
                record.custodian_id = None
                record.collectivization_level = 0
                record.mortgaged = False
        player.properties.clear()
        player.is_eliminated = True
        player.elimination_reason = reason
        player.elimination_round = self._state.round_number
        player.in_gulag = False
        player.debts.clear()
        player.vouching_for = None
        self._state.trade_offers = [
            offer
            for offer in self._state.trade_offers
            if player.id not in (offer.from_player_id, offer.to_player_id)
        ]
        tribunal = self._state.tribunal
        if tribunal is not None and player.id in (tribunal.accuser_id, tribunal.accused_id):
            self._state.tribunal = None
        self._state.log(
            LogCategory.SYSTEM,
            _ELIMINATION_MESSAGES[reason].format(
                name=player.name, turns=self._config.gulag_max_turns
            ),
            player.id,
            {"reason": reason.value},
        )
        self.check_game_end()
        return True

    def check_game_end(self) -> GameEndCondition | None:
        """End the game when one or zero competing players remain."""
        if self._state.is_over:
            return self._state.game_end_condition
        active = self._state.active_players()
        if len(active) == 1:
            self.end_game(GameEndCondition.SURVIVOR, active[0].id)
            return GameEndCondition.SURVIVOR
        if not active:
            self.end_game(GameEndCondition.STALIN_WINS, None)
            return GameEndCondition.STALIN_WINS
        return None

    def end_game(self, condition: GameEndCondition, winner_id: str | None) -> None:
        state = self._state
        state.game_end_condition = condition
        state.winner_id = winner_id
        state.statistics.ended_at_round = state.round_number
        state.pending_action = None
        state.final_standings = [
            FinalStanding(
                player_id=player.id,
                rubles=player.rubles,
                rank=player.rank,
                properties=len(player.properties),
                eliminated=player.is_eliminated,
                elimination_reason=player.elimination_reason,
            )
            for player in state.players
            if not player.is_stalin
        ]
        winner = state.player(winner_id)
        headline = {
            GameEndCondition.SURVIVOR: "Survivor Victory!",
            GameEndCondition.STALIN_WINS: "Stalin Wins!",
            GameEndCondition.UNANIMOUS: "Unanimous Vote to End",
        }[condition]
        suffix = f" {winner.name} survives." if winner is not None else ""
        state.log(
            LogCategory.SYSTEM,
            f"Game Over: {headline}{suffix}",
            winner_id,
            {"condition": condition.value},
        )


__all__ = ["EngineBase", "PlayerLedger"]
