"""Stalin's collective decrees: the Great Purge, Five-Year Plans and Hero awards."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from communistopoly.game_logic.ledger import EngineBase
from communistopoly.game_logic.state import FiveYearPlan, GreatPurge, HeroAward, TankCapabilities
from communistopoly.shared.enums import GulagReason, LogCategory
from communistopoly.shared.value_objects import Decision

if TYPE_CHECKING:
    from communistopoly.game_logic.configuration import RulesConfiguration
    from communistopoly.game_logic.gulag import GulagEngine
    from communistopoly.game_logic.ledger import PlayerLedger
    from communistopoly.game_logic.state import GameState, Player


class DecreeEngine(EngineBase):
    """Decrees Stalin may call on the whole table at any point of play."""

    def __init__(
        self,
        state: GameState,
        config: RulesConfiguration,
        ledger: PlayerLedger,
        gulag: GulagEngine,
    ) -> None:
        super().__init__(state, config)
        self._ledger = ledger
        self._gulag = gulag

    def start_round(self) -> None:
        """Retire expired Hero awards and close a Five-Year Plan that reached its deadline."""
        round_number = self._state.round_number
        for hero in self._state.heroes:
            player = self._player(hero.player_id)
            if hero.expires_at_round <= round_number and player is not None:
                self._state.log(
                    LogCategory.RANK,
                    f"{player.name} is no longer a Hero of the Soviet Union",
                    player.id,
                )
        self._state.heroes = [h for h in self._state.heroes if h.expires_at_round > round_number]
        plan = self._state.five_year_plan
        if plan is not None and round_number >= plan.deadline_round:
            self.resolve_five_year_plan()

    # Great Purge ------------------------------------------------------------

    def initiate_great_purge(self) -> Decision:
        """Open the once-per-game purge vote."""
        if self._state.is_over:
            return Decision.deny("The game is over")
        if self._state.great_purge_used:
            return self._deny(
                LogCategory.SYSTEM, "The Great Purge has already been used this game"
            )
        self._state.great_purge_used = True
        self._state.great_purge = GreatPurge(opened_at_round=self._state.round_number)
        self._state.log(
            LogCategory.SYSTEM,
            "THE GREAT PURGE HAS BEGUN! Every comrade must point at another player.",
        )
        return Decision.allow()

    def vote_in_great_purge(self, voter_id: str, target_id: str) -> Decision:
        """Record (or change) the comrade *voter_id* points at."""
        purge = self._state.great_purge
        if purge is None:
            return Decision.deny("No purge is under way")
        voter = self._player(voter_id)
        target = self._player(target_id)
        if voter is None or target is None:
            return Decision.deny("Player not found")
        if not voter.is_active or not target.is_active:
            return self._deny(
                LogCategory.SYSTEM, "Only active comrades take part in the purge", voter.id
            )
        if voter.id == target.id:
            return self._deny(
                LogCategory.SYSTEM, f"{voter.name} cannot point at themselves", voter.id
            )
        purge.votes[voter.id] = target.id
        self._state.log(LogCategory.SYSTEM, f"{voter.name} has cast a purge vote", voter.id)
        return Decision.allow()

    def resolve_great_purge(self) -> list[str]:
        """Send the most-named comrades to the Gulag; every tied comrade goes.

        Returns the ids of the players who actually entered the Gulag.
        """
        purge = self._state.great_purge
        if purge is None:
            return []
        self._state.great_purge = None
        counts = Counter(
            target_id
            for voter_id, target_id in purge.votes.items()
            if self._is_active(voter_id) and self._is_active(target_id)
        )
        if not counts:
            self._state.log(
                LogCategory.SYSTEM,
                "The Great Purge ended with no votes cast. The Party is watching...",
            )
            return []
        most = max(counts.values())
        targets = [player_id for player_id, votes in counts.items() if votes == most]
        names = " and ".join(p.name for pid in targets if (p := self._player(pid)))
        self._state.log(
            LogCategory.SYSTEM,
            f"The Great Purge is complete. {names} received the most votes ({most})",
            payload={"targets": targets, "votes": most},
        )
        return [
            player_id
            for player_id in targets
            if self._gulag.send_to_gulag(
                player_id, GulagReason.STALIN_DECREE, "Purged by the collective in the Great Purge"
            )
        ]

    def _is_active(self, player_id: str) -> bool:
        player = self._player(player_id)
        return player is not None and player.is_active

    # Five-Year Plan ---------------------------------------------------------

    def initiate_five_year_plan(self, target: int, duration_rounds: int = 1) -> Decision:
        """Demand *target* rubles from the collective before *duration_rounds* have passed."""
        if self._state.is_over:
            return Decision.deny("The game is over")
        if target <= 0 or duration_rounds < 1:
            return self._deny(
                LogCategory.SYSTEM, "A Five-Year Plan needs a positive target and duration"
            )
        if self._state.five_year_plan is not None:
            return self._deny(LogCategory.SYSTEM, "A Five-Year Plan is already under way")
        deadline = self._state.round_number + duration_rounds
        self._state.five_year_plan = FiveYearPlan(
            target=target,
            started_at_round=self._state.round_number,
            deadline_round=deadline,
        )
        self._state.log(
            LogCategory.SYSTEM,
            f"FIVE-YEAR PLAN INITIATED! The State requires {target} from the collective "
            f"by round {deadline}.",
            payload={"target": target, "deadline_round": deadline},
        )
        return Decision.allow()

    def contribute_to_five_year_plan(self, player_id: str, amount: int) -> Decision:
        plan = self._state.five_year_plan
        if plan is None:
            return Decision.deny("No Five-Year Plan is under way")
        player = self._player(player_id)
        if player is None or not player.is_active:
            return Decision.deny("Only active comrades may contribute")
        if amount <= 0:
            return self._deny(
                LogCategory.PAYMENT, "A contribution must be a positive sum", player.id
            )
        if not self._ledger.pay_state(player, amount):
            return self._deny(
                LogCategory.PAYMENT,
                f"{player.name} cannot afford to contribute {amount}",
                player.id,
            )
        plan.collected += amount
        plan.contributions[player.id] = plan.contributions.get(player.id, 0) + amount
        self._state.log(
            LogCategory.PAYMENT,
            f"{player.name} contributed {amount} to the Five-Year Plan "
            f"({plan.collected}/{plan.target})",
            player.id,
            {"amount": amount, "collected": plan.collected},
        )
        return Decision.allow()

    def resolve_five_year_plan(self) -> bool | None:
        """Pay every comrade a bonus if the target was met, else punish the poorest.

        Returns ``None`` when no plan is running.
        """
        plan = self._state.five_year_plan
        if plan is None:
            return None
        self._state.five_year_plan = None
        if plan.is_met:
            bonus = self._config.five_year_plan_bonus
            for player in self._state.active_players():
                self._ledger.receive_from_state(player, bonus)
            self._state.log(
                LogCategory.SYSTEM,
                f"Five-Year Plan SUCCESSFUL! Every comrade receives {bonus} for meeting the quota.",
                payload={"collected": plan.collected, "target": plan.target},
            )
            return True
        self._punish_saboteur()
        return False

    def _punish_saboteur(self) -> None:
        candidates = sorted(
            (
                player
                for player in self._state.active_players()
                if not player.in_gulag and not self._state.is_hero(player.id)
            ),
            key=lambda player: player.rubles,
        )
        for player in candidates:
            outcome = self._sentence_saboteur(player)
            if outcome is not None:
                self._state.log(
                    LogCategory.SYSTEM,
                    f"Five-Year Plan FAILED! {player.name} (poorest comrade) has been "
                    f"{outcome} for sabotage.",
                    player.id,
                )
                return
        if candidates:
            self._state.log(
                LogCategory.SYSTEM,
                "Five-Year Plan FAILED! No comrade could be sent to the Gulag.",
            )

    def _sentence_saboteur(self, player: Player) -> str | None:
        tank = player.abilities if isinstance(player.abilities, TankCapabilities) else None
        had_immunity = tank is not None and not tank.gulag_immunity_used
        sent = self._gulag.send_to_gulag(
            player.id, GulagReason.STALIN_DECREE, "Sabotaged the Five-Year Plan"
        )
        if player.is_eliminated:
            return "eliminated"
        if sent:
            return "sent to the Gulag"
        if had_immunity and tank is not None and tank.gulag_immunity_used:
            return "redirected by the Tank's immunity"
        return None

    # Hero of the Soviet Union -----------------------------------------------

    def grant_hero(self, player_id: str) -> Decision:
        """Shield a comrade from the Gulag, demotion and denouncement for a few rounds."""
        player = self._player(player_id)
        if player is None:
            return Decision.deny("Player not found")
        if not player.is_active:
            return Decision.deny(f"{player.name} cannot be decorated")
        if self._state.is_hero(player.id):
            return self._deny(
                LogCategory.RANK,
                f"{player.name} is already a Hero of the Soviet Union!",
                player.id,
            )
        duration = self._config.hero_duration_rounds
        award = HeroAward(
            player_id=player.id,
            granted_at_round=self._state.round_number,
            expires_at_round=self._state.round_number + duration,
        )
        self._state.heroes = [h for h in self._state.heroes if h.player_id != player.id]
        self._state.heroes.append(award)
        self._state.log(
            LogCategory.RANK,
            f"{player.name} has been declared a HERO OF THE SOVIET UNION! "
            f"Immune to all negative effects for {duration} rounds.",
            player.id,
            {"expires_at_round": award.expires_at_round},
        )
        return Decision.allow()

    def is_hero(self, player_id: str) -> bool:
        return self._state.is_hero(player_id)


__all__ = ["DecreeEngine"]
