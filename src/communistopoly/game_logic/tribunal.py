"""Accusation lifecycle: denouncement, witnesses and verdicts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from communistopoly.game_logic.ledger import EngineBase
from communistopoly.game_logic.state import HammerCapabilities, Tribunal
from communistopoly.shared.enums import (
    GulagReason,
    LogCategory,
    PartyRank,
    PieceType,
    TribunalPhase,
    Verdict,
    WitnessSide,
    rank_index,
)
from communistopoly.shared.value_objects import Decision

if TYPE_CHECKING:
    from communistopoly.game_logic.configuration import RulesConfiguration
    from communistopoly.game_logic.gulag import GulagEngine
    from communistopoly.game_logic.ledger import PlayerLedger
    from communistopoly.game_logic.state import GameState, Player

_PHASE_ORDER: tuple[TribunalPhase, ...] = (
    TribunalPhase.ACCUSATION,
    TribunalPhase.EVIDENCE,
    TribunalPhase.VERDICT,
)

_SENIOR_DENOUNCERS = frozenset({PartyRank.COMMISSAR, PartyRank.INNER_CIRCLE})


class TribunalEngine(EngineBase):
    """Runs the single active tribunal."""

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

    @property
    def active(self) -> Tribunal | None:
        return self._state.tribunal

    def can_denounce(self, accuser_id: str, accused_id: str) -> Decision:
        """Eligibility of *accuser_id* to open a tribunal against *accused_id*."""
        accuser = self._player(accuser_id)
        accused = self._player(accused_id)
        if accuser is None or accused is None:
            return Decision.deny("Player not found")
        if self._state.tribunal is not None:
            return Decision.deny("A tribunal is already in session")
        if not accuser.is_active:
            return Decision.deny(f"{accuser.name} cannot denounce anyone")
        if accused.is_stalin:
            return Decision.deny("Comrade Stalin cannot be denounced")
        if accuser.id == accused.id:
            return Decision.deny("Cannot denounce yourself")
        if accused.is_eliminated:
            return Decision.deny("Cannot denounce an eliminated player")
        if accused.in_gulag:
            return Decision.deny("Cannot denounce someone already in the Gulag")
        if self._state.is_hero(accused.id):
            return Decision.deny(f"{accused.name} is a Hero of the Soviet Union")
        if accuser.denouncements_this_round > 0 and accuser.rank not in _SENIOR_DENOUNCERS:
            return Decision.deny("You may only denounce once per round (unless Commissar+)")
        if accused.piece is PieceType.STATUE_OF_LENIN and rank_index(
            accuser.rank
        ) < rank_index(accused.rank):
            return Decision.deny(
                f"{accused.name}'s Statue of Lenin cannot be denounced by a lower rank"
            )
        return Decision.allow()

    def required_witnesses(self, accused: Player) -> int:
        """Witnesses needed to support an accusation against *accused*."""
        if accused.under_suspicion:
            return 0
        if accused.rank is PartyRank.COMMISSAR:
            return self._config.commissar_witnesses
        if accused.rank is PartyRank.INNER_CIRCLE:
            return len(self._eligible_witnesses(accused.id))
        return 0

    def _eligible_witnesses(self, accused_id: str) -> list[Player]:
        tribunal = self._state.tribunal
        accuser_id = tribunal.accuser_id if tribunal is not None else None
        return [
            player
            for player in self._state.active_players()
            if not player.in_gulag and player.id not in (accused_id, accuser_id)
        ]

    def denounce_player(self, accuser_id: str, accused_id: str, crime: str) -> Decision:
        """Open a tribunal; denouncing Stalin sends the accuser to the Gulag instead."""
        accuser = self._player(accuser_id)
        accused = self._player(accused_id)
        if accuser is None or accused is None:
            return Decision.deny("Player not found")
        if accused.is_stalin and accuser.is_active:
            self._state.log(
                LogCategory.TRIBUNAL,
                f"{accuser.name} foolishly attempted to denounce Stalin!",
                accuser.id,
            )
            self._gulag.send_to_gulag(
                accuser.id,
                GulagReason.STALIN_DECREE,
                "Attempted to denounce Comrade Stalin",
            )
            return Decision.deny("Comrade Stalin cannot be denounced")
        eligible = self.can_denounce(accuser_id, accused_id)
        if not eligible:
            return self._deny(
                LogCategory.TRIBUNAL,
                f"Denouncement blocked: {eligible.reason}",
                accuser.id,
            )
        accuser.denouncements_this_round += 1
        tribunal = Tribunal(
            accuser_id=accuser.id,
            accused_id=accused.id,
            crime=crime,
            is_inform=accuser.in_gulag,
            opened_at_round=self._state.round_number,
        )
        self._state.tribunal = tribunal
        tribunal.required_witnesses = self.required_witnesses(accused)
        statistics = self._state.statistics
        statistics.total_denouncements += 1
        statistics.total_tribunals += 1
        statistics.for_player(accuser.id).denouncements_made += 1
        statistics.for_player(accused.id).denouncements_received += 1
        verb = "informs on" if tribunal.is_inform else "denounces"
        self._state.log(
            LogCategory.TRIBUNAL,
            f"{accuser.name} {verb} {accused.name} for: {crime}",
            accuser.id,
            {
                "accused_id": accused.id,
                "is_inform": tribunal.is_inform,
                "required_witnesses": tribunal.required_witnesses,
            },
        )
        return Decision.allow()

    def advance_phase(self) -> TribunalPhase | None:
        tribunal = self._state.tribunal
        if tribunal is None:
            return None
        position = _PHASE_ORDER.index(tribunal.phase)
        if position < len(_PHASE_ORDER) - 1:
            tribunal.phase = _PHASE_ORDER[position + 1]
            self._state.log(
                LogCategory.TRIBUNAL,
                f"Tribunal moves to the {tribunal.phase.value} phase",
                payload={"phase": tribunal.phase.value},
            )
        return tribunal.phase

    def add_witness(self, witness_id: str, side: WitnessSide) -> Decision:
        """Record testimony for or against the accusation.

        A Hammer testifying against an accusation loses its Gulag immunity.
        """
        tribunal = self._state.tribunal
        witness = self._player(witness_id)
        if tribunal is None or witness is None:
            return Decision.deny("No tribunal or witness")
        if witness.id in (tribunal.accuser_id, tribunal.accused_id):
            return self._deny(LogCategory.TRIBUNAL, "Cannot witness your own trial", witness.id)
        if not witness.is_active:
            return self._deny(
                LogCategory.TRIBUNAL, "Eliminated players cannot witness", witness.id
            )
        if witness.in_gulag:
            return self._deny(LogCategory.TRIBUNAL, "Cannot witness from the Gulag", witness.id)
        same, other = (
            (tribunal.witnesses_for, tribunal.witnesses_against)
            if side is WitnessSide.FOR
            else (tribunal.witnesses_against, tribunal.witnesses_for)
        )
        if witness.id in other:
            return self._deny(LogCategory.TRIBUNAL, "Cannot witness for both sides", witness.id)
        if witness.id in same:
            return Decision.allow()
        same.append(witness.id)
        if tribunal.phase is TribunalPhase.ACCUSATION:
            tribunal.phase = TribunalPhase.EVIDENCE
        party = "the accusation" if side is WitnessSide.FOR else "the accused"
        self._state.log(
            LogCategory.TRIBUNAL,
            f"{witness.name} testified for {party}",
            witness.id,
            {"side": side.value},
        )
        abilities = witness.abilities
        if (
            side is WitnessSide.AGAINST
            and isinstance(abilities, HammerCapabilities)
            and not abilities.immunity_forfeited
        ):
            abilities.immunity_forfeited = True
            self._state.log(
                LogCategory.ABILITY,
                f"{witness.name}'s Hammer refused to condemn and loses its Gulag immunity",
                witness.id,
            )
        return Decision.allow()

    def has_sufficient_witnesses(self) -> bool:
        tribunal = self._state.tribunal
        if tribunal is None:
            return False
        return len(tribunal.witnesses_for) >= tribunal.required_witnesses

    def render_verdict(self, verdict: Verdict) -> bool:
        """Apply *verdict* to the active tribunal and close it."""
        tribunal = self._state.tribunal
        if tribunal is None:
            return False
        accuser = self._player(tribunal.accuser_id)
        accused = self._player(tribunal.accused_id)
        tribunal.phase = TribunalPhase.VERDICT
        self._state.log(
            LogCategory.TRIBUNAL,
            f"VERDICT: {verdict.value.replace('_', ' ').upper()}",
            payload={
                "verdict": verdict.value,
                "witnesses_for": len(tribunal.witnesses_for),
                "witnesses_against": len(tribunal.witnesses_against),
                "required_witnesses": tribunal.required_witnesses,
            },
        )
        # Closed before consequences run.
        self._state.tribunal = None
        self._record_verdict(tribunal, verdict)

        if verdict is Verdict.GUILTY:
            self._apply_guilty(tribunal, accuser, accused)
        elif verdict is Verdict.INNOCENT:
            self._apply_innocent(tribunal, accuser)
        elif verdict is Verdict.BOTH_GUILTY:
            if accuser is not None:
                if tribunal.is_inform:
                    self._gulag.extend_sentence(
                        accuser.id, self._config.inform_innocent_extension
                    )
                else:
                    self._gulag.send_to_gulag(
                        accuser.id, GulagReason.DENOUNCEMENT_GUILTY, "Both found guilty"
                    )
            if accused is not None:
                accused.under_suspicion = False
                self._gulag.send_to_gulag(
                    accused.id, GulagReason.DENOUNCEMENT_GUILTY, tribunal.crime
                )
        elif accused is not None:
            accused.under_suspicion = True
            self._state.log(
                LogCategory.TRIBUNAL,
                f"{accused.name} is now under suspicion "
                "(next denouncement needs no witnesses)",
                accused.id,
            )
        return True

    def _record_verdict(self, tribunal: Tribunal, verdict: Verdict) -> None:
        outcomes = {
            Verdict.GUILTY: (True, False),
            Verdict.INNOCENT: (False, True),
            Verdict.BOTH_GUILTY: (False, False),
        }
        if verdict not in outcomes:
            return
        accuser_won, accused_won = outcomes[verdict]
        for player_id, won in (
            (tribunal.accuser_id, accuser_won),
            (tribunal.accused_id, accused_won),
        ):
            stats = self._state.statistics.for_player(player_id)
            if won:
                stats.tribunals_won += 1
            else:
                stats.tribunals_lost += 1

    def _apply_guilty(
        self, tribunal: Tribunal, accuser: Player | None, accused: Player | None
    ) -> None:
        if accused is not None:
            accused.under_suspicion = False
            self._gulag.send_to_gulag(
                accused.id, GulagReason.DENOUNCEMENT_GUILTY, tribunal.crime
            )
        if accuser is None or not accuser.is_active:
            return
        bonus = self._config.informant_bonus
        self._ledger.receive_from_state(accuser, bonus)
        self._state.log(
            LogCategory.TRIBUNAL,
            f"{accuser.name} receives {bonus} informant bonus",
            accuser.id,
            {"amount": bonus},
        )
        if tribunal.is_inform:
            self._gulag.release(accuser.id, "successful informing")

    def _apply_innocent(self, tribunal: Tribunal, accuser: Player | None) -> None:
        if accuser is None:
            return
        self._state.log(
            LogCategory.TRIBUNAL,
            f"{accuser.name} demoted for wasting the Party's time!",
            accuser.id,
        )
        self._ledger.demote(accuser.id)
        if tribunal.is_inform:
            self._gulag.extend_sentence(accuser.id, self._config.inform_innocent_extension)

    def cancel(self) -> bool:
        """Dismiss the active tribunal without a verdict."""
        if self._state.tribunal is None:
            return False
        self._state.tribunal = None
        self._state.log(LogCategory.TRIBUNAL, "The tribunal was dismissed")
        return True


__all__ = ["TribunalEngine"]
