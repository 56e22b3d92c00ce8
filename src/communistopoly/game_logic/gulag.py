"""Imprisonment state machine: sentencing, sentence progression and escapes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from communistopoly.game_logic.board import GULAG_POSITION, get_space, nearest_railway
from communistopoly.game_logic.ledger import EngineBase
from communistopoly.game_logic.pending import (
    BribeReviewPending,
    ConfessionReviewPending,
    GulagEscapeChoicePending,
)
from communistopoly.game_logic.state import (
    BribeRequest,
    Confession,
    HammerCapabilities,
    TankCapabilities,
    VoucherAgreement,
)
from communistopoly.shared.enums import (
    EliminationReason,
    EscapeMethod,
    GulagReason,
    LogCategory,
)
from communistopoly.shared.value_objects import Decision, DiceRoll

if TYPE_CHECKING:
    from communistopoly.game_logic.configuration import RulesConfiguration
    from communistopoly.game_logic.ledger import PlayerLedger
    from communistopoly.game_logic.state import GameState, Player
    from communistopoly.shared.rng import DeterministicRandomService

_REASON_TEXT: dict[GulagReason, str] = {
    GulagReason.ENEMY_OF_STATE: "Landed on Enemy of the State",
    GulagReason.THREE_DOUBLES: (
        "Rolled three consecutive doubles - counter-revolutionary dice behaviour"
    ),
    GulagReason.DENOUNCEMENT_GUILTY: "Found guilty in tribunal",
    GulagReason.DEBT_DEFAULT: "Failed to pay debt within one round",
    GulagReason.PILFERING_CAUGHT: "Caught stealing at STOY checkpoint",
    GulagReason.STALIN_DECREE: "Sent by Stalin",
    GulagReason.RAILWAY_CAPTURE: "Caught attempting to flee the motherland via railway",
    GulagReason.CAMP_LABOUR: "Sent for forced labour by Siberian Camp custodian",
    GulagReason.VOUCHER_CONSEQUENCE: "Voucher consequence - vouchee committed an offence",
}

# Causes set in motion by another player (or the player's own dice), which the Hammer shrugs off.
HAMMER_IMMUNE_REASONS: frozenset[GulagReason] = frozenset(
    {
        GulagReason.DENOUNCEMENT_GUILTY,
        GulagReason.THREE_DOUBLES,
        GulagReason.RAILWAY_CAPTURE,
        GulagReason.CAMP_LABOUR,
    }
)

VOUCHER_TRIGGERING_REASONS: frozenset[GulagReason] = frozenset(GulagReason) - {
    GulagReason.DEBT_DEFAULT,
    GulagReason.VOUCHER_CONSEQUENCE,
}

_ESCAPE_FACES: tuple[frozenset[int], ...] = (
    frozenset({6}),
    frozenset({5, 6}),
    frozenset({4, 5, 6}),
    frozenset({3, 4, 5, 6}),
)
_ANY_FACE = frozenset(range(1, 7))


def gulag_reason_text(reason: GulagReason, justification: str | None = None) -> str:
    """Human-readable sentence for *reason*."""
    if reason is GulagReason.STALIN_DECREE and justification:
        return justification
    return _REASON_TEXT[reason]


def required_escape_faces(turns_served: int) -> frozenset[int]:
    """Double faces that free a prisoner who has served *turns_served* turns."""
    if turns_served <= 1:
        return _ESCAPE_FACES[0]
    if turns_served <= len(_ESCAPE_FACES):
        return _ESCAPE_FACES[turns_served - 1]
    return _ANY_FACE


class GulagEngine(EngineBase):
    """Sends players to the Gulag and lets them out again."""

    def __init__(
        self,
        state: GameState,
        config: RulesConfiguration,
        ledger: PlayerLedger,
        rng: DeterministicRandomService,
    ) -> None:
        super().__init__(state, config)
        self._ledger = ledger
        self._rng = rng

    # Sentencing -------------------------------------------------------------

    def send_to_gulag(
        self,
        player_id: str,
        reason: GulagReason,
        justification: str | None = None,
    ) -> bool:
        """Imprison the player unless a piece immunity intervenes.

        Returns ``True`` only when the player actually entered the Gulag.
        """
        player = self._player(player_id)
        if player is None or not player.is_active or player.in_gulag:
            return False
        if self._state.is_hero(player.id):
            self._state.log(
                LogCategory.GULAG,
                f"{player.name} is a Hero of the Soviet Union and cannot be sent to the Gulag",
                player.id,
                {"reason": reason.value, "blocked": True},
            )
            return False

        abilities = player.abilities
        if (
            isinstance(abilities, HammerCapabilities)
            and not abilities.immunity_forfeited
            and reason in HAMMER_IMMUNE_REASONS
        ):
            self._state.log(
                LogCategory.GULAG,
                f"{player.name}'s Hammer protects them from the Gulag! "
                "(player-initiated imprisonment blocked)",
                player.id,
                {"reason": reason.value, "blocked": True},
            )
            return False

        if isinstance(abilities, TankCapabilities) and not abilities.gulag_immunity_used:
            abilities.gulag_immunity_used = True
            player.position = nearest_railway(player.position)
            station = get_space(player.position)
            self._state.log(
                LogCategory.GULAG,
                f"{player.name}'s Tank evades the Gulag! Redirected to "
                f"{station.name if station else 'the nearest railway'} (immunity used)",
                player.id,
                {"reason": reason.value, "position": player.position},
            )
            self._ledger.demote(player.id)
            return False

        player.in_gulag = True
        player.gulag_turns = 0
        player.gulag_reason = reason
        player.position = GULAG_POSITION
        self._state.log(
            LogCategory.GULAG,
            f"{player.name} sent to Gulag: {gulag_reason_text(reason, justification)}",
            player.id,
            {"reason": reason.value},
        )
        statistics = self._state.statistics
        statistics.total_gulag_sentences += 1
        statistics.for_player(player.id).gulag_sentences += 1
        self._ledger.demote(player.id)
        if reason in VOUCHER_TRIGGERING_REASONS:
            self.check_voucher_consequences(player.id)
        return player.in_gulag

    def handle_gulag_turn(self, player_id: str) -> bool:
        """Serve one more turn; returns ``True`` while the player is still imprisoned."""
        player = self._player(player_id)
        if player is None or not player.in_gulag or not player.is_active:
            return False
        player.gulag_turns = min(player.gulag_turns + 1, self._config.gulag_max_turns)
        self._state.statistics.for_player(player.id).total_gulag_turns += 1
        self._state.log(
            LogCategory.GULAG,
            f"{player.name} begins turn {player.gulag_turns} in the Gulag",
            player.id,
            {"turns": player.gulag_turns},
        )
        return not self.check_sentence_limit(player.id)

    def check_sentence_limit(self, player_id: str) -> bool:
        """Eliminate a prisoner whose sentence has reached the limit."""
        player = self._player(player_id)
        if player is None or not player.in_gulag:
            return False
        if player.gulag_turns < self._config.gulag_max_turns:
            return False
        return self._ledger.eliminate(player.id, EliminationReason.GULAG_TIMEOUT)

    def extend_sentence(self, player_id: str, turns: int) -> None:
        player = self._player(player_id)
        if player is None or not player.in_gulag:
            return
        player.gulag_turns = min(player.gulag_turns + turns, self._config.gulag_max_turns)
        self._state.log(
            LogCategory.GULAG,
            f"{player.name}'s Gulag sentence extended by {turns} turns",
            player.id,
            {"turns": player.gulag_turns},
        )
        self.check_sentence_limit(player.id)

    def release(self, player_id: str, how: str) -> bool:
        """Free the prisoner; they stay on the Gulag space."""
        player = self._player(player_id)
        if player is None or not player.in_gulag:
            return False
        player.in_gulag = False
        player.gulag_turns = 0
        player.gulag_reason = None
        self._state.statistics.for_player(player.id).gulag_escapes += 1
        pending = self._state.pending_action
        if isinstance(pending, GulagEscapeChoicePending) and pending.player_id == player.id:
            self._state.pending_action = None
        self._state.log(
            LogCategory.GULAG,
            f"{player.name} released from the Gulag ({how})",
            player.id,
        )
        return True

    # Escapes ----------------------------------------------------------------

    def attempt_gulag_escape(
        self,
        player_id: str,
        method: EscapeMethod,
        *,
        roll: DiceRoll | None = None,
        voucher_id: str | None = None,
        amount: int | None = None,
    ) -> Decision:
        """Try to leave the Gulag by *method*.

        Informing is a denouncement filed from the Gulag and is routed through
        the tribunal rather than here.
        """
        player = self._player(player_id)
        if player is None:
            return Decision.deny("Player not found")
        if not player.in_gulag:
            return self._deny(LogCategory.GULAG, f"{player.name} is not in the Gulag", player.id)

        if method is EscapeMethod.ROLL:
            return self._escape_by_roll(player, roll)
        if method is EscapeMethod.PAY:
            return self._escape_by_payment(player)
        if method is EscapeMethod.CARD:
            return self._escape_by_token(player)
        if method is EscapeMethod.VOUCH:
            if voucher_id is None:
                return Decision.deny("A voucher must be named")
            return self.vouch_for(voucher_id, player.id)
        if method is EscapeMethod.BRIBE:
            if amount is None:
                return Decision.deny("A bribe amount is required")
            return self.request_bribe(player.id, amount)
        return Decision.deny("Informing is filed as a denouncement")

    def _escape_by_roll(self, player: Player, roll: DiceRoll | None) -> Decision:
        dice = roll if roll is not None else self._rng.roll_dice()
        self._state.last_roll = dice
        faces = required_escape_faces(player.gulag_turns)
        self._state.log(
            LogCategory.DICE,
            f"{player.name} rolled {dice.dice[0]} and {dice.dice[1]} for escape",
            player.id,
            {"dice": list(dice.dice)},
        )
        if dice.is_doubles and dice.dice[0] in faces:
            self.release(player.id, f"rolled double {dice.dice[0]}s")
            return Decision.allow()
        needed = ", ".join(str(face) for face in sorted(faces))
        reason = f"Escape roll failed (needed doubles of {needed})"
        self._state.log(LogCategory.GULAG, f"{player.name}: {reason}", player.id)
        return Decision.deny(reason)

    def _escape_by_payment(self, player: Player) -> Decision:
        cost = self._config.gulag_escape_cost
        if not self._ledger.pay_state(player, cost):
            return self._deny(
                LogCategory.GULAG,
                f"{player.name} cannot afford the {cost} escape fee",
                player.id,
            )
        self.release(player.id, f"paid {cost} to the State")
        self._ledger.demote(player.id)
        return Decision.allow()

    def _escape_by_token(self, player: Player) -> Decision:
        if not player.has_release_token:
            return self._deny(
                LogCategory.GULAG, f"{player.name} holds no release token", player.id
            )
        player.release_tokens -= 1
        self.release(player.id, "used a release token")
        return Decision.allow()

    # Vouchers ---------------------------------------------------------------

    def vouch_for(self, voucher_id: str, prisoner_id: str) -> Decision:
        """Release the prisoner on the voucher's word, opening a liability window."""
        voucher = self._player(voucher_id)
        prisoner = self._player(prisoner_id)
        if voucher is None or prisoner is None:
            return Decision.deny("Player not found")
        if not prisoner.in_gulag:
            return Decision.deny(f"{prisoner.name} is not in the Gulag")
        if voucher.id == prisoner.id or not voucher.is_active or voucher.in_gulag:
            return self._deny(
                LogCategory.GULAG,
                f"{voucher.name} is not in a position to vouch",
                voucher.id,
            )
        if voucher.vouching_for is not None:
            return self._deny(
                LogCategory.GULAG,
                f"{voucher.name} is already vouching for another comrade",
                voucher.id,
            )
        expires = self._state.round_number + self._config.voucher_expiry_rounds
        self._state.vouchers.append(
            VoucherAgreement(
                id=self._state.next_id("voucher"),
                prisoner_id=prisoner.id,
                voucher_id=voucher.id,
                expires_at_round=expires,
            )
        )
        voucher.vouching_for = prisoner.id
        self.release(prisoner.id, f"vouched for by {voucher.name}")
        self._state.log(
            LogCategory.GULAG,
            f"{voucher.name} will share {prisoner.name}'s fate until round {expires}",
            voucher.id,
            {"prisoner_id": prisoner.id, "expires_at_round": expires},
        )
        return Decision.allow()

    def check_voucher_consequences(self, prisoner_id: str) -> None:
        """Imprison whoever is currently vouching for a re-offending player."""
        for agreement in self._state.vouchers:
            if not agreement.is_active or agreement.prisoner_id != prisoner_id:
                continue
            agreement.is_active = False
            voucher = self._player(agreement.voucher_id)
            if voucher is None:
                continue
            voucher.vouching_for = None
            self.send_to_gulag(voucher.id, GulagReason.VOUCHER_CONSEQUENCE)

    def expire_vouchers(self) -> None:
        for agreement in self._state.vouchers:
            if not agreement.is_active or self._state.round_number <= agreement.expires_at_round:
                continue
            agreement.is_active = False
            voucher = self._player(agreement.voucher_id)
            if voucher is not None and voucher.vouching_for == agreement.prisoner_id:
                voucher.vouching_for = None
                self._state.log(
                    LogCategory.GULAG,
                    f"{voucher.name}'s voucher obligation has expired",
                    voucher.id,
                )
        self._state.vouchers = [v for v in self._state.vouchers if v.is_active]

    # Bribes -----------------------------------------------------------------

    def request_bribe(self, player_id: str, amount: int) -> Decision:
        """File a bribe offer for Stalin to review; nothing is paid yet."""
        player = self._player(player_id)
        if player is None:
            return Decision.deny("Player not found")
        if not player.in_gulag:
            return Decision.deny(f"{player.name} is not in the Gulag")
        if amount <= 0:
            return self._deny(LogCategory.GULAG, "A bribe must be a positive sum", player.id)
        if player.rubles < amount:
            return self._deny(
                LogCategory.GULAG,
                f"{player.name} cannot afford a bribe of {amount}",
                player.id,
            )
        if not self._review_slot_free(player):
            return self._deny(
                LogCategory.GULAG, "Another matter awaits a decision", player.id
            )
        bribe = BribeRequest(
            id=self._state.next_id("bribe"),
            player_id=player.id,
            amount=amount,
            requested_at_round=self._state.round_number,
        )
        self._state.bribes.append(bribe)
        self._state.pending_action = BribeReviewPending(
            bribe_id=bribe.id, player_id=player.id, amount=amount
        )
        self._state.log(
            LogCategory.GULAG,
            f"{player.name} offers Stalin a bribe of {amount}",
            player.id,
            {"bribe_id": bribe.id, "amount": amount},
        )
        return Decision.allow()

    def resolve_bribe(self, bribe_id: str, *, accepted: bool) -> bool:
        """Stalin keeps the bribe either way; only an accepted one buys release."""
        bribe = next((b for b in self._state.bribes if b.id == bribe_id), None)
        if bribe is None:
            return False
        self._state.bribes.remove(bribe)
        pending = self._state.pending_action
        if isinstance(pending, BribeReviewPending) and pending.bribe_id == bribe_id:
            self._state.pending_action = None
        player = self._player(bribe.player_id)
        if player is None:
            return False
        if not self._ledger.pay_state(player, bribe.amount):
            self._state.log(
                LogCategory.GULAG,
                f"{player.name}'s bribe could not be collected",
                player.id,
                {"bribe_id": bribe_id},
            )
            return False
        if not accepted:
            self._state.log(
                LogCategory.PAYMENT,
                f"Stalin rejected {player.name}'s bribe of {bribe.amount} "
                "and confiscated it as contraband",
                player.id,
                {"bribe_id": bribe_id, "amount": bribe.amount, "confiscated": True},
            )
            return False
        if not player.in_gulag:
            self._state.log(
                LogCategory.PAYMENT,
                f"Stalin pocketed {player.name}'s bribe of {bribe.amount}",
                player.id,
                {"bribe_id": bribe_id, "amount": bribe.amount},
            )
            return False
        self.release(player.id, f"bribed Stalin with {bribe.amount}")
        return True

    def _review_slot_free(self, player: Player) -> bool:
        """Only the prisoner's own escape prompt may be displaced by a plea to Stalin."""
        pending = self._state.pending_action
        return pending is None or (
            isinstance(pending, GulagEscapeChoicePending) and pending.player_id == player.id
        )

    # Confessions ------------------------------------------------------------

    def submit_confession(self, prisoner_id: str, text: str) -> Decision:
        """Submit a written rehabilitation confession for Stalin to review."""
        player = self._player(prisoner_id)
        if player is None:
            return Decision.deny("Player not found")
        if not player.in_gulag:
            return Decision.deny(f"{player.name} is not in the Gulag")
        text = text.strip()
        if not text:
            return self._deny(LogCategory.GULAG, "A confession cannot be empty", player.id)
        if any(
            c.prisoner_id == player.id and not c.reviewed for c in self._state.confessions
        ):
            return self._deny(
                LogCategory.GULAG,
                f"{player.name}'s confession already awaits review",
                player.id,
            )
        if not self._review_slot_free(player):
            return self._deny(
                LogCategory.GULAG, "Another matter awaits a decision", player.id
            )
        confession = Confession(
            id=self._state.next_id("confession"),
            prisoner_id=player.id,
            text=text,
            submitted_at_round=self._state.round_number,
        )
        self._state.confessions.append(confession)
        self._state.pending_action = ConfessionReviewPending(
            confession_id=confession.id, player_id=player.id
        )
        self._state.log(
            LogCategory.GULAG,
            f"{player.name} has submitted a rehabilitation confession to Stalin",
            player.id,
            {"confession_id": confession.id},
        )
        return Decision.allow()

    def review_confession(self, confession_id: str, *, accepted: bool) -> bool:
        """Stalin's ruling on a confession; acceptance frees the prisoner."""
        confession = next(
            (c for c in self._state.confessions if c.id == confession_id), None
        )
        if confession is None or confession.reviewed:
            return False
        confession.reviewed = True
        confession.accepted = accepted
        pending = self._state.pending_action
        if (
            isinstance(pending, ConfessionReviewPending)
            and pending.confession_id == confession_id
        ):
            self._state.pending_action = None
        player = self._player(confession.prisoner_id)
        if player is None:
            return False
        if not accepted:
            self._state.log(
                LogCategory.GULAG,
                f"Stalin rejected {player.name}'s rehabilitation confession. "
                "They remain in the Gulag.",
                player.id,
                {"confession_id": confession_id},
            )
            return False
        return self.release(player.id, "Stalin accepted their confession")


__all__ = [
    "HAMMER_IMMUNE_REASONS",
    "VOUCHER_TRIGGERING_REASONS",
    "GulagEngine",
    "gulag_reason_text",
    "required_escape_faces",
]
