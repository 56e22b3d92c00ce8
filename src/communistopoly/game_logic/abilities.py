"""Per-piece powers and the powers granted by complete property groups."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, TypeVar

from communistopoly.game_logic.board import (
    KGB_HEADQUARTERS_POSITION,
    RAILWAY_POSITIONS,
    get_space,
)
from communistopoly.game_logic.ledger import EngineBase
from communistopoly.game_logic.pending import AbilityApprovalPending
from communistopoly.game_logic.state import (
    BreadLoafCapabilities,
    IronCurtainCapabilities,
    LeninCapabilities,
    SickleCapabilities,
    TankCapabilities,
)
from communistopoly.game_logic.trivia import TestQuestion, draw_question
from communistopoly.shared.enums import (
    GulagReason,
    LogCategory,
    PropertyGroup,
    SpecialPower,
)
from communistopoly.shared.value_objects import Decision

if TYPE_CHECKING:
    from communistopoly.game_logic.configuration import RulesConfiguration
    from communistopoly.game_logic.gulag import GulagEngine
    from communistopoly.game_logic.ledger import PlayerLedger
    from communistopoly.game_logic.properties import PropertyEngine
    from communistopoly.game_logic.state import GameState, Player
    from communistopoly.shared.rng import DeterministicRandomService

_C = TypeVar("_C")

_POWER_LABELS: dict[SpecialPower, str] = {
    SpecialPower.CAMP_LABOUR: "Siberian Camps forced labour",
    SpecialPower.MINISTRY_REWRITE: "Ministry of Truth rule rewrite",
    SpecialPower.MEDIA_REVOTE: "Pravda Press re-vote",
    SpecialPower.KGB_PREVIEW: "KGB test preview",
    SpecialPower.RAILWAY_CAPTURE: "railway capture",
    SpecialPower.IRON_CURTAIN_DISAPPEAR: "Iron Curtain disappearance",
    SpecialPower.LENIN_SPEECH: "Lenin's inspiring speech",
}


class AbilityEngine(EngineBase):
    """Applies the one-shot and passive powers that sit on top of the core engines."""

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

    def _actor(self, player_id: str, kind: type[_C]) -> tuple[Player, _C] | None:
        """Return the active player with their capability record if it is a *kind*."""
        player = self._player(player_id)
        if player is None or not player.is_active:
            return None
        abilities = player.abilities
        if not isinstance(abilities, kind):
            return None
        return player, abilities

    # Sickle -----------------------------------------------------------------

    def sickle_harvest(self, player_id: str, space_id: int) -> Decision:
        """Seize a cheap property from the State or a comrade, once per game."""
        actor = self._actor(player_id, SickleCapabilities)
        space = get_space(space_id)
        record = self._state.property_state(space_id)
        if actor is None or space is None or record is None:
            return Decision.deny("Sickle or property not found")
        player, abilities = actor
        if abilities.harvest_used:
            return self._deny(LogCategory.ABILITY, "The harvest has already been taken", player.id)
        limit = self._config.sickle_harvest_limit
        if space.base_cost >= limit:
            return self._deny(
                LogCategory.ABILITY,
                f"Cannot harvest {space.name} - value must be less than {limit}",
                player.id,
            )
        if record.custodian_id == player.id:
            return self._deny(
                LogCategory.ABILITY,
                f"{player.name} already holds {space.name}",
                player.id,
            )
        victim = self._player(record.custodian_id)
        moved = self._properties.transfer_property(
            space_id, player.id, from_player_id=record.custodian_id, reason="sickle harvest"
        )
        if not moved:
            return moved
        abilities.harvest_used = True
        self._state.log(
            LogCategory.ABILITY,
            f"{player.name}'s Sickle harvested {space.name} from "
            f"{victim.name if victim else 'the State'}!",
            player.id,
            {"space_id": space_id},
        )
        return Decision.allow()

    def sickle_motherland_fine(self, player_id: str) -> int:
        """Fine a Sickle who forgot to announce "For the Motherland!" before rolling."""
        actor = self._actor(player_id, SickleCapabilities)
        if actor is None:
            return 0
        player, abilities = actor
        abilities.motherland_fines += 1
        fine = self._config.sickle_motherland_fine
        if not self._ledger.pay_state(player, fine):
            self._state.log(
                LogCategory.ABILITY,
                f"{player.name} cannot afford the {fine} fine for forgetting the announcement",
                player.id,
            )
            return 0
        self._state.log(
            LogCategory.ABILITY,
            f'{player.name} forgot to announce "For the Motherland!" and paid a {fine} fine',
            player.id,
            {"amount": fine},
        )
        return fine

    # Tank -------------------------------------------------------------------

    def tank_requisition(self, player_id: str, target_id: str) -> int:
        """Take up to the requisition amount from *target_id*, once per lap."""
        actor = self._actor(player_id, TankCapabilities)
        target = self._player(target_id)
        if actor is None or target is None or not target.is_active:
            return 0
        player, abilities = actor
        if target.id == player.id:
            return 0
        if abilities.requisition_used_this_lap:
            self._deny(
                LogCategory.ABILITY,
                f"{player.name} has already requisitioned this lap",
                player.id,
            )
            return 0
        amount = min(self._config.tank_requisition, target.rubles)
        self._ledger.transfer(target, player, amount)
        abilities.requisition_used_this_lap = True
        self._state.log(
            LogCategory.ABILITY,
            f"{player.name}'s Tank requisitioned {amount} from {target.name}!",
            player.id,
            {"amount": amount, "target_id": target.id},
        )
        return amount

    # Bread Loaf -------------------------------------------------------------

    def cover_debt(self, player_id: str, debtor_id: str, debt_id: str | None = None) -> Decision:
        """Pay another player's debt; they now owe the Bread Loaf a favour with interest."""
        actor = self._actor(player_id, BreadLoafCapabilities)
        debtor = self._player(debtor_id)
        if actor is None or debtor is None or not debtor.debts:
            return Decision.deny("No debt to cover")
        player, abilities = actor
        if debtor.id == player.id:
            return Decision.deny("No debt to cover")
        debt = debtor.debts[0] if debt_id is None else debtor.find_debt(debt_id)
        if debt is None:
            return Decision.deny("Debt not found")
        if debt.creditor_id == player.id:
            return Decision.deny("Cannot cover a debt owed to yourself")
        if player.rubles < debt.amount:
            return self._deny(
                LogCategory.ABILITY,
                f"{player.name} cannot afford to cover {debt.amount}",
                player.id,
            )
        creditor = self._player(debt.creditor_id)
        if creditor is not None and creditor.is_active:
            self._ledger.transfer(player, creditor, debt.amount)
        else:
            self._ledger.pay_state(player, debt.amount)
        debtor.debts.remove(debt)
        self._ledger.create_debt(
            debtor,
            player.id,
            debt.amount,
            f"favour owed to {player.name}",
            interest_rate=self._config.favour_interest_rate,
        )
        debtor.owes_favour_to.append(player.id)
        abilities.debts_covered += 1
        self._state.log(
            LogCategory.ABILITY,
            f"{player.name}'s Bread Loaf covered {debtor.name}'s debt of {debt.amount}",
            player.id,
            {"debtor_id": debtor.id, "amount": debt.amount},
        )
        return Decision.allow()

    def check_starving(self, player_id: str) -> bool:
        """Warn when a Bread Loaf drops below the starving threshold."""
        actor = self._actor(player_id, BreadLoafCapabilities)
        if actor is None:
            return False
        player, _ = actor
        if player.rubles >= self._config.starving_threshold:
            return False
        self._state.log(
            LogCategory.ABILITY,
            f"{player.name}'s Bread Loaf is starving with only {player.rubles} rubles!",
            player.id,
            {"rubles": player.rubles},
        )
        return True

    def redeem_favour(self, creditor_id: str, debtor_id: str, request: str) -> Decision:
        """Call in one favour owed by *debtor_id*."""
        creditor = self._player(creditor_id)
        debtor = self._player(debtor_id)
        if creditor is None or debtor is None:
            return Decision.deny("Player not found")
        if creditor.id not in debtor.owes_favour_to:
            return self._deny(
                LogCategory.ABILITY,
                f"{debtor.name} owes {creditor.name} no favour",
                creditor.id,
            )
        debtor.owes_favour_to.remove(creditor.id)
        self._state.log(
            LogCategory.ABILITY,
            f"{creditor.name} called in a favour from {debtor.name}: {request}",
            creditor.id,
            {"debtor_id": debtor.id},
        )
        return Decision.allow()

    # Iron Curtain -----------------------------------------------------------

    def claim_rubles(self, player_id: str, amount: int) -> None:
        """Record the balance an Iron Curtain publicly declares."""
        actor = self._actor(player_id, IronCurtainCapabilities)
        if actor is None or amount < 0:
            return
        player, abilities = actor
        abilities.claimed_rubles = amount
        self._state.log(
            LogCategory.ABILITY,
            f"{player.name} declares {amount} rubles behind the Iron Curtain",
            player.id,
        )

    def audit_iron_curtain(self, player_id: str) -> bool:
        """Stalin's audit: an Iron Curtain caught under-declaring is imprisoned."""
        actor = self._actor(player_id, IronCurtainCapabilities)
        if actor is None:
            return False
        player, abilities = actor
        if player.rubles <= abilities.claimed_rubles:
            self._state.log(
                LogCategory.ABILITY,
                f"Stalin audited {player.name} and found the books in order",
                player.id,
            )
            abilities.claimed_rubles = player.rubles
            return False
        hidden = player.rubles - abilities.claimed_rubles
        abilities.claimed_rubles = player.rubles
        self._state.log(
            LogCategory.ABILITY,
            f"Stalin's audit exposed {hidden} rubles hidden by {player.name}",
            player.id,
            {"hidden": hidden},
        )
        self._gulag.send_to_gulag(
            player.id, GulagReason.STALIN_DECREE, "Caught hiding rubles from the State"
        )
        return True

    # Lenin ------------------------------------------------------------------

    def lenin_standing_fine(self, player_id: str, offender_id: str) -> int:
        """Fine a comrade who failed to stand for the Statue of Lenin."""
        actor = self._actor(player_id, LeninCapabilities)
        offender = self._player(offender_id)
        if actor is None or offender is None or not offender.is_active:
            return 0
        player, abilities = actor
        if offender.id == player.id:
            return 0
        fine = self._config.lenin_standing_fine
        self._ledger.settle(offender, player.id, fine, "failed to stand for Lenin")
        abilities.standing_fines += 1
        self._state.log(
            LogCategory.ABILITY,
            f"{offender.name} failed to stand for {player.name}'s Statue of Lenin ({fine})",
            offender.id,
            {"amount": fine, "lenin_id": player.id},
        )
        return fine

    # Group powers -----------------------------------------------------------

    def _holds_group(self, player: Player, group: PropertyGroup) -> bool:
        return self._properties.owns_complete_group(player.id, group)

    def _request(
        self,
        power: SpecialPower,
        requester: Player,
        *,
        target_id: str | None = None,
        space_id: int | None = None,
        note: str | None = None,
    ) -> Decision:
        if self._state.pending_action is not None:
            return self._deny(
                LogCategory.ABILITY, "Another request already awaits Stalin", requester.id
            )
        request = AbilityApprovalPending(
            request_id=self._state.next_id("approval"),
            power=power,
            requester_id=requester.id,
            target_id=target_id,
            space_id=space_id,
            note=note,
        )
        self._state.pending_action = request
        self._state.log(
            LogCategory.ABILITY,
            f"{requester.name} requests Stalin's approval for {_POWER_LABELS[power]}",
            requester.id,
            {"request_id": request.request_id, "power": power.value},
        )
        return Decision.allow()

    def request_camp_labour(self, player_id: str, target_id: str) -> Decision:
        player = self._player(player_id)
        target = self._player(target_id)
        if player is None or target is None or not player.is_active:
            return Decision.deny("Player not found")
        if player.group_powers.camp_labour_used:
            return self._deny(LogCategory.ABILITY, "Siberian Camps already used", player.id)
        if not self._holds_group(player, PropertyGroup.SIBERIAN):
            return self._deny(
                LogCategory.ABILITY,
                f"{player.name} must control both Siberian Camps to use this ability!",
                player.id,
            )
        if not target.is_active or target.id == player.id:
            return self._deny(LogCategory.ABILITY, "Invalid forced labour target", player.id)
        return self._request(SpecialPower.CAMP_LABOUR, player, target_id=target.id)

    def request_ministry_rewrite(self, player_id: str, new_rule: str) -> Decision:
        player = self._player(player_id)
        if player is None or not player.is_active:
            return Decision.deny("Player not found")
        if player.group_powers.ministry_rewrite_used:
            return self._deny(LogCategory.ABILITY, "Ministry of Truth already used", player.id)
        if not self._holds_group(player, PropertyGroup.MINISTRY):
            return self._deny(
                LogCategory.ABILITY,
                f"{player.name} must control all three Government Ministries!",
                player.id,
            )
        return self._request(SpecialPower.MINISTRY_REWRITE, player, note=new_rule)

    def media_revote(self, player_id: str, decision: str) -> Decision:
        """Force a re-vote on a decision; needs no approval."""
        player = self._player(player_id)
        if player is None or not player.is_active:
            return Decision.deny("Player not found")
        if player.group_powers.media_revote_used:
            return self._deny(LogCategory.ABILITY, "Pravda Press already used", player.id)
        if not self._holds_group(player, PropertyGroup.MEDIA):
            return self._deny(
                LogCategory.ABILITY,
                f"{player.name} must control all three State Media properties!",
                player.id,
            )
        player.group_powers.media_revote_used = True
        self._state.log(
            LogCategory.ABILITY,
            f'{player.name} used Pravda Press to force a re-vote on: "{decision}"',
            player.id,
        )
        return Decision.allow()

    def kgb_preview(self, player_id: str) -> TestQuestion | None:
        """Show the KGB Headquarters custodian a Communist Test question, once per round."""
        player = self._player(player_id)
        record = self._state.property_state(KGB_HEADQUARTERS_POSITION)
        if player is None or record is None or not player.is_active:
            return None
        if record.custodian_id != player.id:
            self._deny(
                LogCategory.ABILITY,
                f"{player.name} must control KGB Headquarters to use this ability!",
                player.id,
            )
            return None
        if player.group_powers.kgb_previews_this_round >= 1:
            self._deny(
                LogCategory.ABILITY,
                f"{player.name} has already used KGB Preview this round!",
                player.id,
            )
            return None
        question = draw_question(self._rng)
        player.group_powers.kgb_previews_this_round += 1
        self._state.log(
            LogCategory.ABILITY,
            f"{player.name} used KGB Headquarters to preview a Communist Test question",
            player.id,
            {"question_id": question.id},
        )
        return question

    def request_railway_capture(self, player_id: str, target_id: str) -> Decision:
        """Accuse a comrade standing on one of the requester's stations of fleeing."""
        player = self._player(player_id)
        target = self._player(target_id)
        if player is None or target is None or not player.is_active:
            return Decision.deny("Player not found")
        if player.group_powers.railway_capture_used:
            return self._deny(LogCategory.ABILITY, "Railway capture already used", player.id)
        if not target.is_active or target.id == player.id or target.in_gulag:
            return self._deny(LogCategory.ABILITY, "Invalid railway capture target", player.id)
        record = self._state.property_state(target.position)
        if (
            target.position not in RAILWAY_POSITIONS
            or record is None
            or record.custodian_id != player.id
        ):
            return self._deny(
                LogCategory.ABILITY,
                f"{target.name} is not standing on a station held by {player.name}",
                player.id,
            )
        return self._request(
            SpecialPower.RAILWAY_CAPTURE, player, target_id=target.id, space_id=target.position
        )

    def request_iron_curtain_disappear(self, player_id: str, space_id: int) -> Decision:
        actor = self._actor(player_id, IronCurtainCapabilities)
        record = self._state.property_state(space_id)
        if actor is None or record is None:
            return Decision.deny("Iron Curtain or property not found")
        player, abilities = actor
        if abilities.disappear_used:
            return self._deny(LogCategory.ABILITY, "Disappearance already used", player.id)
        if record.custodian_id is None:
            return self._deny(
                LogCategory.ABILITY, "The State already holds that property", player.id
            )
        return self._request(SpecialPower.IRON_CURTAIN_DISAPPEAR, player, space_id=space_id)

    def request_lenin_speech(self, player_id: str) -> Decision:
        actor = self._actor(player_id, LeninCapabilities)
        if actor is None:
            return Decision.deny("Statue of Lenin not found")
        player, abilities = actor
        if abilities.speech_used:
            return self._deny(LogCategory.ABILITY, "The speech has already been given", player.id)
        return self._request(SpecialPower.LENIN_SPEECH, player)

    # Approval ---------------------------------------------------------------

    def resolve_approval(
        self,
        request_id: str,
        *,
        approved: bool,
        applauders: Iterable[str] = (),
    ) -> bool:
        """Stalin's ruling on the pending power request.

        *applauders* names the players Stalin judged to have applauded Lenin's
        speech sincerely.
        """
        pending = self._state.pending_action
        if not isinstance(pending, AbilityApprovalPending) or pending.request_id != request_id:
            return False
        self._state.pending_action = None
        requester = self._player(pending.requester_id)
        if requester is None or not requester.is_active:
            return False
        if not approved:
            self._state.log(
                LogCategory.ABILITY,
                f"Stalin denied {requester.name}'s request for {_POWER_LABELS[pending.power]}",
                requester.id,
                {"power": pending.power.value},
            )
            return False
        self._state.log(
            LogCategory.ABILITY,
            f"Stalin approved {requester.name}'s {_POWER_LABELS[pending.power]}",
            requester.id,
            {"power": pending.power.value},
        )
        return self._apply_power(pending, requester, list(applauders))

    def _apply_power(
        self, pending: AbilityApprovalPending, requester: Player, applauders: list[str]
    ) -> bool:
        power = pending.power
        if power is SpecialPower.CAMP_LABOUR:
            requester.group_powers.camp_labour_used = True
            return self._send_target(pending, GulagReason.CAMP_LABOUR)
        if power is SpecialPower.RAILWAY_CAPTURE:
            requester.group_powers.railway_capture_used = True
            return self._send_target(pending, GulagReason.RAILWAY_CAPTURE)
        if power is SpecialPower.MINISTRY_REWRITE:
            requester.group_powers.ministry_rewrite_used = True
            if pending.note:
                self._state.rule_amendments.append(pending.note)
            self._state.log(
                LogCategory.ABILITY,
                f'{requester.name} used the Ministry of Truth to rewrite a rule: "{pending.note}"',
                requester.id,
            )
            return True
        if power is SpecialPower.IRON_CURTAIN_DISAPPEAR:
            abilities = requester.abilities
            if not isinstance(abilities, IronCurtainCapabilities):
                return False
            abilities.disappear_used = True
            if pending.space_id is None:
                return False
            return self._properties.return_to_state(
                pending.space_id, f"disappeared behind {requester.name}'s Iron Curtain"
            )
        if power is SpecialPower.LENIN_SPEECH:
            return self._deliver_speech(requester, applauders)
        return False

    def _send_target(self, pending: AbilityApprovalPending, reason: GulagReason) -> bool:
        if pending.target_id is None:
            return False
        return self._gulag.send_to_gulag(pending.target_id, reason)

    def _deliver_speech(self, lenin: Player, applauders: list[str]) -> bool:
        abilities = lenin.abilities
        if not isinstance(abilities, LeninCapabilities):
            return False
        abilities.speech_used = True
        collected = 0
        for applauder_id in dict.fromkeys(applauders):
            applauder = self._player(applauder_id)
            if applauder is None or not applauder.is_active or applauder.id == lenin.id:
                continue
            amount = min(self._config.lenin_speech_payment, applauder.rubles)
            self._ledger.transfer(applauder, lenin, amount)
            collected += amount
        self._state.log(
            LogCategory.ABILITY,
            f"{lenin.name}'s inspiring speech collected {collected} rubles",
            lenin.id,
            {"amount": collected},
        )
        return True


__all__ = ["AbilityEngine"]
