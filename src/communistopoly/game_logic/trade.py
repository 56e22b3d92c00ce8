"""Bilateral trade offers between comrades."""

from __future__ import annotations

from typing import TYPE_CHECKING

from communistopoly.game_logic.board import get_space
from communistopoly.game_logic.ledger import EngineBase
from communistopoly.game_logic.state import TradeItems, TradeOffer
from communistopoly.shared.enums import LogCategory
from communistopoly.shared.value_objects import Decision

if TYPE_CHECKING:
    from communistopoly.game_logic.configuration import RulesConfiguration
    from communistopoly.game_logic.ledger import PlayerLedger
    from communistopoly.game_logic.properties import PropertyEngine
    from communistopoly.game_logic.state import GameState, Player


def describe_items(items: TradeItems) -> str:
    parts: list[str] = []
    if items.rubles:
        parts.append(f"{items.rubles} rubles")
    for space_id in items.properties:
        space = get_space(space_id)
        parts.append(space.name if space else f"space {space_id}")
    if items.release_tokens:
        parts.append(f"{items.release_tokens} release token(s)")
    if items.favours:
        parts.append(f"{items.favours} favour(s)")
    return ", ".join(parts) or "nothing"


class TradeEngine(EngineBase):
    """Records offers and executes accepted ones all-or-nothing."""

    def __init__(
        self,
        state: GameState,
        config: RulesConfiguration,
        ledger: PlayerLedger,
        properties: PropertyEngine,
    ) -> None:
        super().__init__(state, config)
        self._ledger = ledger
        self._properties = properties

    def find_offer(self, offer_id: str) -> TradeOffer | None:
        for offer in self._state.trade_offers:
            if offer.id == offer_id:
                return offer
        return None

    def offers_for(self, player_id: str) -> list[TradeOffer]:
        return [
            offer
            for offer in self._state.trade_offers
            if player_id in (offer.from_player_id, offer.to_player_id)
        ]

    def propose_trade(
        self,
        from_player_id: str,
        to_player_id: str,
        offering: TradeItems,
        requesting: TradeItems,
    ) -> TradeOffer | None:
        """Record an offer; affordability is only checked on acceptance."""
        giver = self._player(from_player_id)
        receiver = self._player(to_player_id)
        if giver is None or receiver is None:
            return None
        if giver.id == receiver.id or not giver.is_active or not receiver.is_active:
            self._deny(LogCategory.TRADE, "Trades need two distinct active comrades", giver.id)
            return None
        if offering.is_empty and requesting.is_empty:
            self._deny(LogCategory.TRADE, "An empty trade was proposed", giver.id)
            return None
        offer = TradeOffer(
            id=self._state.next_id("trade"),
            from_player_id=giver.id,
            to_player_id=receiver.id,
            offering=offering,
            requesting=requesting,
            proposed_at_round=self._state.round_number,
        )
        self._state.trade_offers.append(offer)
        self._state.log(
            LogCategory.TRADE,
            f"{giver.name} offers {receiver.name} {describe_items(offering)} "
            f"for {describe_items(requesting)}",
            giver.id,
            {"offer_id": offer.id},
        )
        return offer

    def _validate_side(self, giver: Player, receiver: Player, items: TradeItems) -> Decision:
        if giver.rubles < items.rubles:
            return Decision.deny(f"{giver.name} cannot afford {items.rubles} rubles")
        if giver.release_tokens < items.release_tokens:
            return Decision.deny(f"{giver.name} lacks the promised release tokens")
        if len(set(items.properties)) != len(items.properties):
            return Decision.deny("A property is listed twice")
        for space_id in items.properties:
            space = get_space(space_id)
            record = self._state.property_state(space_id)
            if space is None or record is None or record.custodian_id != giver.id:
                return Decision.deny(f"{giver.name} does not hold space {space_id}")
            eligible = self._properties.eligibility(receiver, space)
            if not eligible:
                return eligible
        return Decision.allow()

    def _give(self, giver: Player, receiver: Player, items: TradeItems) -> None:
        self._ledger.transfer(giver, receiver, items.rubles)
        for space_id in items.properties:
            self._properties.transfer_property(
                space_id, receiver.id, from_player_id=giver.id, reason="trade"
            )
        giver.release_tokens -= items.release_tokens
        receiver.release_tokens += items.release_tokens
        giver.owes_favour_to.extend([receiver.id] * items.favours)

    def accept_trade(self, offer_id: str) -> Decision:
        """Execute both sides of an offer, or neither."""
        offer = self.find_offer(offer_id)
        if offer is None:
            return Decision.deny("Trade offer not found")
        giver = self._player(offer.from_player_id)
        receiver = self._player(offer.to_player_id)
        if giver is None or receiver is None:
            return Decision.deny("Trade participant not found")
        if not giver.is_active or not receiver.is_active:
            return self._deny(LogCategory.TRADE, "A trade participant is no longer active")
        for source, target, items in (
            (giver, receiver, offer.offering),
            (receiver, giver, offer.requesting),
        ):
            valid = self._validate_side(source, target, items)
            if not valid:
                return self._deny(LogCategory.TRADE, valid.reason or "", receiver.id)

        self._give(giver, receiver, offer.offering)
        self._give(receiver, giver, offer.requesting)
        self._state.trade_offers.remove(offer)
        self._state.log(
            LogCategory.TRADE,
            f"{receiver.name} accepted {giver.name}'s trade",
            receiver.id,
            {"offer_id": offer.id},
        )
        return Decision.allow()

    def reject_trade(self, offer_id: str) -> bool:
        offer = self.find_offer(offer_id)
        if offer is None:
            return False
        self._state.trade_offers.remove(offer)
        receiver = self._player(offer.to_player_id)
        self._state.log(
            LogCategory.TRADE,
            f"{receiver.name if receiver else 'A comrade'} rejected the trade",
            offer.to_player_id,
            {"offer_id": offer.id},
        )
        return True


__all__ = ["TradeEngine", "describe_items"]
