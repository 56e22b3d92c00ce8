"""Purchase eligibility, custodianship, quota and collectivization rules."""

from __future__ import annotations

from math import floor
from typing import TYPE_CHECKING

from communistopoly.game_logic.board import (
    GROUP_MINIMUM_RANK,
    GROUP_NAMES,
    MAX_COLLECTIVIZATION,
    PIECE_BARRED_GROUPS,
    RAILWAY_FEES,
    UTILITY_MULTIPLIERS,
    BoardSpace,
    get_space,
    group_members,
    multiplier_for,
)
from communistopoly.game_logic.ledger import EngineBase
from communistopoly.shared.enums import (
    LogCategory,
    PartyRank,
    PieceType,
    PropertyGroup,
    SpaceType,
    rank_index,
)
from communistopoly.shared.value_objects import Decision

if TYPE_CHECKING:
    from communistopoly.game_logic.configuration import RulesConfiguration
    from communistopoly.game_logic.ledger import PlayerLedger
    from communistopoly.game_logic.state import GameState, Player, PropertyState


class PropertyEngine(EngineBase):
    """Implements every rule touching property custodianship and quotas."""

    def __init__(
        self,
        state: GameState,
        config: RulesConfiguration,
        ledger: PlayerLedger,
    ) -> None:
        super().__init__(state, config)
        self._ledger = ledger

    # Queries ----------------------------------------------------------------

    def _lookup(self, space_id: int) -> tuple[BoardSpace, PropertyState] | None:
        space = get_space(space_id)
        record = self._state.property_state(space_id)
        if space is None or record is None or not space.is_ownable:
            return None
        return space, record

    def holdings_in_group(self, custodian_id: str, group: PropertyGroup) -> list[int]:
        return [
            space_id
            for space_id in group_members(group)
            if self._state.properties[space_id].custodian_id == custodian_id
        ]

    def owns_complete_group(self, custodian_id: str | None, group: PropertyGroup) -> bool:
        """Whether *custodian_id* holds every property of *group*."""
        if custodian_id is None:
            return False
        members = group_members(group)
        return bool(members) and len(self.holdings_in_group(custodian_id, group)) == len(
            members
        )

    def discounted_price(self, player: Player, base_price: int) -> int:
        """Apply the player's rank discount to *base_price*."""
        discount = self._config.discount_for(rank_index(player.rank))
        return floor(base_price * (100 - discount) / 100)

    def eligibility(self, player: Player, space: BoardSpace) -> Decision:
        """Rank and piece restrictions, independent of current custodianship."""
        if player.is_stalin:
            return Decision.deny("Stalin does not hold property")
        if not player.is_active:
            return Decision.deny("Eliminated players cannot hold property")
        group = space.group
        if group is None:
            return Decision.deny(f"{space.name} cannot be held")
        minimum = GROUP_MINIMUM_RANK.get(group)
        if minimum is not None and rank_index(player.rank) < rank_index(minimum):
            qualifier = "" if minimum is PartyRank.INNER_CIRCLE else " or higher"
            return Decision.deny(
                f"{GROUP_NAMES[group]} require {minimum.value} rank{qualifier}"
            )
        if player.piece is not None and group in PIECE_BARRED_GROUPS.get(
            player.piece, frozenset()
        ):
            return Decision.deny(
                f"The {player.piece.value} cannot control {GROUP_NAMES[group]}"
            )
        return Decision.allow()

    def can_purchase(self, player_id: str, space_id: int) -> Decision:
        """Check whether the player may buy the State-held property."""
        player = self._player(player_id)
        found = self._lookup(space_id)
        if player is None or found is None:
            return Decision.deny("Player or property not found")
        space, record = found
        if record.custodian_id is not None:
            return Decision.deny("Property already has a Custodian")
        return self.eligibility(player, space)

    # Purchase and transfer --------------------------------------------------

    def purchase_property(
        self, player_id: str, space_id: int, price: int | None = None
    ) -> Decision:
        """Buy a State-held property at *price* (base cost by default) less rank discount."""
        player = self._player(player_id)
        found = self._lookup(space_id)
        if player is None or found is None:
            return Decision.deny("Player or property not found")
        space, record = found
        eligible = self.can_purchase(player_id, space_id)
        if not eligible:
            return self._deny(LogCategory.PROPERTY, eligible.reason or "", player.id)
        quoted = space.base_cost if price is None else price
        final_price = self.discounted_price(player, quoted)
        if player.rubles < final_price:
            return self._deny(
                LogCategory.PROPERTY,
                f"{player.name} cannot afford {space.name} at {final_price}",
                player.id,
            )
        self._ledger.pay_state(player, final_price)
        record.custodian_id = player.id
        player.properties.append(space_id)
        self._state.statistics.for_player(player.id).properties_acquired += 1
        self._state.log(
            LogCategory.PROPERTY,
            f"{player.name} became Custodian of {space.name} for {final_price}",
            player.id,
            {"space_id": space_id, "price": final_price},
        )
        return Decision.allow()

    def transfer_property(
        self,
        space_id: int,
        to_player_id: str,
        *,
        from_player_id: str | None = None,
        reason: str = "transfer",
    ) -> Decision:
        """Move custodianship to *to_player_id* after revalidating eligibility."""
        recipient = self._player(to_player_id)
        found = self._lookup(space_id)
        if recipient is None or found is None:
            return Decision.deny("Player or property not found")
        space, record = found
        if from_player_id is not None and record.custodian_id != from_player_id:
            return Decision.deny(f"{space.name} is not held by the giving player")
        if record.custodian_id == recipient.id:
            return Decision.deny(f"{recipient.name} already holds {space.name}")
        eligible = self.eligibility(recipient, space)
        if not eligible:
            return self._deny(LogCategory.PROPERTY, eligible.reason or "", recipient.id)
        previous_custodian = record.custodian_id
        previous = self._player(previous_custodian)
        if previous is not None and space_id in previous.properties:
            previous.properties.remove(space_id)
        record.custodian_id = recipient.id
        recipient.properties.append(space_id)
        self._state.statistics.for_player(recipient.id).properties_acquired += 1
        origin = previous.name if previous is not None else "the State"
        self._state.log(
            LogCategory.PROPERTY,
            f"{space.name} passes from {origin} to {recipient.name} ({reason})",
            recipient.id,
            {"space_id": space_id, "from": previous_custodian, "reason": reason},
        )
        return Decision.allow()

    def return_to_state(self, space_id: int, reason: str) -> bool:
        """Strip custodianship and improvements, returning the property to the State."""
        found = self._lookup(space_id)
        if found is None:
            return False
        space, record = found
        holder = self._player(record.custodian_id)
        if holder is None:
            return False
        if space_id in holder.properties:
            holder.properties.remove(space_id)
        record.custodian_id = None
        record.collectivization_level = 0
        record.mortgaged = False
        self._state.log(
            LogCategory.PROPERTY,
            f"{space.name} returns to State ownership ({reason})",
            holder.id,
            {"space_id": space_id},
        )
        return True

    # Quota ------------------------------------------------------------------

    def calculate_quota(
        self,
        space_id: int,
        landing_player_id: str,
        dice_total: int | None = None,
    ) -> int:
        """Fee owed by the landing player; zero when nothing is owed."""
        found = self._lookup(space_id)
        lander = self._player(landing_player_id)
        if found is None or lander is None:
            return 0
        space, record = found
        custodian_id = record.custodian_id
        if record.mortgaged or custodian_id is None or custodian_id == lander.id:
            return 0

        if space.space_type is SpaceType.RAILWAY:
            held = len(self.holdings_in_group(custodian_id, PropertyGroup.RAILROAD))
            return RAILWAY_FEES[held - 1] if held else 0

        if space.space_type is SpaceType.UTILITY:
            if not dice_total:
                return 0
            held = len(self.holdings_in_group(custodian_id, PropertyGroup.UTILITY))
            multiplier = UTILITY_MULTIPLIERS[1] if held >= 2 else UTILITY_MULTIPLIERS[0]  # noqa: PLR2004
            return dice_total * multiplier

        quota: float = space.base_quota * multiplier_for(record.collectivization_level)
        if space.group is not None and self.owns_complete_group(custodian_id, space.group):
            quota *= 2
        if space.group is PropertyGroup.ELITE and lander.rank is PartyRank.PROLETARIAT:
            quota *= 2
        if space.group is PropertyGroup.COLLECTIVE and lander.piece is PieceType.SICKLE:
            quota *= 0.5
        return floor(quota)

    def pay_quota(
        self,
        payer_id: str,
        space_id: int,
        dice_total: int | None = None,
    ) -> int:
        """Charge the quota due on *space_id*; shortfalls become a debt to the custodian."""
        payer = self._player(payer_id)
        found = self._lookup(space_id)
        if payer is None or found is None:
            return 0
        space, record = found
        amount = self.calculate_quota(space_id, payer_id, dice_total)
        custodian = self._player(record.custodian_id)
        if amount <= 0 or custodian is None:
            return 0
        if self._ledger.settle(payer, custodian.id, amount, f"quota on {space.name}"):
            self._state.log(
                LogCategory.PAYMENT,
                f"{payer.name} paid {amount} quota to {custodian.name}",
                payer.id,
                {"space_id": space_id, "amount": amount, "custodian_id": custodian.id},
            )
        return amount

    # Collectivization -------------------------------------------------------

    def _improvement_target(
        self, player_id: str, space_id: int
    ) -> tuple[Player, BoardSpace, PropertyState] | Decision:
        player = self._player(player_id)
        found = self._lookup(space_id)
        if player is None or found is None:
            return Decision.deny("Player or property not found")
        space, record = found
        if space.space_type is not SpaceType.PROPERTY or space.group is None:
            return Decision.deny(f"{space.name} cannot be collectivized")
        if record.custodian_id != player.id:
            return Decision.deny(f"{player.name} is not the Custodian of {space.name}")
        return player, space, record

    def _group_levels(self, custodian_id: str, group: PropertyGroup) -> list[int]:
        return [
            self._state.properties[space_id].collectivization_level
            for space_id in self.holdings_in_group(custodian_id, group)
        ]

    def add_collectivization(self, player_id: str, space_id: int) -> Decision:
        """Raise the collectivization level by one, building evenly."""
        target = self._improvement_target(player_id, space_id)
        if isinstance(target, Decision):
            return target
        player, space, record = target
        group = space.group
        if group is None:
            return self._deny(
                LogCategory.PROPERTY, f"{space.name} cannot be collectivized", player.id
            )
        if record.mortgaged:
            return self._deny(
                LogCategory.PROPERTY, f"{space.name} is mortgaged", player.id
            )
        level = record.collectivization_level
        if level >= MAX_COLLECTIVIZATION:
            return self._deny(
                LogCategory.PROPERTY, f"{space.name} is fully collectivized", player.id
            )
        if level > min(self._group_levels(player.id, group)):
            return self._deny(
                LogCategory.PROPERTY,
                "Must collectivize evenly across the group",
                player.id,
            )
        next_level = level + 1
        if next_level == MAX_COLLECTIVIZATION and not self.owns_complete_group(
            player.id, group
        ):
            return self._deny(
                LogCategory.PROPERTY,
                f"A People's Palace requires the complete {GROUP_NAMES[group]} group",
                player.id,
            )
        cost = self._config.collectivization_cost_for(next_level)
        if not self._ledger.pay_state(player, cost):
            return self._deny(
                LogCategory.PROPERTY,
                f"{player.name} cannot afford {cost} for collectivization",
                player.id,
            )
        record.collectivization_level = next_level
        self._state.log(
            LogCategory.PROPERTY,
            f"{player.name} raised {space.name} to level {next_level} for {cost}",
            player.id,
            {"space_id": space_id, "level": next_level, "cost": cost},
        )
        return Decision.allow()

    def sell_collectivization(self, player_id: str, space_id: int) -> Decision:
        """Remove one level, refunding half of what it cost."""
        target = self._improvement_target(player_id, space_id)
        if isinstance(target, Decision):
            return target
        player, space, record = target
        group = space.group
        if group is None:
            return self._deny(
                LogCategory.PROPERTY, f"{space.name} cannot be collectivized", player.id
            )
        level = record.collectivization_level
        if level == 0:
            return self._deny(
                LogCategory.PROPERTY, f"{space.name} has no collectivization", player.id
            )
        if level < max(self._group_levels(player.id, group)):
            return self._deny(
                LogCategory.PROPERTY,
                "Must sell collectivization evenly across the group",
                player.id,
            )
        refund = self._config.collectivization_cost_for(level) // 2
        record.collectivization_level = level - 1
        self._ledger.receive_from_state(player, refund)
        self._state.log(
            LogCategory.PROPERTY,
            f"{player.name} reduced {space.name} to level {level - 1}, refunded {refund}",
            player.id,
            {"space_id": space_id, "level": level - 1, "refund": refund},
        )
        return Decision.allow()

    # Mortgages --------------------------------------------------------------

    def mortgage_value(self, space_id: int) -> int:
        space = get_space(space_id)
        return floor(space.base_cost * self._config.mortgage_rate) if space else 0

    def unmortgage_cost(self, space_id: int) -> int:
        space = get_space(space_id)
        return floor(space.base_cost * self._config.unmortgage_rate) if space else 0

    def mortgage_property(self, player_id: str, space_id: int) -> Decision:
        player = self._player(player_id)
        found = self._lookup(space_id)
        if player is None or found is None:
            return Decision.deny("Player or property not found")
        space, record = found
        if record.custodian_id != player.id:
            return self._deny(
                LogCategory.PROPERTY,
                f"{player.name} is not the Custodian of {space.name}",
                player.id,
            )
        if record.mortgaged:
            return Decision.deny(f"{space.name} is already mortgaged")
        if record.collectivization_level > 0:
            return self._deny(
                LogCategory.PROPERTY,
                f"Sell all collectivization on {space.name} before mortgaging",
                player.id,
            )
        value = self.mortgage_value(space_id)
        record.mortgaged = True
        self._ledger.receive_from_state(player, value)
        self._state.log(
            LogCategory.PROPERTY,
            f"{player.name} mortgaged {space.name} for {value}",
            player.id,
            {"space_id": space_id, "amount": value},
        )
        return Decision.allow()

    def unmortgage_property(self, player_id: str, space_id: int) -> Decision:
        player = self._player(player_id)
        found = self._lookup(space_id)
        if player is None or found is None:
            return Decision.deny("Player or property not found")
        space, record = found
        if record.custodian_id != player.id:
            return self._deny(
                LogCategory.PROPERTY,
                f"{player.name} is not the Custodian of {space.name}",
                player.id,
            )
        if not record.mortgaged:
            return Decision.deny(f"{space.name} is not mortgaged")
        cost = self.unmortgage_cost(space_id)
        if not self._ledger.pay_state(player, cost):
            return self._deny(
                LogCategory.PROPERTY,
                f"{player.name} cannot afford {cost} to lift the mortgage",
                player.id,
            )
        record.mortgaged = False
        self._state.log(
            LogCategory.PROPERTY,
            f"{player.name} lifted the mortgage on {space.name} for {cost}",
            player.id,
            {"space_id": space_id, "amount": cost},
        )
        return Decision.allow()


__all__ = ["PropertyEngine"]
