"""Static board layout, colour groups and collectivization table."""

from __future__ import annotations

from functools import cache

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict

from communistopoly.game_logic.errors import BoardConfigurationError
from communistopoly.shared.enums import (
    CardType,
    PartyRank,
    PieceType,
    PropertyGroup,
    SpaceType,
    TaxType,
)

BOARD_SIZE = 40
STOY_POSITION = 0
GULAG_POSITION = 10
BREADLINE_POSITION = 20
ENEMY_OF_STATE_POSITION = 30
KGB_HEADQUARTERS_POSITION = 23
RAILWAY_POSITIONS: tuple[int, ...] = (5, 15, 25, 35)
RAILWAY_FEES: tuple[int, ...] = (50, 100, 150, 200)
UTILITY_MULTIPLIERS: tuple[int, int] = (4, 10)


class BoardSpace(BaseModel):
    """Immutable description of one of the forty board spaces."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=0, lt=BOARD_SIZE)
    name: str = Field(..., min_length=1)
    space_type: SpaceType
    group: PropertyGroup | None = None
    base_cost: int = Field(default=0, ge=0)
    base_quota: int = Field(default=0, ge=0)
    card_type: CardType | None = None
    tax_type: TaxType | None = None
    special_rule: str | None = None

    @model_validator(mode="after")
    def _validate_kind(self) -> BoardSpace:
        """Ensure ownable spaces carry a group and cards carry a card type."""
        ownable = {SpaceType.PROPERTY, SpaceType.RAILWAY, SpaceType.UTILITY}
        if self.space_type in ownable and self.group is None:
            msg = f"Ownable space {self.id} must declare a group."
            raise ValueError(msg)
        if self.space_type is SpaceType.CARD and self.card_type is None:
            msg = f"Card space {self.id} must declare a card type."
            raise ValueError(msg)
        if self.space_type is SpaceType.TAX and self.tax_type is None:
            msg = f"Tax space {self.id} must declare a tax type."
            raise ValueError(msg)
        return self

    @property
    def is_ownable(self) -> bool:
        return self.space_type in {
            SpaceType.PROPERTY,
            SpaceType.RAILWAY,
            SpaceType.UTILITY,
        }


class CollectivizationLevel(BaseModel):
    """One rung of the property improvement ladder."""

    model_config = ConfigDict(frozen=True)

    level: int = Field(..., ge=0, le=5)
    name: str
    multiplier: int = Field(..., ge=1)


COLLECTIVIZATION_LEVELS: tuple[CollectivizationLevel, ...] = (
    CollectivizationLevel(level=0, name="Uncollectivized", multiplier=1),
    CollectivizationLevel(level=1, name="Worker's Committee", multiplier=4),
    CollectivizationLevel(level=2, name="Party Oversight", multiplier=9),
    CollectivizationLevel(level=3, name="Full Collectivization", multiplier=15),
    CollectivizationLevel(level=4, name="Model Soviet", multiplier=20),
    CollectivizationLevel(level=5, name="People's Palace", multiplier=30),
)
MAX_COLLECTIVIZATION = 5

GROUP_NAMES: dict[PropertyGroup, str] = {
    PropertyGroup.SIBERIAN: "Siberian Work Camps",
    PropertyGroup.COLLECTIVE: "Collective Farms",
    PropertyGroup.INDUSTRIAL: "Industrial Centers",
    PropertyGroup.MINISTRY: "Government Ministries",
    PropertyGroup.MILITARY: "Military Installations",
    PropertyGroup.MEDIA: "State Media",
    PropertyGroup.ELITE: "Party Elite District",
    PropertyGroup.KREMLIN: "Kremlin Complex",
    PropertyGroup.RAILROAD: "Trans-Siberian Railway Stations",
    PropertyGroup.UTILITY: "Means of Production",
}

GROUP_MINIMUM_RANK: dict[PropertyGroup, PartyRank] = {
    PropertyGroup.UTILITY: PartyRank.COMMISSAR,
    PropertyGroup.ELITE: PartyRank.PARTY_MEMBER,
    PropertyGroup.KREMLIN: PartyRank.INNER_CIRCLE,
}

PIECE_BARRED_GROUPS: dict[PieceType, frozenset[PropertyGroup]] = {
    PieceType.TANK: frozenset({PropertyGroup.COLLECTIVE}),
}


def _property(
    space_id: int, name: str, group: PropertyGroup, cost: int, quota: int
) -> BoardSpace:
    return BoardSpace(
        id=space_id,
        name=name,
        space_type=SpaceType.PROPERTY,
        group=group,
        base_cost=cost,
        base_quota=quota,
    )


def _railway(space_id: int, name: str) -> BoardSpace:
    return BoardSpace(
        id=space_id,
        name=name,
        space_type=SpaceType.RAILWAY,
        group=PropertyGroup.RAILROAD,
        base_cost=200,
        special_rule="Custodian may once capture a comrade fleeing via railway.",
    )


def _utility(space_id: int, name: str) -> BoardSpace:
    return BoardSpace(
        id=space_id,
        name=name,
        space_type=SpaceType.UTILITY,
        group=PropertyGroup.UTILITY,
        base_cost=150,
        special_rule="Commissar rank or higher required.",
    )


def _card(space_id: int, card_type: CardType) -> BoardSpace:
    name = "Party Directive" if card_type is CardType.PARTY_DIRECTIVE else "Communist Test"
    return BoardSpace(
        id=space_id, name=name, space_type=SpaceType.CARD, card_type=card_type
    )


def _corner(space_id: int, name: str, rule: str) -> BoardSpace:
    return BoardSpace(
        id=space_id, name=name, space_type=SpaceType.CORNER, special_rule=rule
    )


_TEST = CardType.COMMUNIST_TEST
_DIRECTIVE = CardType.PARTY_DIRECTIVE

BOARD_SPACES: tuple[BoardSpace, ...] = (
    _corner(0, "STOY", "Pay travel tax when passing; pilfer when landing."),
    _property(1, "Camp Vorkuta", PropertyGroup.SIBERIAN, 60, 2),
    _card(2, _TEST),
    _property(3, "Camp Kolyma", PropertyGroup.SIBERIAN, 60, 4),
    BoardSpace(
        id=4,
        name="Revolutionary Contribution",
        space_type=SpaceType.TAX,
        tax_type=TaxType.REVOLUTIONARY_CONTRIBUTION,
        special_rule="Pay 15% of total wealth or a flat 200.",
    ),
    _railway(5, "Moscow Station"),
    _property(6, "Kolkhoz Sunrise", PropertyGroup.COLLECTIVE, 100, 6),
    _card(7, _DIRECTIVE),
    _property(8, "Kolkhoz Progress", PropertyGroup.COLLECTIVE, 100, 6),
    _property(9, "Kolkhoz Victory", PropertyGroup.COLLECTIVE, 120, 8),
    _corner(10, "The Gulag", "Just visiting, unless imprisoned."),
    _property(11, "Tractor Factory #47", PropertyGroup.INDUSTRIAL, 140, 10),
    _utility(12, "State Electricity Board"),
    _property(13, "Steel Mill Molotov", PropertyGroup.INDUSTRIAL, 140, 10),
    _property(14, "Munitions Plant Kalashnikov", PropertyGroup.INDUSTRIAL, 160, 12),
    _railway(15, "Novosibirsk Station"),
    _property(16, "Ministry of Truth", PropertyGroup.MINISTRY, 180, 14),
    _card(17, _TEST),
    _property(18, "Ministry of Plenty", PropertyGroup.MINISTRY, 180, 14),
    _property(19, "Ministry of Love", PropertyGroup.MINISTRY, 200, 16),
    _corner(20, "Breadline", "Every comrade must contribute to the lander."),
    _property(21, "Red Army Barracks", PropertyGroup.MILITARY, 220, 18),
    _card(22, _DIRECTIVE),
    _property(23, "KGB Headquarters", PropertyGroup.MILITARY, 220, 18),
    _property(24, "Nuclear Bunker Arzamas-16", PropertyGroup.MILITARY, 240, 20),
    _railway(25, "Irkutsk Station"),
    _property(26, "Pravda Printing Press", PropertyGroup.MEDIA, 260, 22),
    _property(27, "Radio Moscow", PropertyGroup.MEDIA, 260, 22),
    _utility(28, "People's Water Collective"),
    _property(29, "State Television Center", PropertyGroup.MEDIA, 280, 22),
    _corner(30, "Enemy of the State", "Go directly to the Gulag."),
    _property(31, "Politburo Apartments", PropertyGroup.ELITE, 300, 26),
    _property(32, "Dachas of the Nomenklatura", PropertyGroup.ELITE, 300, 26),
    _card(33, _TEST),
    _property(34, "The Lubyanka", PropertyGroup.ELITE, 320, 28),
    _railway(35, "Vladivostok Station"),
    _card(36, _DIRECTIVE),
    _property(37, "Lenin's Mausoleum", PropertyGroup.KREMLIN, 350, 35),
    BoardSpace(
        id=38,
        name="Bourgeois Decadence Tax",
        space_type=SpaceType.TAX,
        tax_type=TaxType.BOURGEOIS_DECADENCE,
        special_rule="Pay 100; the wealthiest comrade pays 200 and is demoted.",
    ),
    _property(39, "Stalin's Private Office", PropertyGroup.KREMLIN, 400, 50),
)


def validate_board(spaces: tuple[BoardSpace, ...]) -> None:
    """Raise :class:`BoardConfigurationError` if *spaces* is malformed."""
    if len(spaces) != BOARD_SIZE:
        msg = f"Board must contain {BOARD_SIZE} spaces, found {len(spaces)}."
        raise BoardConfigurationError(msg)
    for index, space in enumerate(spaces):
        if space.id != index:
            msg = f"Space at index {index} declares id {space.id}."
            raise BoardConfigurationError(msg)
    railways = tuple(s.id for s in spaces if s.space_type is SpaceType.RAILWAY)
    if railways != RAILWAY_POSITIONS:
        msg = f"Railway stations must sit at {RAILWAY_POSITIONS}, found {railways}."
        raise BoardConfigurationError(msg)


validate_board(BOARD_SPACES)


def get_space(space_id: int) -> BoardSpace | None:
    """Return the board space with *space_id*, or ``None`` when out of range."""
    if 0 <= space_id < BOARD_SIZE:
        return BOARD_SPACES[space_id]
    return None


@cache
def group_members(group: PropertyGroup) -> tuple[int, ...]:
    """Return the space ids belonging to *group*, in board order."""
    return tuple(space.id for space in BOARD_SPACES if space.group is group)


def ownable_spaces() -> tuple[BoardSpace, ...]:
    return tuple(space for space in BOARD_SPACES if space.is_ownable)


def multiplier_for(level: int) -> int:
    """Return the quota multiplier of a collectivization *level*."""
    return COLLECTIVIZATION_LEVELS[level].multiplier


def nearest_railway(position: int) -> int:
    """Return the railway station closest to *position* (ties go to the lower id)."""
    return min(RAILWAY_POSITIONS, key=lambda station: (abs(station - position), station))


def next_railway(position: int) -> int:
    """Return the first railway station reached moving forward from *position*."""
    for step in range(1, BOARD_SIZE + 1):
        candidate = (position + step) % BOARD_SIZE
        if candidate in RAILWAY_POSITIONS:
            return candidate
    return RAILWAY_POSITIONS[0]  # pragma: no cover - board always has stations


__all__ = [
    "BOARD_SIZE",
    "BOARD_SPACES",
    "BREADLINE_POSITION",
    "COLLECTIVIZATION_LEVELS",
    "ENEMY_OF_STATE_POSITION",
    "GROUP_MINIMUM_RANK",
    "GROUP_NAMES",
    "GULAG_POSITION",
    "KGB_HEADQUARTERS_POSITION",
    "MAX_COLLECTIVIZATION",
    "PIECE_BARRED_GROUPS",
    "RAILWAY_FEES",
    "RAILWAY_POSITIONS",
    "STOY_POSITION",
    "UTILITY_MULTIPLIERS",
    "BoardSpace",
    "CollectivizationLevel",
    "get_space",
    "group_members",
    "multiplier_for",
    "nearest_railway",
    "next_railway",
    "ownable_spaces",
    "validate_board",
]
