"""Tests for game setup and the session facade."""

import logging

import pytest

from communistopoly.game_logic.configuration import RulesOverrides, build_rules_configuration
from communistopoly.game_logic.errors import GameSetupError
from communistopoly.game_logic.session import GameSession, PlayerSetup
from communistopoly.game_logic.state import RedStarCapabilities
from communistopoly.settings import get_settings
from communistopoly.shared.enums import LogCategory, PartyRank, PieceType


def _setups(*pieces: PieceType | None, stalins: int = 1) -> list[PlayerSetup]:
    seats = [PlayerSetup(name=f"Stalin {index}", is_stalin=True) for index in range(stalins)]
    seats.extend(
        PlayerSetup(name=f"Comrade {index}", piece=piece) for index, piece in enumerate(pieces)
    )
    return seats


def test_setup_creates_players_and_treasury() -> None:
    session = GameSession(_setups(PieceType.HAMMER, PieceType.RED_STAR, PieceType.TANK))

    stalin = session.stalin
    assert stalin.id == "player-1"
    assert stalin.is_stalin
    assert stalin.rubles == 0
    assert stalin.piece is None

    competitors = [player for player in session.players if not player.is_stalin]
    assert [player.id for player in competitors] == ["player-2", "player-3", "player-4"]
    assert all(player.rubles == 1_500 for player in competitors)
    assert session.state.state_treasury == 3 * 1_500
    assert len(session.properties) == 28
    assert all(record.custodian_id is None for record in session.properties)


def test_red_star_starts_as_party_member() -> None:
    session = GameSession(_setups(PieceType.RED_STAR, PieceType.SICKLE))

    red_star = session.player("player-2")
    assert red_star.rank is PartyRank.PARTY_MEMBER
    assert isinstance(red_star.abilities, RedStarCapabilities)
    assert session.player("player-3").rank is PartyRank.PROLETARIAT


def test_explicit_starting_rank_is_respected() -> None:
    seats = _setups(PieceType.SICKLE)
    seats.append(PlayerSetup(name="Lavrentiy", piece=PieceType.HAMMER, rank=PartyRank.COMMISSAR))

    session = GameSession(seats)

    assert session.player_by_name("Lavrentiy").rank is PartyRank.COMMISSAR


def test_iron_curtain_starts_with_an_honest_claim() -> None:
    session = GameSession(_setups(PieceType.IRON_CURTAIN, PieceType.SICKLE))

    assert session.player("player-2").abilities.claimed_rubles == 1_500


@pytest.mark.parametrize(
    "seats",
    [
        _setups(PieceType.HAMMER, PieceType.SICKLE, stalins=0),
        _setups(PieceType.HAMMER, PieceType.SICKLE, stalins=2),
        _setups(PieceType.HAMMER),
        _setups(PieceType.HAMMER, PieceType.HAMMER),
        _setups(PieceType.HAMMER, None),
        [
            PlayerSetup(name="Joseph", is_stalin=True, piece=PieceType.TANK),
            PlayerSetup(name="Sasha", piece=PieceType.HAMMER),
            PlayerSetup(name="Olga", piece=PieceType.SICKLE),
        ],
    ],
    ids=["no-stalin", "two-stalins", "one-competitor", "duplicate-piece", "no-piece", "armed-stalin"],
)
def test_invalid_setup_is_rejected(seats: list[PlayerSetup]) -> None:
    with pytest.raises(GameSetupError):
        GameSession(seats)


def test_overrides_change_starting_rubles() -> None:
    rules = build_rules_configuration(RulesOverrides(starting_rubles=2_000))

    session = GameSession(_setups(PieceType.HAMMER, PieceType.SICKLE), rules=rules)

    assert session.player("player-2").rubles == 2_000
    assert session.state.state_treasury == 4_000
    assert session.rules.starting_rubles == 2_000


def test_start_game_is_idempotent(make_session) -> None:
    session = make_session()
    order = list(session.state.turn_order)

    session.start_game()

    assert session.state.turn_order == order
    assert session.state.round_number == 1


def test_journal_records_game_start(make_session) -> None:
    session = make_session()

    system = session.state.journal.by_category(LogCategory.SYSTEM)
    assert system[0].message.startswith("The game begins")
    assert system[0].payload["turn_order"] == session.state.turn_order
    assert session.log[0] is system[0]


def test_rejections_are_journaled(make_session) -> None:
    session = make_session()

    session.purchase_property("player-2", 37)

    last = session.state.journal.last()
    assert last is not None
    assert last.message.startswith("Rejected:")
    assert last.payload == {"rejected": True}


def test_journal_limit_comes_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COMMUNISTOPOLY_MAX_LOG_ENTRIES", "3")
    get_settings.cache_clear()
    session = GameSession(_setups(PieceType.HAMMER, PieceType.SICKLE))
    session.start_game()

    for _ in range(5):
        session.purchase_property("player-2", 37)

    assert len(session.log) == 3


def test_log_level_setting_is_applied() -> None:
    GameSession(_setups(PieceType.HAMMER, PieceType.SICKLE))

    assert logging.getLogger("communistopoly").level == logging.DEBUG


def test_seeded_settings_make_games_reproducible() -> None:
    pieces = (PieceType.HAMMER, PieceType.SICKLE, PieceType.TANK, PieceType.RED_STAR)
    first = GameSession(_setups(*pieces))
    second = GameSession(_setups(*pieces))

    first.start_game()
    second.start_game()

    assert first.state.turn_order == second.state.turn_order


def test_total_wealth_counts_property_and_debt(make_session, give_property) -> None:
    session = make_session()
    give_property(session, "player-2", 1, level=1)
    session.state.properties[3].custodian_id = "player-2"
    session.state.properties[3].mortgaged = True
    session.player("player-2").properties.append(3)
    session._ledger.create_debt(session.player("player-2"), "player-3", 40, "quota")

    assert session.total_wealth("player-2") == 1_500 + 60 + 100 + 30 - 40
    assert session.total_wealth("nobody") is None
