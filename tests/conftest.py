"""Test configuration and fixtures for the rules engine test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest

from communistopoly.game_logic.configuration import (
    RulesConfiguration,
    get_default_rules_configuration,
)
from communistopoly.game_logic.session import GameSession, PlayerSetup
from communistopoly.settings import get_settings
from communistopoly.shared.enums import PieceType
from communistopoly.shared.rng import DeterministicRandomService

_NAMES = ("Sasha", "Olga", "Dmitri", "Katya", "Boris", "Nadia", "Ivan", "Vera")

SessionFactory = Callable[..., GameSession]


@pytest.fixture(autouse=True)
def _mock_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Ensure settings are loaded with predictable values during tests."""
    monkeypatch.setenv("COMMUNISTOPOLY_RNG_SEED", "1917")
    monkeypatch.setenv("COMMUNISTOPOLY_LOG_LEVEL", "DEBUG")
    get_settings.cache_clear()
    get_default_rules_configuration.cache_clear()
    yield
    get_settings.cache_clear()
    get_default_rules_configuration.cache_clear()


@pytest.fixture
def make_session() -> SessionFactory:
    """Build a session with Stalin in the first seat and one comrade per piece.

    Competitors receive ids ``player-2``, ``player-3`` and so on, in the order
    their pieces are given.
    """

    def factory(
        *pieces: PieceType,
        start: bool = True,
        rules: RulesConfiguration | None = None,
        seed: int = 7,
    ) -> GameSession:
        chosen = pieces or (PieceType.SICKLE, PieceType.VODKA_BOTTLE)
        setups = [PlayerSetup(name="Joseph", is_stalin=True)]
        setups.extend(
            PlayerSetup(name=_NAMES[index], piece=piece) for index, piece in enumerate(chosen)
        )
        session = GameSession(
            setups, rules=rules, rng_service=DeterministicRandomService(seed)
        )
        if start:
            session.start_game()
        return session

    return factory


def _give_property(
    session: GameSession, player_id: str, space_id: int, *, level: int = 0
) -> None:
    player = session.player(player_id)
    assert player is not None
    record = session.state.properties[space_id]
    record.custodian_id = player_id
    record.collectivization_level = level
    player.properties.append(space_id)


def _make_current(session: GameSession, player_id: str) -> None:
    state = session.state
    state.current_turn_index = state.turn_order.index(player_id)
    state.has_rolled = False
    state.last_roll = None
    state.doubles_count = 0
    state.pending_action = None


@pytest.fixture
def give_property() -> Callable[..., None]:
    """Hand a property to a player directly, bypassing purchase rules."""
    return _give_property


@pytest.fixture
def make_current() -> Callable[[GameSession, str], None]:
    """Point the turn marker at a player with a fresh, unrolled turn."""
    return _make_current
