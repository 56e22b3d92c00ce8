"""Tests for dice, turn order, rounds and the end-of-game vote."""

import pytest

from communistopoly.game_logic.errors import SessionNotInitializedError
from communistopoly.game_logic.pending import GulagEscapeChoicePending
from communistopoly.shared.enums import (
    EliminationReason,
    GameEndCondition,
    GulagReason,
    PieceType,
)
from communistopoly.shared.value_objects import DiceRoll


def test_start_game_shuffles_only_competitors(make_session) -> None:
    session = make_session(PieceType.SICKLE, PieceType.HAMMER, PieceType.TANK)

    assert sorted(session.state.turn_order) == ["player-2", "player-3", "player-4"]
    assert session.state.started
    assert session.state.round_number == 1
    assert session.current_player().id == session.state.turn_order[0]


def test_same_seed_gives_the_same_turn_order(make_session) -> None:
    pieces = (PieceType.SICKLE, PieceType.HAMMER, PieceType.TANK, PieceType.RED_STAR)

    first = make_session(*pieces, seed=42)
    second = make_session(*pieces, seed=42)

    assert first.state.turn_order == second.state.turn_order


def test_rolling_before_start_raises(make_session) -> None:
    session = make_session(start=False)

    with pytest.raises(SessionNotInitializedError):
        session.roll_dice("player-2")
    with pytest.raises(SessionNotInitializedError):
        session.end_turn("player-2")


def test_only_the_current_player_may_roll(make_session, make_current) -> None:
    session = make_session()
    make_current(session, "player-2")

    assert session.roll_dice("player-3", roll=DiceRoll(dice=(1, 2))) is None
    assert session.player("player-3").position == 0
    assert not session.end_turn("player-3").allowed


def test_roll_moves_the_player_and_resolves_the_space(make_session, make_current) -> None:
    session = make_session()
    make_current(session, "player-2")
    session.player("player-2").position = 7

    roll = session.roll_dice("player-2", roll=DiceRoll(dice=(1, 2)))

    assert roll is not None
    assert roll.total == 3
    assert session.player("player-2").position == 10
    assert session.pending_action is None
    assert session.roll_dice("player-2", roll=DiceRoll(dice=(1, 2))) is None


def test_turn_must_be_rolled_before_it_ends(make_session, make_current) -> None:
    session = make_session()
    make_current(session, "player-2")

    assert not session.end_turn("player-2").allowed


def test_pending_action_blocks_ending_the_turn(make_session, make_current) -> None:
    session = make_session()
    make_current(session, "player-2")

    session.roll_dice("player-2", roll=DiceRoll(dice=(1, 2)))

    assert session.pending_action is not None
    assert not session.end_turn("player-2").allowed
    assert session.decline_purchase("player-2")
    assert session.end_turn("player-2").allowed


def test_three_consecutive_doubles_send_to_the_gulag(make_session, make_current) -> None:
    session = make_session()
    make_current(session, "player-2")
    player = session.player("player-2")

    for start, faces in ((8, (1, 1)), (6, (2, 2))):
        player.position = start
        session.roll_dice("player-2", roll=DiceRoll(dice=faces))
        assert player.position == 10
        assert session.end_turn("player-2").allowed
        assert session.current_player().id == "player-2"

    player.position = 4
    session.roll_dice("player-2", roll=DiceRoll(dice=(3, 3)))

    assert player.in_gulag
    assert player.gulag_reason is GulagReason.THREE_DOUBLES
    assert player.position == 10
    assert session.state.doubles_count == 0
    assert session.end_turn("player-2").allowed
    assert session.current_player().id != "player-2"


def test_vodka_bottle_roll_is_counted(make_session, make_current) -> None:
    session = make_session(PieceType.VODKA_BOTTLE, PieceType.SICKLE)
    make_current(session, "player-2")
    session.player("player-2").position = 7

    session.roll_dice("player-2", use_vodka=True, roll=DiceRoll(dice=(2, 1), discarded=(1,)))

    assert session.player("player-2").abilities.use_count == 1


def test_round_advances_after_everyone_has_played(make_session, make_current) -> None:
    session = make_session()
    last = session.state.turn_order[-1]
    make_current(session, last)
    session.player(last).position = 7

    session.roll_dice(last, roll=DiceRoll(dice=(1, 2)))
    assert session.end_turn(last).allowed

    assert session.state.round_number == 2
    assert session.current_player().id == session.state.turn_order[0]


def test_eliminated_players_are_skipped(make_session, make_current) -> None:
    session = make_session(PieceType.SICKLE, PieceType.HAMMER, PieceType.TANK)
    order = session.state.turn_order
    first, middle, last = order
    make_current(session, first)
    session.execute_player(middle)
    session.player(first).position = 7

    session.roll_dice(first, roll=DiceRoll(dice=(1, 2)))
    session.end_turn(first)

    assert session.current_player().id == last


def test_imprisoned_player_is_offered_an_escape(make_session, make_current) -> None:
    session = make_session()
    first, second = session.state.turn_order
    session.send_to_gulag(second, GulagReason.ENEMY_OF_STATE)
    make_current(session, first)
    session.player(first).position = 7

    session.roll_dice(first, roll=DiceRoll(dice=(1, 2)))
    session.end_turn(first)

    pending = session.pending_action
    assert isinstance(pending, GulagEscapeChoicePending)
    assert pending.player_id == second
    assert session.player(second).gulag_turns == 1
    assert session.roll_dice(second, roll=DiceRoll(dice=(1, 2))) is None
    assert session.end_turn(second).allowed


def test_unpaid_debt_defaults_to_the_gulag(make_session) -> None:
    session = make_session()
    debtor = session.player("player-2")
    session._ledger.create_debt(debtor, None, 50, "Communist Test penalty")

    session._turns._start_round()
    assert not debtor.in_gulag

    session._turns._start_round()
    assert debtor.in_gulag
    assert debtor.gulag_reason is GulagReason.DEBT_DEFAULT
    assert debtor.debts == []


def test_paid_debt_does_not_default(make_session) -> None:
    session = make_session()
    debtor = session.player("player-2")
    session._ledger.create_debt(debtor, "player-3", 50, "quota")

    assert session.pay_debt("player-2").allowed
    session._turns._start_round()
    session._turns._start_round()

    assert not debtor.in_gulag
    assert session.player("player-3").rubles == 1_550


def test_execution_of_the_penultimate_player_ends_the_game(make_session) -> None:
    session = make_session()

    assert session.execute_player("player-3")

    assert session.player("player-3").elimination_reason is EliminationReason.EXECUTION
    assert session.state.game_end_condition is GameEndCondition.SURVIVOR
    assert session.state.winner_id == "player-2"
    assert session.check_game_end() is GameEndCondition.SURVIVOR
    assert len(session.state.final_standings) == 2


def test_unanimous_vote_ends_the_game(make_session) -> None:
    session = make_session()

    assert session.initiate_end_vote("player-2").allowed
    assert session.state.game_end_condition is None
    assert session.cast_end_vote("player-3", in_favour=True).allowed

    assert session.state.game_end_condition is GameEndCondition.UNANIMOUS
    assert session.state.winner_id is None


def test_a_single_no_vote_cancels_the_end_vote(make_session) -> None:
    session = make_session()

    session.initiate_end_vote("player-2")
    session.cast_end_vote("player-3", in_favour=False)

    assert session.state.game_end_condition is None
    assert session.state.end_vote_initiator is None
    assert not session.cast_end_vote("player-3", in_favour=True).allowed


def test_red_star_demoted_to_proletariat_is_eliminated(make_session) -> None:
    session = make_session(PieceType.RED_STAR, PieceType.SICKLE, PieceType.HAMMER)

    session.send_to_gulag("player-2", GulagReason.ENEMY_OF_STATE)

    red_star = session.player("player-2")
    assert red_star.is_eliminated
    assert red_star.elimination_reason is EliminationReason.RED_STAR_DEMOTION


def test_prisoner_eliminated_at_turn_start_passes_the_turn_on(make_session, make_current) -> None:
    session = make_session(PieceType.SICKLE, PieceType.HAMMER, PieceType.VODKA_BOTTLE)
    first, second, third = session.state.turn_order
    session.send_to_gulag(second, GulagReason.ENEMY_OF_STATE)
    session.player(second).gulag_turns = 9
    make_current(session, first)
    session.player(first).position = 7

    session.roll_dice(first, roll=DiceRoll(dice=(1, 2)))
    assert session.end_turn(first).allowed

    prisoner = session.player(second)
    assert prisoner.is_eliminated
    assert prisoner.elimination_reason is EliminationReason.GULAG_TIMEOUT
    assert session.current_player().id == third
    assert session.pending_action is None
    assert session.roll_dice(third, roll=DiceRoll(dice=(1, 2))) is not None
