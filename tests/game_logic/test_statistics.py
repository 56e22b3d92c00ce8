"""Tests for the running game statistics."""

from communistopoly.shared.enums import EscapeMethod, GulagReason, Verdict
from communistopoly.shared.value_objects import DiceRoll


def test_statistics_start_from_the_opening_position(make_session) -> None:
    session = make_session()
    stats = session.statistics

    assert set(stats.player_stats) == {"player-2", "player-3"}
    assert stats.player_stats["player-2"].max_wealth == 1_500
    assert stats.state_treasury_peak == 3_000
    assert stats.total_turns == 0
    assert stats.ended_at_round is None


def test_purchases_count_spending_and_holdings(make_session) -> None:
    session = make_session()

    session.purchase_property("player-2", 1)

    stats = session.statistics.for_player("player-2")
    assert stats.money_spent == 60
    assert stats.properties_acquired == 1
    assert session.statistics.state_treasury_peak == 3_060


def test_finished_turns_are_counted(make_session, make_current) -> None:
    session = make_session()
    make_current(session, "player-2")
    session.player("player-2").position = 7

    session.roll_dice("player-2", roll=DiceRoll(dice=(1, 2)))
    session.end_turn("player-2")

    assert session.statistics.total_turns == 1
    assert session.statistics.for_player("player-2").turns_played == 1
    assert session.statistics.for_player("player-3").turns_played == 0


def test_tribunals_record_denouncements_and_outcomes(make_session) -> None:
    session = make_session()

    session.denounce_player("player-2", "player-3", "Hoarding potatoes")
    session.render_verdict(Verdict.GUILTY)

    stats = session.statistics
    accuser = stats.for_player("player-2")
    accused = stats.for_player("player-3")
    assert stats.total_denouncements == 1
    assert stats.total_tribunals == 1
    assert accuser.denouncements_made == 1
    assert accuser.tribunals_won == 1
    assert accuser.money_earned == 100
    assert accuser.max_wealth == 1_600
    assert accused.denouncements_received == 1
    assert accused.tribunals_lost == 1
    assert accused.gulag_sentences == 1
    assert stats.total_gulag_sentences == 1


def test_gulag_time_and_escapes_are_counted(make_session) -> None:
    session = make_session()
    session.send_to_gulag("player-2", GulagReason.ENEMY_OF_STATE)

    session._gulag.handle_gulag_turn("player-2")
    session._gulag.handle_gulag_turn("player-2")
    session.player("player-2").release_tokens = 1
    assert session.attempt_gulag_escape("player-2", EscapeMethod.CARD).allowed

    stats = session.statistics.for_player("player-2")
    assert stats.total_gulag_turns == 2
    assert stats.gulag_escapes == 1


def test_game_end_records_the_final_round(make_session) -> None:
    session = make_session()

    session.execute_player("player-3")

    assert session.statistics.ended_at_round == 1
