"""Tests for the Great Purge, Five-Year Plans and Hero of the Soviet Union awards."""

from communistopoly.shared.enums import GulagReason, PartyRank, PieceType


def _table(make_session):
    return make_session(PieceType.SICKLE, PieceType.VODKA_BOTTLE, PieceType.BREAD_LOAF)


def _rounds(session, count: int) -> None:
    for _ in range(count):
        session._turns._start_round()


# Great Purge ----------------------------------------------------------------


def test_great_purge_imprisons_the_most_named_comrade(make_session) -> None:
    session = _table(make_session)

    assert session.initiate_great_purge().allowed
    assert session.vote_in_great_purge("player-2", "player-3").allowed
    assert session.vote_in_great_purge("player-4", "player-3").allowed
    assert session.vote_in_great_purge("player-3", "player-2").allowed

    assert session.resolve_great_purge() == ["player-3"]

    purged = session.player("player-3")
    assert purged.in_gulag
    assert purged.gulag_reason is GulagReason.STALIN_DECREE
    assert not session.player("player-2").in_gulag
    assert session.state.great_purge is None


def test_great_purge_takes_everyone_tied(make_session) -> None:
    session = _table(make_session)
    session.initiate_great_purge()
    session.vote_in_great_purge("player-2", "player-3")
    session.vote_in_great_purge("player-3", "player-2")

    assert sorted(session.resolve_great_purge()) == ["player-2", "player-3"]
    assert not session.player("player-4").in_gulag


def test_a_changed_vote_replaces_the_first(make_session) -> None:
    session = _table(make_session)
    session.initiate_great_purge()
    session.vote_in_great_purge("player-2", "player-3")
    session.vote_in_great_purge("player-2", "player-4")

    assert session.state.great_purge.votes == {"player-2": "player-4"}


def test_great_purge_without_votes_sends_nobody(make_session) -> None:
    session = _table(make_session)
    session.initiate_great_purge()

    assert session.resolve_great_purge() == []

    assert not any(player.in_gulag for player in session.players)
    assert "no votes" in session.state.journal.last().message


def test_great_purge_happens_once_per_game(make_session) -> None:
    session = _table(make_session)
    session.initiate_great_purge()
    session.resolve_great_purge()

    assert not session.initiate_great_purge().allowed
    assert session.state.great_purge is None


def test_purge_votes_need_an_open_purge_and_another_target(make_session) -> None:
    session = _table(make_session)

    assert not session.vote_in_great_purge("player-2", "player-3").allowed

    session.initiate_great_purge()
    assert not session.vote_in_great_purge("player-2", "player-2").allowed
    assert not session.vote_in_great_purge("player-2", "player-1").allowed
    assert session.state.great_purge.votes == {}


# Five-Year Plan -------------------------------------------------------------


def test_met_five_year_plan_pays_every_comrade(make_session) -> None:
    session = make_session()
    treasury = session.state.state_treasury

    assert session.initiate_five_year_plan(300, duration_rounds=2).allowed
    assert session.contribute_to_five_year_plan("player-2", 200).allowed
    assert session.contribute_to_five_year_plan("player-3", 100).allowed
    assert session.state.five_year_plan.collected == 300

    assert session.resolve_five_year_plan() is True

    assert session.player("player-2").rubles == 1_400
    assert session.player("player-3").rubles == 1_500
    assert session.state.state_treasury == treasury + 300 - 200
    assert session.state.five_year_plan is None


def test_failed_five_year_plan_imprisons_the_poorest(make_session) -> None:
    session = _table(make_session)
    session.player("player-3").rubles = 100
    session.initiate_five_year_plan(1_000)
    session.contribute_to_five_year_plan("player-2", 200)

    assert session.resolve_five_year_plan() is False

    poorest = session.player("player-3")
    assert poorest.in_gulag
    assert poorest.gulag_reason is GulagReason.STALIN_DECREE
    assert not session.player("player-2").in_gulag
    assert not session.player("player-4").in_gulag


def test_tank_immunity_absorbs_the_failed_plan(make_session) -> None:
    session = make_session(PieceType.TANK, PieceType.SICKLE)
    tank = session.player("player-2")
    tank.rubles = 50
    session.initiate_five_year_plan(500)

    assert session.resolve_five_year_plan() is False

    assert not tank.in_gulag
    assert tank.abilities.gulag_immunity_used
    assert not session.player("player-3").in_gulag


def test_five_year_plan_closes_at_its_deadline(make_session) -> None:
    session = make_session()
    session.player("player-3").rubles = 10
    session.initiate_five_year_plan(400, duration_rounds=2)

    _rounds(session, 1)
    assert session.state.five_year_plan is not None

    _rounds(session, 1)
    assert session.state.five_year_plan is None
    assert session.player("player-3").in_gulag


def test_five_year_plan_contributions_are_checked(make_session) -> None:
    session = make_session()

    assert not session.contribute_to_five_year_plan("player-2", 100).allowed
    assert session.resolve_five_year_plan() is None

    session.initiate_five_year_plan(500)
    assert not session.initiate_five_year_plan(200).allowed
    assert not session.contribute_to_five_year_plan("player-2", 0).allowed
    assert not session.contribute_to_five_year_plan("player-2", 5_000).allowed
    assert not session.contribute_to_five_year_plan("player-1", 100).allowed
    assert session.state.five_year_plan.collected == 0
    assert session.player("player-2").rubles == 1_500


# Hero of the Soviet Union ---------------------------------------------------


def test_hero_cannot_be_imprisoned_demoted_or_denounced(make_session) -> None:
    session = make_session()
    hero = session.player("player-2")
    hero.rank = PartyRank.COMMISSAR

    assert session.grant_hero("player-2").allowed
    assert session.is_hero("player-2")

    assert not session.send_to_gulag("player-2", GulagReason.ENEMY_OF_STATE)
    assert not hero.in_gulag
    assert not session._ledger.demote("player-2")
    assert hero.rank is PartyRank.COMMISSAR
    assert not session.can_denounce("player-3", "player-2").allowed


def test_hero_award_cannot_be_doubled(make_session) -> None:
    session = make_session()
    session.grant_hero("player-2")

    assert not session.grant_hero("player-2").allowed
    assert len(session.state.heroes) == 1
    assert not session.grant_hero("player-1").allowed


def test_hero_award_expires_after_three_rounds(make_session) -> None:
    session = make_session()
    session.grant_hero("player-2")

    _rounds(session, 2)
    assert session.is_hero("player-2")

    _rounds(session, 1)
    assert not session.is_hero("player-2")
    assert session.state.heroes == []
    assert session.send_to_gulag("player-2", GulagReason.ENEMY_OF_STATE)


def test_heroes_are_spared_by_the_purge_and_the_plan(make_session) -> None:
    session = _table(make_session)
    session.grant_hero("player-3")
    session.player("player-3").rubles = 0
    session.player("player-4").rubles = 200

    session.initiate_great_purge()
    session.vote_in_great_purge("player-2", "player-3")
    assert session.resolve_great_purge() == []

    session.initiate_five_year_plan(1_000)
    session.resolve_five_year_plan()

    assert not session.player("player-3").in_gulag
    assert session.player("player-4").in_gulag
