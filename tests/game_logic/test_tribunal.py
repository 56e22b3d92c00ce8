"""Tests for denouncements, witnesses and verdicts."""

from communistopoly.shared.enums import (
    EscapeMethod,
    GulagReason,
    PartyRank,
    PieceType,
    TribunalPhase,
    Verdict,
    WitnessSide,
)


def _three_comrades(make_session):
    return make_session(PieceType.SICKLE, PieceType.VODKA_BOTTLE, PieceType.RED_STAR)


def test_guilty_verdict_imprisons_and_rewards_the_accuser(make_session) -> None:
    session = make_session()
    accuser = session.player("player-2")
    before = accuser.rubles

    assert session.denounce_player("player-2", "player-3", "Hoarding potatoes").allowed
    assert session.render_verdict(Verdict.GUILTY)

    accused = session.player("player-3")
    assert accused.in_gulag
    assert accused.gulag_reason is GulagReason.DENOUNCEMENT_GUILTY
    assert accuser.rubles == before + 100
    assert session.state.tribunal is None


def test_innocent_verdict_demotes_the_accuser(make_session) -> None:
    session = make_session()
    accuser = session.player("player-2")
    accuser.rank = PartyRank.COMMISSAR

    session.denounce_player("player-2", "player-3", "Smiling")
    session.render_verdict(Verdict.INNOCENT)

    assert accuser.rank is PartyRank.PARTY_MEMBER
    assert not session.player("player-3").in_gulag


def test_demotion_saturates_at_proletariat(make_session) -> None:
    session = make_session()
    accuser = session.player("player-2")
    assert accuser.rank is PartyRank.PROLETARIAT

    session.denounce_player("player-2", "player-3", "Smiling")
    session.render_verdict(Verdict.INNOCENT)

    assert accuser.rank is PartyRank.PROLETARIAT
    assert accuser.is_active


def test_both_guilty_imprisons_both_parties(make_session) -> None:
    session = make_session()

    session.denounce_player("player-2", "player-3", "Conspiracy")
    session.render_verdict(Verdict.BOTH_GUILTY)

    assert session.player("player-2").in_gulag
    assert session.player("player-3").in_gulag


def test_insufficient_evidence_leaves_the_accused_under_suspicion(make_session) -> None:
    session = _three_comrades(make_session)
    accused = session.player("player-3")
    accused.rank = PartyRank.COMMISSAR

    session.denounce_player("player-2", "player-3", "Reading poetry")
    assert session.state.tribunal.required_witnesses == 2
    assert not session.has_sufficient_witnesses()
    session.render_verdict(Verdict.INSUFFICIENT_EVIDENCE)

    assert accused.under_suspicion
    assert not accused.in_gulag

    session.player("player-2").denouncements_this_round = 0
    session.denounce_player("player-2", "player-3", "Reading more poetry")
    assert session.state.tribunal.required_witnesses == 0
    assert session.has_sufficient_witnesses()


def test_inner_circle_needs_every_eligible_witness(make_session) -> None:
    session = make_session(
        PieceType.SICKLE, PieceType.VODKA_BOTTLE, PieceType.RED_STAR, PieceType.HAMMER
    )
    session.player("player-3").rank = PartyRank.INNER_CIRCLE

    session.denounce_player("player-2", "player-3", "Ambition")

    assert session.state.tribunal.required_witnesses == 2
    session.add_witness("player-4", WitnessSide.FOR)
    assert not session.has_sufficient_witnesses()
    session.add_witness("player-5", WitnessSide.FOR)
    assert session.has_sufficient_witnesses()


def test_witness_testimony_moves_the_tribunal_to_evidence(make_session) -> None:
    session = _three_comrades(make_session)
    session.denounce_player("player-2", "player-3", "Jazz records")
    assert session.state.tribunal.phase is TribunalPhase.ACCUSATION

    assert session.add_witness("player-4", WitnessSide.FOR).allowed

    assert session.state.tribunal.phase is TribunalPhase.EVIDENCE
    assert not session.add_witness("player-4", WitnessSide.AGAINST).allowed
    assert not session.add_witness("player-3", WitnessSide.AGAINST).allowed


def test_hammer_testifying_against_the_accused_forfeits_immunity(make_session) -> None:
    session = make_session(PieceType.SICKLE, PieceType.VODKA_BOTTLE, PieceType.HAMMER)
    hammer = session.player("player-4")

    session.denounce_player("player-2", "player-3", "Decadence")
    session.add_witness("player-4", WitnessSide.AGAINST)

    assert hammer.abilities.immunity_forfeited
    assert session.send_to_gulag("player-4", GulagReason.THREE_DOUBLES)


def test_denouncing_stalin_sends_the_accuser_to_the_gulag(make_session) -> None:
    session = make_session()

    decision = session.denounce_player("player-2", "player-1", "Tyranny")

    assert not decision.allowed
    accuser = session.player("player-2")
    assert accuser.in_gulag
    assert accuser.gulag_reason is GulagReason.STALIN_DECREE
    assert session.state.tribunal is None


def test_one_denouncement_per_round_below_commissar(make_session) -> None:
    session = _three_comrades(make_session)

    session.denounce_player("player-2", "player-3", "First")
    session.cancel_tribunal()

    assert not session.can_denounce("player-2", "player-4").allowed
    session.player("player-2").rank = PartyRank.COMMISSAR
    assert session.can_denounce("player-2", "player-4").allowed


def test_only_one_tribunal_at_a_time(make_session) -> None:
    session = _three_comrades(make_session)
    session.denounce_player("player-2", "player-3", "First")

    assert not session.denounce_player("player-4", "player-2", "Second").allowed


def test_lenin_cannot_be_denounced_by_a_lower_rank(make_session) -> None:
    session = make_session(PieceType.SICKLE, PieceType.STATUE_OF_LENIN)
    session.player("player-3").rank = PartyRank.PARTY_MEMBER

    assert not session.can_denounce("player-2", "player-3").allowed
    session.player("player-2").rank = PartyRank.PARTY_MEMBER
    assert session.can_denounce("player-2", "player-3").allowed


def test_cannot_denounce_a_prisoner_or_yourself(make_session) -> None:
    session = make_session()

    assert not session.can_denounce("player-2", "player-2").allowed
    session.send_to_gulag("player-3", GulagReason.ENEMY_OF_STATE)
    assert not session.can_denounce("player-2", "player-3").allowed


def test_successful_informing_releases_the_informer(make_session) -> None:
    session = _three_comrades(make_session)
    session.send_to_gulag("player-2", GulagReason.ENEMY_OF_STATE)

    decision = session.attempt_gulag_escape(
        "player-2", EscapeMethod.INFORM, accused_id="player-3", crime="Hidden rubles"
    )
    assert decision.allowed
    assert session.state.tribunal.is_inform

    session.render_verdict(Verdict.GUILTY)

    assert not session.player("player-2").in_gulag
    assert session.player("player-3").in_gulag


def test_false_informing_extends_the_sentence(make_session) -> None:
    session = _three_comrades(make_session)
    session.send_to_gulag("player-2", GulagReason.ENEMY_OF_STATE)
    informer = session.player("player-2")
    informer.gulag_turns = 3

    session.attempt_gulag_escape("player-2", EscapeMethod.INFORM, accused_id="player-3")
    session.render_verdict(Verdict.INNOCENT)

    assert informer.in_gulag
    assert informer.gulag_turns == 5
