"""Tests for movement and the effects of each kind of space."""

from communistopoly.game_logic.pending import (
    BreadlinePending,
    CommunistTestPending,
    PartyDirectivePending,
    PropertyPurchasePending,
    QuotaPaymentPending,
    StoyPilferPending,
    TaxPaymentPending,
)
from communistopoly.shared.enums import (
    BreadlineResponse,
    GulagReason,
    PartyRank,
    PieceType,
    TaxChoice,
    TaxType,
)
from communistopoly.shared.value_objects import DiceRoll


def test_passing_stoy_charges_the_travel_tax(make_session, make_current) -> None:
    session = make_session()
    make_current(session, "player-2")
    player = session.player("player-2")
    player.position = 38

    session.roll_dice("player-2", roll=DiceRoll(dice=(1, 2)))

    assert player.position == 1
    assert player.rubles == 1_300
    assert player.laps_completed == 1
    pending = session.pending_action
    assert isinstance(pending, PropertyPurchasePending)
    assert pending.space_id == 1


def test_hammer_earns_a_bonus_when_passing_stoy(make_session, make_current) -> None:
    session = make_session(PieceType.HAMMER, PieceType.SICKLE)
    make_current(session, "player-2")
    session.player("player-2").position = 38

    session.roll_dice("player-2", roll=DiceRoll(dice=(1, 2)))

    assert session.player("player-2").rubles == 1_350


def test_landing_on_stoy_offers_a_pilfer_without_tax(make_session, make_current) -> None:
    session = make_session()
    make_current(session, "player-2")
    player = session.player("player-2")
    player.position = 38

    session.roll_dice("player-2", roll=DiceRoll(dice=(1, 1)))

    assert player.position == 0
    assert player.rubles == 1_500
    assert player.laps_completed == 1
    assert isinstance(session.pending_action, StoyPilferPending)


def test_pilfer_success_and_failure(make_session) -> None:
    session = make_session()
    session.state.pending_action = StoyPilferPending(player_id="player-2")

    assert session.resolve_pilfer("player-2", roll=4)
    assert session.player("player-2").rubles == 1_600

    session.state.pending_action = StoyPilferPending(player_id="player-3")
    assert not session.resolve_pilfer("player-3", roll=3)
    assert session.player("player-3").in_gulag
    assert session.player("player-3").gulag_reason is GulagReason.PILFERING_CAUGHT


def test_stalin_can_set_the_purchase_price(make_session) -> None:
    session = make_session()
    session.state.pending_action = PropertyPurchasePending(
        player_id="player-2", space_id=1, price=60
    )

    assert session.set_purchase_price(40)
    assert session.accept_purchase("player-2").allowed

    assert session.player("player-2").rubles == 1_460
    assert session.pending_action is None


def test_unaffordable_purchase_keeps_the_offer_open(make_session) -> None:
    session = make_session()
    session.player("player-2").rubles = 10
    session.state.pending_action = PropertyPurchasePending(
        player_id="player-2", space_id=1, price=60
    )

    assert not session.accept_purchase("player-2").allowed
    assert isinstance(session.pending_action, PropertyPurchasePending)
    assert session.state.properties[1].custodian_id is None


def test_landing_on_held_property_demands_the_quota(
    make_session, make_current, give_property
) -> None:
    session = make_session()
    give_property(session, "player-3", 3)
    make_current(session, "player-2")

    session.roll_dice("player-2", roll=DiceRoll(dice=(1, 2)))
    pending = session.pending_action
    assert isinstance(pending, QuotaPaymentPending)
    assert pending.amount == 4

    assert session.pay_quota("player-2") == 4
    assert session.player("player-2").rubles == 1_496
    assert session.player("player-3").rubles == 1_504
    assert session.pending_action is None


def test_ineligible_lander_gets_no_purchase_offer(make_session, make_current) -> None:
    session = make_session()
    make_current(session, "player-2")
    session.player("player-2").position = 10

    session.roll_dice("player-2", roll=DiceRoll(dice=(1, 1)))

    assert session.player("player-2").position == 12
    assert session.pending_action is None


def test_revolutionary_contribution_defaults_to_the_cheaper_option(
    make_session, make_current
) -> None:
    session = make_session()
    make_current(session, "player-2")
    session.player("player-2").position = 1

    session.roll_dice("player-2", roll=DiceRoll(dice=(1, 2)))
    assert isinstance(session.pending_action, TaxPaymentPending)

    assert session.pay_tax("player-2") == 200
    assert session.player("player-2").rubles == 1_300


def test_revolutionary_contribution_percentage_choice(make_session) -> None:
    session = make_session()
    session.state.pending_action = TaxPaymentPending(
        player_id="player-2", space_id=4, tax_type=TaxType.REVOLUTIONARY_CONTRIBUTION
    )

    assert session.pay_tax("player-2", TaxChoice.PERCENTAGE) == 225


def test_bourgeois_decadence_hits_the_wealthiest_hardest(make_session) -> None:
    session = make_session()
    wealthy = session.player("player-2")
    wealthy.rank = PartyRank.COMMISSAR
    wealthy.rubles = 2_000
    session.state.pending_action = TaxPaymentPending(
        player_id="player-2", space_id=38, tax_type=TaxType.BOURGEOIS_DECADENCE
    )

    assert session.pay_tax("player-2") == 200
    assert wealthy.rank is PartyRank.PARTY_MEMBER

    session.state.pending_action = TaxPaymentPending(
        player_id="player-3", space_id=38, tax_type=TaxType.BOURGEOIS_DECADENCE
    )
    assert session.pay_tax("player-3") == 100


def test_enemy_of_the_state_goes_straight_to_the_gulag(make_session, make_current) -> None:
    session = make_session()
    make_current(session, "player-2")
    session.player("player-2").position = 27

    session.roll_dice("player-2", roll=DiceRoll(dice=(1, 2)))

    player = session.player("player-2")
    assert player.in_gulag
    assert player.position == 10
    assert player.gulag_reason is GulagReason.ENEMY_OF_STATE


def test_breadline_collects_from_every_comrade(make_session, make_current) -> None:
    session = make_session(PieceType.SICKLE, PieceType.VODKA_BOTTLE, PieceType.HAMMER)
    make_current(session, "player-2")
    session.player("player-2").position = 17

    session.roll_dice("player-2", roll=DiceRoll(dice=(1, 2)))
    pending = session.pending_action
    assert isinstance(pending, BreadlinePending)
    assert set(pending.remaining) == {"player-3", "player-4"}

    assert session.contribute_to_breadline("player-3", BreadlineResponse.CONTRIBUTE).allowed
    assert session.contribute_to_breadline("player-4", BreadlineResponse.REFUSE).allowed

    assert session.player("player-2").rubles == 1_550
    assert session.player("player-3").rubles == 1_450
    assert session.player("player-4").under_suspicion
    assert session.pending_action is None
    assert not session.contribute_to_breadline(
        "player-3", BreadlineResponse.CONTRIBUTE
    ).allowed


def test_correct_answer_is_rewarded_by_the_state(make_session) -> None:
    session = make_session()
    session.state.pending_action = CommunistTestPending(
        player_id="player-2", question_id="easy-3"
    )
    treasury = session.state.state_treasury

    assert session.answer_communist_test("player-2", " 1917 ")

    assert session.player("player-2").rubles == 1_600
    assert session.state.state_treasury == treasury - 100
    assert session.pending_action is None


def test_hard_question_also_promotes(make_session) -> None:
    session = make_session()
    session.state.pending_action = CommunistTestPending(
        player_id="player-2", question_id="hard-1"
    )

    assert session.answer_communist_test("player-2", "Jughashvili")

    assert session.player("player-2").rank is PartyRank.PARTY_MEMBER


def test_red_star_pays_double_for_a_wrong_answer(make_session) -> None:
    session = make_session(PieceType.RED_STAR, PieceType.SICKLE)
    session.state.pending_action = CommunistTestPending(
        player_id="player-2", question_id="medium-1"
    )

    assert session.answer_communist_test("player-2", "1953") is False

    assert session.player("player-2").rubles == 1_300


def test_two_failed_tests_in_a_row_demote(make_session) -> None:
    session = make_session()
    player = session.player("player-2")
    player.rank = PartyRank.COMMISSAR

    for _ in range(2):
        session.state.pending_action = CommunistTestPending(
            player_id="player-2", question_id="easy-3"
        )
        session.answer_communist_test("player-2", "1812")

    assert player.rank is PartyRank.PARTY_MEMBER
    assert player.consecutive_failed_tests == 0


def test_trick_question_waits_for_stalins_ruling(make_session) -> None:
    session = make_session(PieceType.VODKA_BOTTLE, PieceType.SICKLE)

    session.state.pending_action = CommunistTestPending(
        player_id="player-2", question_id="trick-1"
    )
    assert session.answer_communist_test("player-2", "No") is None
    assert isinstance(session.pending_action, CommunistTestPending)

    assert session.answer_communist_test("player-2", "No", stalin_ruling=False) is False
    assert session.player("player-2").consecutive_failed_tests == 0


def test_party_directive_applies_the_drawn_card(make_session) -> None:
    session = make_session()
    session.state.directive_deck = ["pd-3", "pd-5"]
    session.state.pending_action = PartyDirectivePending(player_id="player-2")

    card = session.draw_party_directive("player-2")

    assert card is not None
    assert card.id == "pd-3"
    assert session.player("player-2").rubles == 1_700
    assert session.state.directive_discard == ["pd-3"]

    session.state.pending_action = PartyDirectivePending(player_id="player-2")
    session.draw_party_directive("player-2")
    assert session.player("player-2").release_tokens == 1


def test_directive_deck_reshuffles_its_discards(make_session) -> None:
    session = make_session()
    session.state.directive_deck = []
    session.state.directive_discard = ["pd-12"]
    session.state.pending_action = PartyDirectivePending(player_id="player-2")

    card = session.draw_party_directive("player-2")

    assert card.id == "pd-12"
    assert session.player("player-2").rank is PartyRank.PARTY_MEMBER


def test_property_tax_directive_counts_holdings_and_levels(make_session, give_property) -> None:
    session = make_session()
    give_property(session, "player-2", 1, level=2)
    give_property(session, "player-2", 3)
    session.state.directive_deck = ["pd-20"]
    session.state.pending_action = PartyDirectivePending(player_id="player-2")

    session.draw_party_directive("player-2")

    assert session.player("player-2").rubles == 1_500 - (2 * 15 + 2 * 50)
