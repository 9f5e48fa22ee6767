from racebook.core import BetType, EngineConfig, ErrorCode, RaceBettingEngine, RaceStatus
from racebook.core.settlement import compute_payout
from racebook.core.storage import InMemoryStorage

OWNER = "ST1HTBVD3JG9C05J7HBJTHGR0GGW7KXW28M5JS8QE"
USER1 = "ST2CY5V39NHDPWSXMW9QDT3HC3GD6Q6XX4CFRK9AG"
USER2 = "ST2JHG361ZXG51QTKY2NQCVBPPRRE2KZB1HR05NNC"
RACERS = ["Lightning", "Thunder", "Storm"]


def make_two_bet_race():
    """Race 1 with a 1000 Win bet on racer 0 (USER1) and a 500 Place bet on racer 1 (USER2)."""
    engine = RaceBettingEngine(storage=InMemoryStorage(), config=EngineConfig(contract_owner=OWNER))
    engine.deposit(USER1, 10000)
    engine.deposit(USER2, 10000)
    engine.create_race(OWNER, "Test Race", RACERS, 100)
    engine.place_bet(USER1, 1, 0, 1000, "win")
    engine.place_bet(USER2, 1, 1, 500, "place")
    engine.start_race(OWNER, 1)
    return engine


def test_finish_and_claim_scenario():
    engine = make_two_bet_race()

    result = engine.finish_race(OWNER, 1, [0, 1, 2])
    assert result.is_ok

    race = engine.race_of(1)
    assert race.status == RaceStatus.FINISHED
    assert race.winner == 0
    assert race.house_take == 37  # 1500 * 250 // 10000
    assert engine.racer_of(1, 0).finish_position == 1
    assert engine.racer_of(1, 1).finish_position == 2
    assert engine.racer_of(1, 2).finish_position == 3
    assert engine.race_result_of(1) == [0, 1, 2]

    win = engine.claim_winnings(USER1, 1)
    assert win.is_ok
    assert win.value == engine.bet_of(1).potential_payout == 2000
    assert engine.balance_of(USER1) == 11000

    place = engine.claim_winnings(USER2, 2)
    assert place.value == engine.bet_of(2).potential_payout // 2 == 500
    assert engine.balance_of(USER2) == 10000


def test_losing_claim_pays_zero_and_marks_claimed():
    engine = make_two_bet_race()
    engine.finish_race(OWNER, 1, [1, 0, 2])

    result = engine.claim_winnings(USER1, 1)
    assert result.is_ok
    assert result.value == 0
    assert engine.bet_of(1).claimed is True
    assert engine.balance_of(USER1) == 9000

    assert engine.claim_winnings(USER1, 1).error == ErrorCode.ALREADY_CLAIMED


def test_double_claim_rejected():
    engine = make_two_bet_race()
    engine.finish_race(OWNER, 1, [0, 1, 2])

    assert engine.claim_winnings(USER1, 1).value == 2000
    for _ in range(3):
        assert engine.claim_winnings(USER1, 1).error == ErrorCode.ALREADY_CLAIMED
    assert engine.balance_of(USER1) == 11000


def test_claim_errors():
    engine = make_two_bet_race()

    assert engine.claim_winnings(USER1, 99).error == ErrorCode.BET_NOT_FOUND
    # Ownership is checked before race state
    assert engine.claim_winnings(USER2, 1).error == ErrorCode.UNAUTHORIZED
    assert engine.claim_winnings(USER1, 1).error == ErrorCode.RACE_NOT_ENDED

    engine.finish_race(OWNER, 1, [0, 1, 2])
    assert engine.claim_winnings(USER2, 1).error == ErrorCode.UNAUTHORIZED
    assert engine.claim_winnings(OWNER, 1).error == ErrorCode.UNAUTHORIZED
    assert engine.bet_of(1).claimed is False


def test_show_bet_pays_third():
    engine = RaceBettingEngine(storage=InMemoryStorage(), config=EngineConfig(contract_owner=OWNER))
    engine.deposit(USER1, 10000)
    engine.create_race(OWNER, "Test Race", RACERS + ["Gale"], 100)
    show_id = engine.place_bet(USER1, 1, 2, 300, "show").value
    place_id = engine.place_bet(USER1, 1, 2, 300, "place").value
    late_show_id = engine.place_bet(USER1, 1, 3, 300, "show").value
    engine.start_race(OWNER, 1)
    engine.finish_race(OWNER, 1, [0, 1, 2, 3])

    assert engine.bet_of(show_id).potential_payout == 600
    assert engine.claim_winnings(USER1, show_id).value == 200
    assert engine.claim_winnings(USER1, place_id).value == 0
    assert engine.claim_winnings(USER1, late_show_id).value == 0


def test_finish_errors():
    engine = make_two_bet_race()

    assert engine.finish_race(USER1, 1, [0, 1, 2]).error == ErrorCode.NOT_OWNER
    assert engine.finish_race(OWNER, 5, [0, 1, 2]).error == ErrorCode.RACE_NOT_FOUND

    engine.create_race(OWNER, "Still Open", RACERS, 100)
    assert engine.finish_race(OWNER, 2, [0, 1, 2]).error == ErrorCode.RACE_NOT_RUNNING
    assert engine.race_result_of(2) is None

    assert engine.finish_race(OWNER, 1, [0, 1, 2]).is_ok
    assert engine.finish_race(OWNER, 1, [2, 1, 0]).error == ErrorCode.RACE_NOT_RUNNING
    assert engine.race_of(1).winner == 0


def test_house_take_uses_current_edge():
    engine = make_two_bet_race()

    assert engine.set_house_edge(OWNER, 1000).is_ok
    assert engine.house_edge() == 1000
    engine.finish_race(OWNER, 1, [0, 1, 2])

    assert engine.race_of(1).house_take == 150


def test_payouts_not_capped_by_pool():
    engine = make_two_bet_race()
    engine.finish_race(OWNER, 1, [0, 1, 2])

    paid = engine.claim_winnings(USER1, 1).value + engine.claim_winnings(USER2, 2).value
    race = engine.race_of(1)
    assert paid > race.total_pool - race.house_take


def test_unlisted_racer_never_pays():
    engine = make_two_bet_race()
    engine.finish_race(OWNER, 1, [0, 7])

    # Racer 7 has no record, so second place goes unassigned
    assert engine.racer_of(1, 0).finish_position == 1
    assert engine.racer_of(1, 1).finish_position is None
    assert engine.racer_of(1, 2).finish_position is None
    assert engine.race_result_of(1) == [0, 7]

    result = engine.claim_winnings(USER2, 2)
    assert result.is_ok
    assert result.value == 0
    assert engine.bet_of(2).claimed is True
    assert engine.balance_of(USER2) == 9500


def test_compute_payout():
    assert compute_payout(BetType.WIN, 2000, 1) == 2000
    assert compute_payout(BetType.WIN, 2000, 2) == 0
    assert compute_payout(BetType.PLACE, 1001, 1) == 500
    assert compute_payout(BetType.PLACE, 1001, 2) == 500
    assert compute_payout(BetType.PLACE, 1001, 3) == 0
    assert compute_payout(BetType.SHOW, 1000, 3) == 333
    assert compute_payout(BetType.SHOW, 1000, 4) == 0
    assert compute_payout(BetType.SHOW, 1000, None) == 0
