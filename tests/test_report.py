from racebook.core import EngineConfig, RaceBettingEngine
from racebook.core.storage import InMemoryStorage
from racebook.utils.report import bet_history, get_stats, race_book, race_summary

OWNER = "owner"
USER1 = "alice"
USER2 = "bob"


def make_settled_race():
    engine = RaceBettingEngine(storage=InMemoryStorage(), config=EngineConfig(contract_owner=OWNER))
    engine.deposit(USER1, 10000)
    engine.deposit(USER2, 10000)
    engine.create_race(OWNER, "Test Race", ["Lightning", "Thunder", "Storm"], 100)
    engine.place_bet(USER1, 1, 0, 1000, "win")
    engine.place_bet(USER2, 1, 1, 500, "place")
    engine.place_bet(USER2, 1, 2, 500, "win")
    engine.start_race(OWNER, 1)
    engine.finish_race(OWNER, 1, [0, 1, 2])
    return engine


def test_race_book():
    engine = make_settled_race()
    df = race_book(engine, 1)

    assert list(df['Name']) == ["Lightning", "Thunder", "Storm"]
    assert list(df['TotalBets']) == [1000, 500, 500]
    assert list(df['FinishPosition']) == [1, 2, 3]
    assert df['PoolShare'].sum() == 1.0


def test_race_book_unknown_race_is_empty():
    engine = make_settled_race()
    assert race_book(engine, 42).empty


def test_bet_history_filters():
    engine = make_settled_race()

    assert len(bet_history(engine)) == 3
    bob = bet_history(engine, account=USER2)
    assert list(bob['BetID']) == [2, 3]
    assert list(bob['Payout']) == [500, 0]
    assert bet_history(engine, race_id=2).empty


def test_get_stats():
    engine = make_settled_race()
    engine.claim_winnings(USER1, 1)

    stats = get_stats(engine, USER1)
    assert stats['bets'] == 1
    assert stats['claimed'] == 1
    assert stats['wins'] == 1
    assert stats['staked'] == 1000
    assert stats['returned'] == 2000
    assert stats['profit'] == 1000
    assert stats['roi'] == 100.0

    assert get_stats(engine, "carol")['bets'] == 0


def test_race_summary():
    engine = make_settled_race()
    engine.create_race(OWNER, "Second", ["A", "B"], 10)
    df = race_summary(engine)

    assert list(df['RaceID']) == [1, 2]
    assert list(df['Status']) == ["finished", "open"]
    assert list(df['TotalPool']) == [2000, 0]
    assert df.iloc[0]['HouseTake'] == 50
    assert df.iloc[0]['Winner'] == 0
