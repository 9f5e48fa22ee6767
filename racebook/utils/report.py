"""Tabular reports over engine state.

Builds pandas DataFrames of race books and bet histories and computes
per-account performance stats.

Example:
    >>> from racebook.utils.report import race_book, get_stats
    >>> df = race_book(engine, race_id=1)
    >>> df[['Name', 'Odds', 'TotalBets']]
    >>> get_stats(engine, 'alice')
    {'bets': 2, 'claimed': 2, 'wins': 1, 'staked': 1500, ...}
"""

from typing import Any, Dict, List, Optional

import pandas as pd

from racebook.core.engine import RaceBettingEngine
from racebook.core.models import RaceStatus
from racebook.core.settlement import compute_payout

RACE_BOOK_COLUMNS: List[str] = [
    "Index", "Name", "Odds", "TotalBets", "PoolShare", "FinishPosition"
]
BET_COLUMNS: List[str] = [
    "BetID", "RaceID", "Bettor", "RacerIndex", "BetType", "Amount",
    "PotentialPayout", "Claimed", "RaceStatus", "FinishPosition", "Payout"
]
RACE_COLUMNS: List[str] = [
    "RaceID", "Name", "Status", "Racers", "TotalPool", "HouseTake", "Winner"
]


def race_book(engine: RaceBettingEngine, race_id: int) -> pd.DataFrame:
    """One row per racer slot with a record. Empty for an unknown race."""
    race = engine.race_of(race_id)
    if race is None:
        return pd.DataFrame(columns=RACE_BOOK_COLUMNS)

    rows = []
    for index in range(len(race.racers)):
        racer = engine.racer_of(race_id, index)
        if racer is None:
            continue
        rows.append({
            "Index": index,
            "Name": racer.name,
            "Odds": racer.odds,
            "TotalBets": racer.total_bets,
            "PoolShare": racer.total_bets / race.total_pool if race.total_pool else 0.0,
            "FinishPosition": racer.finish_position,
        })
    return pd.DataFrame(rows, columns=RACE_BOOK_COLUMNS)


def race_summary(engine: RaceBettingEngine) -> pd.DataFrame:
    """One row per race, in creation order."""
    rows = [{
        "RaceID": race.race_id,
        "Name": race.name,
        "Status": race.status.value,
        "Racers": len(race.racers),
        "TotalPool": race.total_pool,
        "HouseTake": race.house_take,
        "Winner": race.winner,
    } for race in engine.all_races()]
    return pd.DataFrame(rows, columns=RACE_COLUMNS)


def bet_history(engine: RaceBettingEngine, account: Optional[str] = None,
                race_id: Optional[int] = None) -> pd.DataFrame:
    """All bets, optionally filtered by bettor and race.

    ``Payout`` is what the bet pays (or paid) once its race has finished,
    and 0 before that.
    """
    rows = []
    for bet in engine.all_bets():
        if account is not None and bet.bettor != account:
            continue
        if race_id is not None and bet.race_id != race_id:
            continue

        race = engine.race_of(bet.race_id)
        racer = engine.racer_of(bet.race_id, bet.racer_index)
        finish_position = racer.finish_position if racer else None
        payout = 0
        if race is not None and race.status == RaceStatus.FINISHED:
            payout = compute_payout(bet.bet_type, bet.potential_payout, finish_position)

        rows.append({
            "BetID": bet.bet_id,
            "RaceID": bet.race_id,
            "Bettor": bet.bettor,
            "RacerIndex": bet.racer_index,
            "BetType": bet.bet_type.value,
            "Amount": bet.amount,
            "PotentialPayout": bet.potential_payout,
            "Claimed": bet.claimed,
            "RaceStatus": race.status.value if race else None,
            "FinishPosition": finish_position,
            "Payout": payout,
        })
    return pd.DataFrame(rows, columns=BET_COLUMNS)


def get_stats(engine: RaceBettingEngine, account: str) -> Dict[str, Any]:
    """Calculate performance stats for one account"""
    df = bet_history(engine, account=account)
    if len(df) == 0:
        return {'bets': 0, 'claimed': 0, 'wins': 0, 'staked': 0,
                'returned': 0, 'profit': 0, 'roi': 0}

    claimed = df[df['Claimed']]
    staked = int(df['Amount'].sum())
    returned = int(claimed['Payout'].sum())
    profit = returned - staked

    return {
        'bets': len(df),
        'claimed': len(claimed),
        'wins': int((df['Payout'] > 0).sum()),
        'staked': staked,
        'returned': returned,
        'profit': profit,
        'roi': (profit / staked) * 100 if staked > 0 else 0,
    }
