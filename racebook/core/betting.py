"""Bet placement and dynamic odds.

A bet's potential payout is priced from the racer's odds *before* the bet is
added to the pool. After the bet is recorded, that racer's odds are
recalculated from its share of the pool:

    new_odds = max(MIN_ODDS, total_pool * 100 // max(1, racer.total_bets))

Only the backed racer is repriced; the other racers keep their odds until
they take a bet of their own.

Example:
    >>> engine = BettingEngine(storage, config, ledger, registry)
    >>> bet_id = engine.place_bet('alice', race_id=1, racer_index=0,
    ...                           amount=500, bet_type='win')
"""

import logging
from typing import Any, List

from racebook.core.config import MIN_ODDS, ODDS_SCALE, EngineConfig
from racebook.core.errors import EngineError, ErrorCode
from racebook.core.ledger import Ledger
from racebook.core.models import Bet, BetType, RaceStatus
from racebook.core.registry import RaceRegistry
from racebook.core.storage import BETS, USER_BETS, Storage, user_bets_key

logger = logging.getLogger(__name__)


def recalculate_odds(total_pool: int, racer_total: int) -> int:
    """Odds for a racer holding ``racer_total`` of a ``total_pool``."""
    return max(MIN_ODDS, total_pool * ODDS_SCALE // max(1, racer_total))


def price_bet(amount: int, odds: int) -> int:
    """Payout owed for ``amount`` at ``odds`` (floored)."""
    return amount * odds // ODDS_SCALE


class BettingEngine:
    def __init__(self, storage: Storage, config: EngineConfig,
                 ledger: Ledger, registry: RaceRegistry) -> None:
        self.storage = storage
        self.config = config
        self.ledger = ledger
        self.registry = registry

    def place_bet(self, caller: str, race_id: int, racer_index: int,
                  amount: int, bet_type: Any) -> int:
        """Place a bet on an open race.

        Checks run in a fixed order and the first failure is reported:
        race exists, race is open, racer exists, stake and bet type are
        valid, caller can cover the stake.

        Args:
            caller: Bettor account
            race_id: Target race
            racer_index: Racer slot within the race
            amount: Stake
            bet_type: BetType or one of 'win', 'place', 'show'

        Returns:
            The new bet id
        """
        race = self.registry.require_race(race_id)
        if race.status != RaceStatus.OPEN:
            raise EngineError(ErrorCode.RACE_ALREADY_STARTED, f"Race {race_id} is {race.status.value}")

        racer = self.registry.get_racer(race_id, racer_index)
        if racer is None:
            raise EngineError(ErrorCode.INVALID_RACER, f"Race {race_id} has no racer {racer_index}")

        if amount < self.config.min_bet or amount > self.config.max_bet:
            raise EngineError(
                ErrorCode.INVALID_BET,
                f"Stake {amount} outside [{self.config.min_bet}, {self.config.max_bet}]",
            )
        parsed_type = BetType.parse(bet_type)
        if parsed_type is None:
            raise EngineError(ErrorCode.INVALID_BET, f"Unknown bet type {bet_type!r}")

        self.ledger.debit(caller, amount)

        bet = Bet(
            bet_id=self.storage.next_id('bet_id_counter'),
            race_id=race_id,
            bettor=caller,
            racer_index=racer_index,
            amount=amount,
            potential_payout=price_bet(amount, racer.odds),
            bet_type=parsed_type,
        )
        self.storage.set(BETS, bet.bet_id, bet.to_dict())

        racer.total_bets += amount
        race.total_pool += amount

        key = user_bets_key(caller, race_id)
        bet_ids: List[int] = self.storage.get(USER_BETS, key, [])
        bet_ids.append(bet.bet_id)
        self.storage.set(USER_BETS, key, bet_ids)

        old_odds = racer.odds
        if race.total_pool > 0:
            racer.odds = recalculate_odds(race.total_pool, racer.total_bets)

        self.registry.save_racer(racer)
        self.registry.save_race(race)

        logger.info(
            "Bet %d: %s %d on race %d racer %d (%s) payout %d, odds %d -> %d",
            bet.bet_id, caller, amount, race_id, racer_index, parsed_type.value,
            bet.potential_payout, old_odds, racer.odds,
        )
        return bet.bet_id
