"""House-edge administration, race cancellation and read-only queries.

Queries never raise for unknown keys; they return None, 0 or an empty list.
"""

import logging
from typing import List, Optional

from racebook.core.config import MAX_HOUSE_EDGE
from racebook.core.errors import EngineError, ErrorCode
from racebook.core.ledger import Ledger
from racebook.core.models import Bet, Race, RaceResult, Racer
from racebook.core.registry import RaceRegistry
from racebook.core.settlement import SettlementEngine
from racebook.core.storage import (BETS, META, RACE_RESULTS, RACES, USER_BETS,
                                   Storage, user_bets_key)

logger = logging.getLogger(__name__)


class AdminControl:
    def __init__(self, storage: Storage, ledger: Ledger, registry: RaceRegistry,
                 settlement: SettlementEngine) -> None:
        self.storage = storage
        self.ledger = ledger
        self.registry = registry
        self.settlement = settlement

    def set_house_edge(self, caller: str, new_edge_bps: int) -> bool:
        self.registry.require_owner(caller)
        if new_edge_bps > MAX_HOUSE_EDGE or new_edge_bps < 0:
            raise EngineError(ErrorCode.INVALID_BET, f"House edge {new_edge_bps} outside [0, {MAX_HOUSE_EDGE}]")

        old_edge = self.house_edge()
        self.storage.set(META, 'house_edge', new_edge_bps)
        logger.info("House edge %d -> %d bps", old_edge, new_edge_bps)
        return True

    def cancel_race(self, caller: str, race_id: int) -> bool:
        return self.registry.cancel_race(caller, race_id)

    # ----- queries -----

    def house_edge(self) -> int:
        return self.settlement.house_edge()

    def balance_of(self, account: str) -> int:
        return self.ledger.balance_of(account)

    def race_of(self, race_id: int) -> Optional[Race]:
        return self.registry.get_race(race_id)

    def racer_of(self, race_id: int, index: int) -> Optional[Racer]:
        return self.registry.get_racer(race_id, index)

    def bet_of(self, bet_id: int) -> Optional[Bet]:
        return self.settlement.get_bet(bet_id)

    def user_bets_of(self, account: str, race_id: int) -> List[int]:
        return list(self.storage.get(USER_BETS, user_bets_key(account, race_id), []))

    def current_odds_of(self, race_id: int, index: int) -> Optional[int]:
        racer = self.registry.get_racer(race_id, index)
        return racer.odds if racer else None

    def race_result_of(self, race_id: int) -> Optional[List[int]]:
        data = self.storage.get(RACE_RESULTS, race_id)
        return RaceResult.from_dict(data).final_positions if data else None

    def all_races(self) -> List[Race]:
        return [Race.from_dict(data) for _, data in self.storage.items(RACES)]

    def all_bets(self) -> List[Bet]:
        return [Bet.from_dict(data) for _, data in self.storage.items(BETS)]
