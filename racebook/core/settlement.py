"""Race settlement and claims.

``finish_race`` records the finishing order and the house take.
``claim_winnings`` pays a settled bet from its frozen potential payout:

    win   -> full payout if the racer finished 1st
    place -> payout // 2 if the racer finished 1st or 2nd
    show  -> payout // 3 if the racer finished 1st to 3rd

Claims are not capped by ``total_pool - house_take``; several bet types
can each win on the same race.
"""

import logging
from typing import List, Optional

from racebook.core.config import BPS_SCALE
from racebook.core.errors import EngineError, ErrorCode
from racebook.core.ledger import Ledger
from racebook.core.models import Bet, BetType, RaceResult, RaceStatus
from racebook.core.registry import RaceRegistry
from racebook.core.storage import BETS, META, RACE_RESULTS, Storage

logger = logging.getLogger(__name__)

# Finishing position required, and payout divisor, per bet type
PAYOUT_RULES = {
    BetType.WIN: (1, 1),
    BetType.PLACE: (2, 2),
    BetType.SHOW: (3, 3),
}


def compute_payout(bet_type: BetType, potential_payout: int,
                   finish_position: Optional[int]) -> int:
    """Amount owed for a bet whose racer finished at ``finish_position``.

    An unplaced racer (``None``) never pays.
    """
    if not finish_position:
        return 0
    max_position, divisor = PAYOUT_RULES[bet_type]
    if finish_position > max_position:
        return 0
    return potential_payout // divisor


class SettlementEngine:
    def __init__(self, storage: Storage, ledger: Ledger, registry: RaceRegistry) -> None:
        self.storage = storage
        self.ledger = ledger
        self.registry = registry

    def house_edge(self) -> int:
        return int(self.storage.get(META, 'house_edge', self.registry.config.house_edge))

    def finish_race(self, caller: str, race_id: int, final_positions: List[int]) -> bool:
        """Settle a running race.

        Args:
            caller: Must be the contract owner
            race_id: Race to settle
            final_positions: Racer indices in finishing order (index 0 won)
        """
        self.registry.require_owner(caller)
        race = self.registry.require_race(race_id)
        if race.status != RaceStatus.RUNNING:
            raise EngineError(ErrorCode.RACE_NOT_RUNNING, f"Race {race_id} is {race.status.value}")

        final_positions = [int(i) for i in final_positions]
        race.house_take = race.total_pool * self.house_edge() // BPS_SCALE
        race.status = RaceStatus.FINISHED
        race.winner = final_positions[0] if final_positions else None
        self.registry.save_race(race)

        for position, racer_index in enumerate(final_positions):
            racer = self.registry.get_racer(race_id, racer_index)
            if racer is None:
                logger.warning("Race %d: no racer %d to place at %d", race_id, racer_index, position + 1)
                continue
            racer.finish_position = position + 1
            self.registry.save_racer(racer)

        result = RaceResult(race_id=race_id, final_positions=final_positions)
        self.storage.set(RACE_RESULTS, race_id, result.to_dict())

        logger.info("Finished race %d: winner %s, pool %d, house take %d",
                    race_id, race.winner, race.total_pool, race.house_take)
        return True

    def get_bet(self, bet_id: int) -> Optional[Bet]:
        data = self.storage.get(BETS, bet_id)
        return Bet.from_dict(data) if data else None

    def claim_winnings(self, caller: str, bet_id: int) -> int:
        """Claim a bet on a finished race. Returns the payout, possibly 0.

        The bet is marked claimed even when it pays nothing.
        """
        bet = self.get_bet(bet_id)
        if bet is None:
            raise EngineError(ErrorCode.BET_NOT_FOUND, f"Bet {bet_id} not found")
        if bet.bettor != caller:
            raise EngineError(ErrorCode.UNAUTHORIZED, f"Bet {bet_id} does not belong to {caller}")
        if bet.claimed:
            raise EngineError(ErrorCode.ALREADY_CLAIMED, f"Bet {bet_id} already claimed")

        race = self.registry.get_race(bet.race_id)
        if race is None or race.status != RaceStatus.FINISHED:
            raise EngineError(ErrorCode.RACE_NOT_ENDED, f"Race {bet.race_id} has not finished")

        racer = self.registry.get_racer(bet.race_id, bet.racer_index)
        if racer is None:
            raise EngineError(ErrorCode.INVALID_RACER, f"Race {bet.race_id} has no racer {bet.racer_index}")

        payout = compute_payout(bet.bet_type, bet.potential_payout, racer.finish_position)

        bet.claimed = True
        self.storage.set(BETS, bet.bet_id, bet.to_dict())
        if payout > 0:
            self.ledger.credit(caller, payout)

        logger.info("Claim bet %d by %s: %s racer %d finished %s, payout %d",
                    bet_id, caller, bet.bet_type.value, bet.racer_index,
                    racer.finish_position, payout)
        return payout
