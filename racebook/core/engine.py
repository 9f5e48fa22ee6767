"""Operation boundary for the wagering engine.

RaceBettingEngine owns one store and the five components built on it. Every
mutating operation:

- runs under a single lock, so callers on many threads are serialized
- runs inside a storage transaction, so a rejected operation leaves no trace
- returns a Result instead of raising EngineError

Operations can also be invoked by their wire names through ``call`` and
``read``, which is how hosts speaking the numeric error-code protocol drive
the engine.

Example:
    >>> from racebook.core.config import EngineConfig
    >>> from racebook.core.engine import RaceBettingEngine
    >>>
    >>> engine = RaceBettingEngine(config=EngineConfig(contract_owner='owner'))
    >>> engine.deposit('alice', 1000).value
    1000
    >>> race_id = engine.create_race('owner', 'Cup', ['Lightning', 'Thunder'], 100).value
    >>> engine.place_bet('alice', race_id, 0, 500, 'win').value
    1
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence

from racebook.core.admin import AdminControl
from racebook.core.betting import BettingEngine
from racebook.core.config import DB_PATH, STORAGE_BACKEND, EngineConfig
from racebook.core.errors import EngineError, Result
from racebook.core.ledger import Ledger
from racebook.core.models import Bet, Race, Racer
from racebook.core.registry import RaceRegistry
from racebook.core.settlement import SettlementEngine
from racebook.core.storage import Storage, create_storage

logger = logging.getLogger(__name__)


class RaceBettingEngine:
    """Wagering ledger and settlement engine.

    Attributes:
        storage (Storage): Backing store for every record
        config (EngineConfig): Owner and stake limits
        ledger (Ledger): Balance ledger
        registry (RaceRegistry): Races, racers and lifecycle
        betting (BettingEngine): Bet placement and odds
        settlement (SettlementEngine): Race finishing and claims
        admin (AdminControl): House edge, cancellation and queries
        lock (threading.Lock): Serializes operations and queries
    """

    def __init__(
        self,
        storage: Optional[Storage] = None,
        config: Optional[EngineConfig] = None,
        height_source: Optional[Callable[[], int]] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            storage: Store to use. Defaults to the RACEBOOK_STORAGE backend.
            config: Engine settings. Defaults to EngineConfig.from_env().
            height_source: Returns the current height used for race start
                times. Defaults to a constant 0.
        """
        self.storage = storage if storage is not None else create_storage(STORAGE_BACKEND, DB_PATH)
        self.config = config if config is not None else EngineConfig.from_env()
        self.height_source = height_source or (lambda: 0)
        self.lock = threading.Lock()

        self.ledger = Ledger(self.storage)
        self.registry = RaceRegistry(self.storage, self.config, self.height_source)
        self.betting = BettingEngine(self.storage, self.config, self.ledger, self.registry)
        self.settlement = SettlementEngine(self.storage, self.ledger, self.registry)
        self.admin = AdminControl(self.storage, self.ledger, self.registry, self.settlement)

        self._operations: Dict[str, Callable[..., Any]] = {
            'deposit-funds': lambda sender, amount: self.ledger.deposit(sender, amount),
            'withdraw-funds': lambda sender, amount: self.ledger.withdraw(sender, amount),
            'create-race': self.registry.create_race,
            'start-race': self.registry.start_race,
            'place-bet': self.betting.place_bet,
            'finish-race': self.settlement.finish_race,
            'claim-winnings': self.settlement.claim_winnings,
            'set-house-edge': self.admin.set_house_edge,
            'cancel-race': self.admin.cancel_race,
        }
        self._queries: Dict[str, Callable[..., Any]] = {
            'get-balance': self.balance_of,
            'get-race': self.race_of,
            'get-racer': self.racer_of,
            'get-bet': self.bet_of,
            'get-user-bets': self.user_bets_of,
            'get-current-odds': self.current_odds_of,
            'get-race-result': self.race_result_of,
            'get-house-edge': self.house_edge,
        }

    def _execute(self, name: str, operation: Callable[..., Any], *args: Any) -> Result:
        with self.lock:
            try:
                with self.storage.transaction():
                    value = operation(*args)
            except EngineError as e:
                logger.debug("%s rejected: %s", name, e)
                return Result.err(e.code)
            except Exception:
                logger.exception("%s failed unexpectedly", name)
                raise
        return Result.ok(value)

    # ----- mutating operations -----

    def deposit(self, caller: str, amount: int) -> Result:
        return self._execute('deposit-funds', self.ledger.deposit, caller, amount)

    def withdraw(self, caller: str, amount: int) -> Result:
        return self._execute('withdraw-funds', self.ledger.withdraw, caller, amount)

    def create_race(self, caller: str, name: str, racer_names: Sequence[str],
                    duration_blocks: int) -> Result:
        return self._execute('create-race', self.registry.create_race,
                             caller, name, list(racer_names), duration_blocks)

    def start_race(self, caller: str, race_id: int) -> Result:
        return self._execute('start-race', self.registry.start_race, caller, race_id)

    def place_bet(self, caller: str, race_id: int, racer_index: int,
                  amount: int, bet_type: Any) -> Result:
        return self._execute('place-bet', self.betting.place_bet,
                             caller, race_id, racer_index, amount, bet_type)

    def finish_race(self, caller: str, race_id: int, final_positions: Sequence[int]) -> Result:
        return self._execute('finish-race', self.settlement.finish_race,
                             caller, race_id, list(final_positions))

    def claim_winnings(self, caller: str, bet_id: int) -> Result:
        return self._execute('claim-winnings', self.settlement.claim_winnings, caller, bet_id)

    def set_house_edge(self, caller: str, new_edge_bps: int) -> Result:
        return self._execute('set-house-edge', self.admin.set_house_edge, caller, new_edge_bps)

    def cancel_race(self, caller: str, race_id: int) -> Result:
        return self._execute('cancel-race', self.admin.cancel_race, caller, race_id)

    # ----- read-only queries -----

    def _query(self, query: Callable[..., Any], *args: Any) -> Any:
        # Reads wait for any in-flight operation so rolled-back writes stay invisible
        with self.lock:
            return query(*args)

    def balance_of(self, account: str) -> int:
        return self._query(self.admin.balance_of, account)

    def race_of(self, race_id: int) -> Optional[Race]:
        return self._query(self.admin.race_of, race_id)

    def racer_of(self, race_id: int, index: int) -> Optional[Racer]:
        return self._query(self.admin.racer_of, race_id, index)

    def bet_of(self, bet_id: int) -> Optional[Bet]:
        return self._query(self.admin.bet_of, bet_id)

    def user_bets_of(self, account: str, race_id: int) -> List[int]:
        return self._query(self.admin.user_bets_of, account, race_id)

    def current_odds_of(self, race_id: int, index: int) -> Optional[int]:
        return self._query(self.admin.current_odds_of, race_id, index)

    def race_result_of(self, race_id: int) -> Optional[List[int]]:
        return self._query(self.admin.race_result_of, race_id)

    def house_edge(self) -> int:
        return self._query(self.admin.house_edge)

    def all_races(self) -> List[Race]:
        return self._query(self.admin.all_races)

    def all_bets(self) -> List[Bet]:
        return self._query(self.admin.all_bets)

    # ----- wire dispatch -----

    def call(self, function_name: str, args: Sequence[Any], sender: str) -> Result:
        """Run a mutating operation by wire name, e.g. ``'place-bet'``."""
        operation = self._operations.get(function_name)
        if operation is None:
            raise ValueError(f"Unknown function: {function_name}")
        return self._execute(function_name, operation, sender, *args)

    def read(self, function_name: str, args: Sequence[Any]) -> Result:
        """Run a read-only query by wire name. Records come back as dicts."""
        query = self._queries.get(function_name)
        if query is None:
            raise ValueError(f"Unknown function: {function_name}")
        value = query(*args)
        if hasattr(value, 'to_dict'):
            value = value.to_dict()
        return Result.ok(value)
