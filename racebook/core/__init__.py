"""Core services and components for the Racebook wagering engine.

This package contains the building blocks of the engine:

Modules:
    config: Defaults, environment overrides and EngineConfig
    errors: Numeric error codes, EngineError and Result
    models: Race, Racer, Bet and RaceResult records
    storage: In-memory and SQLite key/value backends
    ledger: Per-account balances
    registry: Race and racer records and the race lifecycle
    betting: Bet placement and odds recalculation
    settlement: Race finishing, payouts and claims
    admin: House edge, cancellation and read-only queries
    engine: The locked, transactional operation boundary

Example:
    >>> from racebook.core import EngineConfig, RaceBettingEngine
    >>>
    >>> engine = RaceBettingEngine(config=EngineConfig(contract_owner='owner'))
    >>> engine.deposit('alice', 1000)
    Result(is_ok=True, value=1000, error=None)
"""

from racebook.core.config import EngineConfig
from racebook.core.engine import RaceBettingEngine
from racebook.core.errors import EngineError, ErrorCode, Result
from racebook.core.models import Bet, BetType, Race, RaceStatus, Racer

__all__ = [
    'Bet',
    'BetType',
    'EngineConfig',
    'EngineError',
    'ErrorCode',
    'Race',
    'RaceBettingEngine',
    'RaceStatus',
    'Racer',
    'Result',
]
