"""Configuration constants and engine settings.

This module contains the defaults for the wagering engine. Every default can
be overridden through an environment variable, optionally loaded from a
``.env`` file in the project root.

Attributes:
    DEFAULT_HOUSE_EDGE (int): House edge in basis points (250 = 2.5%)
    MAX_HOUSE_EDGE (int): Upper bound accepted by set_house_edge (10%)
    DEFAULT_MIN_BET (int): Smallest accepted stake
    DEFAULT_MAX_BET (int): Largest accepted stake
    DEFAULT_ODDS (int): Odds assigned to a new racer (200 = 2.00x)
    MIN_ODDS (int): Floor applied by odds recalculation (110 = 1.10x)
    ODDS_SCALE (int): Fixed-point scale for odds (100 = 1.00x)
    BPS_SCALE (int): Basis points in 100%
    DB_PATH (str): Default SQLite database path

Example:
    >>> from racebook.core.config import EngineConfig
    >>> config = EngineConfig.from_env()
    >>> config.house_edge
    250
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from dotenv import load_dotenv

BASE_DIR: Final[str] = os.path.dirname(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
)
load_dotenv(dotenv_path=Path(BASE_DIR) / '.env')

# Fixed-point scales
ODDS_SCALE: Final[int] = 100
BPS_SCALE: Final[int] = 10000

# Odds
DEFAULT_ODDS: Final[int] = 200
MIN_ODDS: Final[int] = 110

# House edge (basis points)
DEFAULT_HOUSE_EDGE: Final[int] = int(os.getenv("RACEBOOK_HOUSE_EDGE", "250"))
MAX_HOUSE_EDGE: Final[int] = 1000

# Stake limits
DEFAULT_MIN_BET: Final[int] = int(os.getenv("RACEBOOK_MIN_BET", "100"))
DEFAULT_MAX_BET: Final[int] = int(os.getenv("RACEBOOK_MAX_BET", "100000"))

# Storage
STORAGE_BACKEND: Final[str] = os.getenv("RACEBOOK_STORAGE", "memory")
DB_PATH: Final[str] = os.getenv("RACEBOOK_DB_PATH", "racebook.db")

LOG_LEVEL: Final[str] = os.getenv("RACEBOOK_LOG_LEVEL", "INFO")


@dataclass(frozen=True)
class EngineConfig:
    """Settings for one engine instance.

    Attributes:
        contract_owner (str): The single privileged identity
        house_edge (int): Initial house edge in basis points
        min_bet (int): Smallest accepted stake (inclusive)
        max_bet (int): Largest accepted stake (inclusive)
    """
    contract_owner: str
    house_edge: int = DEFAULT_HOUSE_EDGE
    min_bet: int = DEFAULT_MIN_BET
    max_bet: int = DEFAULT_MAX_BET

    def __post_init__(self) -> None:
        if not self.contract_owner:
            raise ValueError("contract_owner is required (set RACEBOOK_OWNER)")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build a config from RACEBOOK_* environment variables."""
        return cls(
            contract_owner=os.getenv("RACEBOOK_OWNER", ""),
            house_edge=DEFAULT_HOUSE_EDGE,
            min_bet=DEFAULT_MIN_BET,
            max_bet=DEFAULT_MAX_BET,
        )


def configure_logging(level: str = LOG_LEVEL) -> logging.Logger:
    """Attach a console handler to the racebook package logger.

    Returns the configured logger. Calling it again only changes the level.
    """
    logger = logging.getLogger("racebook")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(handler)
    return logger
