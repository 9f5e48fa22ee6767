"""Records held by the wagering engine.

Each record converts to and from a JSON-compatible dict so any storage
backend can hold it.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from racebook.core.config import DEFAULT_ODDS


class RaceStatus(str, Enum):
    OPEN = "open"
    RUNNING = "running"
    FINISHED = "finished"
    CANCELLED = "cancelled"


class BetType(str, Enum):
    WIN = "win"
    PLACE = "place"
    SHOW = "show"

    @classmethod
    def parse(cls, value: Any) -> Optional["BetType"]:
        """Accept a BetType or its name/value in any case. None if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


@dataclass
class Race:
    """A race and its pool.

    Attributes:
        race_id (int): Unique, monotonically assigned id
        name (str): Display name
        racers (List[str]): Racer slot names in slot order
        start_time (int): Height at creation
        end_time (int): start_time + duration
        status (RaceStatus): Lifecycle state
        total_pool (int): Sum of all bet amounts on this race
        house_take (int): Operator share, set at finish
        winner (Optional[int]): Winning racer index once finished
    """
    race_id: int
    name: str
    racers: List[str]
    start_time: int
    end_time: int
    status: RaceStatus = RaceStatus.OPEN
    total_pool: int = 0
    house_take: int = 0
    winner: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['status'] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Race":
        data = dict(data)
        data['status'] = RaceStatus(data['status'])
        data['racers'] = list(data['racers'])
        return cls(**data)


@dataclass
class Racer:
    race_id: int
    index: int
    name: str
    odds: int = DEFAULT_ODDS
    total_bets: int = 0
    finish_position: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Racer":
        return cls(**data)


@dataclass
class Bet:
    """A single wager. ``potential_payout`` is fixed when the bet is placed."""
    bet_id: int
    race_id: int
    bettor: str
    racer_index: int
    amount: int
    potential_payout: int
    bet_type: BetType
    claimed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['bet_type'] = self.bet_type.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bet":
        data = dict(data)
        data['bet_type'] = BetType(data['bet_type'])
        return cls(**data)


@dataclass
class RaceResult:
    race_id: int
    final_positions: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RaceResult":
        return cls(race_id=data['race_id'], final_positions=list(data['final_positions']))
