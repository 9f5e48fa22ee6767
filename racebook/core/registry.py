"""Race and racer records and the race lifecycle.

Status transitions:
    open -> running -> finished
    open | running -> cancelled

Only the contract owner may create, start or cancel a race.
"""

import logging
from typing import Callable, List, Optional

from racebook.core.config import DEFAULT_ODDS, EngineConfig
from racebook.core.errors import EngineError, ErrorCode
from racebook.core.models import Race, RaceStatus, Racer
from racebook.core.storage import RACERS, RACES, Storage, racer_key

logger = logging.getLogger(__name__)


class RaceRegistry:
    """Stores races and racers and applies lifecycle transitions.

    Attributes:
        storage (Storage): Backing store
        config (EngineConfig): Owner identity and limits
        height_source (Callable[[], int]): Supplies the current height
    """

    def __init__(self, storage: Storage, config: EngineConfig,
                 height_source: Callable[[], int]) -> None:
        self.storage = storage
        self.config = config
        self.height_source = height_source

    def require_owner(self, caller: str) -> None:
        if caller != self.config.contract_owner:
            raise EngineError(ErrorCode.NOT_OWNER, f"{caller} is not the contract owner")

    # ----- records -----

    def get_race(self, race_id: int) -> Optional[Race]:
        data = self.storage.get(RACES, race_id)
        return Race.from_dict(data) if data else None

    def require_race(self, race_id: int) -> Race:
        race = self.get_race(race_id)
        if race is None:
            raise EngineError(ErrorCode.RACE_NOT_FOUND, f"Race {race_id} not found")
        return race

    def save_race(self, race: Race) -> None:
        self.storage.set(RACES, race.race_id, race.to_dict())

    def get_racer(self, race_id: int, index: int) -> Optional[Racer]:
        data = self.storage.get(RACERS, racer_key(race_id, index))
        return Racer.from_dict(data) if data else None

    def save_racer(self, racer: Racer) -> None:
        self.storage.set(RACERS, racer_key(racer.race_id, racer.index), racer.to_dict())

    # ----- lifecycle -----

    def create_race(self, caller: str, name: str, racer_names: List[str],
                    duration_blocks: int) -> int:
        """Create an open race and a Racer record for every non-empty name.

        Returns:
            The new race id
        """
        self.require_owner(caller)
        if len(racer_names) < 2:
            raise EngineError(ErrorCode.INVALID_RACER_SET, f"Need at least 2 racers, got {len(racer_names)}")

        race_id = self.storage.next_id('race_id_counter')
        start = int(self.height_source())
        race = Race(
            race_id=race_id,
            name=name,
            racers=list(racer_names),
            start_time=start,
            end_time=start + duration_blocks,
        )
        self.save_race(race)

        for index, racer_name in enumerate(racer_names):
            if racer_name:
                self.save_racer(Racer(race_id=race_id, index=index, name=racer_name, odds=DEFAULT_ODDS))

        logger.info("Created race %d '%s' with %d racers", race_id, name, len(racer_names))
        return race_id

    def start_race(self, caller: str, race_id: int) -> bool:
        self.require_owner(caller)
        race = self.require_race(race_id)
        if race.status != RaceStatus.OPEN:
            raise EngineError(ErrorCode.RACE_ALREADY_STARTED, f"Race {race_id} is {race.status.value}")

        race.status = RaceStatus.RUNNING
        self.save_race(race)
        logger.info("Started race %d", race_id)
        return True

    def cancel_race(self, caller: str, race_id: int) -> bool:
        """Cancel an unfinished race. Bets already placed are not refunded."""
        self.require_owner(caller)
        race = self.require_race(race_id)
        if race.status == RaceStatus.FINISHED:
            raise EngineError(ErrorCode.RACE_ENDED, f"Race {race_id} already finished")

        race.status = RaceStatus.CANCELLED
        self.save_race(race)
        logger.info("Cancelled race %d (pool %d not refunded)", race_id, race.total_pool)
        return True
