"""Data types shared by the drop table parser, cache and simulator."""
import re
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Quantity:
    """Inclusive quantity range for a single drop."""
    min: int = 1
    max: int = 1

    @property
    def mean(self) -> float:
        return (self.min + self.max) / 2


@dataclass
class Drop:
    item: str
    quantity: Quantity
    rarity: float
    rarity_text: str

    @property
    def is_fractional(self) -> bool:
        """Rarity text like 5/130. N/A and other text with a slash do not count."""
        return bool(re.search(r'\d\s*/|/\s*\d', self.rarity_text))


@dataclass
class DropTable:
    """Everything a monster can drop on a single kill.

    `unique_table_chance` set means one roll per kill against the unique table
    followed by a uniform pick; unset means every unique rolls on its own rarity.
    """
    name: str
    always: List[Drop] = field(default_factory=list)
    main: List[Drop] = field(default_factory=list)
    uniques: List[Drop] = field(default_factory=list)
    tertiary: List[Drop] = field(default_factory=list)
    main_table_rolls: int = 1
    unique_table_chance: Optional[float] = None

    def __post_init__(self):
        if self.main_table_rolls < 1:
            raise ValueError(f"main_table_rolls must be >= 1, got {self.main_table_rolls}")
        if self.unique_table_chance is not None and not 0 < self.unique_table_chance <= 1:
            raise ValueError(f"unique_table_chance must be in (0, 1], got {self.unique_table_chance}")

    def is_empty(self) -> bool:
        return not (self.always or self.main or self.uniques or self.tertiary)


@dataclass
class UniqueDrop:
    item: str
    kill_number: int
    rarity: str


@dataclass
class SimulationResult:
    monster_name: str
    kill_count: int
    loot: Dict[str, int] = field(default_factory=dict)
    unique_drops: List[UniqueDrop] = field(default_factory=list)

    def add_loot(self, item: str, quantity: int):
        self.loot[item] = self.loot.get(item, 0) + quantity

    def to_dict(self) -> dict:
        return asdict(self)


class DropDataError(Exception):
    """Base class for failures while acquiring a monster's drop table."""


class MonsterNotFound(DropDataError):
    pass


class MalformedResponse(DropDataError):
    pass


class FetchFailed(DropDataError):
    """Network or HTTP failure talking to the wiki. Worth retrying later."""


class NoDropData(DropDataError):
    pass
