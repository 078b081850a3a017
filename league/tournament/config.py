"""
Scoring and tournament configuration.

Both objects are immutable once built; edit them between tournaments by
building a new one (see TournamentConfig.from_dict).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

from league.utils.constants import (
    TABLES,
    NUM_ROUNDS,
    TARGET_TABLE_SIZE,
    PROMOTE_COUNT,
    MAX_REBALANCE_STEPS,
    BASE_POINTS,
    MULTIPLIER,
    HOT_STREAK_BONUS,
    ARCINEMICO_BONUS,
    ARCINEMICO_THRESHOLD,
    MAX_BONUS_POINTS,
)


def _default_base_points() -> Dict[int, Dict[int, float]]:
    return {size: dict(table) for size, table in BASE_POINTS.items()}


@dataclass(frozen=True)
class ScoringConfig:
    """Points, multipliers and bonus values supplied to the engine."""
    base_points: Dict[int, Dict[int, float]] = field(default_factory=_default_base_points)
    multipliers: Dict[int, float] = field(default_factory=lambda: dict(MULTIPLIER))
    hot_streak_bonus: float = HOT_STREAK_BONUS
    arcinemico_bonus: float = ARCINEMICO_BONUS
    arcinemico_threshold: int = ARCINEMICO_THRESHOLD
    max_bonus: float = MAX_BONUS_POINTS
    default_table_size: int = TARGET_TABLE_SIZE

    def __post_init__(self):
        if self.default_table_size not in self.base_points:
            raise ValueError(
                f"base_points has no scale for the default table size {self.default_table_size}"
            )
        if self.max_bonus < 0:
            raise ValueError("max_bonus must be non-negative")
        if self.arcinemico_threshold < 0:
            raise ValueError("arcinemico_threshold must be non-negative")

    def base_points_for(self, table_size: int) -> Dict[int, float]:
        """Position -> points for a table of this size (falls back to the default scale)."""
        return self.base_points.get(table_size, self.base_points[self.default_table_size])

    def multiplier_for(self, round_index: int) -> float:
        return self.multipliers.get(round_index, 1.0)

    def cap_bonus(self, raw_bonus: float) -> float:
        """Clamp a summed bonus to [-max_bonus, max_bonus]."""
        return max(-self.max_bonus, min(self.max_bonus, raw_bonus))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScoringConfig":
        """Build from plain data; JSON-style string keys are converted to ints."""
        kwargs: Dict[str, Any] = {}
        if 'base_points' in data:
            kwargs['base_points'] = {
                int(size): {int(pos): float(pts) for pos, pts in table.items()}
                for size, table in data['base_points'].items()
            }
        if 'multipliers' in data:
            kwargs['multipliers'] = {int(r): float(m) for r, m in data['multipliers'].items()}
        for name in ('hot_streak_bonus', 'arcinemico_bonus', 'max_bonus'):
            if name in data:
                kwargs[name] = float(data[name])
        for name in ('arcinemico_threshold', 'default_table_size'):
            if name in data:
                kwargs[name] = int(data[name])
        return cls(**kwargs)


@dataclass(frozen=True)
class TournamentConfig:
    """Shape of a tournament: tables, rounds and promotion rules."""
    tables: Tuple[str, ...] = TABLES
    num_rounds: int = NUM_ROUNDS
    target_table_size: int = TARGET_TABLE_SIZE
    promote_count: int = PROMOTE_COUNT
    max_rebalance_steps: int = MAX_REBALANCE_STEPS
    scoring: ScoringConfig = field(default_factory=ScoringConfig)

    def __post_init__(self):
        # Accept any sequence of labels but store a tuple
        object.__setattr__(self, 'tables', tuple(self.tables))
        if len(self.tables) < 1:
            raise ValueError("Need at least one table")
        if len(set(self.tables)) != len(self.tables):
            raise ValueError("Table labels must be unique")
        if self.num_rounds < 1:
            raise ValueError("num_rounds must be at least 1")
        if self.target_table_size < 2:
            raise ValueError("target_table_size must be at least 2")
        if self.promote_count < 0:
            raise ValueError("promote_count must be non-negative")

    @property
    def min_players(self) -> int:
        """Smallest roster that seats at least two players per table."""
        return 2 * len(self.tables)

    def table_rank(self, table: str) -> int:
        """0 for the top table, increasing down the ladder."""
        return self.tables.index(table)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TournamentConfig":
        kwargs: Dict[str, Any] = {}
        if 'tables' in data:
            kwargs['tables'] = tuple(str(t) for t in data['tables'])
        for name in ('num_rounds', 'target_table_size', 'promote_count', 'max_rebalance_steps'):
            if name in data:
                kwargs[name] = int(data[name])
        if 'scoring' in data:
            kwargs['scoring'] = ScoringConfig.from_dict(data['scoring'])
        return cls(**kwargs)
