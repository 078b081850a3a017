"""
Core data model for a ladder tournament: players, table results and rounds.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass
class Player:
    """A tournament participant and their accumulated results."""
    id: str
    name: str
    total: float = 0.0
    round_points: List[float] = field(default_factory=list)
    wins: int = 0
    games_played: List[str] = field(default_factory=list)
    hot_streak_triggered: bool = False
    manual_adjustments: Dict[int, float] = field(default_factory=dict)
    # Whether the player won the most recently closed round
    last_was_win: bool = False

    @property
    def rounds_played(self) -> int:
        return len(self.round_points)

    @property
    def adjustment_total(self) -> float:
        return sum(self.manual_adjustments.values())

    def adjusted_round_points(self) -> List[float]:
        """Per-round scores with manual adjustments applied (index = round - 1)."""
        return [
            round(points + self.manual_adjustments.get(i, 0.0), 2)
            for i, points in enumerate(self.round_points, 1)
        ]

    def expected_total(self) -> float:
        return round(sum(self.round_points) + self.adjustment_total, 2)

    def record_game(self, title: str):
        if title not in self.games_played:
            self.games_played.append(title)


@dataclass
class TableResult:
    """One table in one round: who sat there, what they played, how they finished."""
    table: str
    players: List[str]
    game: Optional[str] = None
    positions: Dict[str, Optional[int]] = field(default_factory=dict)

    def __post_init__(self):
        for pid in self.players:
            self.positions.setdefault(pid, None)

    @property
    def size(self) -> int:
        return len(self.players)

    def missing_positions(self) -> List[str]:
        return [pid for pid in self.players if self.positions.get(pid) is None]

    @property
    def is_complete(self) -> bool:
        return self.game is not None and not self.missing_positions()

    def ranked(self) -> List[Tuple[str, int]]:
        """(player, position) sorted by position; equal positions keep seating order."""
        entries = [(pid, self.positions[pid]) for pid in self.players]
        return sorted(entries, key=lambda e: e[1])

    def position_groups(self) -> Dict[int, List[str]]:
        """Position -> players sharing it, in seating order."""
        groups: Dict[int, List[str]] = {}
        for pid in self.players:
            groups.setdefault(self.positions[pid], []).append(pid)
        return groups

    def winners(self) -> List[str]:
        return [pid for pid in self.players if self.positions.get(pid) == 1]


@dataclass
class Round:
    """A numbered round of play across all tables."""
    index: int
    tables: List[TableResult]
    finalized: bool = False

    def table(self, label: str) -> Optional[TableResult]:
        for t in self.tables:
            if t.table == label:
                return t
        return None

    def player_ids(self) -> List[str]:
        return [pid for t in self.tables for pid in t.players]

    def table_of(self, player_id: str) -> Optional[TableResult]:
        for t in self.tables:
            if player_id in t.players:
                return t
        return None

    def memberships(self) -> List[List[str]]:
        return [list(t.players) for t in self.tables]

    @property
    def is_complete(self) -> bool:
        return all(t.is_complete for t in self.tables)

    def assignments(self) -> Dict[str, List[str]]:
        return {t.table: list(t.players) for t in self.tables}


def make_round(index: int, assignments: Dict[str, List[str]], tables) -> Round:
    """Create an empty open round from table -> players assignments."""
    return Round(
        index=index,
        tables=[TableResult(table=t, players=list(assignments.get(t, []))) for t in tables],
    )


@dataclass
class StandingRow:
    """One line of the standings table."""
    id: str
    name: str
    total: float
    wins: int
    sos: float
    h2h: Dict[str, int]
    rounds: List[float]
    games: List[str]
    rank: int = 0
