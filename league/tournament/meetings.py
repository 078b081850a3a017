"""
Pairwise meetings ledger.

Counts how many closed rounds each unordered pair of players shared a table.
The ledger only ever grows: one record_round() call per finalized round.
"""

from itertools import combinations
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple


Pair = Tuple[str, str]


def pair_key(a: str, b: str) -> Pair:
    """Canonical key for an unordered pair."""
    return (a, b) if a <= b else (b, a)


class MeetingsLedger:
    """Append-only counts of shared-table rounds per player pair."""

    def __init__(self, counts: Optional[Dict[Pair, int]] = None):
        self._counts: Dict[Pair, int] = {}
        for (a, b), count in (counts or {}).items():
            if a == b:
                raise ValueError(f"A player cannot meet themselves: {a}")
            if count < 0:
                raise ValueError(f"Negative meeting count for {a}/{b}: {count}")
            if count:
                self._counts[pair_key(a, b)] = count

    def meetings(self, a: str, b: str) -> int:
        """Number of rounds a and b shared a table (0 if never)."""
        return self._counts.get(pair_key(a, b), 0)

    def record_round(self, table_memberships: Iterable[Sequence[str]]):
        """Add one meeting for every pair seated together at a table."""
        for members in table_memberships:
            for a, b in combinations(members, 2):
                key = pair_key(a, b)
                self._counts[key] = self._counts.get(key, 0) + 1

    def pairs(self) -> Iterator[Tuple[Pair, int]]:
        return iter(sorted(self._counts.items()))

    def opponents_of(self, player_id: str) -> Dict[str, int]:
        """Everyone player_id has met, with counts."""
        out = {}
        for (a, b), count in self._counts.items():
            if a == player_id:
                out[b] = count
            elif b == player_id:
                out[a] = count
        return out

    def copy(self) -> "MeetingsLedger":
        return MeetingsLedger(dict(self._counts))

    def to_records(self) -> List[dict]:
        """Serializable form: [{'players': [a, b], 'count': n}, ...]."""
        return [{'players': [a, b], 'count': count} for (a, b), count in self.pairs()]

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "MeetingsLedger":
        counts: Dict[Pair, int] = {}
        for record in records:
            a, b = record['players']
            key = pair_key(a, b)
            if key in counts:
                raise ValueError(f"Duplicate meeting record for {a}/{b}")
            counts[key] = int(record['count'])
        return cls(counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __eq__(self, other) -> bool:
        if not isinstance(other, MeetingsLedger):
            return NotImplemented
        return self._counts == other._counts

    def __repr__(self) -> str:
        return f"MeetingsLedger({len(self._counts)} pairs)"
