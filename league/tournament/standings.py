"""
Standings with tie-breakers.

Recomputed from scratch from players and closed rounds every time:
    total -> strength of schedule -> wins -> head-to-head -> name -> id
"""

from functools import cmp_to_key
from itertools import combinations
from typing import Dict, Iterable, List, Sequence

from league.tournament.models import Player, Round, StandingRow


def closed_rounds(rounds: Iterable[Round]) -> List[Round]:
    return [r for r in rounds if r.finalized]


def calculate_sos(rounds: Iterable[Round], players: Dict[str, Player]) -> Dict[str, float]:
    """
    Strength of schedule: sum of the current totals of everyone a player
    shared a table with, once per shared round.
    """
    sos: Dict[str, float] = {}
    for r in closed_rounds(rounds):
        for table in r.tables:
            for a in table.players:
                sos.setdefault(a, 0.0)
                for b in table.players:
                    if a != b and b in players:
                        sos[a] += players[b].total
    return {pid: round(value, 2) for pid, value in sos.items()}


def calculate_h2h(rounds: Iterable[Round]) -> Dict[str, Dict[str, int]]:
    """
    Head-to-head tally: h2h[p][q] gains 1 for every shared round where p
    finished ahead of q, loses 1 where p finished behind. Always
    h2h[p][q] == -h2h[q][p].
    """
    h2h: Dict[str, Dict[str, int]] = {}
    for r in closed_rounds(rounds):
        for table in r.tables:
            for a, b in combinations(table.players, 2):
                pa, pb = table.positions[a], table.positions[b]
                if pa == pb:
                    continue
                delta = 1 if pa < pb else -1
                h2h.setdefault(a, {})
                h2h.setdefault(b, {})
                h2h[a][b] = h2h[a].get(b, 0) + delta
                h2h[b][a] = h2h[b].get(a, 0) - delta
    return h2h


def _compare(a: StandingRow, b: StandingRow) -> int:
    """Negative when a ranks above b."""
    if a.total != b.total:
        return -1 if a.total > b.total else 1
    if a.sos != b.sos:
        return -1 if a.sos > b.sos else 1
    if a.wins != b.wins:
        return -1 if a.wins > b.wins else 1

    d = a.h2h.get(b.id, 0) - b.h2h.get(a.id, 0)
    if d != 0:
        return -1 if d > 0 else 1

    if a.name != b.name:
        return -1 if a.name < b.name else 1
    if a.id != b.id:
        return -1 if a.id < b.id else 1
    return 0


def calculate_standings(players: Sequence[Player], rounds: Iterable[Round]) -> List[StandingRow]:
    """
    Build the ranked standings table.

    Args:
        players: All players (totals already include manual adjustments)
        rounds: Rounds so far; open rounds are ignored

    Returns:
        StandingRow list, best first, with rank set from 1
    """
    rounds = list(rounds)
    by_id = {p.id: p for p in players}
    sos = calculate_sos(rounds, by_id)
    h2h = calculate_h2h(rounds)

    rows = [
        StandingRow(
            id=p.id,
            name=p.name,
            total=round(p.total, 2),
            wins=p.wins,
            sos=sos.get(p.id, 0.0),
            h2h=dict(h2h.get(p.id, {})),
            rounds=p.adjusted_round_points(),
            games=list(p.games_played),
        )
        for p in players
    ]

    rows.sort(key=cmp_to_key(_compare))
    for i, row in enumerate(rows, 1):
        row.rank = i
    return rows
