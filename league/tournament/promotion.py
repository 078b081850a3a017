"""
Promotion and demotion between rounds.

Each table sends its top finishers one table up and its bottom finishers one
table down; the top table keeps its winners and the bottom table keeps its
losers. Ties straddling a cut are broken by tournament total, and only ties
that survive that are broken with the injected random source. Table sizes are
then rebalanced toward the target, one player at a time.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from league.tournament.config import TournamentConfig
from league.tournament.errors import DiagnosticWarning
from league.tournament.models import Round, TableResult
from league.utils.constants import MOVE_UP, MOVE_DOWN, MOVE_STAY

logger = logging.getLogger(__name__)


@dataclass
class TableMovement:
    """Who leaves a table upward and downward."""
    table: str
    winners: List[str]
    losers: List[str]
    stayers: List[str]


@dataclass
class PromotionResult:
    """Next round's assignments and how they were reached."""
    assignments: Dict[str, List[str]]
    movements: Dict[str, str]
    tables: List[TableMovement] = field(default_factory=list)
    rebalance_moves: List[Tuple[str, str, str]] = field(default_factory=list)
    diagnostics: List[DiagnosticWarning] = field(default_factory=list)

    @property
    def guard_exhausted(self) -> bool:
        return any(d.code == "rebalance_guard" for d in self.diagnostics)


def pick_with_boundary(
    ranked: Sequence[Tuple[str, int]],
    k: int,
    totals: Mapping[str, float],
    prefer_high_total: bool,
    rng: random.Random
) -> List[str]:
    """
    Take the first k players of a position-ordered list.

    If the k-th and (k+1)-th players share a position, the contested slots
    go to the tied block ordered by total (higher first when prefer_high_total,
    lower first otherwise). Players still level on total are drawn at random.

    Args:
        ranked: (player, position) in cut order (best-first for winners,
                worst-first for losers)
        k: Number of players to take
        totals: Player id -> tournament total
        prefer_high_total: Direction of the total tie-break
        rng: Random source for exact ties

    Returns:
        The selected player ids
    """
    if k <= 0:
        return []
    if len(ranked) <= k:
        return [pid for pid, _ in ranked]

    edge_pos = ranked[k - 1][1]
    if ranked[k][1] != edge_pos:
        return [pid for pid, _ in ranked[:k]]

    start = next(i for i, (_, pos) in enumerate(ranked) if pos == edge_pos)
    fixed = [pid for pid, _ in ranked[:start]]
    contenders = [pid for pid, pos in ranked[start:] if pos == edge_pos]
    need = k - len(fixed)

    # Group contenders by total, best group first
    by_total: Dict[float, List[str]] = {}
    for pid in contenders:
        by_total.setdefault(totals.get(pid, 0.0), []).append(pid)
    ordered_totals = sorted(by_total, reverse=prefer_high_total)

    picked: List[str] = []
    for total in ordered_totals:
        group = by_total[total]
        remaining = need - len(picked)
        if remaining <= 0:
            break
        if len(group) <= remaining:
            picked.extend(group)
        else:
            drawn = rng.sample(group, remaining)
            logger.debug("Random tie-break among %s on total %s: picked %s", group, total, drawn)
            picked.extend(drawn)

    return fixed + picked


def decide_winners_losers(
    table: TableResult,
    totals: Mapping[str, float],
    k: int,
    rng: random.Random
) -> TableMovement:
    """Split a completed table into winners, losers and stayers."""
    ranked = table.ranked()
    winners = pick_with_boundary(ranked, k, totals, True, rng)
    rest = [entry for entry in ranked if entry[0] not in winners]
    losers = pick_with_boundary(list(reversed(rest)), k, totals, False, rng)
    stayers = [pid for pid in table.players if pid not in winners and pid not in losers]
    return TableMovement(table=table.table, winners=winners, losers=losers, stayers=stayers)


class PromotionEngine:
    """
    Computes next-round table assignments from a finalized round.

    Usage:
        engine = PromotionEngine(config, rng=random.Random(7))
        result = engine.compute(round_, totals)
    """

    def __init__(self, config: Optional[TournamentConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or TournamentConfig()
        self.rng = rng or random.Random()

    def compute(self, round_: Round, totals: Mapping[str, float]) -> PromotionResult:
        """
        Args:
            round_: The finalized round
            totals: Player id -> total after this round's scoring

        Returns:
            PromotionResult with an assignment for every label in config.tables
        """
        tables = self.config.tables
        last = len(tables) - 1
        nxt: Dict[str, List[str]] = {t: [] for t in tables}
        movements: Dict[str, str] = {}
        table_moves: List[TableMovement] = []

        for table in round_.tables:
            move = decide_winners_losers(table, totals, self.config.promote_count, self.rng)
            table_moves.append(move)
            idx = self.config.table_rank(table.table)
            up = tables[max(0, idx - 1)]
            down = tables[min(last, idx + 1)]

            nxt[up].extend(move.winners)
            nxt[down].extend(move.losers)
            nxt[table.table].extend(move.stayers)
            for pid in move.winners:
                movements[pid] = MOVE_UP if idx > 0 else MOVE_STAY
            for pid in move.losers:
                movements[pid] = MOVE_DOWN if idx < last else MOVE_STAY
            for pid in move.stayers:
                movements[pid] = MOVE_STAY

        rebalance_moves, diagnostics = self.rebalance(nxt)
        return PromotionResult(
            assignments=nxt,
            movements=movements,
            tables=table_moves,
            rebalance_moves=rebalance_moves,
            diagnostics=diagnostics,
        )

    def size_bounds(self, num_players: int) -> Tuple[int, int]:
        """
        (lo, hi) table sizes rebalancing aims for.

        With a full roster both equal the target size; otherwise they bracket
        the even split of the roster over the tables.
        """
        num_tables = len(self.config.tables)
        target = self.config.target_table_size
        lo = min(target, num_players // num_tables)
        hi = max(target, -(-num_players // num_tables))
        return lo, hi

    def rebalance(self, nxt: Dict[str, List[str]]) -> Tuple[List[Tuple[str, str, str]], List[DiagnosticWarning]]:
        """
        Move players one at a time from surplus tables to deficit tables.

        Adjacent donors are preferred; otherwise the first surplus table gives.
        The loop is bounded by config.max_rebalance_steps.

        Returns:
            ([(player, from_table, to_table), ...], diagnostics)
        """
        tables = self.config.tables
        lo, hi = self.size_bounds(sum(len(v) for v in nxt.values()))
        moves: List[Tuple[str, str, str]] = []

        def next_move() -> Optional[Tuple[str, str]]:
            deficit = [t for t in tables if len(nxt[t]) < lo]
            if deficit:
                receiver = deficit[0]
                donors = [t for t in tables if len(nxt[t]) > lo]
            else:
                overfull = [t for t in tables if len(nxt[t]) > hi]
                if not overfull:
                    return None
                receivers = [t for t in tables if len(nxt[t]) < hi]
                if not receivers:
                    return None
                donors = overfull
                receiver = _nearest(tables, receivers, overfull[0])
            if not donors:
                return None
            return _nearest(tables, donors, receiver), receiver

        guard = self.config.max_rebalance_steps
        while guard > 0:
            step = next_move()
            if step is None:
                return moves, []
            donor, receiver = step
            pid = nxt[donor].pop()
            nxt[receiver].append(pid)
            moves.append((pid, donor, receiver))
            guard -= 1

        if next_move() is None:
            return moves, []

        sizes = {t: len(nxt[t]) for t in tables}
        diagnostic = DiagnosticWarning(
            "rebalance_guard",
            f"Rebalancing stopped after {self.config.max_rebalance_steps} moves; table sizes {sizes}",
        )
        logger.warning(diagnostic.message)
        return moves, [diagnostic]


def _nearest(tables: Sequence[str], candidates: Sequence[str], anchor: str) -> str:
    """The candidate adjacent to anchor if any, else the first candidate."""
    idx = tables.index(anchor)
    for neighbour in (idx - 1, idx + 1):
        if 0 <= neighbour < len(tables) and tables[neighbour] in candidates:
            return tables[neighbour]
    return candidates[0]


def compute_promotions(
    round_: Round,
    totals: Mapping[str, float],
    config: Optional[TournamentConfig] = None,
    rng: Optional[random.Random] = None
) -> PromotionResult:
    """Convenience wrapper around PromotionEngine.compute()."""
    return PromotionEngine(config, rng).compute(round_, totals)
