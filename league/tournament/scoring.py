"""
Round scoring.

Base points come from finishing position, averaged over tied positions:
players sharing position p in a group of k each receive the mean of the base
values for positions p..p+k-1. The round multiplier scales base points only;
the summed bonus is clamped to [-max_bonus, max_bonus] and added after:

    round_score = round(base * multiplier + clamp(raw_bonus), 2)
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping

from league.tournament.bonuses import BonusContribution, bonus_total
from league.tournament.config import ScoringConfig
from league.tournament.errors import IncompleteRound, NoGameSelected
from league.tournament.models import TableResult


@dataclass
class RoundScore:
    """How a player's score for one round was built."""
    player_id: str
    table: str
    position: int
    base_points: float
    multiplier: float
    bonuses: List[BonusContribution] = field(default_factory=list)
    raw_bonus: float = 0.0
    capped_bonus: float = 0.0
    points: float = 0.0

    @property
    def is_win(self) -> bool:
        return self.position == 1


def validate_table(table: TableResult):
    """Raise if the table cannot be scored yet."""
    if not table.game:
        raise NoGameSelected(table.table)
    missing = table.missing_positions()
    if missing:
        raise IncompleteRound(table.table, missing)


def validate_tables(tables: Iterable[TableResult]):
    for table in tables:
        validate_table(table)


def base_points_for_positions(
    table_size: int,
    positions: List[int],
    config: ScoringConfig
) -> float:
    """Average base value over a run of positions; positions off the scale count 0."""
    scale = config.base_points_for(table_size)
    return sum(scale.get(p, 0) for p in positions) / len(positions)


def table_base_points(table: TableResult, config: ScoringConfig) -> Dict[str, float]:
    """Tie-averaged base points for every player at a completed table."""
    validate_table(table)
    out: Dict[str, float] = {}
    for position, ids in table.position_groups().items():
        run = [position + i for i in range(len(ids))]
        base = base_points_for_positions(table.size, run, config)
        for pid in ids:
            out[pid] = base
    return out


def round_score(
    base_points: float,
    multiplier: float,
    raw_bonus: float,
    config: ScoringConfig
) -> float:
    return round(base_points * multiplier + config.cap_bonus(raw_bonus), 2)


def score_table(
    table: TableResult,
    round_index: int,
    bonuses: Mapping[str, List[BonusContribution]],
    config: ScoringConfig
) -> Dict[str, RoundScore]:
    """
    Score one completed table.

    Args:
        table: Table with every position recorded and a game selected
        round_index: 1-based round number (selects the multiplier)
        bonuses: Player id -> raw bonus contributions for this round
        config: Scoring configuration

    Returns:
        Player id -> RoundScore

    Raises:
        NoGameSelected, IncompleteRound
    """
    multiplier = config.multiplier_for(round_index)
    base = table_base_points(table, config)

    scores = {}
    for pid in table.players:
        contributions = list(bonuses.get(pid, []))
        raw = bonus_total(contributions)
        scores[pid] = RoundScore(
            player_id=pid,
            table=table.table,
            position=table.positions[pid],
            base_points=base[pid],
            multiplier=multiplier,
            bonuses=contributions,
            raw_bonus=raw,
            capped_bonus=config.cap_bonus(raw),
            points=round_score(base[pid], multiplier, raw, config),
        )
    return scores


def score_round(
    tables: Iterable[TableResult],
    round_index: int,
    bonuses: Mapping[str, List[BonusContribution]],
    config: ScoringConfig
) -> Dict[str, RoundScore]:
    """Score every table of a round. All tables are validated before any is scored."""
    tables = list(tables)
    validate_tables(tables)
    scores: Dict[str, RoundScore] = {}
    for table in tables:
        scores.update(score_table(table, round_index, bonuses, config))
    return scores
