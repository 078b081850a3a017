"""
Situational bonuses for a round: Hot Streak and Arcinemico.

Each rule emits tagged BonusContribution entries; the per-player sum is
capped once, in the scoring step, never per rule.
"""

from dataclasses import dataclass
from enum import Enum
from itertools import combinations
from typing import Dict, Iterable, List, Mapping, Optional

from league.tournament.config import ScoringConfig
from league.tournament.meetings import MeetingsLedger
from league.tournament.models import Player, TableResult


class BonusSource(str, Enum):
    HOT_STREAK = "hot_streak"
    ARCINEMICO = "arcinemico"


@dataclass(frozen=True)
class BonusContribution:
    """A single bonus (or penalty) earned by a player this round."""
    source: BonusSource
    amount: float
    opponent: Optional[str] = None


def bonus_total(contributions: Iterable[BonusContribution]) -> float:
    """Raw, uncapped sum of a player's contributions."""
    return sum(c.amount for c in contributions)


def hot_streak_contributions(
    table: TableResult,
    players: Mapping[str, Player],
    config: ScoringConfig
) -> Dict[str, List[BonusContribution]]:
    """
    Hot Streak: won this round and the previous one, first time this tournament.

    A player with no closed rounds has no previous win and never qualifies.
    """
    out: Dict[str, List[BonusContribution]] = {}
    for pid in table.players:
        player = players[pid]
        won = table.positions[pid] == 1
        won_previous = player.rounds_played > 0 and player.last_was_win
        if won and won_previous and not player.hot_streak_triggered:
            out[pid] = [BonusContribution(BonusSource.HOT_STREAK, config.hot_streak_bonus)]
    return out


def arcinemico_contributions(
    table: TableResult,
    ledger: MeetingsLedger,
    config: ScoringConfig
) -> Dict[str, List[BonusContribution]]:
    """
    Arcinemico: rivals meeting for the (threshold + 1)-th time or later.

    Decided once per pair: the better finisher gains the bonus, the worse one
    loses it, tied positions change nothing. Contributions from several rival
    pairs at the same table accumulate.

    The ledger must not yet include this round's pairings.
    """
    out: Dict[str, List[BonusContribution]] = {}
    for a, b in combinations(table.players, 2):
        if ledger.meetings(a, b) < config.arcinemico_threshold:
            continue
        pa, pb = table.positions[a], table.positions[b]
        if pa == pb:
            continue
        winner, loser = (a, b) if pa < pb else (b, a)
        out.setdefault(winner, []).append(
            BonusContribution(BonusSource.ARCINEMICO, config.arcinemico_bonus, opponent=loser)
        )
        out.setdefault(loser, []).append(
            BonusContribution(BonusSource.ARCINEMICO, -config.arcinemico_bonus, opponent=winner)
        )
    return out


def calculate_bonuses(
    tables: Iterable[TableResult],
    players: Mapping[str, Player],
    ledger: MeetingsLedger,
    config: ScoringConfig
) -> Dict[str, List[BonusContribution]]:
    """
    Collect every bonus contribution for the round, per player.

    Args:
        tables: Completed table results for the round being finalized
        players: Player state as of the end of the previous round
        ledger: Meetings before this round
        config: Scoring configuration

    Returns:
        Player id -> contributions (players without bonuses are absent)
    """
    bonuses: Dict[str, List[BonusContribution]] = {}
    for table in tables:
        for rule_output in (
            arcinemico_contributions(table, ledger, config),
            hot_streak_contributions(table, players, config),
        ):
            for pid, contributions in rule_output.items():
                bonuses.setdefault(pid, []).extend(contributions)
    return bonuses


def hot_streak_earned(contributions: Iterable[BonusContribution]) -> bool:
    return any(c.source == BonusSource.HOT_STREAK for c in contributions)
