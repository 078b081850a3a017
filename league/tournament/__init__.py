"""
Ladder tournament engine.

Provides:
- Tournament: round lifecycle, finalize, adjustments and snapshots
- MeetingsLedger: pairwise shared-table counts
- calculate_bonuses / score_round: Hot Streak, Arcinemico and round scoring
- PromotionEngine: promotion, demotion and table rebalancing
- calculate_standings: ranked standings with SOS and head-to-head
"""

from league.tournament.config import ScoringConfig, TournamentConfig
from league.tournament.errors import (
    LeagueError,
    ValidationError,
    IncompleteRound,
    NoGameSelected,
    UndersizedRoster,
    RoundClosed,
    UnknownPlayer,
    UnknownTable,
    InvalidPosition,
    ConsistencyError,
    DiagnosticWarning,
)
from league.tournament.models import Player, TableResult, Round, StandingRow
from league.tournament.meetings import MeetingsLedger, pair_key
from league.tournament.bonuses import BonusSource, BonusContribution, calculate_bonuses
from league.tournament.scoring import RoundScore, score_round, score_table
from league.tournament.promotion import PromotionEngine, PromotionResult, compute_promotions
from league.tournament.standings import calculate_standings
from league.tournament.engine import Tournament, FinalizeResult
from league.tournament.display import format_standings, format_round, format_promotions

__all__ = [
    'ScoringConfig',
    'TournamentConfig',
    'LeagueError',
    'ValidationError',
    'IncompleteRound',
    'NoGameSelected',
    'UndersizedRoster',
    'RoundClosed',
    'UnknownPlayer',
    'UnknownTable',
    'InvalidPosition',
    'ConsistencyError',
    'DiagnosticWarning',
    'Player',
    'TableResult',
    'Round',
    'StandingRow',
    'MeetingsLedger',
    'pair_key',
    'BonusSource',
    'BonusContribution',
    'calculate_bonuses',
    'RoundScore',
    'score_round',
    'score_table',
    'PromotionEngine',
    'PromotionResult',
    'compute_promotions',
    'calculate_standings',
    'Tournament',
    'FinalizeResult',
    'format_standings',
    'format_round',
    'format_promotions',
]
