"""
Utilities module for the ladder league.
"""
from league.utils.constants import (
    TABLES, NUM_ROUNDS, DEFAULT_ROSTER_SIZE, TARGET_TABLE_SIZE,
    PROMOTE_COUNT, MAX_REBALANCE_STEPS,
    BASE_POINTS, BASE_POINTS_3, BASE_POINTS_4, BASE_POINTS_5, MULTIPLIER,
    HOT_STREAK_BONUS, ARCINEMICO_BONUS, ARCINEMICO_THRESHOLD, MAX_BONUS_POINTS,
    MOVE_UP, MOVE_DOWN, MOVE_STAY, SNAPSHOT_VERSION
)
from league.utils.logger import configure_root_logger, get_logger, setup_logger

__all__ = [
    'TABLES', 'NUM_ROUNDS', 'DEFAULT_ROSTER_SIZE', 'TARGET_TABLE_SIZE',
    'PROMOTE_COUNT', 'MAX_REBALANCE_STEPS',
    'BASE_POINTS', 'BASE_POINTS_3', 'BASE_POINTS_4', 'BASE_POINTS_5', 'MULTIPLIER',
    'HOT_STREAK_BONUS', 'ARCINEMICO_BONUS', 'ARCINEMICO_THRESHOLD', 'MAX_BONUS_POINTS',
    'MOVE_UP', 'MOVE_DOWN', 'MOVE_STAY', 'SNAPSHOT_VERSION',
    'configure_root_logger', 'get_logger', 'setup_logger',
]
