"""
Default constants for a ladder league tournament.
"""

# Tables, ordered from the top of the ladder to the bottom
TABLES = ("A", "B", "C", "D")

# Tournament shape
NUM_ROUNDS = 4
DEFAULT_ROSTER_SIZE = 16
TARGET_TABLE_SIZE = 4
PROMOTE_COUNT = 2            # winners promoted / losers demoted per table
MAX_REBALANCE_STEPS = 50

# Base points per finishing position, keyed by table size
BASE_POINTS_3 = {1: 6, 2: 4, 3: 2}
BASE_POINTS_4 = {1: 7, 2: 5, 3: 3, 4: 1}
BASE_POINTS_5 = {1: 7, 2: 5, 3: 3, 4: 2, 5: 1}
BASE_POINTS = {
    3: BASE_POINTS_3,
    4: BASE_POINTS_4,
    5: BASE_POINTS_5,
}

# Round multiplier (applied to base points only)
MULTIPLIER = {
    1: 1.0,
    2: 1.0,
    3: 1.25,
    4: 1.5,
}

# Bonuses
HOT_STREAK_BONUS = 1
ARCINEMICO_BONUS = 1
ARCINEMICO_THRESHOLD = 2     # prior meetings needed, i.e. the 3rd meeting
MAX_BONUS_POINTS = 3         # cap on the summed bonus per player per round

# Promotion movements
MOVE_UP = "up"
MOVE_DOWN = "down"
MOVE_STAY = "stay"

SNAPSHOT_VERSION = 1
