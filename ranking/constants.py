"""
Scoring and tier constants for the YGO ranking engine
"""

# =====================================================
# Placements
# =====================================================

# Placements 1-4 count as a TOP
TOP_POSITIONS = 4
FIRST_PLACE = 1
SECOND_PLACE = 2
THIRD_PLACE = 3
FOURTH_PLACE = 4

# Points per placement
PLACEMENT_POINTS = {
    FIRST_PLACE: 4,   # champion
    SECOND_PLACE: 3,  # runner-up
    THIRD_PLACE: 2,
    FOURTH_PLACE: 2,
}


# =====================================================
# Tournament / penalty partitions
# =====================================================

TOURNAMENT_TYPE_REGULAR = "regular"
TOURNAMENT_TYPE_BEGINNER = "beginner"

SCOPE_VETERAN = "veteran"
SCOPE_BEGINNER = "beginner"
SCOPE_ALL = "all"

SCOPES = (SCOPE_VETERAN, SCOPE_BEGINNER, SCOPE_ALL)


# =====================================================
# Tiers
# =====================================================

TIERS = ("S", "A", "B", "C", "D")

# Point threshold = ceil(avg_points * multiplier)
TIER_POINT_MULTIPLIERS = {
    "S": 1.75,
    "A": 1.25,
    "B": 0.85,
    "C": 0.55,
}

# Advisory slot count = max(1, floor(eligible * ratio))
TIER_SLOT_RATIOS = {
    "S": 0.05,  # top 5%
    "A": 0.15,  # next 15%
    "B": 0.25,  # next 25%
}

# (max percentile exclusive, min TOP %)
TIER_GATES = {
    "S": (5, 55),
    "A": (20, 45),
    "B": (45, 35),
}

# Minimum participations to receive a tier
MIN_TOURNAMENTS_FOR_TIER = 1

# Beginner ranking has no tier system
BEGINNER_TIER_SLOTS = {"S": 0, "A": 0, "B": 0}


# =====================================================
# Statistics
# =====================================================

TOP_PLAYERS_LIMIT = 10
BEST_PERFORMANCE_LIMIT = 8
MINIMUM_TOURNAMENTS_FOR_RANKING = 2
TREND_WINDOW = 3
IMPROVEMENT_THRESHOLD = 10.0
