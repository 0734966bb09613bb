"""
Global constants for the scoring core.

Centralizes magic numbers used by the scorers, the preference engine and the
consensus aggregator so they can be tuned in one place. Structured overrides
live in ``civic_scoring.config``.
"""

# Needs-based scale: 0 = extremely harmful, 5 = no effect, 10 = extremely beneficial
MIN_SCORE = 0.0
NEUTRAL_SCORE = 5.0
MAX_SCORE = 10.0

# Ratings
MIN_RATING = -2
MAX_RATING = 2
RATING_VALUES = (-2, -1, 0, 1, 2)

# Floating-point tolerances
NEUTRAL_TOLERANCE = 1e-9  # |overall - 5| below this is labeled neutral
WEIGHT_SUM_TOLERANCE = 1e-6  # Archetype weights must sum to 1 within this

# Combined (needs + dimensions) score split
COMBINED_NEED_SHARE = 0.5
COMBINED_DIMENSION_SHARE = 0.5

# Preference profile display range (radar chart axes)
PROFILE_DISPLAY_MIN = 0.0
PROFILE_DISPLAY_MAX = 100.0

# Profile confidence by number of contributing ratings
PROFILE_MEDIUM_CONFIDENCE_AT = 5
PROFILE_HIGH_CONFIDENCE_AT = 10

# Consensus classification (majority side, whole percent)
CONSENSUS_STRONG_THRESHOLD = 70
CONSENSUS_MODERATE_THRESHOLD = 55

# Consensus list views
CONSENSUS_ITEM_THRESHOLD = 60  # supportPercent at or above counts as a consensus item
BIPARTISAN_THRESHOLD = 50  # every group's support strictly above this
TOP_CONSENSUS_THRESHOLD = 65  # national headline list
TOP_CONSENSUS_LIMIT = 10

# Cross-archetype spread classification (0-10 scale)
SPREAD_ALL_HIGH = 7.0  # every archetype scores above this
SPREAD_ALL_LOW = 4.0  # every archetype scores below this
SPREAD_LOW_STDEV = 1.0
SPREAD_HIGH_STDEV = 2.0
SPREAD_HIDDEN_AGREEMENT_MEAN = 6.0

# Archetype matching
ARCHETYPE_MAX_DISTANCE = 0.5  # distance at which similarity bottoms out
ARCHETYPE_SIMILARITY_DECAY = 3.0

# ImpactScorer memo entries kept before the least recently used is evicted
IMPACT_CACHE_MAXSIZE = 1024
