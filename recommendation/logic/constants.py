"""
Matching Engine Constants

Defines the criterion weights, thresholds, degree-level aliases and enums used by
the scholarship matching engine. All values are deterministic.
"""

from enum import Enum
from typing import Dict, Tuple

# =============================================================================
# CRITERION WEIGHTS (points out of 100)
# =============================================================================

CRITERION_WEIGHTS: Dict[str, int] = {
    "degree_level": 30,
    "gpa": 25,
    "field_of_study": 20,
    "english_score": 15,
    "country_preference": 10,
}

# Points granted when the scholarship country is not one of the user's preferences
COUNTRY_PARTIAL_CREDIT = 5

# Display names used in matched/failed criteria lists
CRITERION_LABELS: Dict[str, str] = {
    "degree_level": "Degree Level",
    "gpa": "GPA",
    "field_of_study": "Field of Study",
    "english_score": "English Score",
    "country_preference": "Country Preference",
}

MAX_SCORE = 100

# =============================================================================
# THRESHOLDS
# =============================================================================

# IELTS band applied when a scholarship asks for an English test without a score
DEFAULT_ENGLISH_THRESHOLD = 6.0

# GPA margin above the minimum that earns an extra "strong candidate" note
SIGNIFICANT_GPA_MARGIN = 0.5

# Percentage -> 4.0 scale divisor
PERCENTAGE_TO_GPA_DIVISOR = 25.0

# (max days until deadline, bonus points), checked in order
DEADLINE_BONUS_TIERS: Tuple[Tuple[int, int], ...] = (
    (7, 5),
    (30, 3),
)

# =============================================================================
# CATEGORIES
# =============================================================================

class Category(str, Enum):
    """Recommendation tiers."""
    HIGHLY_RECOMMENDED = "highly_recommended"
    PARTIALLY_SUITABLE = "partially_suitable"
    EXPLORE_AND_PREPARE = "explore_and_prepare"


HIGHLY_RECOMMENDED_MIN_SCORE = 80
PARTIALLY_SUITABLE_MIN_SCORE = 60

# Maximum number of scholarships returned per tier
MAX_RESULTS_PER_CATEGORY = 10

# =============================================================================
# DOCUMENTS & SCHOLARSHIPS
# =============================================================================

class ParsingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ScholarshipStatus(str, Enum):
    OPEN = "open"
    UPCOMING = "upcoming"
    CLOSED = "closed"


ENGLISH_TEST_TAG = "ielts"

# Field labels meaning "open to every field"
OPEN_FIELD_LABELS = ("all fields", "any field", "all", "any")

# Canonical degree levels, lowest to highest
DEGREE_LEVELS = ("+2", "Bachelor", "Master", "PhD")

# Lower-cased label -> canonical levels it stands for
DEGREE_LEVEL_ALIASES: Dict[str, Tuple[str, ...]] = {
    "+2": ("+2",),
    "plus two": ("+2",),
    "plus 2": ("+2",),
    "higher secondary": ("+2",),
    "high school": ("+2",),
    "bachelor": ("Bachelor",),
    "bachelors": ("Bachelor",),
    "bachelor's": ("Bachelor",),
    "bsc": ("Bachelor",),
    "ba": ("Bachelor",),
    "be": ("Bachelor",),
    "undergraduate": ("Bachelor",),
    "master": ("Master",),
    "masters": ("Master",),
    "master's": ("Master",),
    "msc": ("Master",),
    "ma": ("Master",),
    "mba": ("Master",),
    "graduate": ("Master", "PhD"),
    "postgraduate": ("Master", "PhD"),
    "phd": ("PhD",),
    "ph.d": ("PhD",),
    "ph.d.": ("PhD",),
    "doctorate": ("PhD",),
    "doctoral": ("PhD",),
}

# Order of the missing-data report
MISSING_DATA_LABELS = (
    "Education Level",
    "GPA",
    "Field of Study",
    "IELTS Score",
    "Preferred Countries",
)

ENGINE_VERSION = "1.0.0"
