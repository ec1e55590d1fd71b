"""
Matching Logic Module

Provides the deterministic scoring engine for scholarship matching and
tiered recommendations.
"""

from .contracts import (
    ParsedDocument,
    ParsedData,
    EnglishScore,
    UserProfileFields,
    NormalizedProfile,
    EligibilityRule,
    ScholarshipSummary,
    CandidateScholarship,
    ScoringConfig,
    MatchResult,
    ScoredScholarship,
    RecommendationOutput,
    MatchOutput,
)
from .engine import RecommendationEngine
from .aggregator import score_scholarship
from .classifier import categorize
from .profile_extractor import extract_profile, build_profile, find_missing_data
from .constants import Category

__all__ = [
    # Main engine
    "RecommendationEngine",
    "score_scholarship",
    "categorize",
    "extract_profile",
    "build_profile",
    "find_missing_data",

    # Contracts
    "ParsedDocument",
    "ParsedData",
    "EnglishScore",
    "UserProfileFields",
    "NormalizedProfile",
    "EligibilityRule",
    "ScholarshipSummary",
    "CandidateScholarship",
    "ScoringConfig",
    "MatchResult",
    "ScoredScholarship",
    "RecommendationOutput",
    "MatchOutput",

    # Enums
    "Category",
]
