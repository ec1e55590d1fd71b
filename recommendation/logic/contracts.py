"""
Data Contracts for the Scholarship Matching Engine

Defines Pydantic models for the engine inputs (parsed documents, user profile,
scholarship eligibility rules), the derived NormalizedProfile and the engine
outputs (MatchResult, RecommendationOutput, MatchOutput).
Absent values are always None so that "not provided" never reads as zero.
"""

import math
from datetime import datetime
from typing import List, Optional, Dict, Any, Tuple
from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from .constants import (
    Category,
    ParsingStatus,
    ScholarshipStatus,
    CRITERION_WEIGHTS,
    COUNTRY_PARTIAL_CREDIT,
    DEFAULT_ENGLISH_THRESHOLD,
    DEADLINE_BONUS_TIERS,
    HIGHLY_RECOMMENDED_MIN_SCORE,
    PARTIALLY_SUITABLE_MIN_SCORE,
    MAX_RESULTS_PER_CATEGORY,
    SIGNIFICANT_GPA_MARGIN,
    PERCENTAGE_TO_GPA_DIVISOR,
    MAX_SCORE,
    ENGINE_VERSION,
)


def _in_range_or_none(value: Any, low: float, high: float) -> Optional[float]:
    """Coerce to float; anything unparsable or outside [low, high] becomes None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or not low <= number <= high:
        return None
    return number


# =============================================================================
# INPUT CONTRACTS
# =============================================================================

class EnglishScore(BaseModel):
    """IELTS-style sub-scores, each on the 0-9 band scale."""
    listening: Optional[float] = None
    reading: Optional[float] = None
    writing: Optional[float] = None
    speaking: Optional[float] = None
    overall: Optional[float] = None

    @field_validator("listening", "reading", "writing", "speaking", "overall", mode="before")
    @classmethod
    def _band_in_range(cls, value: Any) -> Optional[float]:
        return _in_range_or_none(value, 0.0, 9.0)


class ParsedData(BaseModel):
    """Fields extracted from an uploaded document by the parsing pipeline."""
    level: Optional[str] = None
    gpa: Optional[float] = None
    percentage: Optional[float] = None
    stream: Optional[str] = None
    passing_year: Optional[int] = None
    degree_name: Optional[str] = None
    english_score: Optional[EnglishScore] = None

    @field_validator("gpa", mode="before")
    @classmethod
    def _gpa_in_range(cls, value: Any) -> Optional[float]:
        return _in_range_or_none(value, 0.0, 4.0)

    @field_validator("percentage", mode="before")
    @classmethod
    def _percentage_in_range(cls, value: Any) -> Optional[float]:
        return _in_range_or_none(value, 0.0, 100.0)

    @field_validator("passing_year", mode="before")
    @classmethod
    def _year_or_none(cls, value: Any) -> Optional[int]:
        year = _in_range_or_none(value, 1900, 2200)
        return int(year) if year is not None else None

    @field_validator("level", "stream", "degree_name", mode="before")
    @classmethod
    def _blank_is_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None


class ParsedDocument(BaseModel):
    """A user document as stored by the upload/parsing subsystem."""
    id: Optional[str] = None
    user_id: Optional[str] = None
    type: Optional[str] = None             # +2/bachelor/ielts/master/phd/other
    document_type: Optional[str] = None    # transcript/certificate/passport/ielts/other
    parsing_status: str = ParsingStatus.PENDING.value
    uploaded_at: Optional[datetime] = None
    parsed_data: Optional[ParsedData] = None


class UserProfileFields(BaseModel):
    """Explicit profile fields the user entered; fallback for document data."""
    education_level: Optional[str] = None
    gpa: Optional[float] = None
    major: Optional[str] = None
    preferred_countries: List[str] = Field(default_factory=list)

    @field_validator("gpa", mode="before")
    @classmethod
    def _gpa_in_range(cls, value: Any) -> Optional[float]:
        return _in_range_or_none(value, 0.0, 4.0)

    @field_validator("preferred_countries", mode="before")
    @classmethod
    def _clean_countries(cls, value: Any) -> List[str]:
        if not value:
            return []
        if isinstance(value, str):
            value = [value]
        return [str(c).strip() for c in value if c and str(c).strip()]


class NormalizedProfile(BaseModel):
    """
    Authoritative academic snapshot used for scoring.
    Derived per request from documents + profile; never persisted.
    """
    degree_level: Optional[str] = None
    gpa: Optional[float] = None
    percentage: Optional[float] = None
    field_of_study: Optional[str] = None
    passing_year: Optional[int] = None
    english_score: Optional[EnglishScore] = None
    preferred_countries: List[str] = Field(default_factory=list)
    gpa_source: Optional[str] = None  # document/percentage/profile

    @property
    def usable_gpa(self) -> Optional[float]:
        if self.gpa is not None:
            return self.gpa
        if self.percentage is not None:
            return self.percentage / PERCENTAGE_TO_GPA_DIVISOR
        return None

    @property
    def english_overall(self) -> Optional[float]:
        return self.english_score.overall if self.english_score else None


class EligibilityRule(BaseModel):
    """
    Entry requirements of one scholarship.
    Every requirement is optional - absent means "no requirement".
    """
    scholarship_id: Optional[str] = None
    title: str = ""
    degree_levels: List[str] = Field(default_factory=list)
    min_gpa: Optional[float] = None
    required_fields: List[str] = Field(default_factory=list)
    required_english_score: Optional[float] = None
    requires_english_test: bool = False
    country: Optional[str] = None
    deadline: Optional[datetime] = None
    status: str = ScholarshipStatus.OPEN.value
    verified: bool = False

    @property
    def has_english_requirement(self) -> bool:
        return bool(self.required_english_score) or self.requires_english_test


class ScholarshipSummary(BaseModel):
    """Display fields returned alongside a match."""
    id: Optional[str] = None
    title: str = ""
    country: Optional[str] = None
    level: List[str] = Field(default_factory=list)
    fields: List[str] = Field(default_factory=list)
    deadline: Optional[datetime] = None
    amount: Optional[str] = None
    university_name: Optional[str] = None
    status: Optional[str] = None
    verified: bool = False


class CandidateScholarship(BaseModel):
    """A scholarship ready for scoring: its rule plus what the caller displays."""
    rule: EligibilityRule
    summary: ScholarshipSummary


class ScoringConfig(BaseModel):
    """
    Weights and thresholds passed explicitly into the scorer, categorizer and
    ranker. Defaults mirror constants.py.
    """
    weights: Dict[str, int] = Field(default_factory=lambda: dict(CRITERION_WEIGHTS))
    country_partial_credit: int = COUNTRY_PARTIAL_CREDIT
    default_english_threshold: float = DEFAULT_ENGLISH_THRESHOLD
    deadline_bonus_tiers: List[Tuple[int, int]] = Field(
        default_factory=lambda: list(DEADLINE_BONUS_TIERS)
    )
    highly_recommended_min_score: int = HIGHLY_RECOMMENDED_MIN_SCORE
    partially_suitable_min_score: int = PARTIALLY_SUITABLE_MIN_SCORE
    max_results_per_category: int = Field(default=MAX_RESULTS_PER_CATEGORY, ge=1)
    significant_gpa_margin: float = SIGNIFICANT_GPA_MARGIN

    @model_validator(mode="after")
    def _check_weights(self) -> "ScoringConfig":
        missing = set(CRITERION_WEIGHTS) - set(self.weights)
        if missing:
            raise ValueError(f"Missing criterion weights: {sorted(missing)}")
        total = sum(self.weights[k] for k in CRITERION_WEIGHTS)
        if total != MAX_SCORE:
            raise ValueError(f"Criterion weights must sum to {MAX_SCORE}, got {total}")
        if self.highly_recommended_min_score <= self.partially_suitable_min_score:
            raise ValueError("highly_recommended_min_score must exceed partially_suitable_min_score")
        return self


# =============================================================================
# OUTPUT CONTRACTS
# =============================================================================

class CriterionOutcome(BaseModel):
    """Result of evaluating one criterion."""
    criterion: str
    label: str
    points: int = 0
    matched: bool = False
    failed: bool = False
    why_recommended: List[str] = Field(default_factory=list)
    why_not: List[str] = Field(default_factory=list)
    preparation_steps: List[str] = Field(default_factory=list)


class MatchDetails(BaseModel):
    """Profile values the decision was based on."""
    user_gpa: Optional[float] = None
    user_ielts: Optional[float] = None
    user_level: Optional[str] = None
    user_field: Optional[str] = None


class MatchResult(BaseModel):
    """
    Outcome of scoring one scholarship against one profile.
    `eligible` is derived from failed_criteria and cannot be set.
    """
    score: int = Field(ge=0, le=MAX_SCORE)
    category: Category
    matched_criteria: List[str] = Field(default_factory=list)
    failed_criteria: List[str] = Field(default_factory=list)
    why_recommended: List[str] = Field(default_factory=list)
    why_not: List[str] = Field(default_factory=list)
    preparation_steps: List[str] = Field(default_factory=list)
    days_until_deadline: Optional[int] = None
    details: MatchDetails = Field(default_factory=MatchDetails)

    @computed_field
    @property
    def eligible(self) -> bool:
        return len(self.failed_criteria) == 0


class ScoredScholarship(BaseModel):
    """A candidate with its match result; used between scoring and ranking."""
    candidate: CandidateScholarship
    result: MatchResult


class RecommendationStats(BaseModel):
    total_analyzed: int = 0
    eligible_count: int = 0
    missing_data: List[str] = Field(default_factory=list)
    has_documents: bool = False
    document_count: int = 0


class RecommendationOutput(BaseModel):
    """
    Output of the tiered recommendation pipeline.
    Each tier is ranked and truncated independently.
    """
    request_id: Optional[str] = None
    user_id: Optional[str] = None

    highly_recommended: List[ScoredScholarship] = Field(default_factory=list)
    partially_recommended: List[ScoredScholarship] = Field(default_factory=list)
    explore_and_prepare: List[ScoredScholarship] = Field(default_factory=list)

    stats: RecommendationStats = Field(default_factory=RecommendationStats)
    message: Optional[str] = None

    processing_time_ms: Optional[float] = None
    engine_version: str = ENGINE_VERSION


class MatchOutput(BaseModel):
    """Output of the match-only pipeline."""
    matches: List[ScoredScholarship] = Field(default_factory=list)
    total_scholarships: int = 0
    eligible_count: int = 0
    user_documents_count: int = 0
    message: Optional[str] = None
