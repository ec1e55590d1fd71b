"""
Score Aggregator

Combines individual criterion outcomes into a single MatchResult.
Applies the deadline urgency bonus and clamps the total to 0-100.
"""

from datetime import datetime
from typing import List, Optional

from .contracts import (
    EligibilityRule,
    NormalizedProfile,
    ScoringConfig,
    MatchResult,
    MatchDetails,
    CandidateScholarship,
    ScoredScholarship,
)
from .criterion_scorers import CRITERION_SCORERS, days_until_deadline, deadline_bonus
from .classifier import categorize
from .constants import MAX_SCORE


def score_scholarship(
    rule: EligibilityRule,
    profile: NormalizedProfile,
    now: datetime,
    config: Optional[ScoringConfig] = None
) -> MatchResult:
    """
    Score one scholarship rule against one profile.

    Args:
        rule: Scholarship eligibility rule (sparse fields mean "no requirement")
        profile: Normalized profile of the user
        now: Reference time for deadline proximity, captured once by the caller
        config: Weights and thresholds; defaults to ScoringConfig()

    Returns:
        MatchResult with score, category and explanations
    """
    config = config or ScoringConfig()

    score = 0
    matched: List[str] = []
    failed: List[str] = []
    why_recommended: List[str] = []
    why_not: List[str] = []
    preparation_steps: List[str] = []

    for scorer in CRITERION_SCORERS:
        outcome = scorer(rule, profile, config)
        score += outcome.points
        if outcome.matched:
            matched.append(outcome.label)
        if outcome.failed:
            failed.append(outcome.label)
        why_recommended.extend(outcome.why_recommended)
        why_not.extend(outcome.why_not)
        preparation_steps.extend(outcome.preparation_steps)

    days = days_until_deadline(rule.deadline, now)
    bonus, bonus_reason = deadline_bonus(days, config)
    if bonus_reason:
        why_recommended.append(bonus_reason)

    final_score = max(0, min(score + bonus, MAX_SCORE))

    return MatchResult(
        score=final_score,
        category=categorize(final_score, config),
        matched_criteria=matched,
        failed_criteria=failed,
        why_recommended=why_recommended,
        why_not=why_not,
        preparation_steps=preparation_steps,
        days_until_deadline=days,
        details=MatchDetails(
            user_gpa=profile.usable_gpa,
            user_ielts=profile.english_overall,
            user_level=profile.degree_level,
            user_field=profile.field_of_study,
        ),
    )


def batch_score(
    profile: NormalizedProfile,
    candidates: List[CandidateScholarship],
    now: datetime,
    config: Optional[ScoringConfig] = None
) -> List[ScoredScholarship]:
    """Score multiple candidates against the same profile and reference time."""
    config = config or ScoringConfig()
    return [
        ScoredScholarship(
            candidate=candidate,
            result=score_scholarship(candidate.rule, profile, now, config),
        )
        for candidate in candidates
    ]
