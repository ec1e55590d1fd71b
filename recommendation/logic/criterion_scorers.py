"""
Criterion Scorers

Individual scoring functions for each eligibility criterion.
Each scorer returns a CriterionOutcome carrying its points and the
explanation lines shown to the user. Every criterion evaluated produces at
least one explanation, including criteria passed for lack of a requirement.
"""

import math
from datetime import datetime, timezone
from typing import Optional, Tuple

from .contracts import EligibilityRule, NormalizedProfile, ScoringConfig, CriterionOutcome
from .constants import CRITERION_LABELS, OPEN_FIELD_LABELS
from .profile_extractor import expand_degree_levels


def _outcome(criterion: str) -> CriterionOutcome:
    return CriterionOutcome(criterion=criterion, label=CRITERION_LABELS[criterion])


def _pass(outcome: CriterionOutcome, points: int, reason: str) -> CriterionOutcome:
    outcome.points = points
    outcome.matched = True
    outcome.why_recommended.append(reason)
    return outcome


def _fail(outcome: CriterionOutcome, reason: str, *steps: str) -> CriterionOutcome:
    outcome.failed = True
    outcome.why_not.append(reason)
    outcome.preparation_steps.extend(steps)
    return outcome


def score_degree_level(
    rule: EligibilityRule,
    profile: NormalizedProfile,
    config: ScoringConfig
) -> CriterionOutcome:
    """Profile level must be one of the accepted levels, if any are set."""
    outcome = _outcome("degree_level")
    weight = config.weights["degree_level"]

    required = [level for level in rule.degree_levels if level and level.strip()]
    if not required:
        return _pass(outcome, weight, "✓ No specific degree level required")

    accepted = {
        canonical.lower()
        for level in required
        for canonical in expand_degree_levels(level)
    }
    user_level = profile.degree_level

    if user_level and user_level.lower() in accepted:
        return _pass(outcome, weight, f"✓ Your {user_level} level matches the scholarship requirement")

    steps = [] if user_level else ["Complete your education level in your profile"]
    return _fail(
        outcome,
        f"✗ Required: {', '.join(required)}, You have: {user_level or 'Not specified'}",
        *steps
    )


def score_gpa(
    rule: EligibilityRule,
    profile: NormalizedProfile,
    config: ScoringConfig
) -> CriterionOutcome:
    """Usable GPA (GPA, or percentage / 25) must reach the minimum."""
    outcome = _outcome("gpa")
    weight = config.weights["gpa"]

    if not rule.min_gpa:
        return _pass(outcome, weight, "✓ No minimum GPA requirement")

    user_gpa = profile.usable_gpa
    if user_gpa is None:
        return _fail(
            outcome,
            "✗ GPA not found in your profile or documents",
            "Upload your transcript or add GPA to your profile"
        )

    if user_gpa >= rule.min_gpa:
        _pass(
            outcome,
            weight,
            f"✓ Your GPA ({user_gpa:.2f}) meets the minimum requirement ({rule.min_gpa:g})"
        )
        if profile.gpa_source == "percentage" and profile.percentage is not None:
            outcome.why_recommended.append(f"  Converted from {profile.percentage:g}%")
        margin = user_gpa - rule.min_gpa
        if margin >= config.significant_gpa_margin:
            outcome.why_recommended.append(
                f"  Strong candidate - GPA is {margin:.2f} points above minimum"
            )
        return outcome

    gap = rule.min_gpa - user_gpa
    return _fail(
        outcome,
        f"✗ Your GPA ({user_gpa:.2f}) is below the minimum ({rule.min_gpa:g})",
        f"Work on improving your GPA by {gap:.2f} points",
        "Consider scholarships with lower GPA requirements"
    )


def score_field_of_study(
    rule: EligibilityRule,
    profile: NormalizedProfile,
    config: ScoringConfig
) -> CriterionOutcome:
    """Field must overlap (substring, either direction) with a required field."""
    outcome = _outcome("field_of_study")
    weight = config.weights["field_of_study"]

    required = [field for field in rule.required_fields if field and field.strip()]
    if not required or any(field.strip().lower() in OPEN_FIELD_LABELS for field in required):
        return _pass(outcome, weight, "✓ Open to all fields of study")

    user_field = profile.field_of_study
    if not user_field:
        return _fail(
            outcome,
            "✗ Field of study not specified in your profile",
            "Add your major/field of study to your profile"
        )

    if any(_fuzzy_match(user_field, field) for field in required):
        return _pass(outcome, weight, f"✓ Your field ({user_field}) matches the scholarship requirements")

    _fail(
        outcome,
        f"✗ Required fields: {', '.join(required)}",
        f"Consider scholarships in {user_field}"
    )
    outcome.why_not.append(f"  Your field: {user_field}")
    return outcome


def score_english(
    rule: EligibilityRule,
    profile: NormalizedProfile,
    config: ScoringConfig
) -> CriterionOutcome:
    """Overall IELTS band must reach the threshold when English is required."""
    outcome = _outcome("english_score")
    weight = config.weights["english_score"]

    if not rule.has_english_requirement:
        return _pass(outcome, weight, "✓ No English proficiency test required")

    threshold = rule.required_english_score or config.default_english_threshold
    user_ielts = profile.english_overall

    if user_ielts is None:
        return _fail(
            outcome,
            "✗ IELTS score not found in your documents",
            "Upload your IELTS scorecard or take the IELTS exam"
        )

    if user_ielts >= threshold:
        return _pass(outcome, weight, f"✓ Your IELTS ({user_ielts:g}) meets the requirement ({threshold:g})")

    return _fail(
        outcome,
        f"✗ Your IELTS ({user_ielts:g}) is below the requirement ({threshold:g})",
        f"Improve your IELTS score by {threshold - user_ielts:.1f} points",
        "Consider taking IELTS preparation courses"
    )


def score_country_preference(
    rule: EligibilityRule,
    profile: NormalizedProfile,
    config: ScoringConfig
) -> CriterionOutcome:
    """
    Soft criterion: full points when preferred or no preference is set,
    partial credit otherwise. Never fails.
    """
    outcome = _outcome("country_preference")
    weight = config.weights["country_preference"]

    country = (rule.country or "").strip()
    if not country:
        return _pass(outcome, weight, "✓ No country restriction")

    preferred = {c.strip().lower() for c in profile.preferred_countries if c and c.strip()}
    if not preferred:
        return _pass(outcome, weight, f"✓ Scholarship is in {country}")

    if country.lower() in preferred:
        return _pass(outcome, weight, f"✓ {country} is one of your preferred countries")

    outcome.points = min(config.country_partial_credit, weight)
    outcome.why_not.append(f"⚠ {country} is not in your preferred countries")
    return outcome


# =============================================================================
# DEADLINE
# =============================================================================

def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def days_until_deadline(deadline: Optional[datetime], now: datetime) -> Optional[int]:
    """Whole days left (floored); negative once the deadline has passed."""
    if deadline is None:
        return None
    delta = _as_utc(deadline) - _as_utc(now)
    return math.floor(delta.total_seconds() / 86400)


def deadline_bonus(days: Optional[int], config: ScoringConfig) -> Tuple[int, Optional[str]]:
    """Urgency bonus points and the line explaining it."""
    if days is None or days < 0:
        return 0, None
    for index, (max_days, bonus) in enumerate(config.deadline_bonus_tiers):
        if days <= max_days:
            if index == 0:
                return bonus, f"⚡ URGENT: Deadline in {days} days!"
            return bonus, f"⏰ Deadline approaching in {days} days"
    return 0, None


# Evaluation order = order of explanations in the result
CRITERION_SCORERS = [
    score_degree_level,
    score_gpa,
    score_field_of_study,
    score_english,
    score_country_preference,
]


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _fuzzy_match(term1: str, term2: str) -> bool:
    """Simple fuzzy matching - checks if either term contains the other."""
    t1 = term1.lower().strip()
    t2 = term2.lower().strip()
    return bool(t1) and bool(t2) and (t1 in t2 or t2 in t1)
