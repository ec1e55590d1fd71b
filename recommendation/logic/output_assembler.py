"""
Output Assembler

Builds the RecommendationOutput / MatchOutput contracts and converts them into
the JSON payloads exposed by the API (camelCase keys).
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from .contracts import (
    ScoredScholarship,
    ScholarshipSummary,
    RecommendationOutput,
    RecommendationStats,
    MatchOutput,
)
from .constants import Category, ENGINE_VERSION

logger = logging.getLogger(__name__)

NO_DOCUMENTS_MESSAGE = "No documents found. Please upload your documents first."
NO_PARSED_DOCUMENTS_MESSAGE = (
    "No parsed documents found. Recommendations use your profile only - "
    "upload your transcripts and IELTS scorecard for more accurate results."
)
NO_SCHOLARSHIPS_MESSAGE = "No scholarships available for matching."
MATCHING_COMPLETED_MESSAGE = "Matching completed"


def assemble_output(
    user_id: Optional[str],
    by_category: Dict[Category, List[ScoredScholarship]],
    total_analyzed: int,
    eligible_count: int,
    missing_data: List[str],
    document_count: int,
    processing_time_ms: Optional[float] = None
) -> RecommendationOutput:
    """
    Assemble the final RecommendationOutput.

    Args:
        user_id: Requesting user
        by_category: Ranked and truncated tiers
        total_analyzed: Number of scholarships scored
        eligible_count: Number with zero failed criteria (before truncation)
        missing_data: Profile fields the user has not supplied
        document_count: Completed documents used
        processing_time_ms: Processing time in milliseconds

    Returns:
        Complete RecommendationOutput
    """
    message = _build_message(document_count, total_analyzed)
    if message:
        logger.warning(f"⚠️ {message} (user={user_id})")

    return RecommendationOutput(
        request_id=str(uuid.uuid4()),
        user_id=user_id,
        highly_recommended=by_category.get(Category.HIGHLY_RECOMMENDED, []),
        partially_recommended=by_category.get(Category.PARTIALLY_SUITABLE, []),
        explore_and_prepare=by_category.get(Category.EXPLORE_AND_PREPARE, []),
        stats=RecommendationStats(
            total_analyzed=total_analyzed,
            eligible_count=eligible_count,
            missing_data=missing_data,
            has_documents=document_count > 0,
            document_count=document_count,
        ),
        message=message,
        processing_time_ms=processing_time_ms,
        engine_version=ENGINE_VERSION,
    )


def _build_message(document_count: int, total_analyzed: int) -> Optional[str]:
    if total_analyzed == 0:
        return NO_SCHOLARSHIPS_MESSAGE
    if document_count == 0:
        return NO_PARSED_DOCUMENTS_MESSAGE
    return None


# =============================================================================
# SERIALIZATION
# =============================================================================

def serialize_summary(summary: ScholarshipSummary) -> Dict[str, Any]:
    return {
        "id": summary.id,
        "title": summary.title,
        "country": summary.country,
        "level": summary.level,
        "fields": summary.fields,
        "deadline": summary.deadline.isoformat() if summary.deadline else None,
        "amount": summary.amount,
        "university": summary.university_name,
        "status": summary.status,
        "verified": summary.verified,
    }


def serialize_scored(item: ScoredScholarship) -> Dict[str, Any]:
    """Convert a ScoredScholarship to the API shape."""
    result = item.result
    return {
        "scholarship": serialize_summary(item.candidate.summary),
        "score": result.score,
        "eligible": result.eligible,
        "category": Category(result.category).value,
        "matchedCriteria": result.matched_criteria,
        "failedCriteria": result.failed_criteria,
        "whyRecommended": result.why_recommended,
        "whyNot": result.why_not,
        "preparationSteps": result.preparation_steps,
        "daysUntilDeadline": result.days_until_deadline,
        "details": {
            "userGPA": result.details.user_gpa,
            "userIELTS": result.details.user_ielts,
            "userLevel": result.details.user_level,
            "userField": result.details.user_field,
        },
    }


def serialize_recommendations(output: RecommendationOutput) -> Dict[str, Any]:
    return {
        "highlyRecommended": [serialize_scored(s) for s in output.highly_recommended],
        "partiallyRecommended": [serialize_scored(s) for s in output.partially_recommended],
        "exploreAndPrepare": [serialize_scored(s) for s in output.explore_and_prepare],
        "stats": {
            "totalAnalyzed": output.stats.total_analyzed,
            "eligibleCount": output.stats.eligible_count,
            "missingData": output.stats.missing_data,
            "hasDocuments": output.stats.has_documents,
            "documentCount": output.stats.document_count,
        },
    }


def serialize_matches(output: MatchOutput) -> Dict[str, Any]:
    matches = []
    for item in output.matches:
        payload = serialize_scored(item)
        payload["scholarshipId"] = item.candidate.summary.id
        matches.append(payload)
    return {
        "matches": matches,
        "totalScholarships": output.total_scholarships,
        "eligibleCount": output.eligible_count,
        "userDocumentsCount": output.user_documents_count,
    }


def serialize_legacy(items: List[ScoredScholarship]) -> List[Dict[str, Any]]:
    """Flattened list kept for clients of the original recommendations format."""
    return [
        {
            **serialize_summary(item.candidate.summary),
            "score": item.result.score,
            "matchedBy": item.result.matched_criteria,
            "daysUntilDeadline": item.result.days_until_deadline,
        }
        for item in items
    ]
