"""
Scholarship Matching API Routes

Exposes the matching engine via REST API:
- GET /scholarships/match                  (every open/upcoming scholarship, eligible first)
- GET /scholarships/recommendations        (three tiers, or a flat list with format=simple)
- GET /scholarships/{scholarship_id}/match (full rationale for one scholarship)
- GET /recommendations/health
"""

import asyncio
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from db_mongo import profiles_collection, user_documents_collection, scholarships_collection
from models.schemas_user import UserOut
from utils.auth_deps import auth_user
from .logic.adapter import StoreBundle, MongoDocumentStore, MongoScholarshipStore, MongoProfileStore
from .logic.constants import ENGINE_VERSION
from .logic.output_assembler import (
    serialize_recommendations,
    serialize_matches,
    serialize_scored,
    serialize_legacy,
)
from .logic.runner import run_recommendations, run_recommendations_simple, run_matching, explain_match

logger = logging.getLogger(__name__)

router = APIRouter(tags=["scholarships"])


def get_stores() -> StoreBundle:
    return StoreBundle(
        documents=MongoDocumentStore(user_documents_collection),
        scholarships=MongoScholarshipStore(scholarships_collection),
        profiles=MongoProfileStore(profiles_collection),
    )


def get_now() -> datetime:
    """Reference time for one request; deadlines are measured from it."""
    return datetime.now(timezone.utc)


def _success(message: str, data):
    return {"status": "success", "message": message, "data": data}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message},
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/scholarships/match", summary="Match every open scholarship against my documents")
async def match_scholarships(
    current: UserOut = Depends(auth_user),
    stores: StoreBundle = Depends(get_stores),
    now: datetime = Depends(get_now)
):
    """
    Score every open or upcoming scholarship for the current user.

    **Response:**
    - `matches`: all scored scholarships, eligible first, then by score
    - `totalScholarships`, `eligibleCount`, `userDocumentsCount`
    - an empty result with a message when no parsed documents exist
    """
    try:
        output = await run_matching(current.id, stores, now=now)
        return _success(output.message, serialize_matches(output))

    except HTTPException:
        raise
    except asyncio.TimeoutError:
        logger.error(f"⏱️ Matching timed out for user {current.id}")
        return _error(504, "Matching timed out, please try again")
    except Exception as e:
        logger.exception(f"❌ Matching failed for user {current.id}: {e}")
        return _error(500, "Error matching scholarships")


@router.get("/scholarships/recommendations", summary="Tiered scholarship recommendations")
async def get_recommendations(
    limit: int = Query(default=10, ge=1, le=50, description="Max scholarships per tier"),
    format: str = Query(
        default="full",
        pattern="^(full|simple)$",
        description="Response format: 'full' (three tiers + stats) or 'simple' (flat list)"
    ),
    current: UserOut = Depends(auth_user),
    stores: StoreBundle = Depends(get_stores),
    now: datetime = Depends(get_now)
):
    """
    Generate personalized scholarship recommendations.

    **Response (full):**
    - `highlyRecommended` (score >= 80), `partiallyRecommended` (60-79), `exploreAndPrepare`
    - per scholarship: score, matched/failed criteria, reasons and preparation steps
    - `stats`: totals plus the profile fields still missing

    **Response (simple):**
    - `scholarships`: tiers concatenated, at most `limit` entries
    """
    try:
        if format == "simple":
            items = await run_recommendations_simple(current.id, stores, limit=limit, now=now)
            return _success(
                "Recommendations generated",
                {"scholarships": serialize_legacy(items), "count": len(items)},
            )

        output = await run_recommendations(current.id, stores, now=now, limit=limit)
        data = serialize_recommendations(output)
        data["requestId"] = output.request_id
        data["processingTimeMs"] = output.processing_time_ms
        data["engineVersion"] = output.engine_version
        return _success(output.message or "Recommendations generated", data)

    except HTTPException:
        raise
    except asyncio.TimeoutError:
        logger.error(f"⏱️ Recommendations timed out for user {current.id}")
        return _error(504, "Recommendations timed out, please try again")
    except Exception as e:
        logger.exception(f"❌ Recommendations failed for user {current.id}: {e}")
        return _error(500, "Error generating recommendations")


@router.get("/scholarships/{scholarship_id}/match", summary="Explain my match for one scholarship")
async def get_scholarship_match(
    scholarship_id: str,
    current: UserOut = Depends(auth_user),
    stores: StoreBundle = Depends(get_stores),
    now: datetime = Depends(get_now)
):
    """Full scoring rationale for a single scholarship, whatever its status."""
    try:
        item = await explain_match(current.id, scholarship_id, stores, now=now)
        return _success("Match explanation generated", serialize_scored(item))

    except HTTPException:
        raise
    except LookupError:
        return _error(404, "Scholarship not found")
    except asyncio.TimeoutError:
        logger.error(f"⏱️ Match explanation timed out for {scholarship_id}")
        return _error(504, "Match explanation timed out, please try again")
    except Exception as e:
        logger.exception(f"❌ Match explanation failed for {scholarship_id}: {e}")
        return _error(500, "Error explaining scholarship match")


# =============================================================================
# HEALTH CHECK
# =============================================================================

@router.get("/recommendations/health", summary="Matching engine health check")
def health_check():
    """Check if the matching engine is operational."""
    return {"status": "ok", "engine": "scholarship-matching", "version": ENGINE_VERSION}
