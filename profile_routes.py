"""
Profile API Routes

Endpoints to save/update and fetch the signed-in user's academic profile.
Collection: profiles (keyed by user_id). The matching engine falls back on
these fields when the user's parsed documents don't provide them.
"""

from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from db_mongo import profiles_collection
from models.schemas_user import UserOut, AcademicProfileIn, AcademicProfileOut
from utils.auth_deps import auth_user

router = APIRouter(prefix="/api/profile", tags=["profile"])


def get_profiles_collection():
    return profiles_collection


# ─────────────────────────────────────────────
# GET /api/profile/me
# ─────────────────────────────────────────────
@router.get("/me", summary="Fetch my academic profile")
async def get_my_profile(
    current: UserOut = Depends(auth_user),
    collection=Depends(get_profiles_collection),
):
    """
    Return the academic profile of the current user.
    Returns an empty profile with status 200 if none was saved yet.
    """
    try:
        profile = await collection.find_one(
            {"user_id": current.id},
            {"_id": 0}  # exclude Mongo ObjectId
        )
        return AcademicProfileOut(**(profile or {"user_id": current.id}))

    except Exception as e:
        return JSONResponse(
            status_code=500,
            content={"status": "error", "message": f"Database error: {str(e)}"},
        )


# ─────────────────────────────────────────────
# PUT /api/profile/me
# ─────────────────────────────────────────────
@router.put("/me", summary="Create or update my academic profile")
async def save_my_profile(
    payload: AcademicProfileIn,
    current: UserOut = Depends(auth_user),
    collection=Depends(get_profiles_collection),
):
    """
    Create or update the profile document.
    Uses user_id as the unique key with upsert; omitted fields are left untouched.
    """
    try:
        profile_data = payload.model_dump(exclude_none=True)
        profile_data["user_id"] = current.id
        profile_data["updated_at"] = datetime.now(timezone.utc)

        await collection.update_one(
            {"user_id": current.id},
            {"$set": profile_data},
            upsert=True,
        )

        return {"status": "ok", "message": "Profile saved"}

    except Exception as e:
        return JSONResponse(
            status_code=500,
            content={"status": "error", "message": f"Database error: {str(e)}"},
        )
