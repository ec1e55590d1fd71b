import logging
import jwt
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from db import get_db
from models.schemas_user import UserOut
from utils.auth_utils import decode_token
from utils.crud_user import get_user_by_id

logger = logging.getLogger(__name__)

def auth_user(authorization: str | None = Header(default=None), db: Session = Depends(get_db)) -> UserOut:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing token")
    token = authorization.split(" ", 1)[1]
    try:
        data = decode_token(token)
    except jwt.PyJWTError as e:
        logger.error(f"Token decode failed: {e}")
        raise HTTPException(status_code=401, detail=f"Invalid token: {e}")
    user_id = data.get("sub")
    user = get_user_by_id(db, user_id)
    if not user:
        logger.error(f"User not found for id: {user_id}")
        raise HTTPException(status_code=401, detail=f"User not found for id: {user_id}")
    payload = {
        "id": str(user.id),
        "email": user.email,
        "full_name": user.full_name,
        "role": user.role,
        "created_at": user.created_at
    }
    return UserOut.model_validate(payload)
