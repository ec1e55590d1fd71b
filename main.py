from fastapi import FastAPI, Depends, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
import jwt
import os
import logging

from db import Base, engine, get_db
from models.schemas_user import UserRegister, UserLogin, RefreshRequest, UserOut, TokenResponse
from utils.crud_user import get_user_by_email, get_user_by_id, create_user, store_refresh_token
from utils.auth_utils import hash_password, verify_password, create_token, create_refresh_token, decode_refresh_token
from utils.auth_deps import auth_user
from profile_routes import router as profile_router
from recommendation.routes import router as recommendation_router
from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(level=logging.INFO)
logging.info("App starting with DATABASE_URL")

app = FastAPI(title="ScholarMatch API")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Base.metadata.create_all(bind=engine)

app.include_router(profile_router)
app.include_router(recommendation_router)


def _issue_tokens(db: Session, user) -> TokenResponse:
    access_token = create_token(str(user.id), role=user.role)
    refresh_token = create_refresh_token(str(user.id), role=user.role)
    store_refresh_token(db, user, refresh_token)
    return TokenResponse(access_token=access_token, refresh_token=refresh_token)


@app.post("/auth/register", response_model=TokenResponse, status_code=201, tags=["auth"], summary="Register & get tokens")
def register(payload: UserRegister, db: Session = Depends(get_db)):
    if get_user_by_email(db, payload.email):
        raise HTTPException(status_code=409, detail="Email already registered")
    user = create_user(
        db,
        email=payload.email,
        full_name=payload.full_name,
        role="student",
        password_hash=hash_password(payload.password),
    )
    logging.info(f"New user registered: {user.email}")
    return _issue_tokens(db, user)

@app.post("/auth/login", response_model=TokenResponse, tags=["auth"], summary="Login")
def login(payload: UserLogin, db: Session = Depends(get_db)):
    user = get_user_by_email(db, payload.email)
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return _issue_tokens(db, user)

@app.post("/auth/refresh", response_model=TokenResponse, tags=["auth"], summary="Exchange a refresh token")
def refresh(payload: RefreshRequest, db: Session = Depends(get_db)):
    try:
        data = decode_refresh_token(payload.refresh_token)
    except jwt.PyJWTError as e:
        logging.error(f"Refresh token decode failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    user = get_user_by_id(db, data.get("sub"))
    if not user or user.refresh_token != payload.refresh_token:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    return _issue_tokens(db, user)

@app.get("/users/me", response_model=UserOut, tags=["users"], summary="Current user")
def me(current: UserOut = Depends(auth_user)):
    return current


@app.get("/health", tags=["meta"], summary="Health check")
def health():
    return {"status": "ok"}
