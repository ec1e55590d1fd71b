import os, bcrypt, jwt
from datetime import datetime, timedelta, timezone
from dotenv import load_dotenv

load_dotenv()

JWT_SECRET = os.getenv("JWT_SECRET", "dev_secret_change_me")
JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "dev_refresh_secret_change_me")
JWT_ALG = "HS256"
JWT_EXP_MIN = int(os.getenv("JWT_EXP_MIN", "60"))
JWT_REFRESH_EXP_DAYS = int(os.getenv("JWT_REFRESH_EXP_DAYS", "7"))

def hash_password(raw: str) -> str:
    return bcrypt.hashpw(raw.encode(), bcrypt.gensalt()).decode()

def verify_password(raw: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(raw.encode(), hashed.encode())
    except ValueError:
        # malformed stored hash
        return False

def _encode(sub: str, role: str, token_type: str, expires_delta: timedelta, secret: str) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {
        "sub": sub,
        "role": role,
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(to_encode, secret, algorithm=JWT_ALG)

def create_token(sub: str, role: str = "student", expires_delta: timedelta | None = None) -> str:
    return _encode(sub, role, "access", expires_delta or timedelta(minutes=JWT_EXP_MIN), JWT_SECRET)

def create_refresh_token(sub: str, role: str = "student", expires_delta: timedelta | None = None) -> str:
    return _encode(sub, role, "refresh", expires_delta or timedelta(days=JWT_REFRESH_EXP_DAYS), JWT_REFRESH_SECRET)

def _decode(token: str, secret: str, token_type: str) -> dict:
    data = jwt.decode(token, secret, algorithms=[JWT_ALG])
    if data.get("type") != token_type:
        raise jwt.InvalidTokenError(f"Expected {token_type} token")
    return data

def decode_token(token: str) -> dict:
    return _decode(token, JWT_SECRET, "access")

def decode_refresh_token(token: str) -> dict:
    return _decode(token, JWT_REFRESH_SECRET, "refresh")
