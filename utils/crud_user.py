import uuid
from sqlalchemy.orm import Session
from sqlalchemy import select
from models.models_user import User

def get_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == email.lower())).scalar_one_or_none()

def get_user_by_id(db: Session, user_id: str) -> User | None:
    try:
        key = uuid.UUID(str(user_id))
    except ValueError:
        return None
    return db.get(User, key)

def create_user(db: Session, *, email: str, full_name: str | None, role: str, password_hash: str) -> User:
    user = User(email=email.lower(), full_name=full_name, role=role, password_hash=password_hash)
    db.add(user)
    db.flush()
    return user

def store_refresh_token(db: Session, user: User, refresh_token: str | None) -> None:
    user.refresh_token = refresh_token
