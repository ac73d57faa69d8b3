"""JWT handling for the bearer tokens issued by the authentication service."""
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from sqlalchemy.orm import Session as DbSession

from exam_api.config import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY
from exam_api.models.db.user import User


def create_access_token(user_id: int, expires_minutes: int | None = None) -> str:
    """Create a JWT access token for a user."""
    minutes = ACCESS_TOKEN_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    to_encode = {
        "sub": str(user_id),
        "exp": expire,
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> dict | None:
    """Verify and decode a JWT token.

    Returns:
        Decoded token payload or None if invalid.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        return None


def get_user_by_id(db: DbSession, user_id: int) -> User | None:
    """Get user by ID."""
    return db.query(User).filter(User.id == user_id).first()


def create_user(
    db: DbSession,
    username: str,
    display_name: str | None = None,
    role: str = "student",
) -> User:
    """Register a user mirrored from the authentication service."""
    user = User(username=username, display_name=display_name, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
