from datetime import datetime, timedelta, timezone

from jose import jwt

from timekeeper.core.config import settings


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Issue an access token; used by tooling and tests, login lives elsewhere."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and validate JWT. Raises JWTError on failure."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
