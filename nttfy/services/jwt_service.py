from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from nttfy.config import get_settings

ALGORITHM = "HS256"


def create_access_token(email: str, expires_delta: timedelta | None = None) -> str:
    """Create a JWT session token for the user"""
    settings = get_settings()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(hours=settings.access_token_expire_hours)

    to_encode = {
        "sub": email,
        "exp": expire,
        "iat": datetime.now(timezone.utc)
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def verify_token(token: str) -> str | None:
    """
    Verify a JWT token and return the email if valid.
    Returns None if token is invalid or expired.
    """
    try:
        payload = jwt.decode(token, get_settings().secret_key, algorithms=[ALGORITHM])
        email: str = payload.get("sub")
        if email is None:
            return None
        return email
    except JWTError:
        return None
