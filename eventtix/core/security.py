"""Admin credentials: password hashing and the access/refresh JWT pair."""
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from eventtix.core.config import settings

ALGORITHM = "HS256"
ACCESS = "access"
REFRESH = "refresh"

# pbkdf2 has no input length cap and no native backend to install
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def _issue(user_id: str, token_type: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    claims = {"sub": user_id, "type": token_type, "iat": now, "exp": now + lifetime}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=ALGORITHM)


def create_access_token(user_id: str) -> str:
    return _issue(user_id, ACCESS, timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))


def create_refresh_token(user_id: str) -> str:
    return _issue(user_id, REFRESH, timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))


def token_pair(user_id: str) -> dict:
    return {"access_token": create_access_token(user_id), "refresh_token": create_refresh_token(user_id)}


def subject_of(token: str, token_type: str) -> str:
    """Return the user id a token was issued to.

    Raises JWTError for a bad signature, an expired token, a missing subject
    or a token of the other type.
    """
    claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    if claims.get("type") != token_type or not claims.get("sub"):
        raise JWTError(f"not a valid {token_type} token")
    return claims["sub"]
