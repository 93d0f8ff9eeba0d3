from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from eventtix.core.security import ACCESS, subject_of
from eventtix.db.session import get_db
from eventtix.models.user import ADMIN_ROLES, User
from eventtix.services.event_config_service import EventSettings, load_event_settings

bearer = HTTPBearer(auto_error=False)


def active_user(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return user


def get_current_user(creds: HTTPAuthorizationCredentials | None = Depends(bearer),
                     db: Session = Depends(get_db)) -> User:
    if not creds:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        user_id = subject_of(creds.credentials, ACCESS)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    return active_user(db, user_id)


def require_roles(*roles: str):
    def guard(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Forbidden")
        return user
    return guard


require_admin = require_roles(*ADMIN_ROLES)


def get_event_settings(db: Session = Depends(get_db)) -> EventSettings:
    """Event configuration for this request only."""
    return load_event_settings(db)
