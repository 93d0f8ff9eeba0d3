import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from jose import JWTError
from sqlalchemy.orm import Session

from eventtix.api.deps import active_user, get_current_user
from eventtix.core.security import REFRESH, subject_of, token_pair, verify_password
from eventtix.db.session import get_db
from eventtix.models.user import User
from eventtix.schemas.auth import LoginRequest, MeOut, RefreshRequest, TokenPair

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenPair)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    email = body.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if not user or not user.is_active or not verify_password(body.password, user.password_hash):
        logger.info("Failed admin login for %s", email)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    return TokenPair(**token_pair(user.id))


@router.post("/refresh", response_model=TokenPair)
def refresh(body: RefreshRequest, db: Session = Depends(get_db)):
    try:
        user_id = subject_of(body.refreshToken, REFRESH)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    return TokenPair(**token_pair(active_user(db, user_id).id))


@router.get("/me", response_model=MeOut)
def me(user: User = Depends(get_current_user)):
    return MeOut(id=user.id, email=user.email, fullName=user.full_name or "", role=user.role, isAdmin=user.is_admin)
