"""
Auth routes: account registration, password login and the current profile.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.orm import Session

from auth import hash_password, verify_password, create_token
from config import STARTING_GAME_COINS
from database import get_db
from models.user import User
from services.dates import local_now
from streak import get_active_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


# ── Pydantic schemas ──────────────────────────────────────────────
class RegisterRequest(BaseModel):
    username: str
    password: str
    email: Optional[str] = None


class AuthRequest(BaseModel):
    username: str
    password: str


def _session_payload(user: User) -> dict:
    token = create_token({"user_id": user.id, "username": user.username})
    return {"token": token, "user": user.to_profile()}


# ── Routes ────────────────────────────────────────────────────────
@router.post("/register", status_code=201)
async def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account and return a session token for it."""
    username = body.username.strip()
    email = body.email.strip().lower() if body.email else None
    if not username or not body.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    clauses = [User.username == username]
    if email:
        clauses.append(User.email == email)
    if db.query(User).filter(or_(*clauses)).first():
        raise HTTPException(status_code=400, detail="User already exists")

    user = User(
        username=username,
        email=email,
        hashed_password=hash_password(body.password),
        game_coins=STARTING_GAME_COINS,
        streak_current=1,
        streak_last_log_date=local_now(),
        mission_requests=[],
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Registered user {user.id} ({user.username})")
    return _session_payload(user)


@router.post("/login")
async def login(body: AuthRequest, db: Session = Depends(get_db)):
    """Authenticate with username (or email) + password."""
    name = body.username.strip()
    user = db.query(User).filter(or_(User.username == name, User.email == name.lower())).first()
    if not user or not verify_password(body.password, user.hashed_password):
        logger.info(f"Failed login for {name!r}")
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return _session_payload(user)


@router.get("/me")
async def me(user: User = Depends(get_active_user)):
    return user.to_profile()
