"""
streak.py — Login streak, advanced once per calendar day on any authenticated request.
"""

from datetime import datetime
import logging

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from auth import get_current_user
from database import get_db
from models.user import User
from services.dates import date_key, local_now, yesterday_key

logger = logging.getLogger(__name__)


def apply_streak(user: User, now: datetime | None = None) -> bool:
    """Advance or reset `user`'s streak for `now`. Returns True if anything changed."""
    now = now or local_now()
    today = date_key(now)
    last = date_key(user.streak_last_log_date) if user.streak_last_log_date else None

    if last == today:
        return False
    if last == yesterday_key(now):
        user.streak_current = (user.streak_current or 0) + 1
    elif last is not None and last > today:
        # Stored date in the future (clock skew): leave it alone
        return False
    else:
        user.streak_current = 1
    user.streak_last_log_date = now
    return True


async def get_active_user(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)) -> User:
    """
    FastAPI dependency: the authenticated User row with its streak brought up to date,
    so the handler sees the fresh value within the same request.
    """
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User no longer exists")

    if apply_streak(user):
        db.commit()
        db.refresh(user)
        logger.info(f"User {user.id} streak is now {user.streak_current}")
    return user
