from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Any, Optional
from sqlalchemy.orm import Session

from database import get_db
from models.user import User
from services.daily_service import DailyLogService
from streak import get_active_user

router = APIRouter(prefix="/api/v1/daily", tags=["Daily"])


class WidgetUpdate(BaseModel):
    type: str
    value: Any = None
    date: Optional[str] = None


@router.get("")
async def get_daily_log(date: Optional[str] = None, user: User = Depends(get_active_user),
                        db: Session = Depends(get_db)):
    """Today's log (or the client's date), created on first access."""
    return DailyLogService.get_for_date(db, user.id, date, user.streak_current)


@router.get("/specific")
async def get_daily_log_by_date(date: Optional[str] = None, user: User = Depends(get_active_user),
                                db: Session = Depends(get_db)):
    """Calendar lookup. Never creates a log; days without one return null."""
    return DailyLogService.get_by_date(db, user.id, date)


@router.put("")
async def update_daily_log(body: WidgetUpdate, date: Optional[str] = None, user: User = Depends(get_active_user),
                           db: Session = Depends(get_db)):
    return DailyLogService.update_widget(db, user.id, body.type, body.value, body.date or date,
                                         user.streak_current)


@router.get("/history")
async def weight_history(user: User = Depends(get_active_user), db: Session = Depends(get_db)):
    return DailyLogService.weight_history(db, user.id)
