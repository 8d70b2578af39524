from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, JSON, UniqueConstraint
from database import Base


def empty_mission_stats(total: int = 0) -> dict:
    return {"completed": 0, "total": total, "list_completed": []}


def empty_gains() -> dict:
    return {"coins": 0, "xp": 0, "lives": 0}


class DailyLog(Base):
    __tablename__ = "daily_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    weight = Column(Float, default=0)
    mood = Column(String(50), nullable=True)
    sleep_hours = Column(Float, default=0)
    steps = Column(Integer, default=0)
    streak_current = Column(Integer, default=0)  # snapshot, not live
    sport_workouts = Column(JSON, default=list)
    gym_workouts = Column(JSON, default=list)
    nutrition = Column(JSON, default=lambda: {"total_kcal": 0})
    mission_stats = Column(JSON, default=empty_mission_stats)
    gains = Column(JSON, default=empty_gains)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_dailylog_user_date"),
    )

    def to_dict(self) -> dict:
        nutrition = dict(self.nutrition or {})
        return {
            "id": self.id,
            "user_id": self.user_id,
            "date": self.date,
            "weight": self.weight,
            "mood": self.mood,
            "sleep_hours": self.sleep_hours,
            "steps": self.steps,
            "streak_current": self.streak_current,
            "sport_workouts": list(self.sport_workouts or []),
            "gym_workouts": list(self.gym_workouts or []),
            "nutrition": nutrition,
            "mission_stats": dict(self.mission_stats or empty_mission_stats()),
            "gains": dict(self.gains or empty_gains()),
            "total_kcal": nutrition.get("total_kcal", 0),
        }
