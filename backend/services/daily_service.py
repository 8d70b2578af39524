"""
daily_service.py — Per-user, per-day aggregate log.
Lazily creates the day's record and keeps its denormalized counters
(mission total, nutrition kcal) in step with Missions and NutritionLogs.
"""

import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.daily_log import DailyLog, empty_mission_stats, empty_gains
from models.mission import Mission, MissionParticipant
from models.nutrition_log import NutritionLog
from models.user import User
from services.dates import date_key, parse_date_key, weekday_index
from services.errors import ValidationError

logger = logging.getLogger(__name__)

# Widget name -> column. camelCase aliases are what older clients send.
WIDGET_FIELDS = {
    "mood": "mood",
    "weight": "weight",
    "sleepHours": "sleep_hours",
    "sleep_hours": "sleep_hours",
    "steps": "steps",
    "streakCurrent": "streak_current",
    "streak_current": "streak_current",
    "sport": "sport_workouts",
    "sport_workouts": "sport_workouts",
    "training": "gym_workouts",
    "gym_workouts": "gym_workouts",
    "missions": "mission_stats",
    "mission_stats": "mission_stats",
    "gains": "gains",
    "nutrition": "nutrition",
}

PROTECTED_FIELDS = {"id", "user_id", "date", "created_at"}


def _coerce(column: str, value):
    try:
        if column in ("weight", "sleep_hours"):
            return float(value or 0)
        if column in ("steps", "streak_current"):
            return int(value or 0)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid value for {column}")
    if column in ("sport_workouts", "gym_workouts") and not isinstance(value, list):
        raise ValidationError(f"{column} must be a list")
    if column in ("mission_stats", "gains", "nutrition") and not isinstance(value, dict):
        raise ValidationError(f"{column} must be an object")
    return value


class DailyLogService:
    @staticmethod
    def count_applicable_missions(db: Session, user_id: int, day: str) -> int:
        """Daily missions of the user (owned or shared, not awaiting a partner) scheduled on `day`."""
        weekday = weekday_index(day)
        missions = db.query(Mission).filter(
            Mission.frequency == "daily",
            or_(
                Mission.owner_id == user_id,
                Mission.participant_links.any(MissionParticipant.user_id == user_id),
            ),
            Mission.invitation_status != "pending",
        ).all()

        count = 0
        for m in missions:
            days = m.specific_days or []
            try:
                if not days or weekday in [int(d) for d in days]:
                    count += 1
            except (TypeError, ValueError):
                logger.warning(f"Mission {m.id} has malformed specific_days {days!r}, counting as every day")
                count += 1
        return count

    @staticmethod
    def latest_weight(db: Session, user_id: int, day: str) -> float:
        last = db.query(DailyLog.weight).filter(
            DailyLog.user_id == user_id,
            DailyLog.date < day,
            DailyLog.weight > 0,
        ).order_by(DailyLog.date.desc()).first()
        return last[0] if last else 0

    @staticmethod
    def ensure(db: Session, user_id: int, day: str | None = None, streak: int | None = None,
               commit: bool = True) -> tuple[DailyLog, NutritionLog | None]:
        """Find or create the log for (user, day) and heal its stale counters."""
        day = day or date_key()
        parse_date_key(day)

        active_count = DailyLogService.count_applicable_missions(db, user_id, day)
        weight = DailyLogService.latest_weight(db, user_id, day)
        nutrition_log = db.query(NutritionLog).filter_by(user_id=user_id, date=day).first()
        current_kcal = nutrition_log.total_calories if nutrition_log else 0

        if streak is None:
            user = db.get(User, user_id)
            streak = user.streak_current if user else 0

        created = False
        log = db.query(DailyLog).filter_by(user_id=user_id, date=day).first()
        if not log:
            try:
                with db.begin_nested():
                    log = DailyLog(
                        user_id=user_id,
                        date=day,
                        weight=weight,
                        streak_current=streak,
                        nutrition={"total_kcal": current_kcal},
                        mission_stats=empty_mission_stats(active_count),
                        gains=empty_gains(),
                        sport_workouts=[],
                        gym_workouts=[],
                    )
                    db.add(log)
                created = True
            except IntegrityError:
                # Lost the race against a concurrent request creating the same day
                log = db.query(DailyLog).filter_by(user_id=user_id, date=day).one()

        changed = False
        stats = dict(log.mission_stats or empty_mission_stats())
        if stats.get("total") != active_count:
            logger.info(f"[DailyLog] Correcting mission total for user {user_id} on {day}: "
                        f"{stats.get('total')} -> {active_count}")
            stats["total"] = active_count
            changed = True
        if (stats.get("completed") or 0) > active_count:
            stats["completed"] = active_count
            changed = True
        if changed:
            stats.setdefault("list_completed", [])
            log.mission_stats = stats

        nutrition = dict(log.nutrition or {})
        if nutrition.get("total_kcal") != current_kcal:
            nutrition["total_kcal"] = current_kcal
            log.nutrition = nutrition
            changed = True

        if created or changed:
            if commit:
                db.commit()
                db.refresh(log)
            else:
                db.flush()
        return log, nutrition_log

    @staticmethod
    def _with_meals(data: dict, nutrition_log: NutritionLog | None) -> dict:
        if nutrition_log:
            data["nutrition"] = {
                **data["nutrition"],
                "meals": [m.to_dict() for m in nutrition_log.meals],
                **nutrition_log.totals(),
            }
            data["total_kcal"] = nutrition_log.total_calories
        return data

    @staticmethod
    def get_for_date(db: Session, user_id: int, day: str | None = None, streak: int | None = None) -> dict:
        log, nutrition_log = DailyLogService.ensure(db, user_id, day, streak)
        return DailyLogService._with_meals(log.to_dict(), nutrition_log)

    @staticmethod
    def get_by_date(db: Session, user_id: int, day: str) -> dict | None:
        """Read-only lookup for the calendar; never creates a record."""
        if not day:
            raise ValidationError("Missing date parameter")
        parse_date_key(day)
        log = db.query(DailyLog).filter_by(user_id=user_id, date=day).first()
        if not log:
            return None
        nutrition_log = db.query(NutritionLog).filter_by(user_id=user_id, date=day).first()
        return DailyLogService._with_meals(log.to_dict(), nutrition_log)

    @staticmethod
    def update_widget(db: Session, user_id: int, field: str, value, day: str | None = None,
                      streak: int | None = None) -> dict:
        if not field:
            raise ValidationError("Missing widget type")
        log, _ = DailyLogService.ensure(db, user_id, day, streak, commit=False)

        column = WIDGET_FIELDS.get(field)
        if column == "nutrition":
            log.nutrition = {**(log.nutrition or {}), **_coerce(column, value)}
        elif column == "mission_stats":
            log.mission_stats = {**(log.mission_stats or empty_mission_stats()), **_coerce(column, value)}
        elif column:
            setattr(log, column, _coerce(column, value))
        elif field in DailyLog.__table__.columns and field not in PROTECTED_FIELDS:
            setattr(log, field, value)
        else:
            logger.warning(f"Ignoring unknown daily widget '{field}'")

        db.commit()
        db.refresh(log)
        return log.to_dict()

    @staticmethod
    def weight_history(db: Session, user_id: int) -> list[dict]:
        logs = db.query(DailyLog.date, DailyLog.weight).filter(
            DailyLog.user_id == user_id,
            DailyLog.weight > 0,
        ).order_by(DailyLog.date.asc()).all()
        return [{"date": d, "weight": w} for d, w in logs]

    @staticmethod
    def record_completion(db: Session, user_id: int, mission: Mission, day: str | None = None) -> DailyLog:
        """Count a completed mission in the user's log for `day`. Caller commits."""
        log, _ = DailyLogService.ensure(db, user_id, day, commit=False)
        stats = dict(log.mission_stats or empty_mission_stats())
        stats["completed"] = (stats.get("completed") or 0) + 1
        stats["list_completed"] = list(stats.get("list_completed") or []) + [{
            "title": mission.title,
            "xp_reward": mission.xp_reward,
            "coin_reward": mission.coin_reward,
            "game_coin_reward": mission.game_coin_reward,
            "type": mission.type,
        }]
        log.mission_stats = stats
        db.flush()
        return log
