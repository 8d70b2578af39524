"""
nutrition_service.py — Meals and food intake per day.
Totals are running sums: added on insert, subtracted on removal (never below zero),
rounded to integers after every change. The day's DailyLog kcal mirrors the total.
"""

import logging
import math

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.daily_log import DailyLog
from models.nutrition_log import NutritionLog, Meal, FoodEntry
from services.dates import date_key, parse_date_key
from services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_MEALS = ["BREAKFAST", "SNACK", "LUNCH", "AFTERNOON SNACK", "DINNER"]
MACROS = ("calories", "protein", "carbs", "fat", "fiber")


def _number(value, default: float = 0, field: str = "value") -> float:
    if value is None or value == "":
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}")
    if math.isnan(number) or math.isinf(number) or number < 0:
        raise ValidationError(f"Invalid {field}")
    return number


def _round(value: float) -> int:
    return int(math.floor(value + 0.5))


class NutritionService:
    @staticmethod
    def get_or_create(db: Session, user_id: int, day: str | None = None) -> NutritionLog:
        day = day or date_key()
        parse_date_key(day)
        log = db.query(NutritionLog).filter_by(user_id=user_id, date=day).first()
        if log:
            return log
        try:
            with db.begin_nested():
                log = NutritionLog(user_id=user_id, date=day)
                log.meals = [Meal(name=name, position=i) for i, name in enumerate(DEFAULT_MEALS)]
                db.add(log)
            db.commit()
        except IntegrityError:
            log = db.query(NutritionLog).filter_by(user_id=user_id, date=day).one()
        db.refresh(log)
        return log

    @staticmethod
    def add_meal(db: Session, user_id: int, name: str, day: str | None = None) -> NutritionLog:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Meal name is required")
        log = NutritionService.get_or_create(db, user_id, day)
        position = max([m.position for m in log.meals], default=-1) + 1
        log.meals.append(Meal(name=name.strip().upper(), position=position))
        db.commit()
        db.refresh(log)
        return log

    @staticmethod
    def _meal(db: Session, log: NutritionLog, meal_id) -> Meal:
        meal = db.get(Meal, meal_id)
        if not meal or meal.log_id != log.id:
            raise NotFoundError("Meal not found")
        return meal

    @staticmethod
    def _sync_daily_kcal(db: Session, log: NutritionLog):
        # Only touches an existing DailyLog; the daily service heals the rest on read
        daily = db.query(DailyLog).filter_by(user_id=log.user_id, date=log.date).first()
        if daily:
            daily.nutrition = {**(daily.nutrition or {}), "total_kcal": log.total_calories}

    @staticmethod
    def add_food(db: Session, user_id: int, meal_id, data: dict, day: str | None = None) -> NutritionLog:
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Food name is required")

        log = NutritionService.get_or_create(db, user_id, day)
        meal = NutritionService._meal(db, log, meal_id)

        entry = FoodEntry(
            name=name.strip(),
            calories=_number(data.get("calories"), 0, "calories"),
            protein=_number(data.get("protein"), 0, "protein"),
            carbs=_number(data.get("carbs"), 0, "carbs"),
            fat=_number(data.get("fat"), 0, "fat"),
            fiber=_number(data.get("fiber"), 0, "fiber"),
            quantity=_number(data.get("quantity"), 1, "quantity") or 1,
        )
        meal.foods.append(entry)

        for macro in MACROS:
            field = f"total_{macro}"
            setattr(log, field, _round(getattr(log, field) + getattr(entry, macro)))

        NutritionService._sync_daily_kcal(db, log)
        db.commit()
        db.refresh(log)
        return log

    @staticmethod
    def remove_food(db: Session, user_id: int, meal_id, food_id, day: str | None = None) -> NutritionLog:
        day = day or date_key()
        log = db.query(NutritionLog).filter_by(user_id=user_id, date=day).first()
        if not log:
            raise NotFoundError("Nutrition log not found")
        meal = NutritionService._meal(db, log, meal_id)
        entry = db.get(FoodEntry, food_id)
        if not entry or entry.meal_id != meal.id:
            raise NotFoundError("Food not found")

        for macro in MACROS:
            field = f"total_{macro}"
            setattr(log, field, max(0, _round(getattr(log, field) - (getattr(entry, macro) or 0))))

        meal.foods.remove(entry)
        NutritionService._sync_daily_kcal(db, log)
        db.commit()
        db.refresh(log)
        return log
