"""
food_service.py — Food catalog: global foods plus each user's saved foods.
"""

import math

from sqlalchemy import or_
from sqlalchemy.orm import Session

from models.food import Food
from services.errors import NotFoundError, ValidationError

FOLDERS = ("General", "Breakfast", "Lunch", "Dinner", "Snack")
EDITABLE = ("name", "calories", "protein", "carbs", "fat", "fiber", "serving_size", "icon", "folder")


def _validate(data: dict, partial: bool = False) -> dict:
    clean = {}
    if "name" in data or not partial:
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Food name is required")
        clean["name"] = name.strip()
    for macro in ("calories", "protein", "carbs", "fat", "fiber"):
        if macro in data or (not partial and macro == "calories"):
            try:
                clean[macro] = float(data.get(macro) or 0)
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid {macro}")
            if not math.isfinite(clean[macro]) or clean[macro] < 0:
                raise ValidationError(f"Invalid {macro}")
    if "folder" in data:
        if data["folder"] not in FOLDERS:
            raise ValidationError(f"Invalid folder '{data['folder']}'")
        clean["folder"] = data["folder"]
    for k in ("serving_size", "icon"):
        if data.get(k):
            clean[k] = str(data[k])
    return clean


class FoodService:
    @staticmethod
    def search(db: Session, user_id: int, query: str, limit: int = 20) -> list[Food]:
        if not query or not query.strip():
            return []
        return db.query(Food).filter(
            Food.name.ilike(f"%{query.strip()}%"),
            or_(Food.user_id == user_id, Food.user_id.is_(None)),
        ).limit(limit).all()

    @staticmethod
    def saved(db: Session, user_id: int, limit: int = 50) -> list[Food]:
        return db.query(Food).filter(Food.user_id == user_id).order_by(Food.id.desc()).limit(limit).all()

    @staticmethod
    def create(db: Session, user_id: int, data: dict) -> Food:
        clean = _validate(data)
        food = Food(
            user_id=user_id,
            serving_size=clean.pop("serving_size", "1 serving"),
            icon=clean.pop("icon", "🍽️"),
            folder=clean.pop("folder", "General"),
            **clean,
        )
        db.add(food)
        db.commit()
        db.refresh(food)
        return food

    @staticmethod
    def _owned(db: Session, user_id: int, food_id: int) -> Food:
        food = db.query(Food).filter_by(id=food_id, user_id=user_id).first()
        if not food:
            raise NotFoundError("Food not found")
        return food

    @staticmethod
    def update(db: Session, user_id: int, food_id: int, data: dict) -> Food:
        food = FoodService._owned(db, user_id, food_id)
        for k, v in _validate({k: v for k, v in data.items() if k in EDITABLE}, partial=True).items():
            setattr(food, k, v)
        db.commit()
        db.refresh(food)
        return food

    @staticmethod
    def delete(db: Session, user_id: int, food_id: int) -> bool:
        food = FoodService._owned(db, user_id, food_id)
        db.delete(food)
        db.commit()
        return True
