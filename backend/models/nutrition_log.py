from sqlalchemy import Column, Integer, String, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base


class NutritionLog(Base):
    __tablename__ = "nutrition_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD

    # Running totals, maintained incrementally and rounded after every change
    total_calories = Column(Integer, default=0, nullable=False)
    total_protein = Column(Integer, default=0, nullable=False)
    total_carbs = Column(Integer, default=0, nullable=False)
    total_fat = Column(Integer, default=0, nullable=False)
    total_fiber = Column(Integer, default=0, nullable=False)

    meals = relationship(
        "Meal",
        order_by="Meal.position",
        cascade="all, delete-orphan",
        back_populates="log",
    )

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_nutritionlog_user_date"),
    )

    def totals(self) -> dict:
        return {
            "total_kcal": self.total_calories,
            "total_protein": self.total_protein,
            "total_carbs": self.total_carbs,
            "total_fat": self.total_fat,
            "total_fiber": self.total_fiber,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "meals": [m.to_dict() for m in self.meals],
            "total_calories": self.total_calories,
            "total_protein": self.total_protein,
            "total_carbs": self.total_carbs,
            "total_fat": self.total_fat,
            "total_fiber": self.total_fiber,
        }


class Meal(Base):
    __tablename__ = "meals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    log_id = Column(Integer, ForeignKey("nutrition_logs.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(100), nullable=False)
    position = Column(Integer, default=0)

    log = relationship("NutritionLog", back_populates="meals")
    foods = relationship(
        "FoodEntry",
        order_by="FoodEntry.id",
        cascade="all, delete-orphan",
        back_populates="meal",
    )

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "foods": [f.to_dict() for f in self.foods]}


class FoodEntry(Base):
    __tablename__ = "food_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    meal_id = Column(Integer, ForeignKey("meals.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(200), nullable=False)
    calories = Column(Float, default=0)
    protein = Column(Float, default=0)
    carbs = Column(Float, default=0)
    fat = Column(Float, default=0)
    fiber = Column(Float, default=0)
    quantity = Column(Float, default=1)

    meal = relationship("Meal", back_populates="foods")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
            "fiber": self.fiber,
            "quantity": self.quantity,
        }
