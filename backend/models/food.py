from sqlalchemy import Column, Integer, String, Float, ForeignKey
from database import Base


class Food(Base):
    __tablename__ = "foods"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)  # null = global food
    name = Column(String(200), nullable=False, index=True)
    calories = Column(Float, nullable=False)
    protein = Column(Float, default=0)
    carbs = Column(Float, default=0)
    fat = Column(Float, default=0)
    fiber = Column(Float, default=0)
    serving_size = Column(String(50), default="100g")
    icon = Column(String(10), default="🍎")
    folder = Column(String(20), default="General")  # General/Breakfast/Lunch/Dinner/Snack

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
            "fiber": self.fiber,
            "serving_size": self.serving_size,
            "icon": self.icon,
            "folder": self.folder,
        }
