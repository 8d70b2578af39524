# Importing the package registers every table on Base.metadata (see database.init_db)

from models.user import User
from models.mission import Mission, MissionParticipant
from models.daily_log import DailyLog
from models.nutrition_log import NutritionLog, Meal, FoodEntry
from models.food import Food
from models.shop_item import ShopItem, InventoryEntry

__all__ = [
    "User",
    "Mission",
    "MissionParticipant",
    "DailyLog",
    "NutritionLog",
    "Meal",
    "FoodEntry",
    "Food",
    "ShopItem",
    "InventoryEntry",
]
