from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional, Union, List, Dict
from sqlalchemy.orm import Session

from database import get_db
from models.user import User
from services.food_analysis import FoodAnalysisService, get_food_analysis
from services.food_service import FoodService
from services.nutrition_service import NutritionService
from streak import get_active_user

router = APIRouter(prefix="/api/v1/food", tags=["Food"])

Number = Optional[Union[float, str]]


class MealCreate(BaseModel):
    name: str


class FoodItem(BaseModel):
    name: Optional[str] = None
    calories: Number = None
    protein: Number = None
    carbs: Number = None
    fat: Number = None
    fiber: Number = None
    quantity: Number = None


class SavedFood(BaseModel):
    name: Optional[str] = None
    calories: Number = None
    protein: Number = None
    carbs: Number = None
    fat: Number = None
    fiber: Number = None
    serving_size: Optional[str] = None
    icon: Optional[str] = None
    folder: Optional[str] = None


class AnalyzeText(BaseModel):
    text: str


class MacroChat(BaseModel):
    history: List[Dict[str, str]]


# --- Nutrition log ---

@router.get("/log")
async def get_nutrition_log(date: Optional[str] = None, user: User = Depends(get_active_user),
                            db: Session = Depends(get_db)):
    return NutritionService.get_or_create(db, user.id, date).to_dict()


@router.post("/log/meals")
async def add_meal_category(body: MealCreate, date: Optional[str] = None, user: User = Depends(get_active_user),
                            db: Session = Depends(get_db)):
    return NutritionService.add_meal(db, user.id, body.name, date).to_dict()


@router.post("/log/{meal_id}")
async def add_food_to_log(meal_id: int, body: FoodItem, date: Optional[str] = None,
                          user: User = Depends(get_active_user), db: Session = Depends(get_db)):
    return NutritionService.add_food(db, user.id, meal_id, body.model_dump(), date).to_dict()


@router.delete("/log/{meal_id}/{food_id}")
async def remove_food_from_log(meal_id: int, food_id: int, date: Optional[str] = None,
                               user: User = Depends(get_active_user), db: Session = Depends(get_db)):
    return NutritionService.remove_food(db, user.id, meal_id, food_id, date).to_dict()


# --- Food catalog ---

@router.get("/search")
async def search_foods(query: str = "", user: User = Depends(get_active_user), db: Session = Depends(get_db)):
    return [f.to_dict() for f in FoodService.search(db, user.id, query)]


@router.get("/saved")
async def get_saved_foods(user: User = Depends(get_active_user), db: Session = Depends(get_db)):
    return [f.to_dict() for f in FoodService.saved(db, user.id)]


@router.post("/saved", status_code=201)
async def save_custom_food(body: SavedFood, user: User = Depends(get_active_user), db: Session = Depends(get_db)):
    return FoodService.create(db, user.id, body.model_dump(exclude_none=True)).to_dict()


@router.put("/saved/{food_id}")
async def update_saved_food(food_id: int, body: SavedFood, user: User = Depends(get_active_user),
                            db: Session = Depends(get_db)):
    return FoodService.update(db, user.id, food_id, body.model_dump(exclude_unset=True)).to_dict()


@router.delete("/saved/{food_id}")
async def delete_saved_food(food_id: int, user: User = Depends(get_active_user), db: Session = Depends(get_db)):
    FoodService.delete(db, user.id, food_id)
    return {"message": "Deleted"}


# --- AI analysis ---

@router.post("/analyze-text")
async def analyze_food_text(body: AnalyzeText, user: User = Depends(get_active_user),
                            analysis: FoodAnalysisService = Depends(get_food_analysis)):
    return await analysis.analyze_text(body.text)


@router.post("/macro-chat")
async def chat_macro_calculator(body: MacroChat, user: User = Depends(get_active_user),
                                analysis: FoodAnalysisService = Depends(get_food_analysis)):
    return await analysis.macro_chat(body.history)
