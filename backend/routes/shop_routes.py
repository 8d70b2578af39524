from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Union
from sqlalchemy.orm import Session

from database import get_db
from models.user import User
from services.shop_service import ShopService, inventory_of
from streak import get_active_user

router = APIRouter(prefix="/api/v1/shop", tags=["Shop"])


class RewardCreate(BaseModel):
    name: str
    price: Union[int, str]


class ItemAction(BaseModel):
    item_id: int


class Exchange(BaseModel):
    amount_game_coins: Union[int, str]


@router.get("")
async def get_shop_items(user: User = Depends(get_active_user), db: Session = Depends(get_db)):
    return [item.to_dict() for item in ShopService.list_items(db, user.id)]


@router.get("/inventory")
async def get_inventory(user: User = Depends(get_active_user), db: Session = Depends(get_db)):
    return inventory_of(db, user.id)


@router.post("/rewards", status_code=201)
async def create_custom_reward(body: RewardCreate, user: User = Depends(get_active_user),
                               db: Session = Depends(get_db)):
    return ShopService.create_reward(db, user.id, body.name, body.price).to_dict()


@router.post("/buy")
async def buy_item(body: ItemAction, user: User = Depends(get_active_user), db: Session = Depends(get_db)):
    return ShopService.buy(db, user, body.item_id)


@router.post("/use")
async def use_item(body: ItemAction, user: User = Depends(get_active_user), db: Session = Depends(get_db)):
    return ShopService.use(db, user, body.item_id)


@router.post("/exchange")
async def exchange_currency(body: Exchange, user: User = Depends(get_active_user), db: Session = Depends(get_db)):
    return ShopService.exchange(db, user, body.amount_game_coins)
