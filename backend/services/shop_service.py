"""
shop_service.py — Shop catalog, purchases, inventory use and currency exchange.
Personal rewards cost coins; system items cost game coins.
"""

import logging
import random

from sqlalchemy import or_
from sqlalchemy.orm import Session

from models.shop_item import ShopItem, InventoryEntry
from models.user import User
from services.errors import InsufficientFundsError, NotFoundError, ValidationError
from services.level_service import LevelService, MAX_HP

logger = logging.getLogger(__name__)

UNIQUE_CATEGORIES = ("avatar", "frame", "theme", "title", "pet")
MIN_EXCHANGE = 100
EXCHANGE_RATE = 100  # game coins per coin

SEED_ITEMS = [
    {"name": "Golden Knight", "price": 500, "category": "avatar", "icon": "/avatars/golden_knight.png", "description": "Legendary armor."},
    {"name": "Zeus", "price": 10, "category": "avatar", "icon": "/avatars/zeus.png", "description": "The god of thunder."},
    {"name": "Goddess", "price": 2100, "category": "avatar", "icon": "/avatars/goddess.png", "description": "The goddess of wisdom."},
    {"name": "Flask of Wisdom", "price": 40, "category": "consumable", "icon": "/consumables/xp_potion.png", "effect_type": "xp", "effect_value": 100, "description": "+100 XP."},
    {"name": "Vital Potion", "price": 100, "category": "consumable", "icon": "/consumables/life_potion.png", "effect_type": "heal", "effect_value": 1, "description": "+1 HP."},
    {"name": "Golden Frame", "price": 300, "category": "frame", "icon": "/frames/gold_frame.png", "description": "Shiny."},
    {"name": "Lightning Frame", "price": 10, "category": "frame", "icon": "/frames/lightning.png", "description": "Pure energy."},
    {"name": "Infernal Dragon", "price": 1, "category": "pet", "icon": "/pets/dragon.png", "description": "Legendary beast."},
    {"name": "Dragon Snake", "price": 1, "category": "pet", "icon": "/pets/snake.png", "description": "Stealthy and lethal."},
    {"name": "The Veteran", "price": 500, "category": "title", "icon": "📜", "description": "For those who have seen it all."},
    {"name": "The Legend", "price": 2000, "category": "title", "icon": "👾", "description": "Legendary."},
    {"name": "Shabby Chest", "price": 50, "category": "chest", "icon": "/chests/wood_chest.png", "description": "Low risk."},
    {"name": "Golden Chest", "price": 250, "category": "chest", "icon": "/chests/gold_chest.png", "description": "Balanced."},
    {"name": "Legendary Chest", "price": 1000, "category": "chest", "icon": "/chests/legendary_chest.png", "description": "High risk."},
    {"name": "Dark Mode", "price": 0, "category": "theme", "icon": "🌙", "effect_type": "dark", "description": "Classic."},
    {"name": "Light Mode", "price": 1, "category": "theme", "icon": "☀️", "effect_type": "light", "description": "Bright."},
]


def inventory_of(db: Session, user_id: int) -> list[dict]:
    entries = db.query(InventoryEntry).filter_by(user_id=user_id).all()
    return [e.to_dict() for e in entries]


class ShopService:
    @staticmethod
    def seed(db: Session, reset: bool = False) -> int:
        if reset:
            for item in db.query(ShopItem).filter(ShopItem.category != "reward").all():
                db.delete(item)
        db.add_all([ShopItem(**data) for data in SEED_ITEMS])
        db.commit()
        logger.info(f"Seeded {len(SEED_ITEMS)} shop items")
        return len(SEED_ITEMS)

    @staticmethod
    def list_items(db: Session, user_id: int) -> list[ShopItem]:
        if db.query(ShopItem).filter(ShopItem.category != "reward").count() == 0:
            ShopService.seed(db)
        return db.query(ShopItem).filter(or_(
            ShopItem.user_id == user_id,
            ShopItem.category != "reward",
        )).all()

    @staticmethod
    def create_reward(db: Session, user_id: int, name: str, price) -> ShopItem:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Reward name is required")
        try:
            price = int(price)
        except (TypeError, ValueError):
            raise ValidationError("Invalid price")
        if price < 0:
            raise ValidationError("Invalid price")
        item = ShopItem(user_id=user_id, name=name.strip(), price=price, category="reward",
                        icon="🎟️", description="Personal reward.")
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    @staticmethod
    def _item(db: Session, item_id) -> ShopItem:
        item = db.get(ShopItem, item_id)
        if not item:
            raise NotFoundError("Item not found")
        return item

    @staticmethod
    def buy(db: Session, user: User, item_id) -> dict:
        item = ShopService._item(db, item_id)
        if item.category == "reward" and item.user_id not in (None, user.id):
            raise NotFoundError("Item not found")

        currency = "coins" if item.category == "reward" else "game_coins"
        if getattr(user, currency) < item.price:
            label = "coins" if currency == "coins" else "game coins"
            raise InsufficientFundsError(f"You don't have enough {label}")

        entry = db.query(InventoryEntry).filter_by(user_id=user.id, item_id=item.id).first()
        if entry and item.category in UNIQUE_CATEGORIES:
            raise ValidationError("You already own this item!")

        setattr(user, currency, getattr(user, currency) - item.price)
        if entry:
            entry.quantity += 1
        else:
            db.add(InventoryEntry(user_id=user.id, item_id=item.id, quantity=1))
        db.commit()
        db.refresh(user)
        return {"message": f"You bought {item.name}!", "user": user.to_profile(),
                "inventory": inventory_of(db, user.id)}

    @staticmethod
    def use(db: Session, user: User, item_id) -> dict:
        item = ShopService._item(db, item_id)
        entry = db.query(InventoryEntry).filter_by(user_id=user.id, item_id=item.id).first()
        if not entry:
            raise ValidationError("You don't own this item")

        msg, reward = "Item used", None
        if item.category == "avatar":
            user.avatar, msg = item.icon, "Avatar equipped"
        elif item.category == "frame":
            user.frame, msg = item.icon, "Frame equipped"
        elif item.category == "pet":
            user.pet, msg = item.icon, "Pet equipped"
        elif item.category == "title":
            user.title, msg = item.name, "Title equipped"
        elif item.category == "theme":
            user.theme, msg = item.effect_type or "dark", "Theme applied"
        elif item.category in ("consumable", "chest"):
            if item.category == "chest":
                prize = 100 if random.random() > 0.8 else 10
                user.coins += prize
                reward, msg = {"type": "coins", "value": prize}, "Chest opened"
            elif item.effect_type == "xp":
                LevelService.add_rewards(db, user.id, xp=item.effect_value or 0, commit=False)
                reward, msg = {"type": "xp", "value": item.effect_value or 0}, "Potion used"
            elif item.effect_type == "heal":
                user.hp = min(MAX_HP, (user.hp or 0) + (item.effect_value or 0))
                reward, msg = {"type": "hp", "value": item.effect_value or 0}, "Potion used"
            entry.quantity -= 1
            if entry.quantity <= 0:
                db.delete(entry)

        db.commit()
        db.refresh(user)
        return {"message": msg, "user": user.to_profile(), "reward": reward,
                "inventory": inventory_of(db, user.id)}

    @staticmethod
    def exchange(db: Session, user: User, amount_game_coins) -> dict:
        try:
            amount = int(amount_game_coins)
        except (TypeError, ValueError):
            raise ValidationError(f"Minimum {MIN_EXCHANGE} game coins")
        if amount < MIN_EXCHANGE:
            raise ValidationError(f"Minimum {MIN_EXCHANGE} game coins")
        if user.game_coins < amount:
            raise InsufficientFundsError("Not enough game coins")

        coins = amount // EXCHANGE_RATE
        user.game_coins -= amount
        user.coins += coins
        db.commit()
        db.refresh(user)
        return {"message": f"Exchange complete: +{coins} coins", "user": user.to_profile()}
