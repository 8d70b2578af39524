"""
level_service.py — XP, level and currency bookkeeping.
XP is cumulative. Going from level L to L+1 costs 100 * L XP, so the thresholds
are 0, 100, 300, 600, 1000, ...
"""

import logging

from sqlalchemy.orm import Session

from models.user import User
from services.errors import NotFoundError

logger = logging.getLogger(__name__)

MAX_HP = 100


def xp_threshold(level: int) -> int:
    """Total XP needed to reach `level`."""
    return 50 * level * (level - 1)


def level_for_xp(xp: int) -> int:
    level = 1
    while xp >= xp_threshold(level + 1):
        level += 1
    return level


class LevelService:
    @staticmethod
    def add_rewards(db: Session, user_id: int, xp: int = 0, coins: int = 0, game_coins: int = 0,
                    commit: bool = True) -> dict:
        """Apply reward deltas; returns {"user": User, "leveled_up": bool}."""
        user = db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")

        user.xp = max(0, (user.xp or 0) + int(xp or 0))
        user.coins = max(0, (user.coins or 0) + int(coins or 0))
        user.game_coins = max(0, (user.game_coins or 0) + int(game_coins or 0))

        old_level = user.level or 1
        new_level = max(old_level, level_for_xp(user.xp))
        leveled_up = new_level > old_level
        if leveled_up:
            user.level = new_level
            user.hp = MAX_HP
            logger.info(f"User {user_id} leveled up: {old_level} -> {new_level}")

        if commit:
            db.commit()
            db.refresh(user)
        else:
            db.flush()
        return {"user": user, "leveled_up": leveled_up}
