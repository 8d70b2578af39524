from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, JSON
from database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=True)
    hashed_password = Column(String(255), nullable=False)

    # Progression
    xp = Column(Integer, default=0, nullable=False)
    level = Column(Integer, default=1, nullable=False)
    coins = Column(Integer, default=0, nullable=False)
    game_coins = Column(Integer, default=0, nullable=False)
    hp = Column(Integer, default=100, nullable=False)
    lives = Column(Integer, default=100, nullable=False)

    # Login streak
    streak_current = Column(Integer, default=1, nullable=False)
    streak_last_log_date = Column(DateTime, nullable=True)  # server-local naive

    # Cosmetics equipped from the shop
    avatar = Column(String(255), nullable=True)
    frame = Column(String(255), nullable=True)
    pet = Column(String(255), nullable=True)
    title = Column(String(100), nullable=True)
    theme = Column(String(20), default="dark")

    mission_requests = Column(JSON, default=list)  # ids of pending coop invitations
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    def to_profile(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "xp": self.xp,
            "level": self.level,
            "coins": self.coins,
            "game_coins": self.game_coins,
            "hp": self.hp,
            "lives": self.lives,
            "streak": {
                "current": self.streak_current,
                "last_log_date": self.streak_last_log_date.isoformat() if self.streak_last_log_date else None,
            },
            "avatar": self.avatar,
            "frame": self.frame,
            "pet": self.pet,
            "title": self.title,
            "theme": self.theme,
            "mission_requests": list(self.mission_requests or []),
        }
