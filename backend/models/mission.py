from datetime import datetime

from sqlalchemy import Column, Integer, String, Float, DateTime, Boolean, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base


class Mission(Base):
    __tablename__ = "missions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    type = Column(String(10), default="habit")  # habit/quest
    difficulty = Column(String(10), default="easy")  # easy/medium/hard/epic
    frequency = Column(String(10), default="daily")  # daily/weekly/monthly/yearly
    specific_days = Column(JSON, default=list)  # weekday ints, 0 = Sunday; empty = every day

    target = Column(Float, default=1, nullable=False)
    progress = Column(Float, default=0, nullable=False)
    unit = Column(String(50), default="")
    completed = Column(Boolean, default=False, nullable=False)
    last_updated = Column(DateTime, default=datetime.now)  # server-local naive

    is_coop = Column(Boolean, default=False, nullable=False)
    invitation_status = Column(String(10), default="none")  # none/pending/active
    contributions = Column(JSON, default=dict)  # canonical user id -> amount

    xp_reward = Column(Integer, default=0)
    coin_reward = Column(Integer, default=0)
    game_coin_reward = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.now)
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}

    owner = relationship("User", foreign_keys=[owner_id])
    participant_links = relationship(
        "MissionParticipant",
        order_by="MissionParticipant.position",
        cascade="all, delete-orphan",
        back_populates="mission",
    )

    @property
    def participant_ids(self) -> list[int]:
        return [p.user_id for p in self.participant_links]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "title": self.title,
            "type": self.type,
            "difficulty": self.difficulty,
            "frequency": self.frequency,
            "specific_days": list(self.specific_days or []),
            "target": self.target,
            "progress": self.progress,
            "unit": self.unit,
            "completed": self.completed,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
            "is_coop": self.is_coop,
            "invitation_status": self.invitation_status,
            "contributions": dict(self.contributions) if isinstance(self.contributions, dict) else {},
            "participants": [
                {
                    "id": link.user_id,
                    "username": link.user.username if link.user else None,
                    "avatar": link.user.avatar if link.user else None,
                }
                for link in self.participant_links
            ],
            "xp_reward": self.xp_reward,
            "coin_reward": self.coin_reward,
            "game_coin_reward": self.game_coin_reward,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class MissionParticipant(Base):
    __tablename__ = "mission_participants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    mission_id = Column(Integer, ForeignKey("missions.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    position = Column(Integer, default=0)

    mission = relationship("Mission", back_populates="participant_links")
    user = relationship("User", lazy="joined")

    __table_args__ = (
        UniqueConstraint("mission_id", "user_id", name="uq_mission_participant"),
    )
