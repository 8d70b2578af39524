from sqlalchemy import Column, Integer, String, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base


class ShopItem(Base):
    __tablename__ = "shop_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)  # set only for personal rewards
    name = Column(String(100), nullable=False)
    price = Column(Integer, nullable=False)
    category = Column(String(20), nullable=False)  # avatar/frame/pet/title/theme/consumable/chest/reward
    icon = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    effect_type = Column(String(20), nullable=True)  # xp/heal/dark/light
    effect_value = Column(Integer, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "price": self.price,
            "category": self.category,
            "icon": self.icon,
            "description": self.description,
            "effect_type": self.effect_type,
            "effect_value": self.effect_value,
        }


class InventoryEntry(Base):
    __tablename__ = "inventory_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    item_id = Column(Integer, ForeignKey("shop_items.id", ondelete="CASCADE"), nullable=False)
    quantity = Column(Integer, default=1, nullable=False)

    item = relationship("ShopItem", lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_id", "item_id", name="uq_inventory_user_item"),
    )

    def to_dict(self) -> dict:
        return {"item": self.item.to_dict() if self.item else None, "quantity": self.quantity}
