from sqlalchemy import Column, String, Boolean, Integer, ForeignKey, Table
from sqlalchemy.orm import relationship
from database.base import Base

shop_categories = Table(
    "shop_categories",
    Base.metadata,
    Column("shop_id", String(36), ForeignKey("shops.shop_id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("categories.category_id"), primary_key=True),
)

class Category(Base):
    __tablename__ = "categories"

    category_id = Column(Integer, primary_key=True, autoincrement=True)
    category_name = Column(String(100), nullable=False, unique=True)
    icon = Column(String(100), nullable=True)
    display_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)

    # Relationships
    shops = relationship("Shop", secondary=shop_categories, back_populates="categories")

    def to_dict(self):
        return {
            "category_id": self.category_id,
            "category_name": self.category_name,
            "icon": self.icon,
            "display_order": self.display_order,
            "is_active": self.is_active,
        }
