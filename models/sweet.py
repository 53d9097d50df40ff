from sqlalchemy import (
    Column,
    String,
    Integer,
    Numeric,
    Text,
    CheckConstraint,
    Index,
)

from models.base_model import BaseModel, Base

CATEGORIES = ("Chocolate", "Candy", "Gummy", "Hard Candy", "Lollipop", "Toffee", "Other")


class Sweet(BaseModel, Base):
    __tablename__ = "sweets"

    name = Column(String(100), nullable=False)  # 2..100 chars (in schema)
    category = Column(String(32), nullable=False)  # one of CATEGORIES (in schema)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    description = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_sweets_quantity_nonnegative"),
        CheckConstraint("price >= 0", name="ck_sweets_price_nonnegative"),
        Index("ix_sweets_name", "name"),
        Index("ix_sweets_category", "category"),
        Index("ix_sweets_price", "price"),
    )
