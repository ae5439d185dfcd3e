from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from storefront.models.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price_cents = Column(Integer, nullable=False)  # minor units of DEFAULT_CURRENCY
    created_at = Column(DateTime(timezone=True), server_default=func.now())
