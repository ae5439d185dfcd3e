from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.errors import StoreError
from storefront.models import Product


class ProductCatalog(Protocol):
    def get(self, product_id: int) -> Product | None: ...


class SqlAlchemyProductCatalog:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int) -> Product | None:
        try:
            return self.db.query(Product).filter(Product.id == product_id).first()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to load product {product_id}") from exc

    def list(self) -> list[Product]:
        try:
            return self.db.query(Product).order_by(Product.created_at.desc(), Product.id.desc()).all()
        except SQLAlchemyError as exc:
            raise StoreError("Failed to list products") from exc

    def create(self, name: str, price_cents: int, description: str | None = None) -> Product:
        product = Product(name=name, description=description, price_cents=price_cents)
        try:
            self.db.add(product)
            self.db.commit()
            self.db.refresh(product)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError("Failed to create product") from exc
        return product
