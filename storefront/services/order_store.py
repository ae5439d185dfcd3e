import logging
from collections.abc import Collection
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.errors import StoreError
from storefront.models import Order, OrderStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusTransition:
    """Outcome of a status write for the order matching a payment reference."""

    order_id: int
    previous_status: str
    status: str
    applied: bool
    allowed: bool = True


class OrderStore(Protocol):
    def add_pending(
        self,
        user_id: int,
        product_id: int,
        amount_cents: int,
        currency: str,
        payment_reference_id: str,
    ) -> Order: ...

    def get(self, order_id: int) -> Order | None: ...

    def get_by_payment_reference(self, payment_reference_id: str) -> Order | None: ...

    def list_for_user(self, user_id: int) -> list[Order]: ...

    def transition_status(
        self,
        payment_reference_id: str,
        new_status: str,
        allowed_from: Collection[str],
    ) -> StatusTransition | None: ...


class SqlAlchemyOrderStore:
    """Order store backed by a SQLAlchemy session.

    Every write commits on its own; a failed write is rolled back and raised
    as StoreError.
    """

    def __init__(self, db: Session):
        self.db = db

    def add_pending(
        self,
        user_id: int,
        product_id: int,
        amount_cents: int,
        currency: str,
        payment_reference_id: str,
    ) -> Order:
        order = Order(
            user_id=user_id,
            product_id=product_id,
            amount_cents=amount_cents,
            currency=currency,
            payment_reference_id=payment_reference_id,
            status=OrderStatus.PENDING.value,
        )
        try:
            self.db.add(order)
            self.db.commit()
            self.db.refresh(order)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError(f"Failed to persist order for payment reference {payment_reference_id}") from exc
        return order

    def get(self, order_id: int) -> Order | None:
        try:
            return self.db.query(Order).filter(Order.id == order_id).first()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to load order {order_id}") from exc

    def get_by_payment_reference(self, payment_reference_id: str) -> Order | None:
        try:
            return self.db.query(Order).filter(Order.payment_reference_id == payment_reference_id).first()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to load order for payment reference {payment_reference_id}") from exc

    def list_for_user(self, user_id: int) -> list[Order]:
        try:
            return (
                self.db.query(Order)
                .filter(Order.user_id == user_id)
                .order_by(Order.created_at.desc(), Order.id.desc())
                .all()
            )
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to list orders for user {user_id}") from exc

    def transition_status(
        self,
        payment_reference_id: str,
        new_status: str,
        allowed_from: Collection[str],
    ) -> StatusTransition | None:
        """Lock the order for the reference and move it to new_status.

        Returns None when no order matches. A same-status write is a no-op and
        a status outside allowed_from is left untouched.
        """
        try:
            order = (
                self.db.query(Order)
                .filter(Order.payment_reference_id == payment_reference_id)
                .with_for_update()
                .first()
            )
            if not order:
                self.db.rollback()
                return None

            order_id = order.id
            previous = order.status
            if previous == new_status:
                self.db.rollback()
                return StatusTransition(order_id, previous, previous, applied=False)
            if previous not in allowed_from:
                self.db.rollback()
                return StatusTransition(order_id, previous, previous, applied=False, allowed=False)

            order.status = new_status
            self.db.commit()
            logger.info(
                "Order %s status %s -> %s (payment reference %s)",
                order_id,
                previous,
                new_status,
                payment_reference_id,
            )
            return StatusTransition(order_id, previous, new_status, applied=True)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError(
                f"Failed to update order status for payment reference {payment_reference_id}"
            ) from exc
