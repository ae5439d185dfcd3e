from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.models import User, get_db
from storefront.services.accounts import AccountService, user_id_from_token
from storefront.services.order_service import OrderCreationService
from storefront.services.order_store import OrderStore, SqlAlchemyOrderStore
from storefront.services.payment_gateway import PaymentIntentGateway, StripePaymentIntentGateway
from storefront.services.product_catalog import SqlAlchemyProductCatalog
from storefront.services.reconciler import EventReconciler
from storefront.services.webhook_verifier import StripeWebhookVerifier

security = HTTPBearer(auto_error=False)


def get_current_user_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User | None:
    if not credentials:
        return None
    user_id = user_id_from_token(credentials.credentials)
    if user_id is None:
        return None
    return AccountService(db).get(user_id)


def get_current_user(
    user: Annotated[User | None, Depends(get_current_user_optional)],
) -> User:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_account_service(db: Annotated[Session, Depends(get_db)]) -> AccountService:
    return AccountService(db)


def get_product_catalog(db: Annotated[Session, Depends(get_db)]) -> SqlAlchemyProductCatalog:
    return SqlAlchemyProductCatalog(db)


def get_order_store(db: Annotated[Session, Depends(get_db)]) -> OrderStore:
    return SqlAlchemyOrderStore(db)


def get_payment_gateway() -> PaymentIntentGateway:
    return StripePaymentIntentGateway(api_key=settings.STRIPE_SECRET_KEY)


def get_order_service(
    products: Annotated[SqlAlchemyProductCatalog, Depends(get_product_catalog)],
    orders: Annotated[OrderStore, Depends(get_order_store)],
    gateway: Annotated[PaymentIntentGateway, Depends(get_payment_gateway)],
) -> OrderCreationService:
    return OrderCreationService(products, orders, gateway, currency=settings.DEFAULT_CURRENCY)


def get_webhook_verifier() -> StripeWebhookVerifier:
    return StripeWebhookVerifier(
        secret=settings.STRIPE_WEBHOOK_SECRET,
        tolerance=settings.STRIPE_WEBHOOK_TOLERANCE_SECONDS,
    )


def get_event_reconciler(
    orders: Annotated[OrderStore, Depends(get_order_store)],
) -> EventReconciler:
    return EventReconciler(orders)
