import logging
from dataclasses import dataclass

from storefront.errors import NotFoundError, StoreError, ValidationError
from storefront.services.order_store import OrderStore
from storefront.services.payment_gateway import PaymentIntentGateway
from storefront.services.product_catalog import ProductCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreatedOrder:
    order_id: int
    client_secret: str
    payment_reference_id: str


class OrderCreationService:
    """Create a pending order backed by a freshly created payment intent.

    The intent is created first; the order is written only once the provider
    has returned a reference, so a gateway failure never leaves a pending
    order behind.
    """

    def __init__(
        self,
        products: ProductCatalog,
        orders: OrderStore,
        gateway: PaymentIntentGateway,
        currency: str = "usd",
    ):
        self.products = products
        self.orders = orders
        self.gateway = gateway
        self.currency = currency

    def create_order(self, user_id: int, product_id: int | None) -> CreatedOrder:
        if product_id is None:
            raise ValidationError("Product ID is required")

        product = self.products.get(product_id)
        if not product:
            raise NotFoundError("Product not found")

        amount_cents = int(product.price_cents)

        # GatewayError propagates untouched; nothing has been written yet.
        intent = self.gateway.create_intent(
            amount_cents,
            self.currency,
            {"productId": str(product.id), "userId": str(user_id)},
        )

        try:
            order = self.orders.add_pending(
                user_id=user_id,
                product_id=product.id,
                amount_cents=amount_cents,
                currency=self.currency,
                payment_reference_id=intent.reference_id,
            )
        except StoreError:
            logger.error(
                "Payment intent %s was created but its order could not be saved "
                "(user %s, product %s, amount %s %s)",
                intent.reference_id,
                user_id,
                product.id,
                amount_cents,
                self.currency,
            )
            raise

        logger.info(
            "Order %s created for user %s, product %s, payment intent %s",
            order.id,
            user_id,
            product.id,
            intent.reference_id,
        )
        return CreatedOrder(
            order_id=order.id,
            client_secret=intent.client_secret,
            payment_reference_id=intent.reference_id,
        )
