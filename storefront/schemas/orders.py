from pydantic import ConfigDict, Field

from storefront.models import OrderStatus
from storefront.schemas.base import CamelModel


class OrderCreateRequest(CamelModel):
    # A missing id is rejected by OrderCreationService (400).
    product_id: int | None = Field(default=None, alias="productId")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"examples": [{"productId": 1}]},
    )


class OrderCreateResponse(CamelModel):
    order_id: int = Field(alias="orderId")
    client_secret: str = Field(alias="clientSecret")


class OrderResponse(CamelModel):
    id: int
    product_id: int = Field(alias="productId")
    amount: int
    currency: str
    status: OrderStatus
    payment_reference_id: str | None = Field(default=None, alias="paymentReferenceId")
    created_at: str = Field(alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")
