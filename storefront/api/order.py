import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from storefront.dependencies import get_current_user, get_order_service, get_order_store
from storefront.errors import GatewayError, NotFoundError, StoreError, ValidationError
from storefront.models import Order, User
from storefront.schemas.orders import OrderCreateRequest, OrderCreateResponse, OrderResponse
from storefront.services.order_service import OrderCreationService
from storefront.services.order_store import OrderStore

router = APIRouter()
logger = logging.getLogger(__name__)


def order_to_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        productId=order.product_id,
        amount=order.amount_cents,
        currency=order.currency,
        status=order.status,
        paymentReferenceId=order.payment_reference_id,
        createdAt=order.created_at.isoformat() if order.created_at else "",
        updatedAt=order.updated_at.isoformat() if order.updated_at else None,
    )


@router.post(
    "",
    response_model=OrderCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create order and payment intent",
)
def create_order(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[OrderCreationService, Depends(get_order_service)],
    body: OrderCreateRequest | None = None,
):
    """
    Create a pending order for the given product and a matching payment intent.
    Returns the order id and the client secret used to confirm payment client-side.
    An absent body is treated like one without productId (400).
    """
    product_id = body.product_id if body is not None else None
    try:
        created = service.create_order(user_id=current_user.id, product_id=product_id)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except GatewayError as e:
        logger.warning("Payment intent creation failed for user %s: %s", current_user.id, e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except StoreError:
        logger.exception("Failed to save order for user %s", current_user.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save order",
        )

    return OrderCreateResponse(orderId=created.order_id, clientSecret=created.client_secret)


@router.get(
    "/me",
    response_model=list[OrderResponse],
    summary="List my orders",
)
def my_orders(
    current_user: Annotated[User, Depends(get_current_user)],
    orders: Annotated[OrderStore, Depends(get_order_store)],
):
    """Returns the list of orders for the current user, newest first."""
    return [order_to_response(o) for o in orders.list_for_user(current_user.id)]


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get order",
)
def get_order(
    order_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    orders: Annotated[OrderStore, Depends(get_order_store)],
):
    """Returns one order (only for the current user's orders)."""
    order = orders.get(order_id)
    if not order or order.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order_to_response(order)
