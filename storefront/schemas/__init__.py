from storefront.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from storefront.schemas.orders import OrderCreateRequest, OrderCreateResponse, OrderResponse
from storefront.schemas.products import ProductCreateRequest, ProductResponse

__all__ = [
    "LoginRequest",
    "RegisterRequest",
    "TokenResponse",
    "UserResponse",
    "OrderCreateRequest",
    "OrderCreateResponse",
    "OrderResponse",
    "ProductCreateRequest",
    "ProductResponse",
]
