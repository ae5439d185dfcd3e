from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from storefront.config import settings
from storefront.dependencies import get_product_catalog
from storefront.models import Product
from storefront.schemas.products import ProductCreateRequest, ProductResponse
from storefront.services.product_catalog import SqlAlchemyProductCatalog

router = APIRouter()


def product_to_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        name=product.name,
        description=product.description,
        price=product.price_cents,
        currency=settings.DEFAULT_CURRENCY,
        createdAt=product.created_at.isoformat() if product.created_at else "",
    )


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create product",
)
def create_product(
    body: ProductCreateRequest,
    catalog: Annotated[SqlAlchemyProductCatalog, Depends(get_product_catalog)],
):
    product = catalog.create(name=body.name, price_cents=body.price, description=body.description)
    return product_to_response(product)


@router.get(
    "",
    response_model=list[ProductResponse],
    summary="List products",
)
def list_products(
    catalog: Annotated[SqlAlchemyProductCatalog, Depends(get_product_catalog)],
):
    """Returns all products, newest first."""
    return [product_to_response(p) for p in catalog.list()]


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product by ID",
)
def get_product(
    product_id: int,
    catalog: Annotated[SqlAlchemyProductCatalog, Depends(get_product_catalog)],
):
    product = catalog.get(product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product_to_response(product)
