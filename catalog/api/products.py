from typing import List

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from catalog.database import get_db
from catalog.models.product import MAX_STOCK
from catalog.schemas.product import (
    PageRequest,
    ProductPage,
    ProductRequest,
    ProductResponse,
    SortDirection,
)
from catalog.services.product_service import ProductService
from catalog.utils.cache import ProductCache, get_cache

router = APIRouter(prefix="/products", tags=["Products"])


def get_product_service(
    db: Session = Depends(get_db),
    cache: ProductCache = Depends(get_cache),
) -> ProductService:
    return ProductService(db, cache)


@router.get(
    "/",
    response_model=ProductPage,
    summary="List active products",
    description="Get a zero-indexed, sorted page of products that have not been deleted."
)
def list_products(
    page: int = Query(0, ge=0, description="Page number (zero-based)"),
    size: int = Query(10, ge=1, le=100, description="Items per page"),
    sort_by: str = Query("id", alias="sortBy", description="Field to sort by"),
    sort_dir: str = Query("ASC", alias="sortDir", description="ASC or DESC (case-insensitive)"),
    service: ProductService = Depends(get_product_service)
):
    """Get paginated list of active products."""
    page_request = PageRequest(
        page=page,
        size=size,
        sort_by=sort_by,
        sort_dir=SortDirection.parse(sort_dir),
    )
    return service.get_all_products(page_request)


@router.get(
    "/search",
    response_model=ProductPage,
    summary="Search products",
    description="Case-insensitive search over product name and description."
)
def search_products(
    query: str = Query("", description="Search term; blank matches every active product"),
    page: int = Query(0, ge=0, description="Page number (zero-based)"),
    size: int = Query(10, ge=1, le=100, description="Items per page"),
    service: ProductService = Depends(get_product_service)
):
    return service.search_products(query, page, size)


@router.get(
    "/categories",
    response_model=List[str],
    summary="List categories",
    description="Distinct categories of active products."
)
def list_categories(service: ProductService = Depends(get_product_service)):
    return service.get_all_categories()


@router.get(
    "/category/{category}",
    response_model=List[ProductResponse],
    summary="List products in a category",
    description="Active products whose category matches exactly. Unknown categories give an empty list."
)
def list_products_by_category(
    category: str,
    service: ProductService = Depends(get_product_service)
):
    return service.get_products_by_category(category)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product by ID",
    description="Get a single product. Deleted products are still returned. Results are cached."
)
def get_product(
    product_id: int,
    service: ProductService = Depends(get_product_service)
):
    return service.get_product_by_id(product_id)


@router.post(
    "/",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product"
)
def create_product(
    product_data: ProductRequest,
    service: ProductService = Depends(get_product_service)
):
    """
    Create a new product.

    - **name**: Product name (required)
    - **price**: Unit price, must be non-negative (required)
    - **stock**: Initial stock quantity, must be non-negative (required)
    - **description**, **category**, **image_url**: optional
    """
    return service.create_product(product_data)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Replace a product",
    description="Full update: every field is replaced with the request values."
)
def update_product(
    product_id: int,
    product_data: ProductRequest,
    service: ProductService = Depends(get_product_service)
):
    return service.update_product(product_id, product_data)


@router.patch(
    "/{product_id}/stock",
    response_model=ProductResponse,
    summary="Adjust stock",
    description="""
    Add a signed quantity to the current stock.

    Negative quantities deduct stock. A deduction larger than the stock on
    hand fails with 409 and leaves stock unchanged.
    """
)
def update_stock(
    product_id: int,
    quantity: int = Query(..., ge=-MAX_STOCK, le=MAX_STOCK, description="Signed stock delta"),
    service: ProductService = Depends(get_product_service)
):
    return service.update_stock(product_id, quantity)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product",
    description="Soft delete: the product is hidden from listings but kept in the database."
)
def delete_product(
    product_id: int,
    service: ProductService = Depends(get_product_service)
):
    service.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
