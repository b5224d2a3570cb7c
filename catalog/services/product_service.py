import logging
import math
from contextlib import contextmanager
from typing import List

from sqlalchemy.orm import Session

from catalog.exceptions import InsufficientStockError, ProductNotFoundError, StockLimitExceededError
from catalog.models.product import MAX_STOCK, Product
from catalog.repositories.product_repository import ProductRepository
from catalog.schemas.product import PageRequest, ProductPage, ProductRequest, ProductResponse
from catalog.utils.cache import ProductCache

logger = logging.getLogger(__name__)


class ProductService:
    """
    Service class for product catalog operations.

    This service handles:
    - Reading products (single lookups go through the read-through cache)
    - Listing, searching and browsing active products by category
    - Creating and fully replacing products
    - Adjusting stock by a signed delta
    - Soft-deleting products
    - Cache invalidation after every committed write

    CACHE POLICY:
    =============
    Only get_product_by_id populates the cache. Creating a product clears
    the whole cache; update, stock adjustment and delete evict the single
    entry. Eviction happens after commit, so a reader can at worst see the
    previous value until the write lands. Not-found results are never cached.
    """

    def __init__(self, db: Session, cache: ProductCache):
        self.db = db
        self.cache = cache
        self.repository = ProductRepository(db)

    @contextmanager
    def _transaction(self):
        """Commit on success, roll back and re-raise on any error."""
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def _get_or_raise(self, product_id: int) -> Product:
        product = self.repository.find_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    @staticmethod
    def to_response(product: Product) -> ProductResponse:
        """Project a Product onto its response shape (adds in_stock, drops active)."""
        return ProductResponse.model_validate(product)

    @staticmethod
    def _to_page(products: List[Product], total: int, page: int, size: int) -> ProductPage:
        return ProductPage(
            items=[ProductService.to_response(p) for p in products],
            total=total,
            page=page,
            size=size,
            total_pages=math.ceil(total / size) if total > 0 else 0,
        )

    def get_product_by_id(self, product_id: int) -> ProductResponse:
        """
        Get a product by ID, cache first.

        Soft-deleted products are still returned here.

        Raises:
            ProductNotFoundError: If no product has this ID
        """
        logger.info(f"Fetching product with id: {product_id}")
        cached = self.cache.get(product_id)
        if cached is not None:
            return ProductResponse.model_validate(cached)

        product = self._get_or_raise(product_id)
        response = self.to_response(product)
        self.cache.put(product_id, response.model_dump(mode="json"))
        return response

    def get_all_products(self, page_request: PageRequest) -> ProductPage:
        logger.info(
            f"Fetching products page={page_request.page} size={page_request.size} "
            f"sort={page_request.sort_by} {page_request.sort_dir.value}"
        )
        products, total = self.repository.list_active(page_request)
        return self._to_page(products, total, page_request.page, page_request.size)

    def search_products(self, term: str, page: int = 0, size: int = 10) -> ProductPage:
        """
        Search active products by name or description.

        A blank term matches every active product.
        """
        term = (term or "").strip()
        logger.info(f"Searching products with term: '{term}'")
        products, total = self.repository.search(term, page, size)
        return self._to_page(products, total, page, size)

    def get_products_by_category(self, category: str) -> List[ProductResponse]:
        logger.info(f"Fetching products by category: {category}")
        return [self.to_response(p) for p in self.repository.find_by_category(category)]

    def get_all_categories(self) -> List[str]:
        logger.info("Fetching all categories")
        return self.repository.list_distinct_categories()

    def create_product(self, request: ProductRequest) -> ProductResponse:
        """
        Create a new, active product.

        Args:
            request: Product fields

        Returns:
            The stored product
        """
        logger.info(f"Creating new product: {request.name}")
        with self._transaction():
            product = self.repository.save(
                Product(
                    name=request.name,
                    description=request.description,
                    price=request.price,
                    stock=request.stock,
                    category=request.category,
                    image_url=request.image_url,
                    active=True,
                )
            )

        self.cache.invalidate_all()
        logger.info(f"Product created with id: {product.id}")
        return self.to_response(product)

    def update_product(self, product_id: int, request: ProductRequest) -> ProductResponse:
        """
        Replace every mutable field of a product with the request values.

        This is a full replace: optional fields missing from the request are
        cleared. The active flag is left untouched.

        Raises:
            ProductNotFoundError: If no product has this ID
        """
        logger.info(f"Updating product with id: {product_id}")
        with self._transaction():
            product = self._get_or_raise(product_id)
            product.name = request.name
            product.description = request.description
            product.price = request.price
            product.stock = request.stock
            product.category = request.category
            product.image_url = request.image_url
            product = self.repository.save(product)

        self.cache.invalidate(product_id)
        logger.info(f"Product updated: {product_id}")
        return self.to_response(product)

    def update_stock(self, product_id: int, delta: int) -> ProductResponse:
        """
        Apply a signed stock delta.

        Positive deltas restock with no business limit, only the MAX_STOCK
        range of the column; negative deltas deduct. A delta of zero still
        writes the row and refreshes updated_at.

        Args:
            product_id: Product to adjust
            delta: Signed quantity to add to the current stock

        Raises:
            ProductNotFoundError: If no product has this ID
            InsufficientStockError: If the deduction exceeds current stock;
                stock is left unchanged
            StockLimitExceededError: If the resulting stock would exceed
                MAX_STOCK
        """
        logger.info(f"Updating stock for product {product_id}: {delta}")
        with self._transaction():
            product = self._get_or_raise(product_id)
            # Deltas the column cannot represent never reach the database
            if delta < -MAX_STOCK:
                raise InsufficientStockError(product_id, product.stock, abs(delta))
            if delta > MAX_STOCK:
                raise StockLimitExceededError(product_id, product.stock, delta, MAX_STOCK)
            if not self.repository.adjust_stock(product_id, delta):
                # Re-read so the error reports the stock that blocked the update
                self.db.refresh(product)
                if delta < 0:
                    raise InsufficientStockError(product_id, product.stock, abs(delta))
                raise StockLimitExceededError(product_id, product.stock, delta, MAX_STOCK)
            self.db.refresh(product)

        self.cache.invalidate(product_id)
        logger.info(f"Stock updated for product {product_id}: new stock = {product.stock}")
        return self.to_response(product)

    def delete_product(self, product_id: int) -> None:
        """
        Soft-delete a product.

        The row is kept with active=False. It disappears from listings,
        search and category browsing but stays retrievable by ID.

        Raises:
            ProductNotFoundError: If no product has this ID
        """
        logger.info(f"Deleting product with id: {product_id}")
        with self._transaction():
            product = self._get_or_raise(product_id)
            product.active = False
            self.repository.save(product)

        self.cache.invalidate(product_id)
        logger.info(f"Product soft deleted: {product_id}")
