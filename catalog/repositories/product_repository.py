from typing import List, Optional, Tuple

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from catalog.exceptions import InvalidSortFieldError
from catalog.models.product import MAX_STOCK, Product, utcnow
from catalog.schemas.product import PageRequest, SortDirection

SORTABLE_FIELDS = {
    "id": Product.id,
    "name": Product.name,
    "price": Product.price,
    "stock": Product.stock,
    "category": Product.category,
    "created_at": Product.created_at,
    "updated_at": Product.updated_at,
}


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ProductRepository:
    """
    Persistence adapter for Product records.

    Methods never commit: the calling service owns the transaction and
    decides when to commit or roll back.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, product_id: int) -> Optional[Product]:
        """Direct lookup by ID. Inactive products are returned too."""
        return self.db.get(Product, product_id)

    def list_active(self, page_request: PageRequest) -> Tuple[List[Product], int]:
        """
        Get one page of active products.

        Args:
            page_request: Zero-indexed page, page size and sort settings

        Returns:
            Tuple of (products on the page, total number of active products)

        Raises:
            InvalidSortFieldError: If sort_by is not a sortable field
        """
        column = SORTABLE_FIELDS.get(page_request.sort_by)
        if column is None:
            raise InvalidSortFieldError(page_request.sort_by, SORTABLE_FIELDS)

        order = column.desc() if page_request.sort_dir == SortDirection.DESC else column.asc()
        query = self.db.query(Product).filter(Product.active.is_(True))

        total = query.count()
        # Tie-break on id for stable pages
        products = (
            query.order_by(order, Product.id.asc())
            .offset(page_request.offset)
            .limit(page_request.size)
            .all()
        )
        return products, total

    def search(self, term: str, page: int, size: int) -> Tuple[List[Product], int]:
        """Case-insensitive substring search over name and description of active products."""
        query = self.db.query(Product).filter(Product.active.is_(True))

        if term:
            pattern = _like_pattern(term)
            query = query.filter(
                or_(
                    Product.name.ilike(pattern, escape="\\"),
                    Product.description.ilike(pattern, escape="\\"),
                )
            )

        total = query.count()
        products = query.order_by(Product.id.asc()).offset(page * size).limit(size).all()
        return products, total

    def find_by_category(self, category: str) -> List[Product]:
        """Active products whose category matches exactly."""
        return (
            self.db.query(Product)
            .filter(Product.category == category, Product.active.is_(True))
            .order_by(Product.id.asc())
            .all()
        )

    def list_distinct_categories(self) -> List[str]:
        rows = (
            self.db.query(Product.category)
            .filter(Product.active.is_(True), Product.category.isnot(None))
            .distinct()
            .order_by(Product.category.asc())
            .all()
        )
        return [row[0] for row in rows]

    def save(self, product: Product) -> Product:
        """Insert a new product or flush changes to an existing one."""
        product.updated_at = utcnow()
        if product.id is None:
            self.db.add(product)
        self.db.flush()
        self.db.refresh(product)
        return product

    def adjust_stock(self, product_id: int, delta: int) -> bool:
        """
        Atomically apply a stock delta unless it would take stock below zero
        or above MAX_STOCK.

        The check and the write happen in one UPDATE statement, so concurrent
        adjustments cannot overwrite each other.

        Returns:
            True if the row was updated, False if the product is missing or
            the delta would take stock out of range
        """
        conditions = [Product.id == product_id]
        # Bounds are compared against the column alone so the check cannot overflow
        if delta < 0:
            conditions.append(Product.stock >= -delta)
        elif delta > 0:
            conditions.append(Product.stock <= MAX_STOCK - delta)

        result = self.db.execute(
            update(Product)
            .where(*conditions)
            .values(stock=Product.stock + delta, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0
