import enum
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator

from catalog.models.product import MAX_STOCK

# Prices are exact decimals internally but plain JSON numbers on the wire
Price = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class SortDirection(str, enum.Enum):
    """Sort direction for paginated listings."""
    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortDirection":
        """Case-insensitive parse; anything other than DESC sorts ascending."""
        if value is not None and str(value).strip().upper() == cls.DESC.value:
            return cls.DESC
        return cls.ASC


class PageRequest(BaseModel):
    """Validated pagination and sort settings. Pages are zero-indexed."""
    page: int = Field(0, ge=0, description="Zero-based page number")
    size: int = Field(10, ge=1, le=100, description="Items per page")
    sort_by: str = Field("id", description="Field to sort by")
    sort_dir: SortDirection = Field(SortDirection.ASC, description="Sort direction")

    @field_validator("sort_dir", mode="before")
    @classmethod
    def _parse_sort_dir(cls, value):
        if isinstance(value, SortDirection):
            return value
        return SortDirection.parse(value)

    @property
    def offset(self) -> int:
        return self.page * self.size


class ProductRequest(BaseModel):
    """Schema for creating or fully replacing a product."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2, description="Unit price (non-negative)")
    stock: int = Field(..., ge=0, le=MAX_STOCK, description="Stock quantity (non-negative)")
    category: Optional[str] = Field(None, max_length=100, description="Category label")
    image_url: Optional[str] = Field(None, max_length=512, description="Image reference")

    @field_validator("description", "category", "image_url")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class ProductResponse(BaseModel):
    """Product as returned to callers. The soft-delete flag is not exposed."""
    id: int
    name: str
    description: Optional[str] = None
    price: Price
    stock: int
    category: Optional[str] = None
    image_url: Optional[str] = None
    in_stock: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductPage(BaseModel):
    """Schema for paginated product list response."""
    items: list[ProductResponse]
    total: int
    page: int
    size: int
    total_pages: int
