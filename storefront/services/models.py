"""API Models - Pydantic models for catalog records and API envelopes."""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from storefront import config
from storefront.services.money import to_decimal as _to_decimal


def _stringify_id(value: Any) -> Any:
    """Numeric ids are accepted and kept as strings."""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class ApiResponse(BaseModel):
    """Result of any API call: `success` plus either `data` or an error message."""
    success: bool
    data: Any = None
    message: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "ApiResponse":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "ApiResponse":
        return cls(success=False, error=error)


class Product(BaseModel):
    """
    Catalog product.

    Accepts the backend's camelCase field names (and Mongo-style `_id`);
    dumps back to camelCase with `model_dump(by_alias=True)`.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(validation_alias=AliasChoices("id", "_id"), serialization_alias="id")
    name: str
    description: str = ""
    price: Decimal = Decimal("0")
    image: str = ""
    rating: float = 0.0
    review_count: int = Field(0, alias="reviewCount")
    discount: float = Field(0.0, ge=0, le=100)
    category: str = ""
    sub_category: str = Field("", alias="subCategory")
    weight_in_kg: Optional[float] = Field(None, alias="weightInKg")
    original_price: Optional[Decimal] = Field(None, alias="originalPrice")
    in_stock: bool = Field(True, alias="inStock")

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, v):
        return _stringify_id(v)

    @field_validator("price", "original_price", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        if v is None:
            return None
        return _to_decimal(v)

    @field_validator("category", "sub_category", mode="before")
    @classmethod
    def flatten_named_reference(cls, v):
        # Populated references arrive as {"_id": ..., "name": ...}
        if isinstance(v, dict):
            return v.get("name") or ""
        return v if v is not None else ""

    @field_validator("description", "image", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v

    @classmethod
    def placeholder(cls, product_id: str) -> "Product":
        """Neutral record used when the catalog lookup for a cart line fails."""
        return cls(
            id=product_id,
            name=config.PLACEHOLDER_PRODUCT_NAME,
            price=Decimal("0"),
            image=config.PLACEHOLDER_IMAGE_URL,
        )


class RemoteCartItem(BaseModel):
    """One line of the server-side cart."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    product_id: str = Field(validation_alias=AliasChoices("productId", "product_id", "product"))
    quantity: int = 1
    added_at: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("addedAt", "added_at", "createdAt")
    )

    @field_validator("product_id", mode="before")
    @classmethod
    def extract_product_id(cls, v):
        # Some responses embed the populated product instead of its id
        if isinstance(v, dict):
            v = v.get("id") or v.get("_id")
        return _stringify_id(v)

    @field_validator("added_at")
    @classmethod
    def assume_utc(cls, v):
        # Server timestamps without an offset are UTC
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v
