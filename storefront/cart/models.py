"""Cart models with Decimal-based pricing.

CartState is an immutable snapshot: every change produces a new object, so
the UI can hold on to a state without it shifting underneath.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from storefront import config
from storefront.services.models import Product
from storefront.services.money import multiply, round_money, subtract, to_decimal, to_float


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a stored timestamp back into an aware datetime.

    Accepts datetime objects and ISO-8601 strings (including the `Z` suffix
    JavaScript's Date.toJSON produces). A missing value means "now".

    Raises:
        ValueError: If the value is present but not a timestamp
    """
    if value is None or value == "":
        return utcnow()
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unsupported timestamp value: {type(value).__name__}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class CartLine:
    """Single line in the cart. Carries its own copy of the product."""
    product: Product
    quantity: int
    added_at: datetime = field(default_factory=utcnow)
    lookup_error: Optional[str] = None  # Set when enrichment failed during sync

    def __post_init__(self):
        # Naive timestamps would not survive a save/load cycle unchanged
        if self.added_at.tzinfo is None:
            object.__setattr__(self, "added_at", self.added_at.replace(tzinfo=timezone.utc))

    @property
    def product_id(self) -> str:
        return self.product.id

    @property
    def total_price(self) -> Decimal:
        """Total price for all units."""
        return round_money(multiply(self.product.price, self.quantity))

    @property
    def savings(self) -> Decimal:
        """Difference to the original (list) price for all units."""
        original = self.product.original_price
        if original is None or original <= self.product.price:
            return Decimal("0")
        return round_money(multiply(subtract(original, self.product.price), self.quantity))

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        data = {
            "product": self.product.model_dump(mode="json", by_alias=True),
            "quantity": self.quantity,
            "addedAt": self.added_at.isoformat(),
        }
        if self.lookup_error:
            data["lookupError"] = self.lookup_error
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "CartLine":
        """Create from dictionary."""
        return cls(
            product=Product.model_validate(data["product"]),
            quantity=int(data["quantity"]),
            added_at=parse_timestamp(data.get("addedAt")),
            lookup_error=data.get("lookupError"),
        )


@dataclass(frozen=True)
class SavedLine:
    """Product set aside for later."""
    product: Product
    saved_at: datetime = field(default_factory=utcnow)

    @property
    def product_id(self) -> str:
        return self.product.id

    def to_dict(self) -> dict:
        return {
            "product": self.product.model_dump(mode="json", by_alias=True),
            "savedAt": self.saved_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SavedLine":
        return cls(
            product=Product.model_validate(data["product"]),
            saved_at=parse_timestamp(data.get("savedAt")),
        )


@dataclass(frozen=True)
class UserLocation:
    """Delivery location picked by the user."""
    coordinates: tuple[float, float]  # (latitude, longitude)
    address: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self):
        lat, lng = self.coordinates
        object.__setattr__(self, "coordinates", (float(lat), float(lng)))

    def to_dict(self) -> dict:
        return {
            "coordinates": list(self.coordinates),
            "address": self.address,
            "name": self.name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserLocation":
        return cls(
            coordinates=tuple(data["coordinates"]),
            address=data.get("address"),
            name=data.get("name"),
        )


def _default_delivery_charges() -> Decimal:
    return to_decimal(config.DEFAULT_DELIVERY_CHARGES)


@dataclass(frozen=True)
class CartState:
    """Cart aggregate: lines, saved-for-later, coupon and delivery details."""
    items: tuple[CartLine, ...] = ()
    saved_items: tuple[SavedLine, ...] = ()
    delivery_charges: Decimal = field(default_factory=_default_delivery_charges)
    coupon_code: str = ""
    coupon_discount: Decimal = Decimal("0")
    pincode: str = ""
    is_delivery_available: bool = True
    user_location: Optional[UserLocation] = None

    def __post_init__(self):
        # Normalize containers and numeric fields
        object.__setattr__(self, "items", tuple(self.items))
        object.__setattr__(self, "saved_items", tuple(self.saved_items))
        object.__setattr__(self, "delivery_charges", to_decimal(self.delivery_charges))
        object.__setattr__(self, "coupon_discount", to_decimal(self.coupon_discount))

    def find_line(self, product_id: str) -> Optional[CartLine]:
        return next((line for line in self.items if line.product_id == product_id), None)

    def find_saved(self, product_id: str) -> Optional[SavedLine]:
        return next((line for line in self.saved_items if line.product_id == product_id), None)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def total_items(self) -> int:
        """Total number of units in cart."""
        return sum(line.quantity for line in self.items)

    @property
    def subtotal(self) -> Decimal:
        """Sum of line totals before coupon and delivery."""
        return sum((line.total_price for line in self.items), Decimal("0"))

    @property
    def savings(self) -> Decimal:
        """Savings against original prices, excluding the coupon."""
        return sum((line.savings for line in self.items), Decimal("0"))

    @property
    def total(self) -> Decimal:
        """Amount payable.

        Calculation order:
        1. Subtotal of all lines
        2. Coupon discount, never taking the amount below zero
        3. Delivery charges (only when there is something to deliver)
        """
        if self.is_empty:
            return Decimal("0")
        after_coupon = max(subtract(self.subtotal, self.coupon_discount), Decimal("0"))
        return round_money(after_coupon + self.delivery_charges)

    def to_dict(self) -> dict:
        """Convert to the JSON blob kept in the persistent store."""
        return {
            "items": [line.to_dict() for line in self.items],
            "savedItems": [line.to_dict() for line in self.saved_items],
            "deliveryCharges": to_float(self.delivery_charges),
            "couponCode": self.coupon_code,
            "couponDiscount": to_float(self.coupon_discount),
            "pincode": self.pincode,
            "isDeliveryAvailable": self.is_delivery_available,
            "userLocation": self.user_location.to_dict() if self.user_location else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartState":
        """Create from the stored JSON blob, re-parsing timestamps."""
        location = data.get("userLocation")
        return cls(
            items=tuple(CartLine.from_dict(item) for item in data.get("items") or []),
            saved_items=tuple(SavedLine.from_dict(item) for item in data.get("savedItems") or []),
            delivery_charges=to_decimal(data.get("deliveryCharges", config.DEFAULT_DELIVERY_CHARGES)),
            coupon_code=data.get("couponCode") or "",
            coupon_discount=to_decimal(data.get("couponDiscount", 0)),
            pincode=data.get("pincode") or "",
            is_delivery_available=bool(data.get("isDeliveryAvailable", True)),
            user_location=UserLocation.from_dict(location) if location else None,
        )
