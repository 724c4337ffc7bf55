"""Cart actions and the reducer that applies them.

Every state change goes through `cart_reducer`, which returns a new
CartState (or the same object when the action is a no-op).
"""
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional, Union

from storefront.services.models import Product
from storefront.services.money import to_decimal
from .models import CartLine, CartState, SavedLine, UserLocation, utcnow


@dataclass(frozen=True)
class AddToCart:
    product: Product


@dataclass(frozen=True)
class RemoveFromCart:
    product_id: str


@dataclass(frozen=True)
class UpdateQuantity:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class SaveForLater:
    product_id: str


@dataclass(frozen=True)
class MoveToCart:
    product_id: str


@dataclass(frozen=True)
class ApplyCoupon:
    code: str
    discount: Decimal


@dataclass(frozen=True)
class RemoveCoupon:
    pass


@dataclass(frozen=True)
class SetPincode:
    pincode: str
    is_available: bool


@dataclass(frozen=True)
class SetUserLocation:
    location: Optional[UserLocation]


@dataclass(frozen=True)
class ClearCart:
    pass


@dataclass(frozen=True)
class LoadCart:
    cart: CartState


@dataclass(frozen=True)
class ReplaceItems:
    """Authoritative cart lines from a server sync."""
    items: tuple[CartLine, ...]


CartAction = Union[
    AddToCart,
    RemoveFromCart,
    UpdateQuantity,
    SaveForLater,
    MoveToCart,
    ApplyCoupon,
    RemoveCoupon,
    SetPincode,
    SetUserLocation,
    ClearCart,
    LoadCart,
    ReplaceItems,
]


def _increment_or_append(items: tuple[CartLine, ...], product: Product) -> tuple[CartLine, ...]:
    if any(line.product_id == product.id for line in items):
        return tuple(
            replace(line, quantity=line.quantity + 1) if line.product_id == product.id else line
            for line in items
        )
    return items + (CartLine(product=product, quantity=1, added_at=utcnow()),)


def _without_saved(saved: tuple[SavedLine, ...], product_id: str) -> tuple[SavedLine, ...]:
    return tuple(line for line in saved if line.product_id != product_id)


def cart_reducer(state: CartState, action: CartAction) -> CartState:
    """Apply one action to the cart state."""
    if isinstance(action, AddToCart):
        # A product lives in the cart or in saved-for-later, never both
        return replace(
            state,
            items=_increment_or_append(state.items, action.product),
            saved_items=_without_saved(state.saved_items, action.product.id),
        )

    elif isinstance(action, RemoveFromCart):
        if state.find_line(action.product_id) is None:
            return state
        return replace(
            state,
            items=tuple(line for line in state.items if line.product_id != action.product_id),
        )

    elif isinstance(action, UpdateQuantity):
        if state.find_line(action.product_id) is None:
            return state
        if action.quantity <= 0:
            return cart_reducer(state, RemoveFromCart(action.product_id))
        return replace(
            state,
            items=tuple(
                replace(line, quantity=action.quantity) if line.product_id == action.product_id else line
                for line in state.items
            ),
        )

    elif isinstance(action, SaveForLater):
        line = state.find_line(action.product_id)
        if line is None:
            return state
        return replace(
            state,
            items=tuple(item for item in state.items if item.product_id != action.product_id),
            saved_items=_without_saved(state.saved_items, action.product_id)
            + (SavedLine(product=line.product, saved_at=utcnow()),),
        )

    elif isinstance(action, MoveToCart):
        saved = state.find_saved(action.product_id)
        if saved is None:
            return state
        return replace(
            state,
            items=_increment_or_append(state.items, saved.product),
            saved_items=_without_saved(state.saved_items, action.product_id),
        )

    elif isinstance(action, ApplyCoupon):
        if not action.code:
            return cart_reducer(state, RemoveCoupon())
        return replace(
            state,
            coupon_code=action.code,
            coupon_discount=max(to_decimal(action.discount), Decimal("0")),
        )

    elif isinstance(action, RemoveCoupon):
        return replace(state, coupon_code="", coupon_discount=Decimal("0"))

    elif isinstance(action, SetPincode):
        return replace(state, pincode=action.pincode, is_delivery_available=action.is_available)

    elif isinstance(action, SetUserLocation):
        return replace(state, user_location=action.location)

    elif isinstance(action, ClearCart):
        return replace(
            state,
            items=(),
            saved_items=(),
            coupon_code="",
            coupon_discount=Decimal("0"),
        )

    elif isinstance(action, LoadCart):
        return action.cart

    elif isinstance(action, ReplaceItems):
        return replace(state, items=tuple(action.items))

    raise TypeError(f"Unknown cart action: {type(action).__name__}")
