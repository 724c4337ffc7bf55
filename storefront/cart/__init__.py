"""Cart package: state models, reducer, persistence and manager."""
from .models import CartLine, CartState, SavedLine, UserLocation
from .persistence import CartPersistence
from .service import CartManager, build_cart_manager

__all__ = [
    "CartLine",
    "CartState",
    "SavedLine",
    "UserLocation",
    "CartPersistence",
    "CartManager",
    "build_cart_manager",
]
