"""
Storefront Client Core

This package contains the cart engine and its collaborators:
- db: persistent key-value store (Upstash Redis)
- services: REST API client, catalog lookup, remote cart
- cart: cart state, reducer, reconciliation engine, debounced persistence

Note: Imports are lazy so that importing a submodule does not pull in the
whole client stack.
"""

__all__ = [
    "CartManager",
    "build_cart_manager",
    "get_redis",
]


def __getattr__(name):
    """Lazy attribute access."""
    if name == "CartManager":
        from storefront.cart import CartManager
        return CartManager
    elif name == "build_cart_manager":
        from storefront.cart import build_cart_manager
        return build_cart_manager
    elif name == "get_redis":
        from storefront.db import get_redis
        return get_redis
    raise AttributeError(f"module 'storefront' has no attribute '{name}'")
