"""
Client configuration.

Values come from the environment so the same build can point at a local
backend or the production API.
"""

import os
from urllib.parse import quote

# REST API
API_BASE_URL = os.environ.get("STOREFRONT_API_URL", "http://localhost:3000")
REQUEST_TIMEOUT = float(os.environ.get("STOREFRONT_REQUEST_TIMEOUT", "30"))

# Cart behaviour
CART_PERSIST_DELAY = float(os.environ.get("STOREFRONT_CART_PERSIST_DELAY", "0.5"))
SYNC_LOOKUP_LIMIT = int(os.environ.get("STOREFRONT_SYNC_LOOKUP_LIMIT", "10"))
DEFAULT_DELIVERY_CHARGES = int(os.environ.get("STOREFRONT_DELIVERY_CHARGES", "40"))

# Upstash Redis backs the on-device key-value store
UPSTASH_REDIS_REST_URL = os.environ.get("UPSTASH_REDIS_REST_URL", "")
UPSTASH_REDIS_REST_TOKEN = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")

# Shown for lines whose product could not be fetched
PLACEHOLDER_PRODUCT_NAME = "Product Name Not Available"
PLACEHOLDER_IMAGE_URL = (
    "https://images.unsplash.com/photo-1559054663-e431ec5e6e13"
    "?w=200&h=200&fit=crop&crop=center"
)


class Endpoints:
    """REST paths relative to API_BASE_URL."""

    PRODUCTS = "/products"
    CART = "/carts"
    CART_ADD_OR_UPDATE = "/carts/add-or-update"

    @staticmethod
    def product(product_id: str) -> str:
        return f"{Endpoints.PRODUCTS}/{quote(product_id, safe='')}"


class StorageKeys:
    """Keys used in the persistent key-value store."""

    CART = "cart"
    USER_TOKEN = "userToken"
    USER = "user"
