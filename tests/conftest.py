"""Pytest configuration and fixtures"""
import os
from unittest.mock import AsyncMock, Mock

import pytest

# Set test environment variables before storefront.config is imported
os.environ.setdefault("STOREFRONT_API_URL", "https://api.test")
os.environ.setdefault("UPSTASH_REDIS_REST_URL", "https://test.upstash.io")
os.environ.setdefault("UPSTASH_REDIS_REST_TOKEN", "test_token")

from storefront.cart import CartManager  # noqa: E402
from storefront.services.models import ApiResponse, Product  # noqa: E402


@pytest.fixture
def sample_product_data():
    """Product as the backend returns it"""
    return {
        "_id": "prod-basmati",
        "name": "Premium Basmati Rice",
        "description": "Aged long-grain basmati",
        "price": 120,
        "originalPrice": 150,
        "image": "https://cdn.test/basmati.jpg",
        "rating": 4.5,
        "reviewCount": 128,
        "discount": 20,
        "category": {"_id": "cat-1", "name": "Rice"},
        "subCategory": "Basmati",
        "weightInKg": 5,
        "inStock": True,
        "__v": 0,
    }


@pytest.fixture
def make_product():
    """Factory for catalog products"""
    def _make(product_id: str = "prod-1", **overrides) -> Product:
        fields = {
            "id": product_id,
            "name": f"Product {product_id}",
            "price": 100,
            "image": f"https://cdn.test/{product_id}.jpg",
            "category": "Rice",
            "sub_category": "Sona Masoori",
        }
        fields.update(overrides)
        return Product(**fields)

    return _make


@pytest.fixture
def mock_store():
    """In-memory key-value store with AsyncMock methods"""
    data = {}
    store = Mock()
    store.data = data
    store.get = AsyncMock(side_effect=lambda key: data.get(key))
    store.set = AsyncMock(side_effect=lambda key, value: data.__setitem__(key, value))
    store.delete = AsyncMock(side_effect=lambda key: data.pop(key, None))
    return store


@pytest.fixture
def mock_catalog():
    """Catalog client; every product lookup fails unless a test configures it"""
    catalog = Mock()
    catalog.get_product_by_id = AsyncMock(return_value=ApiResponse.fail("Product not found"))
    return catalog


@pytest.fixture
def mock_remote_cart():
    """Remote cart client returning an empty cart"""
    remote = Mock()
    remote.get_cart = AsyncMock(return_value=ApiResponse.ok({"items": []}))
    remote.add_or_update_to_cart = AsyncMock(return_value=ApiResponse.ok({"success": True}))
    return remote


@pytest.fixture
def manager(mock_catalog, mock_remote_cart):
    """CartManager without persistence"""
    return CartManager(catalog=mock_catalog, remote_cart=mock_remote_cart)


@pytest.fixture
def serve_products(mock_catalog):
    """Make the mock catalog return the given products; other ids fail"""
    def _serve(*products: Product) -> None:
        by_id = {product.id: product for product in products}

        async def _lookup(product_id):
            if product_id in by_id:
                return ApiResponse.ok(by_id[product_id])
            return ApiResponse.fail("Product not found")

        mock_catalog.get_product_by_id.side_effect = _lookup

    return _serve
