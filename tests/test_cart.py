"""
Tests for cart models
"""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from storefront.cart import CartLine, CartState, SavedLine, UserLocation
from storefront.cart.models import parse_timestamp
from storefront.services.models import Product


class TestProduct:
    """Tests for the catalog Product model."""

    def test_parse_backend_payload(self, sample_product_data):
        """Test camelCase fields, _id and populated category."""
        product = Product.model_validate(sample_product_data)

        assert product.id == "prod-basmati"
        assert product.price == Decimal("120")
        assert product.original_price == Decimal("150")
        assert product.review_count == 128
        assert product.category == "Rice"
        assert product.sub_category == "Basmati"
        assert product.weight_in_kg == 5

    def test_numeric_id_kept_as_string(self):
        """Test numeric ids are converted to strings."""
        product = Product.model_validate({"id": 42, "name": "Sona Masoori", "price": 60})

        assert product.id == "42"

    def test_discount_out_of_range_rejected(self):
        """Test discount must be a percentage."""
        with pytest.raises(ValueError):
            Product(id="p", name="Test", discount=120)

    def test_placeholder(self):
        """Test fallback product for failed lookups."""
        product = Product.placeholder("prod-404")

        assert product.id == "prod-404"
        assert product.name == "Product Name Not Available"
        assert product.price == 0
        assert product.image != ""


class TestCartLine:
    """Tests for CartLine dataclass."""

    def test_total_price_calculation(self, make_product):
        """Test total price for quantity."""
        line = CartLine(product=make_product(price=120), quantity=3)

        assert line.total_price == Decimal("360")

    def test_savings_from_original_price(self, make_product):
        """Test savings against the original price."""
        line = CartLine(product=make_product(price=120, original_price=150), quantity=2)

        assert line.savings == Decimal("60")

    def test_no_savings_without_original_price(self, make_product):
        """Test savings are zero without an original price."""
        line = CartLine(product=make_product(price=120), quantity=2)

        assert line.savings == 0

    def test_added_at_defaults_to_now(self, make_product):
        """Test new lines are stamped with the current UTC time."""
        line = CartLine(product=make_product(), quantity=1)

        assert line.added_at.tzinfo is not None
        assert (datetime.now(timezone.utc) - line.added_at).total_seconds() < 5

    def test_naive_added_at_becomes_utc(self, make_product):
        """Test naive timestamps are stored as UTC."""
        line = CartLine(product=make_product(), quantity=1, added_at=datetime(2024, 5, 1, 10, 0))

        assert line.added_at == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    def test_to_dict(self, make_product):
        """Test serialization to dict."""
        line = CartLine(product=make_product("prod-1"), quantity=2)

        data = line.to_dict()
        assert data["product"]["id"] == "prod-1"
        assert data["quantity"] == 2
        assert "addedAt" in data
        assert "lookupError" not in data


class TestParseTimestamp:
    """Tests for stored timestamp parsing."""

    def test_javascript_iso_string(self):
        """Test the format Date.toJSON produces."""
        parsed = parse_timestamp("2025-01-15T10:30:00.000Z")

        assert parsed == datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_naive_string_assumed_utc(self):
        """Test strings without offset are read as UTC."""
        parsed = parse_timestamp("2025-01-15T10:30:00")

        assert parsed.tzinfo == timezone.utc

    def test_invalid_string_raises(self):
        """Test unparseable timestamps raise ValueError."""
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")


class TestCartState:
    """Tests for CartState aggregate."""

    def test_create_empty_cart(self):
        """Test creating an empty cart."""
        cart = CartState()

        assert cart.items == ()
        assert cart.total_items == 0
        assert cart.total == 0
        assert cart.coupon_code == ""
        assert cart.coupon_discount == 0
        assert cart.delivery_charges == Decimal("40")
        assert cart.is_delivery_available is True

    def test_cart_totals(self, make_product):
        """Test cart with multiple items."""
        cart = CartState(items=(
            CartLine(product=make_product("prod-1", price=100), quantity=2),
            CartLine(product=make_product("prod-2", price=250, original_price=300), quantity=1),
        ))

        assert cart.total_items == 3
        assert cart.subtotal == Decimal("450")
        assert cart.savings == Decimal("50")
        assert cart.total == Decimal("490")  # 450 + 40 delivery

    def test_cart_with_coupon(self, make_product):
        """Test coupon amount is taken off before delivery charges."""
        cart = CartState(
            items=(CartLine(product=make_product(price=100), quantity=1),),
            coupon_code="SAVE30",
            coupon_discount=30,
        )

        assert cart.subtotal == Decimal("100")
        assert cart.total == Decimal("110")  # 100 - 30 + 40

    def test_coupon_never_makes_total_negative(self, make_product):
        """Test a large coupon only removes the subtotal."""
        cart = CartState(
            items=(CartLine(product=make_product(price=50), quantity=1),),
            coupon_code="BIG",
            coupon_discount=500,
        )

        assert cart.total == Decimal("40")

    def test_lists_are_stored_as_tuples(self, make_product):
        """Test list input is frozen into tuples."""
        cart = CartState(items=[CartLine(product=make_product(), quantity=1)])

        assert isinstance(cart.items, tuple)

    def test_cart_serialization(self, make_product):
        """Test round trip through the stored JSON blob."""
        location = UserLocation(coordinates=(17.385, 78.4867), address="Banjara Hills", name="Home")
        cart = CartState(
            items=(
                CartLine(product=make_product("prod-1", price=120, original_price=150), quantity=2),
                CartLine(product=make_product("prod-2", weight_in_kg=10), quantity=1),
            ),
            saved_items=(SavedLine(product=make_product("prod-3")),),
            coupon_code="RICE10",
            coupon_discount=10,
            pincode="500034",
            is_delivery_available=False,
            user_location=location,
        )

        blob = json.dumps(cart.to_dict())
        restored = CartState.from_dict(json.loads(blob))

        assert restored == cart
        assert restored.items[0].added_at == cart.items[0].added_at
        assert restored.saved_items[0].saved_at == cart.saved_items[0].saved_at

    def test_from_dict_parses_javascript_dates(self):
        """Test blobs written by the mobile app are readable."""
        data = {
            "items": [
                {
                    "product": {"id": "prod-1", "name": "Kolam Rice", "price": 80},
                    "quantity": 2,
                    "addedAt": "2025-03-01T08:00:00.000Z",
                }
            ],
            "savedItems": [
                {
                    "product": {"id": "prod-2", "name": "Brown Rice", "price": 95},
                    "savedAt": "2025-03-02T09:15:00.000Z",
                }
            ],
            "deliveryCharges": 40,
            "couponCode": "",
            "couponDiscount": 0,
            "pincode": "",
            "isDeliveryAvailable": True,
            "userLocation": None,
        }

        cart = CartState.from_dict(data)

        assert cart.items[0].added_at == datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)
        assert cart.saved_items[0].saved_at == datetime(2025, 3, 2, 9, 15, tzinfo=timezone.utc)
        assert cart.items[0].product.price == Decimal("80")
