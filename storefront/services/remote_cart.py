"""Server-side cart endpoints."""
from storefront.config import Endpoints
from storefront.services.api import ApiClient
from storefront.services.models import ApiResponse


class RemoteCartClient:
    """Reads and upserts the authoritative cart kept by the backend.

    Authentication rides on the session token the ApiClient attaches.
    """

    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def get_cart(self) -> ApiResponse:
        """Raw cart payload; its shape is normalized by the cart engine."""
        return await self.api.request("GET", Endpoints.CART)

    async def add_or_update_to_cart(self, product_id: str, quantity: int) -> ApiResponse:
        """Set the server quantity for one product (inserting it if missing)."""
        return await self.api.request(
            "POST",
            Endpoints.CART_ADD_OR_UPDATE,
            json={"productId": product_id, "quantity": quantity},
        )
