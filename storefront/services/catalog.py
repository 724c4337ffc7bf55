"""Catalog lookup: one product per call, no batching."""
from pydantic import ValidationError

from storefront.config import Endpoints
from storefront.errors import ERROR_PRODUCT_NOT_FOUND
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.api import ApiClient
from storefront.services.models import ApiResponse, Product

logger = get_logger(__name__)


def _unwrap_product(payload):
    """Strip a `{"data": ...}` or `{"product": ...}` envelope if present."""
    for key in ("data", "product"):
        if isinstance(payload, dict) and isinstance(payload.get(key), dict):
            payload = payload[key]
    return payload


class CatalogClient:
    """Fetches product records for cart enrichment."""

    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def get_product_by_id(self, product_id: str) -> ApiResponse:
        """Get one product.

        Args:
            product_id: Catalog identifier

        Returns:
            ApiResponse whose `data` is a Product on success

        """
        response = await self.api.request("GET", Endpoints.product(product_id))
        if not response.success:
            return response

        try:
            product = Product.model_validate(_unwrap_product(response.data))
        except ValidationError as e:
            logger.warning(
                "Invalid product payload for %s: %d error(s)",
                sanitize_id_for_logging(product_id),
                e.error_count(),
            )
            return ApiResponse.fail(ERROR_PRODUCT_NOT_FOUND)

        return ApiResponse.ok(product)
