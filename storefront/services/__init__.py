# Services Module
from .api import ApiClient
from .catalog import CatalogClient
from .models import ApiResponse, Product, RemoteCartItem
from .remote_cart import RemoteCartClient

__all__ = ["ApiClient", "ApiResponse", "CatalogClient", "Product", "RemoteCartClient", "RemoteCartItem"]
