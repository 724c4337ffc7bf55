"""
Common Error Constants

Centralized error messages shared by the API clients and the cart engine.
"""

# Transport errors
ERROR_NETWORK = "Network error occurred"
ERROR_INVALID_JSON = "Invalid JSON response from server"
ERROR_REQUEST_FAILED = "Request failed"
ERROR_INVALID_REQUEST = "Request could not be sent"

# Catalog errors
ERROR_PRODUCT_NOT_FOUND = "Product not found"
ERROR_LOOKUP_FAILED = "Product lookup failed"

# Storage errors
ERROR_STORAGE_UNAVAILABLE = "Storage unavailable"
