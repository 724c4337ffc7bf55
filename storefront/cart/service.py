"""Cart manager: local cart state, remote upsert and server reconciliation."""
import asyncio
from typing import Callable, Optional

from storefront import config
from storefront.db import KeyValueStore, RedisStore
from storefront.errors import ERROR_LOOKUP_FAILED
from storefront.logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging
from storefront.services.api import ApiClient
from storefront.services.catalog import CatalogClient
from storefront.services.models import Product
from storefront.services.remote_cart import RemoteCartClient
from .actions import (
    AddToCart,
    ApplyCoupon,
    CartAction,
    ClearCart,
    LoadCart,
    MoveToCart,
    RemoveCoupon,
    RemoveFromCart,
    ReplaceItems,
    SaveForLater,
    SetPincode,
    SetUserLocation,
    UpdateQuantity,
    cart_reducer,
)
from .models import CartLine, CartState, UserLocation, utcnow
from .normalize import RemoteLine, normalize_remote_cart
from .persistence import CartPersistence

logger = get_logger(__name__)

CartListener = Callable[[CartState], None]


class CartManager:
    """
    Owns the client-side cart and keeps it in step with the server.

    Features:
    - Synchronous local mutations (no I/O, never suspend)
    - Single-flight sync: the server cart replaces local lines, each line
      enriched through the catalog
    - Listener notifications for re-rendering
    - Debounced mirroring into the persistent store

    Usage:
        manager = build_cart_manager()
        await manager.hydrate()
        unsubscribe = manager.subscribe(render)
        manager.add_local(product)
        await manager.sync_from_server()
    """

    def __init__(
        self,
        catalog: CatalogClient,
        remote_cart: RemoteCartClient,
        persistence: Optional[CartPersistence] = None,
        lookup_limit: int = config.SYNC_LOOKUP_LIMIT,
        api_client: Optional[ApiClient] = None,
    ):
        self.catalog = catalog
        self.remote_cart = remote_cart
        self.persistence = persistence
        self.lookup_limit = lookup_limit
        # Closed by aclose(); only set when the manager owns the client
        self.api_client = api_client

        self._state = CartState()
        self._listeners: list[CartListener] = []
        self._syncing = False
        self._hydrated = False

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def state(self) -> CartState:
        """Current immutable snapshot."""
        return self._state

    @property
    def is_syncing(self) -> bool:
        return self._syncing

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """
        Call `listener(state)` after every change.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.error("Cart listener failed: %s", type(e).__name__, exc_info=True)

    def _dispatch(self, action: CartAction) -> None:
        new_state = cart_reducer(self._state, action)
        if new_state is self._state:
            return

        self._state = new_state
        if self.persistence is not None:
            self.persistence.schedule(new_state)
        self._notify()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def hydrate(self) -> CartState:
        """
        Adopt the stored cart, once. Later calls return the current state.

        A change made while the blob is loading wins over the stored snapshot.
        """
        if self._hydrated:
            return self._state
        self._hydrated = True

        if self.persistence is None:
            return self._state

        before = self._state
        stored = await self.persistence.load()
        if stored is not None and self._state is not before:
            # A sync or local edit landed while loading; it is newer than the blob
            logger.info("Cart changed during hydration, stored snapshot discarded")
        elif stored is not None:
            # Not rescheduled for persistence: it is what the store already holds
            self._state = cart_reducer(self._state, LoadCart(stored))
            logger.info(
                "Cart restored from storage (%d line(s), %d saved)",
                len(stored.items),
                len(stored.saved_items),
            )
            self._notify()
        return self._state

    async def aclose(self) -> None:
        """Write any pending cart change and release the owned HTTP client."""
        if self.persistence is not None:
            await self.persistence.flush()
        if self.api_client is not None:
            await self.api_client.aclose()

    # ------------------------------------------------------------------
    # Local mutations
    # ------------------------------------------------------------------

    def add_local(self, product: Product) -> None:
        """Add one unit of `product` (new line with quantity 1, or +1)."""
        self._dispatch(AddToCart(product))

    def remove_local(self, product_id: str) -> None:
        self._dispatch(RemoveFromCart(product_id))

    def set_quantity(self, product_id: str, quantity: int) -> None:
        """Set a line's quantity; zero or less removes the line."""
        self._dispatch(UpdateQuantity(product_id, quantity))

    def save_for_later(self, product_id: str) -> None:
        self._dispatch(SaveForLater(product_id))

    def move_to_cart(self, product_id: str) -> None:
        self._dispatch(MoveToCart(product_id))

    def apply_coupon(self, code: str, discount_amount) -> None:
        """Record a coupon the caller has already validated."""
        self._dispatch(ApplyCoupon(code, discount_amount))

    def remove_coupon(self) -> None:
        self._dispatch(RemoveCoupon())

    def set_delivery_pincode(self, pincode: str, is_available: bool) -> None:
        """Record the pincode and the caller's serviceability verdict."""
        self._dispatch(SetPincode(pincode, is_available))

    def set_user_location(self, location: Optional[UserLocation]) -> None:
        self._dispatch(SetUserLocation(location))

    def clear(self) -> None:
        """Empty lines, saved items and coupon. Delivery details are kept."""
        self._dispatch(ClearCart())

    # ------------------------------------------------------------------
    # Remote operations
    # ------------------------------------------------------------------

    async def add_or_update_remote(self, product_id: str, quantity: int) -> bool:
        """
        Set the server-side quantity for one product.

        On success the quantity is mirrored into the local line when the
        product is already in the cart. Products not yet in the local cart
        are not materialized here; callers add them with `add_local`.

        Returns:
            True if the server accepted the change, False otherwise
        """
        safe_id = sanitize_id_for_logging(product_id)
        try:
            response = await self.remote_cart.add_or_update_to_cart(product_id, quantity)
        except Exception as e:
            logger.error("Remote cart update for %s failed: %s", safe_id, type(e).__name__, exc_info=True)
            return False

        if not response.success:
            logger.warning(
                "Remote cart rejected update for %s: %s",
                safe_id,
                sanitize_string_for_logging(response.error),
            )
            return False

        if self._state.find_line(product_id) is not None:
            self._dispatch(UpdateQuantity(product_id, quantity))
        else:
            logger.debug("Product %s updated remotely but not present locally", safe_id)
        return True

    async def sync_from_server(self) -> None:
        """
        Replace local cart lines with the server's cart.

        Overlapping calls are dropped, not queued. Failures are logged and
        leave the current state untouched; nothing is raised to the caller.
        """
        if self._syncing:
            logger.debug("Cart sync already in progress, skipping")
            return

        self._set_syncing(True)
        try:
            await self._sync()
        except Exception as e:
            logger.error("Cart sync failed: %s", type(e).__name__, exc_info=True)
        finally:
            self._set_syncing(False)

    def _set_syncing(self, value: bool) -> None:
        self._syncing = value
        self._notify()

    async def _sync(self) -> None:
        response = await self.remote_cart.get_cart()
        if not response.success:
            logger.warning("Failed to fetch remote cart: %s", sanitize_string_for_logging(response.error))
            return

        remote_lines = normalize_remote_cart(response.data)
        if len(remote_lines) > self.lookup_limit:
            logger.warning(
                "Remote cart has %d products, enriching only the first %d",
                len(remote_lines),
                self.lookup_limit,
            )
            remote_lines = remote_lines[: self.lookup_limit]

        # Results come back in request order regardless of completion order
        lookups = await asyncio.gather(
            *(self._lookup_product(line.product_id) for line in remote_lines)
        )

        items = tuple(
            self._build_line(line, product, error)
            for line, (product, error) in zip(remote_lines, lookups)
        )
        self._dispatch(ReplaceItems(items))

        degraded = sum(1 for line in items if line.lookup_error)
        logger.info("Cart synced: %d line(s), %d without product details", len(items), degraded)

    def _build_line(self, remote: RemoteLine, product: Product, error: Optional[str]) -> CartLine:
        local = self._state.find_line(remote.product_id)
        added_at = remote.added_at or (local.added_at if local else None) or utcnow()
        return CartLine(product=product, quantity=remote.quantity, added_at=added_at, lookup_error=error)

    async def _lookup_product(self, product_id: str) -> tuple[Product, Optional[str]]:
        """Fetch one product; any failure yields the placeholder and an error."""
        try:
            response = await self.catalog.get_product_by_id(product_id)
        except Exception as e:
            logger.warning(
                "Catalog lookup for %s raised %s",
                sanitize_id_for_logging(product_id),
                type(e).__name__,
            )
            return Product.placeholder(product_id), ERROR_LOOKUP_FAILED

        if not response.success or not isinstance(response.data, Product):
            error = response.error or ERROR_LOOKUP_FAILED
            logger.warning(
                "Catalog lookup for %s failed: %s",
                sanitize_id_for_logging(product_id),
                sanitize_string_for_logging(error),
            )
            return Product.placeholder(product_id), error

        return response.data, None


def build_cart_manager(
    store: Optional[KeyValueStore] = None,
    api_client: Optional[ApiClient] = None,
) -> CartManager:
    """
    Wire a CartManager to the configured backend and store.

    A passed-in `api_client` stays owned by the caller; one created here is
    closed by `CartManager.aclose()`.
    """
    store = store if store is not None else RedisStore()
    owned_api = None
    if api_client is None:
        api_client = owned_api = ApiClient(store=store)
    return CartManager(
        catalog=CatalogClient(api_client),
        remote_cart=RemoteCartClient(api_client),
        persistence=CartPersistence(store),
        api_client=owned_api,
    )
