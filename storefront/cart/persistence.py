"""Debounced cart persistence.

Bursts of cart changes collapse into a single write: every change restarts
the delay timer, and only the latest state is written when it fires.
Persistence is best-effort; the server stays authoritative for cart lines.
"""
import asyncio
import json
from typing import Optional

from storefront import config
from storefront.config import StorageKeys
from storefront.db import KeyValueStore
from storefront.logging import get_logger
from .models import CartState

logger = get_logger(__name__)


class CartPersistence:
    """
    Mirrors CartState into a key-value store.

    Usage:
        persistence = CartPersistence(store)
        state = await persistence.load()
        persistence.schedule(new_state)   # on every change
        await persistence.flush()         # on shutdown
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = StorageKeys.CART,
        delay: float = config.CART_PERSIST_DELAY,
    ):
        self.store = store
        self.key = key
        self.delay = delay
        self._pending: Optional[CartState] = None
        self._timer: Optional[asyncio.Task] = None

    @property
    def has_pending_write(self) -> bool:
        return self._pending is not None

    def schedule(self, state: CartState) -> None:
        """Remember `state` and restart the write timer."""
        self._pending = state
        self._cancel_timer()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, cart write deferred until flush")
            return

        self._timer = loop.create_task(self._write_after_delay())

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _write_after_delay(self) -> None:
        await asyncio.sleep(self.delay)
        await self._write_pending()

    async def _write_pending(self) -> None:
        state = self._pending
        if state is None:
            return

        try:
            await self.store.set(self.key, json.dumps(state.to_dict()))
            logger.debug("Cart persisted (%d line(s))", len(state.items))
        except Exception as e:
            logger.error("Failed to persist cart: %s", type(e).__name__, exc_info=True)

        # A newer state scheduled during the write stays pending
        if self._pending is state:
            self._pending = None

    async def flush(self) -> None:
        """Write the pending state now instead of waiting for the timer."""
        self._cancel_timer()
        await self._write_pending()

    async def load(self) -> Optional[CartState]:
        """
        Read the stored cart.

        Returns:
            CartState, or None when nothing usable is stored
        """
        try:
            data = await self.store.get(self.key)
        except Exception as e:
            logger.warning("Failed to read stored cart: %s", type(e).__name__)
            return None

        if not data:
            return None

        try:
            return CartState.from_dict(json.loads(data))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            # Corrupted data - start from an empty cart
            logger.warning("Corrupted cart data in store: %s", type(e).__name__)
            return None
