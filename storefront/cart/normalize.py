"""
Remote cart payload normalization.

The backend has returned the cart in several envelopes over time. Each known
shape is described by a pydantic model and tried in order; the first one that
matches supplies the item list.

Known shapes:
    [ {...}, ... ]                       bare list
    {"items": [ ... ]}                   items envelope
    {"data": {"items": [ ... ]}}         API envelope around the items envelope
    {"data": [ ... ]}                    API envelope around a bare list

TODO: confirm the canonical shape with the backend team and drop the others.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.models import RemoteCartItem

logger = get_logger(__name__)


class ItemsEnvelope(BaseModel):
    items: list[Any]


class DataItemsEnvelope(BaseModel):
    data: ItemsEnvelope


class DataListEnvelope(BaseModel):
    data: list[Any]


_BARE_LIST = TypeAdapter(list[Any])

# (shape name, validator returning the raw item list), in priority order
_SHAPES: tuple[tuple[str, Callable[[Any], list[Any]]], ...] = (
    ("list", _BARE_LIST.validate_python),
    ("items", lambda payload: ItemsEnvelope.model_validate(payload).items),
    ("data.items", lambda payload: DataItemsEnvelope.model_validate(payload).data.items),
    ("data", lambda payload: DataListEnvelope.model_validate(payload).data),
)


@dataclass(frozen=True)
class RemoteLine:
    """Normalized server line: which product, how many, since when."""
    product_id: str
    quantity: int
    added_at: Optional[datetime] = None


def extract_items(payload: Any) -> list[Any]:
    """Return the raw item list from the first matching shape, or [] if none match."""
    for name, validate in _SHAPES:
        try:
            items = validate(payload)
        except ValidationError:
            continue
        logger.debug("Remote cart matched shape '%s' with %d item(s)", name, len(items))
        return items

    logger.warning("Remote cart payload matched no known shape; treating as empty")
    return []


def normalize_remote_cart(payload: Any) -> list[RemoteLine]:
    """
    Flatten a remote cart payload into ordered, de-duplicated lines.

    Malformed entries and entries with quantity < 1 are skipped. Repeated
    product ids are merged into the first occurrence (quantities summed).
    """
    lines: dict[str, RemoteLine] = {}

    for raw in extract_items(payload):
        try:
            item = RemoteCartItem.model_validate(raw)
        except ValidationError as e:
            logger.warning("Skipping malformed remote cart entry: %d error(s)", e.error_count())
            continue

        if item.quantity < 1:
            logger.debug(
                "Skipping remote line %s with quantity %d",
                sanitize_id_for_logging(item.product_id),
                item.quantity,
            )
            continue

        existing = lines.get(item.product_id)
        if existing is not None:
            lines[item.product_id] = RemoteLine(
                product_id=existing.product_id,
                quantity=existing.quantity + item.quantity,
                added_at=existing.added_at,
            )
        else:
            lines[item.product_id] = RemoteLine(
                product_id=item.product_id,
                quantity=item.quantity,
                added_at=item.added_at,
            )

    return list(lines.values())
