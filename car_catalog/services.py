# car_catalog/services.py
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

from .schemas import Catalog, Listing
from .store import CatalogStore
from .utils import logger, parse_int

REQUIRED_FIELDS = ("make", "model", "year", "price", "location", "condition", "image")
TEXT_FIELDS = ("make", "model", "location", "condition", "image")
INT_FIELDS = ("year", "price")


class MissingFieldsError(ValueError):
    def __init__(self, fields: List[str]):
        self.fields = fields
        super().__init__("Missing required fields: " + ", ".join(fields))


class InvalidFieldsError(ValueError):
    def __init__(self, fields: List[str]):
        self.fields = fields
        super().__init__("Invalid numeric fields: " + ", ".join(fields))


def _is_missing(value: Any) -> bool:
    if isinstance(value, str):
        return not value.strip()
    return not value


def utc_timestamp() -> str:
    """Current instant as ISO-8601 with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize_fields(fields: Dict[str, Any], images: Iterable[str] = ()) -> Dict[str, Any]:
    """Check required fields and return the trimmed, coerced listing values.

    `images` are public paths of uploaded files; the first one stands in for a
    missing `image` field.
    """
    payload = dict(fields)
    images = list(images)
    if _is_missing(payload.get("image")) and images:
        payload["image"] = images[0]

    missing = [name for name in REQUIRED_FIELDS if _is_missing(payload.get(name))]
    if missing:
        raise MissingFieldsError(missing)

    numbers = {name: parse_int(payload[name]) for name in INT_FIELDS}
    invalid = [name for name, value in numbers.items() if value is None]
    if invalid:
        raise InvalidFieldsError(invalid)

    return {**{name: str(payload[name]).strip() for name in TEXT_FIELDS}, **numbers}


def create_listing(catalog: Catalog, fields: Dict[str, Any], images: Iterable[str] = ()) -> Listing:
    """Validate `fields`, append a new listing to `catalog` and advance its counter."""
    values = normalize_fields(fields, images)
    listing = Listing(id=catalog.next_id, created_at=utc_timestamp(), **values)
    catalog.cars.append(listing)
    catalog.next_id += 1
    return listing


def add_listing(store: CatalogStore, fields: Dict[str, Any], images: Iterable[str] = ()) -> Listing:
    catalog = store.load()
    listing = create_listing(catalog, fields, images)
    store.save(catalog)
    logger.info("Created listing %s (%s %s)", listing.id, listing.make, listing.model)
    return listing
