# car_catalog/crud.py
"""Read-side operations over an in-memory `Catalog`.

Filtering, sorting, lookup by id and the facet/range helpers used to populate
filter controls. Nothing here touches storage; callers load the catalog first.
"""
from typing import Any, List, Optional, Tuple

from .schemas import Catalog, Listing, ListingQuery
from .utils import logger, parse_int

NUMERIC_SORT_FIELDS = ("price", "year", "mileage")


def _bound(raw: Optional[str], name: str) -> Optional[int]:
    if not raw:
        return None
    value = parse_int(raw)
    if value is None:
        logger.info("Ignoring non-numeric %s=%r", name, raw)
    return value


def _ci_equal(value: str, term: str) -> bool:
    return value.lower() == term.lower()


def list_listings(catalog: Catalog, query: ListingQuery) -> List[Listing]:
    cars = list(catalog.cars)

    if query.search:
        term = query.search.lower()
        cars = [
            c for c in cars
            if term in c.make.lower() or term in c.model.lower() or term in c.location.lower()
        ]
    if query.make:
        cars = [c for c in cars if _ci_equal(c.make, query.make)]
    if query.model:
        cars = [c for c in cars if _ci_equal(c.model, query.model)]

    min_price = _bound(query.min_price, "minPrice")
    max_price = _bound(query.max_price, "maxPrice")
    if min_price is not None:
        cars = [c for c in cars if c.price is not None and c.price >= min_price]
    if max_price is not None:
        cars = [c for c in cars if c.price is not None and c.price <= max_price]

    min_year = _bound(query.min_year, "minYear")
    max_year = _bound(query.max_year, "maxYear")
    if min_year is not None:
        cars = [c for c in cars if c.year is not None and c.year >= min_year]
    if max_year is not None:
        cars = [c for c in cars if c.year is not None and c.year <= max_year]

    if query.location:
        term = query.location.lower()
        cars = [c for c in cars if term in c.location.lower()]
    if query.condition:
        cars = [c for c in cars if _ci_equal(c.condition, query.condition)]

    return sort_listings(cars, query.sort_by, query.sort_order)


def _sort_value(car: Listing, field: str) -> Any:
    value = car.model_dump(by_alias=True).get(field)
    if field in NUMERIC_SORT_FIELDS:
        return parse_int(value)
    return value


def _rank(value: Any) -> Tuple[int, Any]:
    # numbers and text never compare against each other directly
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value)
    if isinstance(value, str):
        return (1, value)
    return (2, str(value))


def sort_listings(cars: List[Listing], sort_by: str = "createdAt", sort_order: str = "desc") -> List[Listing]:
    """Order `cars` by one field, ties broken by id.

    `sort_order` "asc" sorts ascending, anything else descending. Listings
    without a usable value for `sort_by` keep their relative order at the end.
    """
    keyed = [(_sort_value(c, sort_by), c) for c in cars]
    present = [(v, c) for v, c in keyed if v is not None]
    missing = [c for v, c in keyed if v is None]

    descending = (sort_order or "").lower() != "asc"
    present.sort(key=lambda pair: (_rank(pair[0]), pair[1].id), reverse=descending)
    return [c for _, c in present] + missing


def get_listing(catalog: Catalog, listing_id: int) -> Optional[Listing]:
    return next((c for c in catalog.cars if c.id == listing_id), None)


def distinct_makes(catalog: Catalog) -> List[str]:
    return sorted({c.make for c in catalog.cars})


def distinct_models(catalog: Catalog, make: str) -> List[str]:
    return sorted({c.model for c in catalog.cars if _ci_equal(c.make, make)})


def distinct_locations(catalog: Catalog) -> List[str]:
    return sorted({c.location for c in catalog.cars})


def _extrema(values: List[int]) -> Tuple[Optional[int], Optional[int]]:
    if not values:
        return None, None
    return min(values), max(values)


def price_range(catalog: Catalog) -> Tuple[Optional[int], Optional[int]]:
    """(min, max) price over the catalog, (None, None) when there is nothing to measure."""
    return _extrema([c.price for c in catalog.cars if c.price is not None])


def year_range(catalog: Catalog) -> Tuple[Optional[int], Optional[int]]:
    return _extrema([c.year for c in catalog.cars if c.year is not None])
