# car_catalog/schemas.py
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from typing import Any, List, Optional

from .utils import logger, parse_int


class Listing(BaseModel):
    # unknown keys from the stored document (e.g. mileage) ride along
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int
    make: str = ""
    model: str = ""
    year: Optional[int] = None
    price: Optional[int] = None
    location: str = ""
    condition: str = ""
    image: Optional[str] = None
    created_at: Optional[str] = Field(None, alias="createdAt")

    @field_validator("year", "price", mode="before")
    @classmethod
    def _lenient_int(cls, value):
        # stored documents may hold 25000.5, "25,000" or null
        if isinstance(value, str):
            value = value.replace(",", "")
        return parse_int(value)

    @field_validator("make", "model", "location", "condition", mode="before")
    @classmethod
    def _text(cls, value):
        return "" if value is None else str(value)

    @field_validator("image", "created_at", mode="before")
    @classmethod
    def _optional_text(cls, value):
        return None if value is None else str(value)


class Catalog(BaseModel):
    """Listings plus the next identifier to assign.

    Stored records that cannot be read as a `Listing` are kept aside in
    `unparsed` and written back untouched, so one bad row never costs the rest.
    """
    model_config = ConfigDict(populate_by_name=True)

    cars: List[Listing] = Field(default_factory=list)
    next_id: int = Field(1, alias="nextId")
    unparsed: List[Any] = Field(default_factory=list, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _split_unreadable(cls, data):
        if not isinstance(data, dict) or not isinstance(data.get("cars"), list):
            return data
        cars, unparsed = [], list(data.get("unparsed") or [])
        for raw in data["cars"]:
            if isinstance(raw, Listing):
                cars.append(raw)
                continue
            try:
                cars.append(Listing.model_validate(raw))
            except ValidationError as e:
                logger.warning("Keeping unreadable listing aside: %r (%s)", raw, e.errors()[0]["msg"])
                unparsed.append(raw)
        return {**data, "cars": cars, "unparsed": unparsed}

    @field_validator("next_id", mode="before")
    @classmethod
    def _lenient_counter(cls, value):
        parsed = parse_int(value)
        return 1 if parsed is None else parsed

    @model_validator(mode="after")
    def _counter_ahead_of_ids(self):
        ids = [car.id for car in self.cars]
        ids += [i for i in (parse_int(raw.get("id")) for raw in self.unparsed if isinstance(raw, dict)) if i is not None]
        if ids:
            highest = max(ids)
            if self.next_id <= highest:
                self.next_id = highest + 1
        return self

    def to_document(self) -> dict:
        """The persisted shape: {"cars": [...], "nextId": n}."""
        doc = self.model_dump(mode="json", by_alias=True)
        doc["cars"].extend(self.unparsed)
        return doc


class ListingQuery(BaseModel):
    """Raw query-string parameters for the listing search.

    Numeric bounds stay text here; the query engine decides how to read them.
    """
    model_config = ConfigDict(populate_by_name=True)

    search: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    min_price: Optional[str] = Field(None, alias="minPrice")
    max_price: Optional[str] = Field(None, alias="maxPrice")
    min_year: Optional[str] = Field(None, alias="minYear")
    max_year: Optional[str] = Field(None, alias="maxYear")
    location: Optional[str] = None
    condition: Optional[str] = None
    sort_by: str = Field("createdAt", alias="sortBy")
    sort_order: str = Field("desc", alias="sortOrder")


class PriceRange(BaseModel):
    minPrice: Optional[int]
    maxPrice: Optional[int]


class YearRange(BaseModel):
    minYear: Optional[int]
    maxYear: Optional[int]


class ErrorOut(BaseModel):
    error: str
