# car_catalog/store.py
"""Catalog persistence.

Every request reads the whole catalog fresh and, for writes, stores the whole
catalog back. Nothing is cached and nothing is locked: concurrent writers race
and the last one wins.
"""
import json
from abc import ABC, abstractmethod
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from . import settings
from .db import Base, make_session_factory
from .models import CatalogMeta, ListingRow
from .schemas import Catalog, Listing
from .utils import logger

_LISTING_COLUMNS = ("id", "make", "model", "year", "price", "location", "condition", "image", "created_at")


class CatalogStore(ABC):
    """Loads and persists a `Catalog`."""

    @abstractmethod
    def load(self) -> Catalog:
        """Return the current catalog, or an empty one when nothing readable is stored."""

    @abstractmethod
    def save(self, catalog: Catalog) -> None:
        """Overwrite the stored catalog. Write failures propagate."""


class JsonCatalogStore(CatalogStore):
    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Catalog:
        if not self.path.exists():
            return Catalog()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return Catalog.model_validate(data)
        except (OSError, ValueError) as e:
            logger.warning("Unreadable catalog at %s, starting empty: %s", self.path, e)
            return Catalog()

    def save(self, catalog: Catalog) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(catalog.to_document(), indent=2), encoding="utf-8")
        except OSError:
            logger.exception("Error writing data file %s", self.path)
            raise
        logger.info("Catalog written to %s (%d listings)", self.path, len(catalog.cars))


class SqlCatalogStore(CatalogStore):
    """Catalog kept in a SQL database; `save` replaces every row in one transaction."""

    def __init__(self, url: str):
        self.engine, self.SessionLocal = make_session_factory(url)
        Base.metadata.create_all(bind=self.engine)

    def load(self) -> Catalog:
        try:
            with self.SessionLocal() as db:
                rows = db.query(ListingRow).order_by(ListingRow.position).all()
                meta = db.get(CatalogMeta, 1)
                cars = [_row_to_listing(r) for r in rows]
                return Catalog(cars=cars, next_id=meta.next_id if meta else 1)
        except (SQLAlchemyError, ValueError) as e:
            logger.warning("Unreadable catalog in %s, starting empty: %s", self.engine.url, e)
            return Catalog()

    def save(self, catalog: Catalog) -> None:
        if catalog.unparsed:
            logger.warning("Dropping %d unreadable listings with no row shape", len(catalog.unparsed))
        with self.SessionLocal() as db:
            try:
                db.query(ListingRow).delete()
                for position, car in enumerate(catalog.cars):
                    db.add(_listing_to_row(car, position))
                meta = db.get(CatalogMeta, 1)
                if meta is None:
                    meta = CatalogMeta(id=1)
                    db.add(meta)
                meta.next_id = catalog.next_id
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                logger.exception("Error writing catalog to %s", self.engine.url)
                raise
        logger.info("Catalog written to %s (%d listings)", self.engine.url, len(catalog.cars))


def _listing_to_row(car: Listing, position: int) -> ListingRow:
    values = {name: getattr(car, name) for name in _LISTING_COLUMNS}
    return ListingRow(position=position, extra=dict(car.model_extra or {}), **values)


def _row_to_listing(row: ListingRow) -> Listing:
    values = {name: getattr(row, name) for name in _LISTING_COLUMNS}
    return Listing(**(row.extra or {}), **values)


def build_store(backend=None) -> CatalogStore:
    backend = (backend or settings.CATALOG_BACKEND).lower()
    if backend == "json":
        return JsonCatalogStore(settings.DATA_FILE)
    if backend == "sql":
        return SqlCatalogStore(settings.DATABASE_URL)
    raise ValueError(f"Unknown catalog backend: {backend}")
