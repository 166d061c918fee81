# car_catalog/models.py
"""SQLAlchemy tables backing `SqlCatalogStore`.

`listings` holds one row per catalog entry, `catalog_meta` holds the single
row with the next identifier to assign.
"""
from sqlalchemy import Column, Integer, Text, JSON
from .db import Base


class ListingRow(Base):
    __tablename__ = "listings"
    id = Column(Integer, primary_key=True, autoincrement=False)
    position = Column(Integer, nullable=False, index=True)
    make = Column(Text, nullable=False)
    model = Column(Text, nullable=False)
    year = Column(Integer)
    price = Column(Integer)
    location = Column(Text, nullable=False)
    condition = Column(Text, nullable=False)
    image = Column(Text)
    created_at = Column(Text)
    extra = Column(JSON)


class CatalogMeta(Base):
    __tablename__ = "catalog_meta"
    id = Column(Integer, primary_key=True)
    next_id = Column(Integer, nullable=False, default=1)
