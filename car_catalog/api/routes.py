# car_catalog/api/routes.py
import json
from functools import lru_cache
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional
from .. import crud, schemas, settings
from ..services import InvalidFieldsError, MissingFieldsError, add_listing, normalize_fields
from ..store import CatalogStore, build_store
from ..uploads import ImageUploader, UploadRejected
from ..utils import logger, parse_int

router = APIRouter()

_FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


@lru_cache(maxsize=1)
def get_store() -> CatalogStore:
    return build_store()


def get_uploader() -> ImageUploader:
    return ImageUploader(settings.UPLOAD_DIR, settings.UPLOAD_URL_PREFIX, settings.MAX_UPLOAD_BYTES)


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/api/cars", response_model=List[schemas.Listing])
def list_cars(
    search: Optional[str] = None,
    make: Optional[str] = None,
    model: Optional[str] = None,
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    min_year: Optional[str] = Query(None, alias="minYear"),
    max_year: Optional[str] = Query(None, alias="maxYear"),
    location: Optional[str] = None,
    condition: Optional[str] = None,
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    store: CatalogStore = Depends(get_store),
):
    query = schemas.ListingQuery(
        search=search,
        make=make,
        model=model,
        min_price=min_price,
        max_price=max_price,
        min_year=min_year,
        max_year=max_year,
        location=location,
        condition=condition,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return crud.list_listings(store.load(), query)


@router.get("/api/cars/{car_id}", response_model=schemas.Listing, responses={404: {"model": schemas.ErrorOut}})
def get_car(car_id: str, store: CatalogStore = Depends(get_store)):
    listing_id = parse_int(car_id)
    car = crud.get_listing(store.load(), listing_id) if listing_id is not None else None
    if not car:
        raise HTTPException(status_code=404, detail="Car not found")
    return car


async def _read_create_body(request: Request):
    """Split the request into plain fields and (field name, file) uploads."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(_FORM_TYPES):
        form = await request.form()
        fields, files = {}, []
        for key, value in form.multi_items():
            if isinstance(value, str):
                fields.setdefault(key, value)
            else:
                files.append((key, value))
        return fields, files

    raw = await request.body()
    try:
        fields = json.loads(raw) if raw.strip() else {}
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    if not isinstance(fields, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    return fields, []


@router.post(
    "/api/cars",
    response_model=schemas.Listing,
    status_code=201,
    responses={400: {"model": schemas.ErrorOut}, 500: {"model": schemas.ErrorOut}},
)
async def create_car(
    request: Request,
    store: CatalogStore = Depends(get_store),
    uploader: ImageUploader = Depends(get_uploader),
):
    fields, files = await _read_create_body(request)
    try:
        checked = await uploader.read_all(files)
        # uploads only count toward `image` here; nothing is written until the fields pass
        normalize_fields(fields, [original or field for field, original, _ in checked])
        images = await run_in_threadpool(uploader.write_all, checked)
    except (UploadRejected, MissingFieldsError, InvalidFieldsError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError as e:
        logger.exception("Error storing uploads: %s", e)
        raise HTTPException(status_code=500, detail="Internal server error")

    try:
        return await run_in_threadpool(add_listing, store, fields, images)
    except Exception as e:
        await run_in_threadpool(uploader.discard, images)
        if isinstance(e, (OSError, SQLAlchemyError)):
            logger.exception("Error adding car: %s", e)
            raise HTTPException(status_code=500, detail="Internal server error")
        raise


@router.get("/api/makes", response_model=List[str])
def makes(store: CatalogStore = Depends(get_store)):
    return crud.distinct_makes(store.load())


@router.get("/api/makes/{make}/models", response_model=List[str])
def models(make: str, store: CatalogStore = Depends(get_store)):
    return crud.distinct_models(store.load(), make)


@router.get("/api/locations", response_model=List[str])
def locations(store: CatalogStore = Depends(get_store)):
    return crud.distinct_locations(store.load())


@router.get("/api/price-range", response_model=schemas.PriceRange)
def price_range(store: CatalogStore = Depends(get_store)):
    low, high = crud.price_range(store.load())
    return schemas.PriceRange(minPrice=low, maxPrice=high)


@router.get("/api/year-range", response_model=schemas.YearRange)
def year_range(store: CatalogStore = Depends(get_store)):
    low, high = crud.year_range(store.load())
    return schemas.YearRange(minYear=low, maxYear=high)
