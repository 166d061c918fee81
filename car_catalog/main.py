# car_catalog/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import settings
from .api.routes import router as api_router
from .utils import logger

# framework defaults for unmatched paths and methods
_UNROUTED = {404: "Not Found", 405: "Method Not Allowed"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    logger.info("Catalog backend: %s, uploads in %s", settings.CATALOG_BACKEND, settings.UPLOAD_DIR)
    yield


app = FastAPI(title="Car Catalog", lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
app.include_router(api_router)
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")


def _error(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    if _UNROUTED.get(exc.status_code) == exc.detail:
        return _error(404, "Route not found")
    return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "Internal server error")


def run():
    uvicorn.run("car_catalog.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
