# tests/conftest.py
import copy
import json

import pytest
from fastapi.testclient import TestClient

from car_catalog.api.routes import get_store, get_uploader
from car_catalog.main import app
from car_catalog.schemas import Catalog
from car_catalog.store import JsonCatalogStore
from car_catalog.uploads import ImageUploader

SAMPLE_DOC = {
    "cars": [
        {"id": 1, "make": "BMW", "model": "X5", "year": 2018, "price": 30000, "location": "Los Angeles",
         "condition": "used", "image": "/uploads/x5.png", "createdAt": "2024-01-01T10:00:00.000Z"},
        {"id": 2, "make": "Toyota", "model": "Corolla", "year": 2020, "price": 18000, "location": "San Diego",
         "condition": "new", "image": "/uploads/corolla.png", "createdAt": "2024-02-01T10:00:00.000Z",
         "mileage": 12000},
        {"id": 3, "make": "bmw", "model": "M3", "year": 2015, "price": 25000, "location": "Austin",
         "condition": "Used", "image": "/uploads/m3.png", "createdAt": "2024-03-01T10:00:00.000Z",
         "mileage": 60000},
        {"id": 4, "make": "Honda", "model": "Civic", "year": 2012, "price": 9000, "location": "Los Altos",
         "condition": "used", "image": "https://img.example.com/civic.jpg", "createdAt": "2023-12-01T10:00:00.000Z",
         "mileage": "85000"},
    ],
    "nextId": 5,
}


@pytest.fixture
def sample_doc():
    return copy.deepcopy(SAMPLE_DOC)


@pytest.fixture
def catalog(sample_doc):
    return Catalog.model_validate(sample_doc)


@pytest.fixture
def data_file(tmp_path, sample_doc):
    path = tmp_path / "data.json"
    path.write_text(json.dumps(sample_doc), encoding="utf-8")
    return path


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "public"


@pytest.fixture
def make_client(upload_dir):
    """Build a TestClient over a given store; overrides are cleared afterwards."""
    def _make(store):
        app.dependency_overrides[get_store] = lambda: store
        app.dependency_overrides[get_uploader] = lambda: ImageUploader(upload_dir)
        return TestClient(app, raise_server_exceptions=False)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client, data_file):
    return make_client(JsonCatalogStore(data_file))
