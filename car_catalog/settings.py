# car_catalog/settings.py
"""Environment-driven configuration.

Values are read once at import time after loading an optional `.env` file.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# defaults resolve against CATALOG_HOME, else the working directory
BASE_DIR = Path(os.getenv("CATALOG_HOME", Path.cwd()))

CATALOG_BACKEND = os.getenv("CATALOG_BACKEND", "json").lower()
DATA_FILE = Path(os.getenv("DATA_FILE", BASE_DIR / "data.json"))
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'catalog.db'}")

UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", BASE_DIR / "public"))
UPLOAD_URL_PREFIX = "/uploads"
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", 5 * 1024 * 1024))

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
