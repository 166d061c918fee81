# car_catalog/uploads.py
"""Image uploads for new listings.

Files land in a local directory that the app serves under a public prefix;
listings only record the resulting public path.
"""
import random
import re
import time
from pathlib import Path
from typing import Iterable, List, Tuple

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from .utils import logger


class UploadRejected(ValueError):
    pass


class ImageUploader:
    def __init__(self, directory, public_prefix: str = "/uploads", max_bytes: int = 5 * 1024 * 1024):
        self.directory = Path(directory)
        self.public_prefix = public_prefix.rstrip("/")
        self.max_bytes = max_bytes

    def _filename(self, field_name: str, original: str) -> str:
        field = re.sub(r"[^A-Za-z0-9_-]", "_", field_name) or "file"
        suffix = Path(original or "").suffix
        return f"{field}-{int(time.time() * 1000)}-{random.randint(0, 10**9)}{suffix}"

    async def _read_checked(self, upload: UploadFile) -> bytes:
        if not (upload.content_type or "").startswith("image/"):
            logger.warning("Rejected upload %r with content type %r", upload.filename, upload.content_type)
            raise UploadRejected("Only image files are allowed")
        data = await upload.read(self.max_bytes + 1)
        if len(data) > self.max_bytes:
            logger.warning("Rejected upload %r over %d bytes", upload.filename, self.max_bytes)
            raise UploadRejected("File too large")
        return data

    async def save(self, upload: UploadFile, field_name: str = "image") -> str:
        paths = await self.save_all([(field_name, upload)])
        return paths[0]

    async def read_all(self, uploads: Iterable[Tuple[str, UploadFile]]) -> List[Tuple[str, str, bytes]]:
        """Read and check every (field name, file) pair without writing anything.

        Returns (field name, original filename, content) triples for `write_all`.
        """
        return [(field, upload.filename, await self._read_checked(upload)) for field, upload in uploads]

    def write_all(self, checked: Iterable[Tuple[str, str, bytes]]) -> List[str]:
        checked = list(checked)
        if not checked:
            return []
        self.directory.mkdir(parents=True, exist_ok=True)
        paths = []
        for field, original, data in checked:
            filename = self._filename(field, original)
            (self.directory / filename).write_bytes(data)
            paths.append(f"{self.public_prefix}/{filename}")
        return paths

    async def save_all(self, uploads: Iterable[Tuple[str, UploadFile]]) -> List[str]:
        """Store every (field name, file) pair and return their public paths.

        All files are checked before any is written, so a rejected batch
        leaves nothing behind.
        """
        checked = await self.read_all(uploads)
        return await run_in_threadpool(self.write_all, checked)

    def discard(self, paths: Iterable[str]) -> None:
        """Delete files previously returned by `write_all`."""
        for path in paths:
            target = self.directory / path.rsplit("/", 1)[-1]
            target.unlink(missing_ok=True)
            logger.info("Discarded upload %s", target)
