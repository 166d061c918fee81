# tests/test_uploads.py
import asyncio
from io import BytesIO

import pytest
from starlette.datastructures import Headers, UploadFile

from car_catalog.uploads import ImageUploader, UploadRejected

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def upload(data=PNG, filename="car.png", content_type="image/png"):
    return UploadFile(file=BytesIO(data), filename=filename, headers=Headers({"content-type": content_type}))


def test_saves_image_under_public_prefix(upload_dir):
    path = asyncio.run(ImageUploader(upload_dir).save(upload(), field_name="images"))
    assert path.startswith("/uploads/images-")
    assert path.endswith(".png")
    stored = upload_dir / path.rsplit("/", 1)[1]
    assert stored.read_bytes() == PNG


def test_filenames_are_unique(upload_dir):
    uploader = ImageUploader(upload_dir)
    paths = asyncio.run(uploader.save_all([("images", upload()), ("images", upload())]))
    assert len(set(paths)) == 2


def test_rejects_non_images(upload_dir):
    with pytest.raises(UploadRejected, match="Only image files are allowed"):
        asyncio.run(ImageUploader(upload_dir).save(upload(b"hello", "notes.txt", "text/plain")))


def test_rejects_oversized_files(upload_dir):
    with pytest.raises(UploadRejected, match="File too large"):
        asyncio.run(ImageUploader(upload_dir, max_bytes=10).save(upload()))
    assert not upload_dir.exists()


def test_rejected_batch_writes_nothing(upload_dir):
    batch = [("images", upload()), ("images", upload(b"x", "a.txt", "text/plain"))]
    with pytest.raises(UploadRejected):
        asyncio.run(ImageUploader(upload_dir).save_all(batch))
    assert not upload_dir.exists()


def test_field_name_cannot_escape_directory(upload_dir):
    path = asyncio.run(ImageUploader(upload_dir).save(upload(), field_name="../../etc"))
    name = path.rsplit("/", 1)[1]
    assert "/" not in name
    assert (upload_dir / name).exists()


def test_read_all_checks_without_writing(upload_dir):
    checked = asyncio.run(ImageUploader(upload_dir).read_all([("images", upload())]))
    assert checked == [("images", "car.png", PNG)]
    assert not upload_dir.exists()


def test_discard_removes_written_files(upload_dir):
    uploader = ImageUploader(upload_dir)
    paths = asyncio.run(uploader.save_all([("images", upload()), ("images", upload())]))
    uploader.discard(paths)
    assert list(upload_dir.iterdir()) == []
