# tests/test_settings.py
import importlib

from car_catalog import settings


def reload_with(monkeypatch, **env):
    for var in ("CATALOG_HOME", "DATA_FILE", "UPLOAD_DIR", "DATABASE_URL"):
        monkeypatch.delenv(var, raising=False)
    for var, value in env.items():
        monkeypatch.setenv(var, value)
    return importlib.reload(settings)


def test_defaults_follow_working_directory(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    try:
        reloaded = reload_with(monkeypatch)
        assert reloaded.DATA_FILE == tmp_path / "data.json"
        assert reloaded.UPLOAD_DIR == tmp_path / "public"
        assert reloaded.DATABASE_URL == f"sqlite:///{tmp_path / 'catalog.db'}"
    finally:
        monkeypatch.undo()
        importlib.reload(settings)


def test_catalog_home_and_explicit_paths(monkeypatch, tmp_path):
    try:
        reloaded = reload_with(monkeypatch, CATALOG_HOME=str(tmp_path), UPLOAD_DIR=str(tmp_path / "img"))
        assert reloaded.DATA_FILE == tmp_path / "data.json"
        assert reloaded.UPLOAD_DIR == tmp_path / "img"
    finally:
        monkeypatch.undo()
        importlib.reload(settings)
