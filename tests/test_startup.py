"""Startup sequence: the store must be ready before the app serves anything."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from db import DatabaseSettings
from errors import StoreError
from main import app
from store import ProductStore


def test_startup_bootstraps_and_exposes_store():
    with patch.object(ProductStore, "bootstrap") as bootstrap:
        with TestClient(app):
            assert isinstance(app.state.store, ProductStore)

    bootstrap.assert_called_once()


def test_startup_aborts_on_store_failure(caplog):
    failure = StoreError("Can't connect to MySQL server on 'localhost'", code=2003)

    with patch.object(ProductStore, "bootstrap", side_effect=failure):
        with pytest.raises(StoreError):
            with TestClient(app):
                pass

    assert "Could not start server" in caplog.text


def test_database_settings_from_env(monkeypatch):
    monkeypatch.setenv("DATABASE_HOST", "db.internal")
    monkeypatch.setenv("DATABASE_PORT", "3307")
    monkeypatch.delenv("DATABASE_NAME", raising=False)

    settings = DatabaseSettings.from_env()

    assert settings.host == "db.internal"
    assert settings.port == 3307
    assert settings.database == "inventory"
