"""
Pytest fixtures: an isolated SQLite file per test, the FastAPI app built
around it, and a bare PostStore for store-level tests.
"""
import sqlite3

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from app.config import Settings
from app.database import open_database
from app.main import create_app
from app.services.store import PostStore


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "biryani-test.db"


@pytest.fixture
def settings(db_path):
    return Settings(_env_file=None, DATABASE_PATH=str(db_path), LOG_LEVEL="WARNING")


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
async def store(db_path):
    engine = await open_database(str(db_path))
    session_factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    yield PostStore(session_factory)
    await engine.dispose()


@pytest.fixture
def drop_table(db_path):
    """Break the store by dropping a table behind the application's back."""
    def _drop(name: str):
        conn = sqlite3.connect(db_path)
        try:
            conn.execute(f"DROP TABLE {name}")
            conn.commit()
        finally:
            conn.close()
    return _drop


@pytest.fixture
def count_rows(db_path):
    def _count(table: str, where: str = "", params: tuple = ()) -> int:
        conn = sqlite3.connect(db_path)
        try:
            sql = f"SELECT COUNT(*) FROM {table}" + (f" WHERE {where}" if where else "")
            return conn.execute(sql, params).fetchone()[0]
        finally:
            conn.close()
    return _count
