from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import horder.persistence.db as db
from horder.core.config import get_settings
from horder.domain.catalog import Product, Variant
from horder.persistence.models import Base
from horder.persistence.repositories import SqlRepository


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory: pytest.TempPathFactory) -> Path:
    return tmp_path_factory.mktemp("db") / "test.sqlite"


@pytest.fixture(scope="session", autouse=True)
def configure_test_engine(test_db_path: Path):
    settings = get_settings()
    settings.report_timezone = "UTC"
    settings.auth_enabled = True

    engine = create_engine(
        f"sqlite+pysqlite:///{test_db_path}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    TestSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

    db.engine = engine
    db.SessionLocal = TestSessionLocal

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables(configure_test_engine):
    with db.engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    yield


@pytest.fixture()
def session(configure_test_engine):
    with db.session_scope() as s:
        yield s


@pytest.fixture()
def repo(session) -> SqlRepository:
    return SqlRepository(session)


@pytest.fixture()
def client(configure_test_engine):
    from horder.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture()
def auth_headers(client) -> dict[str, str]:
    settings = get_settings()
    resp = client.post(
        "/login",
        json={"username": settings.default_admin_username, "password": settings.default_admin_password},
    )
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture()
def youtube(repo) -> Product:
    product = Product(
        id="yt",
        name="Youtube Premium",
        source="Family Share",
        variants=[
            Variant(id="yt-1m", duration="1 tháng", import_price=25000, sell_price=40000),
            Variant(id="yt-1y", duration="1 năm", import_price=250000, sell_price=390000),
        ],
    )
    repo.insert_product(product)
    return product


@pytest.fixture()
def lifetime_product(repo) -> Product:
    product = Product(
        id="office",
        name="Office 365",
        source="Key",
        variants=[Variant(id="office-life", duration="Vĩnh viễn", import_price=100000, sell_price=150000)],
    )
    repo.insert_product(product)
    return product
