import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from bill_server import db as database
from bill_server.db import get_db, init_db
from bill_server.main import app


@pytest.fixture()
def engine(tmp_path):
    db_path = tmp_path / "data" / "invoices.sqlite"
    engine = create_engine(
        f"sqlite+pysqlite:///{db_path}", connect_args={"check_same_thread": False}
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def SessionLocal(engine, monkeypatch):
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    monkeypatch.setattr(database, "engine", engine)
    monkeypatch.setattr(database, "SessionLocal", factory)
    return factory


@pytest.fixture()
def db_session(SessionLocal):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(SessionLocal):
    def override_get_db():
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def make_invoice():
    def _make(invoice_no, date="2024-01-15", receiver="Acme Traders", **extra):
        document = {
            "invoiceNo": invoice_no,
            "date": date,
            "receiver": {"name": receiver, "gstin": "29ABCDE1234F1Z5"},
            "consignee": {"name": f"{receiver} Warehouse"},
            "items": [
                {"description": "Steel rods", "qty": 10, "rate": 125.5},
            ],
            "grandTotal": 1255,
        }
        document.update(extra)
        return document

    return _make
