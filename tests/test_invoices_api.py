import asyncio

from sqlalchemy import text

from bill_server.config import settings
from bill_server.services import invoices as invoices_service


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_post_then_fetch_round_trip(client, make_invoice):
    document = make_invoice("INV20240115-001")

    response = client.post("/api/invoices", json=document)

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    fetched = client.get("/api/invoices/INV20240115-001")
    assert fetched.status_code == 200
    assert fetched.json() == document


def test_post_same_invoice_twice_keeps_one_record(client, make_invoice):
    client.post("/api/invoices", json=make_invoice("INV20240115-001"))
    client.post(
        "/api/invoices", json=make_invoice("INV20240115-001", receiver="Globex")
    )

    documents = client.get("/api/invoices").json()

    assert len(documents) == 1
    assert documents[0]["receiver"]["name"] == "Globex"


def test_post_requires_invoice_no(client, make_invoice):
    document = make_invoice("")

    response = client.post("/api/invoices", json=document)

    assert response.status_code == 400
    assert response.json() == {"error": "invoiceNo required"}
    assert client.get("/api/invoices").json() == []


def test_post_rejects_non_object_bodies(client):
    response = client.post(
        "/api/invoices",
        content=b"not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400

    response = client.post("/api/invoices", json=[{"invoiceNo": "INV1"}])
    assert response.status_code == 400


def test_post_rejects_oversized_bodies(client, make_invoice, monkeypatch):
    monkeypatch.setattr(settings, "max_body_bytes", 64)

    response = client.post(
        "/api/invoices", json=make_invoice("INV20240115-001", notes="x" * 200)
    )

    assert response.status_code == 413
    assert client.get("/api/invoices").json() == []


def test_fetch_unknown_invoice(client):
    response = client.get("/api/invoices/INV20240115-404")

    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}


def test_list_applies_query_filters(client, make_invoice):
    client.post(
        "/api/invoices",
        json=make_invoice("INV20240110-001", date="2024-01-10", receiver="Acme"),
    )
    client.post(
        "/api/invoices",
        json=make_invoice("INV20240120-001", date="2024-01-20", receiver="Globex"),
    )
    client.post(
        "/api/invoices",
        json=make_invoice("INV20240201-001", date="2024-02-01", receiver="Acme"),
    )

    in_january = client.get(
        "/api/invoices", params={"fromDate": "2024-01-01", "toDate": "2024-01-31"}
    ).json()
    acme_in_january = client.get(
        "/api/invoices",
        params={
            "fromDate": "2024-01-01",
            "toDate": "2024-01-31",
            "customerName": "acme",
        },
    ).json()
    by_number = client.get("/api/invoices", params={"invoiceNo": "0201"}).json()

    assert [d["invoiceNo"] for d in in_january] == ["INV20240120-001", "INV20240110-001"]
    assert [d["invoiceNo"] for d in acme_in_january] == ["INV20240110-001"]
    assert [d["invoiceNo"] for d in by_number] == ["INV20240201-001"]


def test_storage_errors_surface_as_500(client, db_session):
    db_session.execute(text("DROP TABLE invoices"))
    db_session.commit()

    response = client.get("/api/invoices")

    assert response.status_code == 500
    assert "no such table" in response.json()["error"]


def test_post_rejects_non_standard_json_constants(client):
    for constant in ("NaN", "Infinity", "-Infinity"):
        response = client.post(
            "/api/invoices",
            content=f'{{"invoiceNo": "INV20240115-001", "items": [{{"qty": {constant}}}]}}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert constant in response.json()["error"]

    assert client.get("/api/invoices").json() == []


def test_post_rejects_oversized_chunked_bodies(client, monkeypatch):
    monkeypatch.setattr(settings, "max_body_bytes", 64)
    chunks = [b'{"invoiceNo": "INV20240115-001", "notes": "', b"x" * 200, b'"}']

    response = client.post(
        "/api/invoices",
        content=iter(chunks),
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 413
    assert response.json() == {"error": "Request body too large"}
    assert client.get("/api/invoices").json() == []


def test_post_writes_outside_the_event_loop(client, monkeypatch):
    seen = []

    def recording_upsert(db, payload):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            seen.append("worker")
        else:
            seen.append("loop")
        return payload["invoiceNo"]

    monkeypatch.setattr(invoices_service, "upsert_invoice", recording_upsert)

    response = client.post("/api/invoices", json={"invoiceNo": "INV20240115-001"})

    assert response.status_code == 200
    assert seen == ["worker"]
