import json
from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from ..config import settings
from ..db import get_db
from ..errors import PayloadTooLarge, ValidationError
from ..schemas import InvoiceAck, NextInvoice
from ..services import invoices as invoices_service

router = APIRouter()


async def _read_body(request: Request) -> bytes:
    # Chunked uploads carry no Content-Length, so count while reading.
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > settings.max_body_bytes:
            raise PayloadTooLarge()
    return bytes(body)


def _reject_constant(name: str) -> None:
    raise ValidationError(f"Invalid JSON value: {name}")


@router.post("/invoices", response_model=InvoiceAck)
async def invoices_upsert(
    request: Request, db: Session = Depends(get_db)
) -> InvoiceAck:
    body = await _read_body(request)
    try:
        payload = json.loads(body, parse_constant=_reject_constant)
    except ValueError:
        raise ValidationError("invoiceNo required") from None
    await run_in_threadpool(invoices_service.upsert_invoice, db, payload)
    return InvoiceAck(ok=True)


@router.get("/invoices")
def invoices_list(
    from_date: str | None = Query(None, alias="fromDate"),
    to_date: str | None = Query(None, alias="toDate"),
    invoice_no: str | None = Query(None, alias="invoiceNo"),
    customer_name: str | None = Query(None, alias="customerName"),
    db: Session = Depends(get_db),
) -> list[dict[str, Any]]:
    return invoices_service.list_invoices(
        db,
        from_date=from_date,
        to_date=to_date,
        invoice_no=invoice_no,
        customer_name=customer_name,
    )


@router.get("/invoices/{invoice_no}")
def invoices_detail(
    invoice_no: str, db: Session = Depends(get_db)
) -> dict[str, Any]:
    return invoices_service.get_invoice(db, invoice_no)


@router.get("/next-invoice", response_model=NextInvoice)
def next_invoice(
    day: str | None = Query(None, alias="date"),
    db: Session = Depends(get_db),
) -> NextInvoice:
    return invoices_service.next_invoice_number(db, day)
