"""Invoice persistence and lookups.

Every stored invoice keeps the submitted document verbatim in ``data`` and a
small projection of it (date, party names, grand total) in plain columns that
the list filters and the CSV export work from.
"""
import logging
import math
import re
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from typing import Any

from sqlalchemy import delete, func, or_, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import NotFound, StorageError, ValidationError
from ..models import Invoice
from ..models.base import utcnow
from ..schemas import NextInvoice

logger = logging.getLogger(__name__)

INVOICE_PREFIX = "INV"
SEQUENCE_WIDTH = 3

# Newest first; same-day invoices by highest number.
DEFAULT_ORDER = (Invoice.date.desc(), Invoice.invoice_no.desc())

_UPSERT_COLUMNS = ("date", "receiver_name", "consignee_name", "grand_total", "data")
_DATE_DIGITS = re.compile(r"[0-9]{8}")
_LEADING_DIGITS = re.compile(r"[0-9]+")


@contextmanager
def storage_guard(db: Session, action: str) -> Iterator[None]:
    """Roll back and re-raise database failures as :class:`StorageError`."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s failed", action)
        raise StorageError(str(getattr(exc, "orig", None) or exc)) from exc


def upsert_invoice(db: Session, payload: Any) -> str:
    invoice_no = _require_invoice_no(payload)
    values = derive_columns(payload)
    stmt = sqlite_insert(Invoice).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[Invoice.invoice_no],
        set_={name: stmt.excluded[name] for name in _UPSERT_COLUMNS},
    )
    with storage_guard(db, "Invoice upsert"):
        db.execute(stmt)
        db.commit()
    logger.info("Saved invoice %s", invoice_no)
    return invoice_no


def derive_columns(payload: dict[str, Any]) -> dict[str, Any]:
    return {
        "invoice_no": payload["invoiceNo"],
        "date": _text_or_none(payload.get("date")),
        "receiver_name": _party_name(payload.get("receiver")),
        "consignee_name": _party_name(payload.get("consignee")),
        "grand_total": _total(payload.get("grandTotal")),
        "data": payload,
    }


def list_invoices(
    db: Session,
    from_date: str | None = None,
    to_date: str | None = None,
    invoice_no: str | None = None,
    customer_name: str | None = None,
) -> list[dict[str, Any]]:
    query = select(Invoice.data).order_by(*DEFAULT_ORDER)
    # A range needs both ends; a lone bound is ignored.
    if from_date and to_date:
        query = query.where(Invoice.date.between(from_date, to_date))
    if invoice_no:
        query = query.where(Invoice.invoice_no.contains(invoice_no, autoescape=True))
    if customer_name:
        query = query.where(
            or_(
                Invoice.receiver_name.contains(customer_name, autoescape=True),
                Invoice.consignee_name.contains(customer_name, autoescape=True),
            )
        )
    with storage_guard(db, "Invoice list"):
        return list(db.execute(query).scalars().all())


def get_invoice(db: Session, invoice_no: str) -> dict[str, Any]:
    with storage_guard(db, "Invoice fetch"):
        document = db.execute(
            select(Invoice.data).where(Invoice.invoice_no == invoice_no)
        ).scalar_one_or_none()
    if document is None:
        raise NotFound()
    return document


def load_all(db: Session) -> list[Invoice]:
    with storage_guard(db, "Invoice load"):
        return list(db.execute(select(Invoice).order_by(*DEFAULT_ORDER)).scalars())


def count_invoices(db: Session) -> int:
    with storage_guard(db, "Invoice count"):
        return db.execute(select(func.count()).select_from(Invoice)).scalar_one()


def purge_invoices(db: Session) -> int:
    """Delete every invoice and return how many were removed.

    An empty table is left untouched and reported as ``0``.
    """
    if not count_invoices(db):
        return 0
    with storage_guard(db, "Invoice purge"):
        result = db.execute(delete(Invoice))
        db.commit()
    logger.info("Purged %s invoice(s)", result.rowcount)
    return result.rowcount


def next_invoice_number(db: Session, value: str | None = None) -> NextInvoice:
    """Suggest the next invoice number for ``value`` (``YYYY-MM-DD``).

    Nothing is reserved: two callers asking for the same day before either
    saves will be offered the same number.
    """
    day = (value or _today().isoformat()).replace("-", "")
    if not _DATE_DIGITS.fullmatch(day):
        raise ValidationError("Invalid date format. Use YYYY-MM-DD or YYYYMMDD")

    prefix = f"{INVOICE_PREFIX}{day}-"
    with storage_guard(db, "Invoice sequence lookup"):
        numbers = db.execute(
            select(Invoice.invoice_no).where(
                Invoice.invoice_no.startswith(prefix, autoescape=True)
            )
        ).scalars()
        sequence = max((_sequence_of(no, prefix) for no in numbers), default=0) + 1
    return NextInvoice(
        invoice_no=f"{prefix}{sequence:0{SEQUENCE_WIDTH}d}", sequence=sequence
    )


def _sequence_of(invoice_no: str, prefix: str) -> int:
    match = _LEADING_DIGITS.match(invoice_no[len(prefix):])
    if not match:
        return 0
    return int(match.group())


def _require_invoice_no(payload: Any) -> str:
    if not isinstance(payload, dict) or not payload.get("invoiceNo"):
        raise ValidationError("invoiceNo required")
    invoice_no = payload["invoiceNo"]
    if not isinstance(invoice_no, str):
        raise ValidationError("invoiceNo must be a string")
    return invoice_no


def _party_name(party: Any) -> str:
    if isinstance(party, dict) and party.get("name"):
        return str(party["name"])
    return ""


def _text_or_none(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _total(value: Any) -> float:
    try:
        total = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(total):
        return 0.0
    return total


def _today() -> date:
    return utcnow().date()
