import csv
import io
import json
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from sqlalchemy.orm import Session

from ..errors import ValidationError
from ..models import Invoice
from ..models.base import utcnow
from . import invoices as invoices_service

logger = logging.getLogger(__name__)

CSV_HEADER = ("invoiceNo", "date", "receiverName", "consigneeName", "grandTotal")


def render_csv(rows: Sequence[Invoice]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for row in rows:
        writer.writerow(
            [
                row.invoice_no,
                row.date or "",
                row.receiver_name or "",
                row.consignee_name or "",
                _format_total(row.grand_total),
            ]
        )
    return buffer.getvalue()


def render_json(rows: Sequence[Invoice]) -> str:
    return json.dumps([row.data for row in rows], indent=2, ensure_ascii=False)


@dataclass(frozen=True)
class ExportFormat:
    extension: str
    media_type: str
    render: Callable[[Sequence[Invoice]], str]


FORMATS: dict[str, ExportFormat] = {
    "csv": ExportFormat("csv", "text/csv", render_csv),
    "json": ExportFormat("json", "application/json", render_json),
}


@dataclass(frozen=True)
class Export:
    format: ExportFormat
    content: str
    count: int

    @property
    def filename(self) -> str:
        return f"invoices.{self.format.extension}"


def build_export(db: Session, fmt: str) -> Export:
    export_format = FORMATS.get(fmt)
    if export_format is None:
        raise ValidationError(f"Unknown export format: {fmt}")
    rows = invoices_service.load_all(db)
    return Export(export_format, export_format.render(rows), len(rows))


def export_filename(fmt: str, day: date | None = None) -> str:
    day = day or utcnow().date()
    return f"invoices-{day.isoformat()}.{FORMATS[fmt].extension}"


def write_export(
    db: Session, fmt: str, output_dir: Path, day: date | None = None
) -> tuple[Path, int]:
    export = build_export(db, fmt)
    output_dir.mkdir(parents=True, exist_ok=True)
    out_path = output_dir / export_filename(fmt, day)
    out_path.write_text(export.content, encoding="utf-8", newline="")
    logger.info("Wrote %s invoice(s) to %s", export.count, out_path)
    return out_path, export.count


def _format_total(value: float | None) -> str:
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
