from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class Invoice(Base):
    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    invoice_no: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    date: Mapped[str | None] = mapped_column(String(32), index=True)
    receiver_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    consignee_name: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )
    grand_total: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
