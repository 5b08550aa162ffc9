from pydantic import BaseModel, Field


class InvoiceAck(BaseModel):
    ok: bool = True


class NextInvoice(BaseModel):
    invoice_no: str = Field(alias="invoiceNo")
    sequence: int

    model_config = {"populate_by_name": True}


class ErrorRead(BaseModel):
    error: str
