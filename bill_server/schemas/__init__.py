from .invoice import ErrorRead, InvoiceAck, NextInvoice

__all__ = ["ErrorRead", "InvoiceAck", "NextInvoice"]
