from .base import Base
from .invoice import Invoice

__all__ = ["Base", "Invoice"]
