class InvoiceStoreError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(InvoiceStoreError):
    status_code = 400


class NotFound(InvoiceStoreError):
    status_code = 404

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message)


class StorageError(InvoiceStoreError):
    status_code = 500


class PayloadTooLarge(InvoiceStoreError):
    status_code = 413

    def __init__(self, message: str = "Request body too large") -> None:
        super().__init__(message)
