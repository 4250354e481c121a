class InvoiceServerError(Exception):
    """Base class for errors raised by the invoice server"""


class ConfigurationError(InvoiceServerError):
    """Required settings (e.g. Supabase credentials) are missing"""


class StoreUnavailable(InvoiceServerError):
    """The counter store or a repository could not be read or written.

    Always fatal to the enclosing request; the allocator never falls back to
    a cached or guessed value when this is raised.
    """


class DuplicateInvoiceNumber(InvoiceServerError):
    def __init__(self, invoice_number: str):
        super().__init__("Invoice number already exists")
        self.invoice_number = invoice_number
