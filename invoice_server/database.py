import functools
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import create_client, Client

from .config import Settings, get_settings
from .errors import ConfigurationError, DuplicateInvoiceNumber, InvoiceServerError, StoreUnavailable
from .models import Company, Invoice, Item
from .sequence import CounterStore, InvoiceNumberSource

logger = logging.getLogger(__name__)

INVOICES_TABLE = "invoices"
ITEMS_TABLE = "items"
COMPANIES_TABLE = "companies"
COUNTERS_TABLE = "invoice_counters"
ADVANCE_COUNTER_FN = "advance_invoice_counter"
SUGGEST_COMPANIES_FN = "suggest_companies"

UNIQUE_VIOLATION = "23505"


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def create_supabase_client(settings: Optional[Settings] = None) -> Client:
    settings = settings or get_settings()
    if not settings.supabase_url or not settings.supabase_key:
        raise ConfigurationError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
    return create_client(settings.supabase_url, settings.supabase_key)


def translate_errors(action: str):
    """Re-raise PostgREST and transport failures as StoreUnavailable"""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except InvoiceServerError:
                raise
            except APIError as e:
                logger.error("Error %s: %s (code %s)", action, e.message, e.code)
                raise StoreUnavailable(f"Error {action}: {e.message}") from e
            except httpx.HTTPError as e:
                logger.error("Error %s: %s", action, e)
                raise StoreUnavailable(f"Error {action}: {e}") from e
        return wrapper
    return decorator


class SupabaseCounterStore(CounterStore):
    """Counters in the invoice_counters table.

    advance() goes through a Postgres function (see supabase/schema.sql) doing
    INSERT ... ON CONFLICT DO UPDATE SET last_number = GREATEST(...), so the
    compare-and-advance happens in one statement.
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase

    @translate_errors("reading invoice counter")
    def get(self, key: str) -> Optional[int]:
        result = self.supabase.table(COUNTERS_TABLE).select("last_number").eq("id", key).execute()
        if not result.data:
            return None
        return int(result.data[0]["last_number"])

    @translate_errors("advancing invoice counter")
    def advance(self, key: str, value: int) -> int:
        result = self.supabase.rpc(ADVANCE_COUNTER_FN, {"counter_id": key, "candidate": value}).execute()
        # Scalar function: PostgREST returns the bare bigint
        return int(result.data)


class InvoiceRepository(InvoiceNumberSource):
    @abstractmethod
    def list_invoices(self) -> List[Invoice]:
        """All invoices, newest saved_at first"""

    @abstractmethod
    def get_invoice(self, invoice_number: str) -> Optional[Invoice]:
        ...

    @abstractmethod
    def insert_invoice(self, invoice: Invoice) -> Invoice:
        """Insert; raises DuplicateInvoiceNumber if the number is taken"""

    @abstractmethod
    def update_invoice(self, invoice_number: str, invoice: Invoice) -> Optional[Invoice]:
        ...

    @abstractmethod
    def delete_invoice(self, invoice_number: str) -> bool:
        ...


class SupabaseInvoiceRepository(InvoiceRepository):
    def __init__(self, supabase: Client, page_size: int = 1000):
        if page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")
        self.supabase = supabase
        self.page_size = page_size

    @translate_errors("listing invoices")
    def list_invoices(self) -> List[Invoice]:
        result = self.supabase.table(INVOICES_TABLE).select("*").order("saved_at", desc=True).execute()
        return [self._convert_to_invoice(row) for row in result.data]

    @translate_errors("fetching invoice")
    def get_invoice(self, invoice_number: str) -> Optional[Invoice]:
        result = self.supabase.table(INVOICES_TABLE).select("*").eq("invoice_number", invoice_number).execute()
        if result.data:
            return self._convert_to_invoice(result.data[0])
        return None

    @translate_errors("saving invoice")
    def insert_invoice(self, invoice: Invoice) -> Invoice:
        try:
            result = self.supabase.table(INVOICES_TABLE).insert(self._to_row(invoice)).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise DuplicateInvoiceNumber(invoice.invoice_number) from e
            raise
        return self._convert_to_invoice(result.data[0]) if result.data else invoice

    @translate_errors("updating invoice")
    def update_invoice(self, invoice_number: str, invoice: Invoice) -> Optional[Invoice]:
        row = self._to_row(invoice)
        row.pop("invoice_number", None)
        result = self.supabase.table(INVOICES_TABLE).update(row).eq("invoice_number", invoice_number).execute()
        if result.data:
            return self._convert_to_invoice(result.data[0])
        return None

    @translate_errors("deleting invoice")
    def delete_invoice(self, invoice_number: str) -> bool:
        result = self.supabase.table(INVOICES_TABLE).delete().eq("invoice_number", invoice_number).execute()
        return len(result.data) > 0

    @translate_errors("scanning invoice numbers")
    def iter_invoice_numbers(self) -> List[str]:
        # PostgREST caps rows per response, so page through with range()
        numbers: List[str] = []
        start = 0
        while True:
            result = (
                self.supabase.table(INVOICES_TABLE)
                .select("invoice_number")
                .order("saved_at", desc=True)
                .range(start, start + self.page_size - 1)
                .execute()
            )
            numbers.extend(row["invoice_number"] for row in result.data)
            if len(result.data) < self.page_size:
                return numbers
            start += self.page_size

    def _to_row(self, invoice: Invoice) -> Dict[str, Any]:
        return invoice.model_dump(mode="json")

    def _convert_to_invoice(self, row: Dict[str, Any]) -> Invoice:
        """Convert database row to Invoice model"""
        data = dict(row)
        data["items"] = data.get("items") or []
        data["updated_at"] = data.get("updated_at") or ""
        return Invoice.model_validate(data)


class ItemRepository(ABC):
    @abstractmethod
    def list_items(self) -> List[Item]:
        ...

    @abstractmethod
    def insert_item(self, item: Item) -> Item:
        ...

    @abstractmethod
    def update_item(self, item_id: int, changes: Dict[str, Any]) -> Optional[Item]:
        ...

    @abstractmethod
    def delete_item(self, item_id: int) -> bool:
        ...


class SupabaseItemRepository(ItemRepository):
    def __init__(self, supabase: Client):
        self.supabase = supabase

    @translate_errors("listing items")
    def list_items(self) -> List[Item]:
        result = self.supabase.table(ITEMS_TABLE).select("*").order("id").execute()
        return [Item.model_validate(row) for row in result.data]

    @translate_errors("saving item")
    def insert_item(self, item: Item) -> Item:
        result = self.supabase.table(ITEMS_TABLE).insert(item.model_dump()).execute()
        return Item.model_validate(result.data[0]) if result.data else item

    @translate_errors("updating item")
    def update_item(self, item_id: int, changes: Dict[str, Any]) -> Optional[Item]:
        result = self.supabase.table(ITEMS_TABLE).update(changes).eq("id", item_id).execute()
        if result.data:
            return Item.model_validate(result.data[0])
        return None

    @translate_errors("deleting item")
    def delete_item(self, item_id: int) -> bool:
        result = self.supabase.table(ITEMS_TABLE).delete().eq("id", item_id).execute()
        return len(result.data) > 0


class CompanyRepository(ABC):
    @abstractmethod
    def list_names(self) -> List[str]:
        ...

    @abstractmethod
    def suggest(self, term: str, limit: int = 10) -> List[str]:
        """Names where name or name_hindi contains term, case-insensitively"""

    @abstractmethod
    def exists(self, name: str) -> bool:
        ...

    @abstractmethod
    def insert_company(self, company: Company) -> Company:
        ...


class SupabaseCompanyRepository(CompanyRepository):
    def __init__(self, supabase: Client):
        self.supabase = supabase

    @translate_errors("listing companies")
    def list_names(self) -> List[str]:
        result = self.supabase.table(COMPANIES_TABLE).select("name").execute()
        return [row["name"] for row in result.data]

    @translate_errors("searching companies")
    def suggest(self, term: str, limit: int = 10) -> List[str]:
        # Plain substring match in SQL (see supabase/schema.sql), so the term
        # never passes through PostgREST filter or LIKE pattern syntax
        result = self.supabase.rpc(SUGGEST_COMPANIES_FN, {"term": term, "max_results": limit}).execute()
        return [row["name"] for row in result.data]

    @translate_errors("fetching company")
    def exists(self, name: str) -> bool:
        result = self.supabase.table(COMPANIES_TABLE).select("name").eq("name", name).execute()
        return len(result.data) > 0

    @translate_errors("saving company")
    def insert_company(self, company: Company) -> Company:
        self.supabase.table(COMPANIES_TABLE).insert(company.model_dump()).execute()
        return company
