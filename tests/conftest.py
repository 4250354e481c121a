"""Test configuration: in-memory stores injected in place of Supabase."""
import os
import threading

import pytest
from fastapi.testclient import TestClient

# Provide default settings so tests can run without a Supabase project.
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")

from invoice_server import dependencies  # noqa: E402
from invoice_server.database import CompanyRepository, InvoiceRepository, ItemRepository  # noqa: E402
from invoice_server.errors import DuplicateInvoiceNumber, StoreUnavailable  # noqa: E402
from invoice_server.main import app  # noqa: E402
from invoice_server.sequence import CounterStore  # noqa: E402


class InMemoryCounterStore(CounterStore):
    def __init__(self, initial=None):
        self.values = dict(initial or {})
        self.lock = threading.Lock()
        self.reads = 0

    def get(self, key):
        self.reads += 1
        return self.values.get(key)

    def advance(self, key, value):
        with self.lock:
            current = self.values.get(key)
            if current is None or value > current:
                self.values[key] = value
            return self.values[key]


class UnavailableCounterStore(CounterStore):
    def get(self, key):
        raise StoreUnavailable("Error reading invoice counter: connection refused")

    def advance(self, key, value):
        raise StoreUnavailable("Error advancing invoice counter: connection refused")


class InMemoryInvoiceRepository(InvoiceRepository):
    def __init__(self, invoices=()):
        self.rows = {}
        for invoice in invoices:
            self.rows[invoice.invoice_number] = invoice

    def list_invoices(self):
        return sorted(self.rows.values(), key=lambda inv: inv.saved_at, reverse=True)

    def get_invoice(self, invoice_number):
        return self.rows.get(invoice_number)

    def insert_invoice(self, invoice):
        if invoice.invoice_number in self.rows:
            raise DuplicateInvoiceNumber(invoice.invoice_number)
        self.rows[invoice.invoice_number] = invoice
        return invoice

    def update_invoice(self, invoice_number, invoice):
        if invoice_number not in self.rows:
            return None
        self.rows[invoice_number] = invoice
        return invoice

    def delete_invoice(self, invoice_number):
        return self.rows.pop(invoice_number, None) is not None

    def iter_invoice_numbers(self):
        return [inv.invoice_number for inv in self.list_invoices()]


class InMemoryItemRepository(ItemRepository):
    def __init__(self):
        self.rows = {}

    def list_items(self):
        return [self.rows[key] for key in sorted(self.rows)]

    def insert_item(self, item):
        self.rows[item.id] = item
        return item

    def update_item(self, item_id, changes):
        if item_id not in self.rows:
            return None
        self.rows[item_id] = self.rows[item_id].model_copy(update=changes)
        return self.rows[item_id]

    def delete_item(self, item_id):
        return self.rows.pop(item_id, None) is not None


class InMemoryCompanyRepository(CompanyRepository):
    def __init__(self):
        self.rows = []

    def list_names(self):
        return [c.name for c in self.rows]

    def suggest(self, term, limit=10):
        term = term.lower()
        matches = [
            c.name for c in self.rows
            if term in c.name.lower() or term in c.name_hindi.lower()
        ]
        return matches[:limit]

    def exists(self, name):
        return any(c.name == name for c in self.rows)

    def insert_company(self, company):
        self.rows.append(company)
        return company


@pytest.fixture
def counters():
    return InMemoryCounterStore()


@pytest.fixture
def invoices():
    return InMemoryInvoiceRepository()


@pytest.fixture
def items():
    return InMemoryItemRepository()


@pytest.fixture
def companies():
    return InMemoryCompanyRepository()


@pytest.fixture
def client(counters, invoices, items, companies):
    app.dependency_overrides[dependencies.get_counter_store] = lambda: counters
    app.dependency_overrides[dependencies.get_invoice_repository] = lambda: invoices
    app.dependency_overrides[dependencies.get_item_repository] = lambda: items
    app.dependency_overrides[dependencies.get_company_repository] = lambda: companies
    yield TestClient(app)
    app.dependency_overrides.clear()
