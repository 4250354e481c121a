from functools import lru_cache

from fastapi import Depends
from supabase import Client

from .config import get_settings
from .database import (
    CompanyRepository,
    InvoiceRepository,
    ItemRepository,
    SupabaseCompanyRepository,
    SupabaseCounterStore,
    SupabaseInvoiceRepository,
    SupabaseItemRepository,
    create_supabase_client,
)
from .sequence import CounterStore, InvoiceSequenceAllocator


@lru_cache
def get_supabase() -> Client:
    return create_supabase_client(get_settings())


def get_invoice_repository(supabase: Client = Depends(get_supabase)) -> InvoiceRepository:
    return SupabaseInvoiceRepository(supabase, page_size=get_settings().scan_page_size)


def get_counter_store(supabase: Client = Depends(get_supabase)) -> CounterStore:
    return SupabaseCounterStore(supabase)


def get_item_repository(supabase: Client = Depends(get_supabase)) -> ItemRepository:
    return SupabaseItemRepository(supabase)


def get_company_repository(supabase: Client = Depends(get_supabase)) -> CompanyRepository:
    return SupabaseCompanyRepository(supabase)


def get_allocator(
    counters: CounterStore = Depends(get_counter_store),
    invoices: InvoiceRepository = Depends(get_invoice_repository),
) -> InvoiceSequenceAllocator:
    return InvoiceSequenceAllocator(counters, invoices)
