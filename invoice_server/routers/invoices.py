from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path
from fastapi.responses import JSONResponse

from ..database import InvoiceRepository, utcnow_iso
from ..dependencies import get_allocator, get_invoice_repository
from ..errors import DuplicateInvoiceNumber
from ..models import (
    APIResponse,
    Invoice,
    InvoiceCreate,
    InvoiceMutationResponse,
    InvoiceUpdate,
    LastNumberResponse,
    NextNumberResponse,
    RebalanceRequest,
    RebalanceResponse,
)
from ..pricing import calculate_totals, rebalance_rates, with_amounts
from ..sequence import InvoiceSequenceAllocator

router = APIRouter(
    prefix="/api/invoices",
    tags=["invoices"]
)


def _priced(invoice: Invoice) -> Invoice:
    """Fill missing line amounts and recompute totals from them, if there are lines"""
    if not invoice.items:
        return invoice
    items = with_amounts(invoice.items)
    totals = calculate_totals(items, invoice.tax_rate, invoice.discount)
    return invoice.model_copy(update={"items": items, **totals.model_dump()})


@router.get("", response_model=List[Invoice])
def list_invoices(invoices: InvoiceRepository = Depends(get_invoice_repository)):
    return invoices.list_invoices()


@router.get("/last-number", response_model=LastNumberResponse)
def get_last_number(allocator: InvoiceSequenceAllocator = Depends(get_allocator)):
    return LastNumberResponse(last_number=allocator.peek_last())


@router.get("/next-number", response_model=NextNumberResponse)
def get_next_number(allocator: InvoiceSequenceAllocator = Depends(get_allocator)):
    return NextNumberResponse(next_number=allocator.peek_next())


@router.get("/export/json")
def export_invoices(invoices: InvoiceRepository = Depends(get_invoice_repository)):
    today = datetime.now(timezone.utc).date().isoformat()
    return JSONResponse(
        content=[invoice.model_dump(mode="json", by_alias=True) for invoice in invoices.list_invoices()],
        headers={"Content-Disposition": f"attachment; filename=invoices_{today}.json"},
    )


@router.post("/rebalance", response_model=RebalanceResponse)
def rebalance(request: RebalanceRequest):
    """Adjust item rates proportionally so the invoice total matches newTotal"""
    items = rebalance_rates(request.items, request.tax_rate, request.discount, request.new_total)
    totals = calculate_totals(items, request.tax_rate, request.discount)
    return RebalanceResponse(items=items, **totals.model_dump())


@router.get("/{invoice_number}", response_model=Invoice)
def get_invoice(
    invoice_number: str = Path(..., description="Invoice number (e.g., INV-42)"),
    invoices: InvoiceRepository = Depends(get_invoice_repository),
):
    invoice = invoices.get_invoice(invoice_number)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice


@router.post("", response_model=InvoiceMutationResponse)
def create_invoice(
    payload: InvoiceCreate,
    invoices: InvoiceRepository = Depends(get_invoice_repository),
    allocator: InvoiceSequenceAllocator = Depends(get_allocator),
):
    invoice = _priced(Invoice(**payload.model_dump(), saved_at=utcnow_iso()))
    try:
        saved = invoices.insert_invoice(invoice)
    except DuplicateInvoiceNumber:
        raise HTTPException(status_code=400, detail="Invoice number already exists")

    # Only after the invoice is durably stored
    allocator.commit(saved.invoice_number)
    return InvoiceMutationResponse(invoice=saved)


@router.put("/{invoice_number}", response_model=InvoiceMutationResponse)
def update_invoice(
    payload: InvoiceUpdate,
    invoice_number: str = Path(..., description="Invoice number to update"),
    invoices: InvoiceRepository = Depends(get_invoice_repository),
):
    existing = invoices.get_invoice(invoice_number)
    if not existing:
        raise HTTPException(status_code=404, detail="Invoice not found")

    data = payload.model_dump()
    data["invoice_number"] = invoice_number
    invoice = _priced(Invoice(
        **data,
        saved_at=existing.saved_at or utcnow_iso(),
        updated_at=utcnow_iso(),
    ))
    updated = invoices.update_invoice(invoice_number, invoice)
    if not updated:
        # Deleted between the lookup and the update
        raise HTTPException(status_code=404, detail="Invoice not found")
    return InvoiceMutationResponse(invoice=updated)


@router.delete("/{invoice_number}", response_model=APIResponse)
def delete_invoice(
    invoice_number: str = Path(..., description="Invoice number to delete"),
    invoices: InvoiceRepository = Depends(get_invoice_repository),
):
    # The counter is left alone; numbers are never reused
    if not invoices.delete_invoice(invoice_number):
        raise HTTPException(status_code=404, detail="Invoice not found")
    return APIResponse(success=True, message=f"Invoice {invoice_number} deleted")
