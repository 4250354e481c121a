from typing import List

from .models import InvoiceItem, Totals


def calculate_totals(items: List[InvoiceItem], tax_rate: float, discount: float) -> Totals:
    """Sum of line amounts, plus tax_rate percent, minus discount"""
    subtotal = sum(item.amount for item in items)
    tax = subtotal * tax_rate / 100 if tax_rate else 0
    total = subtotal + tax - (discount or 0)
    return Totals(subtotal=subtotal, tax=tax, total=total)


def with_amounts(items: List[InvoiceItem]) -> List[InvoiceItem]:
    """Fill in rate * quantity on lines that have no amount yet"""
    return [
        item if item.amount else item.model_copy(update={"amount": item.rate * item.quantity})
        for item in items
    ]


def rebalance_rates(
    items: List[InvoiceItem],
    tax_rate: float,
    discount: float,
    new_total: float,
) -> List[InvoiceItem]:
    """Scale item rates so the invoice total comes out at new_total.

    Solves total = subtotal * (1 + tax_rate/100) - discount for the subtotal,
    then applies the same ratio to each priced line. Lines with no rate or
    quantity are left alone. Rates are rounded to paise while amounts are
    scaled unrounded, so the line amounts add up to the target exactly.
    """
    items = with_amounts(items)
    current_subtotal = calculate_totals(items, tax_rate, discount).subtotal
    if current_subtotal == 0 or new_total == 0:
        return items

    tax_fraction = (tax_rate or 0) / 100
    target_subtotal = (new_total + (discount or 0)) / (1 + tax_fraction)
    ratio = target_subtotal / current_subtotal

    rebalanced = []
    for item in items:
        if item.rate > 0 and item.quantity > 0:
            item = item.model_copy(update={
                "rate": round(item.rate * ratio, 2),
                "amount": item.amount * ratio,
                "rate_prefilled": False,
            })
        rebalanced.append(item)
    return rebalanced
