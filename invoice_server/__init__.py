"""
Invoice Server Package

This package provides a FastAPI server for invoice management: invoices,
predefined line items and companies stored in Supabase, plus the invoice
sequence allocator that keeps invoice numbering monotonic.
"""

__version__ = "1.0.0"
__author__ = "Invoice Server Team"
