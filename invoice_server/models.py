from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional, Any


class CamelModel(BaseModel):
    """Snake_case in Python and the database, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InvoiceItem(CamelModel):
    name: str = ""
    rate: float = 0
    quantity: float = 0
    amount: float = 0
    rate_prefilled: bool = False


class InvoiceCreate(CamelModel):
    invoice_number: str = Field(..., min_length=1)
    invoice_date: str
    from_name: str = ""
    from_name_eng: str = ""
    from_address: str = ""
    to_name: str = ""
    to_name_hindi: str = ""
    to_address: str = ""
    to_vehicle: str = ""
    items: List[InvoiceItem] = []
    subtotal: float = 0
    tax_rate: float = 0
    tax: float = 0
    discount: float = 0
    total: float = 0


class InvoiceUpdate(InvoiceCreate):
    # The path parameter identifies the invoice; a number in the body is ignored
    invoice_number: Optional[str] = None


class Invoice(InvoiceCreate):
    saved_at: str
    updated_at: str = ""


class InvoiceMutationResponse(BaseModel):
    success: bool = True
    invoice: Invoice


class LastNumberResponse(CamelModel):
    last_number: int


class NextNumberResponse(CamelModel):
    next_number: int


class RebalanceRequest(CamelModel):
    items: List[InvoiceItem]
    tax_rate: float = 0
    discount: float = 0
    new_total: float


class Totals(CamelModel):
    subtotal: float
    tax: float
    total: float


class RebalanceResponse(Totals):
    items: List[InvoiceItem]


class Item(BaseModel):
    id: int
    name: str
    rate: float = 0


class ItemCreate(BaseModel):
    id: Optional[int] = None
    name: str = Field(..., min_length=1)
    rate: float = 0


class ItemUpdate(BaseModel):
    name: Optional[str] = None
    rate: Optional[float] = None


class ItemMutationResponse(BaseModel):
    success: bool = True
    item: Item


class Company(CamelModel):
    name: str
    name_hindi: str = ""
    address: str = ""
    vehicle: str = ""


class CompanyCreate(BaseModel):
    name: str = Field("", validation_alias=AliasChoices("name", "value"))


class CompaniesResponse(BaseModel):
    success: bool = True
    companies: Optional[List[str]] = None
    message: Optional[str] = None


class APIResponse(BaseModel):
    success: bool
    message: str
    data: Optional[Any] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: Optional[str] = None
