from typing import Optional, List
from pydantic import BaseModel, Field
from datetime import date
from app.models.invoice import InvoiceStatus

class LineItemBase(BaseModel):
    name: str
    quantity: float = 1
    price: float = 0
    gst_percent: float = 18
    hsn_code: Optional[str] = None

    model_config = {"from_attributes": True}

class InvoiceCreate(BaseModel):
    customer_id: str
    items: List[LineItemBase]
    invoice_date: Optional[date] = None  # Defaults to today

class InvoiceUpdate(BaseModel):
    """Edit an invoice. Number and status are never client-editable."""
    customer_id: Optional[str] = None
    items: Optional[List[LineItemBase]] = None
    invoice_date: Optional[date] = None

class InvoiceResponse(BaseModel):
    id: str
    invoice_number: str
    customer_id: str
    customer_name: Optional[str] = None
    items: List[LineItemBase]
    subtotal: float
    gst_amount: float
    cgst_amount: Optional[float] = None
    sgst_amount: Optional[float] = None
    total: float
    status: InvoiceStatus
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}

class NextNumberResponse(BaseModel):
    invoice_number: str = Field(..., description="Preview only; the real number is allocated on save")
