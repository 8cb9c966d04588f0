from typing import Optional
from pydantic import BaseModel
from datetime import date
from app.models.receipt import PaymentMode
from app.models.invoice import InvoiceStatus

class ReceiptCreate(BaseModel):
    invoice_id: str
    amount_received: float
    payment_mode: PaymentMode = PaymentMode.CASH
    payment_date: Optional[date] = None  # Defaults to today

class ReceiptUpdate(BaseModel):
    """The linked invoice is immutable; only payment details can change."""
    amount_received: Optional[float] = None
    payment_mode: Optional[PaymentMode] = None
    payment_date: Optional[date] = None

class ReceiptResponse(BaseModel):
    id: str
    receipt_number: str
    invoice_id: str
    invoice_number: Optional[str] = None
    customer_name: Optional[str] = None
    amount_received: float
    payment_mode: PaymentMode
    payment_date: str
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}

class OutstandingResponse(BaseModel):
    invoice_id: str
    total: float
    total_paid: float
    balance: float
    status: InvoiceStatus
