from typing import Optional, List
from pydantic import BaseModel
from app.models.base import StoreModel
from enum import Enum

GST_RATES = (0, 5, 12, 18, 28)

class InvoiceStatus(str, Enum):
    PENDING = "Pending"
    PARTIALLY_PAID = "Partially Paid"
    PAID = "Paid"

# Embedded in Invoice, not a separate document
class LineItem(BaseModel):
    name: str
    quantity: float
    price: float
    gst_percent: float = 18
    hsn_code: Optional[str] = None  # HSN for goods, SAC for services

    def line_value(self) -> float:
        return self.quantity * self.price

    def line_gst(self) -> float:
        return self.line_value() * (self.gst_percent / 100)

    def has_hsn(self) -> bool:
        return bool(self.hsn_code and self.hsn_code.strip())

class Invoice(StoreModel):
    customer_id: str
    invoice_number: str = ""
    items: List[LineItem] = []

    # Rupee amounts; cgst/sgst are absent on invoices created before the split was stored
    subtotal: float = 0.0
    gst_amount: float = 0.0
    cgst_amount: Optional[float] = None
    sgst_amount: Optional[float] = None
    total: float = 0.0

    # Derived from receipts; written only by LedgerService.reconcile
    status: InvoiceStatus = InvoiceStatus.PENDING
