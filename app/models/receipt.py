from app.models.base import StoreModel
from enum import Enum

class PaymentMode(str, Enum):
    CASH = "Cash"
    UPI = "UPI"
    BANK_TRANSFER = "Bank Transfer"
    CHEQUE = "Cheque"
    CARD = "Card"
    OTHER = "Other"

class Receipt(StoreModel):
    invoice_id: str  # Immutable after creation
    receipt_number: str = ""
    amount_received: float
    payment_mode: PaymentMode = PaymentMode.CASH
    payment_date: str  # YYYY-MM-DD
