"""Invoice and receipt validation utilities."""
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional
from app.core.errors import ValidationError
from app.models.invoice import GST_RATES, LineItem

# Float tolerance for rupee comparisons
EPS = 0.01
PAISA = Decimal("0.01")


def round2(value: Optional[float]) -> float:
    """Round a rupee amount to paise, halves away from zero; missing values count as zero."""
    return float(Decimal(str(value or 0)).quantize(PAISA, rounding=ROUND_HALF_UP))


def validate_line_items(items: List[LineItem]) -> None:
    """
    Validate invoice line items.

    Rules:
    - at least one item
    - name must be non-blank
    - quantity must be positive
    - price must be non-negative
    - gst_percent must be one of the GST slabs
    """
    if not items:
        raise ValidationError("Please add at least one line item.")

    for item in items:
        if not item.name or not item.name.strip():
            raise ValidationError("Line item name is required")

        if item.quantity <= 0:
            raise ValidationError(
                f"Item '{item.name}' has non-positive quantity: {item.quantity}"
            )

        if item.price < 0:
            raise ValidationError(
                f"Item '{item.name}' has negative price: {item.price}"
            )

        if item.gst_percent not in GST_RATES:
            raise ValidationError(
                f"Item '{item.name}' has invalid GST rate: {item.gst_percent}%"
            )


def validate_receipt_amount(amount: float, outstanding: Optional[float] = None) -> None:
    """
    Validate a payment amount.

    When ``outstanding`` is given (new receipts), the amount may not exceed
    the invoice's pending balance beyond the rounding tolerance.
    """
    if amount is None or amount <= 0:
        raise ValidationError("Amount must be greater than 0")

    if outstanding is not None and amount > outstanding + EPS:
        raise ValidationError(
            f"Amount cannot exceed pending balance of {outstanding:.2f}"
        )


def calculate_subtotal(items: List[LineItem]) -> float:
    """Sum of quantity x price over all items."""
    return sum(item.line_value() for item in items)


def calculate_gst(items: List[LineItem]) -> float:
    """Sum of per-line GST."""
    return sum(item.line_gst() for item in items)


def calculate_totals(items: List[LineItem]) -> Dict[str, float]:
    """
    Compute invoice amounts from line items.

    cgst/sgst are stored as exact halves of the rounded GST so the stored
    split always adds back up to gst_amount.
    """
    subtotal = round2(calculate_subtotal(items))
    gst_amount = round2(calculate_gst(items))
    cgst_amount = round2(gst_amount / 2)
    sgst_amount = round2(gst_amount - cgst_amount)
    return {
        "subtotal": subtotal,
        "gst_amount": gst_amount,
        "cgst_amount": cgst_amount,
        "sgst_amount": sgst_amount,
        "total": round2(subtotal + gst_amount),
    }
