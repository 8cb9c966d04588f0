from typing import Optional
from app.models.base import StoreModel


class Customer(StoreModel):
    party_name: str
    phone: str = ""
    gst_number: Optional[str] = None
    shipping_address: str = ""

    @property
    def gstin(self) -> str:
        return (self.gst_number or "").strip()
