from typing import Optional
from pydantic import BaseModel, ConfigDict


class BusinessProfile(BaseModel):
    """Seller details printed on returns; one per business account."""
    business_name: str = ""
    gst_number: Optional[str] = None
    upi_id: Optional[str] = None
    phone: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def gstin(self) -> str:
        return (self.gst_number or "").strip()
