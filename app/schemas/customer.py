from pydantic import BaseModel, Field, StringConstraints
from typing import Annotated, Optional

# Surrounding whitespace is dropped before the length check
GSTIN = Annotated[str, StringConstraints(strip_whitespace=True, to_upper=True, max_length=15)]


class CustomerBase(BaseModel):
    party_name: str = Field(..., min_length=1, max_length=200)
    phone: str = ""
    gst_number: Optional[GSTIN] = None
    shipping_address: str = ""

class CustomerCreate(CustomerBase):
    pass

class CustomerUpdate(BaseModel):
    """All fields optional; only provided fields are merged."""
    party_name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = None
    gst_number: Optional[GSTIN] = None
    shipping_address: Optional[str] = None

class CustomerResponse(CustomerBase):
    id: str
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}
