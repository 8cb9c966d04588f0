from typing import Optional
from pydantic import BaseModel, Field
from app.schemas.customer import GSTIN


class BusinessProfileUpdate(BaseModel):
    business_name: str = Field(..., min_length=1, max_length=200)
    gst_number: Optional[GSTIN] = None
    upi_id: Optional[str] = None
    phone: Optional[str] = None


class BusinessProfileResponse(BaseModel):
    business_name: str
    gst_number: Optional[str] = None
    upi_id: Optional[str] = None
    phone: Optional[str] = None
    state_name: Optional[str] = None

    model_config = {"from_attributes": True}
