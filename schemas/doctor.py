from pydantic import BaseModel, Field
from typing import Optional
from models.user import Address


class AvailabilityChange(BaseModel):
    doc_id: str


class DoctorProfileUpdate(BaseModel):
    fees: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    address: Optional[Address] = None
    available: Optional[bool] = None
