from pydantic import BaseModel, Field, field_validator
from email_validator import EmailNotValidError, validate_email
from datetime import datetime
from typing import Optional


def normalize_email(email: str) -> Optional[str]:
    """Return the canonical form stored on documents, or None when invalid."""
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError:
        return None


class UserRegister(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class AppointmentBooking(BaseModel):
    doc_id: str
    slot_date: str  # D_M_YYYY
    slot_time: str = Field(min_length=1)

    @field_validator('slot_date')
    @classmethod
    def validate_slot_date(cls, v):
        try:
            datetime.strptime(v, "%d_%m_%Y")
        except ValueError:
            raise ValueError("slot_date must be a real date in D_M_YYYY format")
        return v


class AppointmentAction(BaseModel):
    appointment_id: str
