from beanie import Document
from pydantic import EmailStr, Field
from typing import Dict, List
from datetime import datetime
from models.user import Address


class Doctor(Document):
    full_name: str
    email: EmailStr
    hashed_password: str
    image: str
    speciality: str
    degree: str
    experience: str
    about: str
    available: bool = True
    fees: float
    address: Address = Field(default_factory=Address)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    # slot date -> booked slot times on that date
    slots_booked: Dict[str, List[str]] = Field(default_factory=dict)

    class Settings:
        name = "doctors"
