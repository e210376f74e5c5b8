from beanie import Document
from pydantic import Field
from typing import Any, Dict, Optional
from datetime import datetime


class Appointment(Document):
    user_id: str
    doc_id: str
    slot_date: str  # D_M_YYYY
    slot_time: str
    user_data: Dict[str, Any] = Field(default_factory=dict)
    doc_data: Dict[str, Any] = Field(default_factory=dict)
    amount: float
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None
    cancelled: bool = False
    payment: bool = False
    is_completed: bool = False

    class Settings:
        name = "appointments"  # MongoDB collection name

    async def cancel(self):
        self.cancelled = True
        self.updated_at = datetime.utcnow()
        await self.save()

    async def complete(self):
        self.is_completed = True
        self.updated_at = datetime.utcnow()
        await self.save()

    async def mark_paid(self):
        self.payment = True
        self.updated_at = datetime.utcnow()
        await self.save()
