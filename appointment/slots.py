from fastapi import HTTPException
from bson import ObjectId
from typing import Dict, List
from models.appointment import Appointment
from models.doctor import Doctor
from utils.serializers import parse_object_id
import logging

logger = logging.getLogger(__name__)


class SlotUnavailableError(Exception):
    pass


def is_slot_booked(slots_booked: Dict[str, List[str]], slot_date: str, slot_time: str) -> bool:
    return slot_time in slots_booked.get(slot_date, [])


def reserve_slot(slots_booked: Dict[str, List[str]], slot_date: str, slot_time: str) -> Dict[str, List[str]]:
    if is_slot_booked(slots_booked, slot_date, slot_time):
        raise SlotUnavailableError(f"{slot_date} {slot_time} is already booked")
    updated = {date: list(times) for date, times in slots_booked.items()}
    updated.setdefault(slot_date, []).append(slot_time)
    return updated


def release_slot(slots_booked: Dict[str, List[str]], slot_date: str, slot_time: str) -> Dict[str, List[str]]:
    updated = {date: list(times) for date, times in slots_booked.items()}
    if slot_date in updated:
        remaining = [time for time in updated[slot_date] if time != slot_time]
        if remaining:
            updated[slot_date] = remaining
        else:
            del updated[slot_date]
    return updated


async def get_appointment_or_404(appointment_id: str) -> Appointment:
    appointment = await Appointment.find_one(Appointment.id == parse_object_id(appointment_id, "appointment"))
    if appointment is None:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return appointment


async def cancel_and_release(appointment: Appointment):
    """Cancel the appointment, then free its slot on the doctor.

    These are two separate writes; a doctor that has disappeared in between
    leaves the appointment cancelled and surfaces as a 404.
    """
    if appointment.cancelled:
        raise HTTPException(status_code=400, detail="Appointment already cancelled")
    if appointment.is_completed:
        raise HTTPException(status_code=400, detail="Completed appointments cannot be cancelled")

    await appointment.cancel()

    doctor = None
    if ObjectId.is_valid(appointment.doc_id):
        doctor = await Doctor.find_one(Doctor.id == ObjectId(appointment.doc_id))
    if doctor is None:
        logger.error(f"Doctor {appointment.doc_id} not found while releasing appointment {appointment.id}")
        raise HTTPException(status_code=404, detail="Doctor not found")

    doctor.slots_booked = release_slot(doctor.slots_booked, appointment.slot_date, appointment.slot_time)
    await doctor.save()
    logger.info(f"Appointment {appointment.id} cancelled, slot {appointment.slot_date} {appointment.slot_time} released")
