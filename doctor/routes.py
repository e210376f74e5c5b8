from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from auth.auth_handler import UserRole, create_access_token, get_current_doctor, verify_password
from appointment.slots import cancel_and_release, get_appointment_or_404
from models.appointment import Appointment
from models.doctor import Doctor
from schemas.doctor import DoctorProfileUpdate
from schemas.user import AppointmentAction, LoginRequest, normalize_email
from utils.email_utils import send_appointment_update_email
from utils.serializers import to_public_dict, to_public_list
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/doctor")


@router.get("/list")
async def doctor_list():
    doctors = await Doctor.find_all().to_list()
    return {"success": True, "doctors": to_public_list(doctors, exclude={"email"})}


@router.post("/login")
async def login_doctor(credentials: LoginRequest):
    email = normalize_email(credentials.email)
    doctor = await Doctor.find_one(Doctor.email == email) if email else None
    if not doctor or not verify_password(credentials.password, doctor.hashed_password):
        logger.warning(f"Failed doctor login for {credentials.email}")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(subject=str(doctor.id), role=UserRole.DOCTOR)
    return {"success": True, "token": token}


@router.get("/appointments")
async def appointments_doctor(current_doctor: Doctor = Depends(get_current_doctor)):
    appointments = await Appointment.find(Appointment.doc_id == str(current_doctor.id)).to_list()
    return {"success": True, "appointments": to_public_list(appointments)}


@router.post("/complete-appointment")
async def appointment_complete(
    request: AppointmentAction, current_doctor: Doctor = Depends(get_current_doctor)
):
    appointment = await get_appointment_or_404(request.appointment_id)
    if appointment.doc_id != str(current_doctor.id):
        logger.warning(f"Doctor {current_doctor.id} tried to complete appointment {appointment.id}")
        raise HTTPException(status_code=403, detail="Mark Failed")
    if appointment.cancelled:
        raise HTTPException(status_code=400, detail="Cancelled appointments cannot be completed")

    await appointment.complete()
    logger.info(f"Appointment {appointment.id} completed")
    return {"success": True, "message": "Appointment Completed"}


@router.post("/cancel-appointment")
async def appointment_cancel(
    request: AppointmentAction,
    background_tasks: BackgroundTasks,
    current_doctor: Doctor = Depends(get_current_doctor),
):
    appointment = await get_appointment_or_404(request.appointment_id)
    if appointment.doc_id != str(current_doctor.id):
        logger.warning(f"Doctor {current_doctor.id} tried to cancel appointment {appointment.id}")
        raise HTTPException(status_code=403, detail="Cancellation Failed")

    await cancel_and_release(appointment)

    patient_email = appointment.user_data.get("email")
    if patient_email:
        background_tasks.add_task(
            send_appointment_update_email, patient_email, "Appointment Cancelled by Doctor", appointment
        )
    return {"success": True, "message": "Appointment Cancelled"}


@router.get("/dashboard")
async def doctor_dashboard(current_doctor: Doctor = Depends(get_current_doctor)):
    appointments = await Appointment.find(Appointment.doc_id == str(current_doctor.id)).to_list()

    earnings = sum(item.amount for item in appointments if item.is_completed or item.payment)
    patients = {item.user_id for item in appointments}

    dash_data = {
        "earnings": earnings,
        "appointments": len(appointments),
        "patients": len(patients),
        "latest_appointments": to_public_list(list(reversed(appointments))[:5]),
    }
    return {"success": True, "dash_data": dash_data}


@router.get("/profile")
async def doctor_profile(current_doctor: Doctor = Depends(get_current_doctor)):
    return {"success": True, "profile_data": to_public_dict(current_doctor)}


@router.post("/update-profile")
async def update_doctor_profile(
    update_data: DoctorProfileUpdate, current_doctor: Doctor = Depends(get_current_doctor)
):
    if update_data.fees is not None:
        current_doctor.fees = update_data.fees
    if update_data.address is not None:
        current_doctor.address = update_data.address
    if update_data.available is not None:
        current_doctor.available = update_data.available

    await current_doctor.save()
    return {"success": True, "message": "Profile Updated"}
