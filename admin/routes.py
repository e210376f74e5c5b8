from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, UploadFile
from typing import Optional
from auth.auth_handler import UserRole, create_access_token, get_current_admin, hash_password
from appointment.slots import cancel_and_release, get_appointment_or_404
from models.appointment import Appointment
from models.doctor import Doctor
from models.user import User
from schemas.doctor import AvailabilityChange
from schemas.user import AppointmentAction, LoginRequest, normalize_email
from utils.email_utils import send_appointment_update_email
from utils.forms import clean_quotes, parse_address
from utils.serializers import parse_object_id, to_public_list
from utils.uploads import store_image
import logging
import math
import config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin")


@router.post("/login")
async def login_admin(credentials: LoginRequest):
    admin_email = normalize_email(config.ADMIN_EMAIL) if config.ADMIN_EMAIL else None
    if (
        admin_email is None
        or normalize_email(credentials.email) != admin_email
        or credentials.password != config.ADMIN_PASSWORD
    ):
        logger.warning(f"Failed admin login for {credentials.email}")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(subject=config.ADMIN_EMAIL, role=UserRole.ADMIN)
    return {"success": True, "token": token}


@router.post("/add-doctor", status_code=201)
async def add_doctor(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    speciality: Optional[str] = Form(None),
    degree: Optional[str] = Form(None),
    experience: Optional[str] = Form(None),
    about: Optional[str] = Form(None),
    fees: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    current_admin: str = Depends(get_current_admin),
):
    if image is None:
        raise HTTPException(status_code=400, detail="Image file is required")

    fields = {
        "name": clean_quotes(name),
        "email": clean_quotes(email),
        "password": clean_quotes(password),
        "speciality": clean_quotes(speciality),
        "degree": clean_quotes(degree),
        "experience": clean_quotes(experience),
        "about": clean_quotes(about),
        "fees": clean_quotes(fees),
    }
    missing = [key for key, value in fields.items() if not value]
    if missing or not address:
        logger.warning(f"Add doctor rejected, missing fields: {missing or ['address']}")
        raise HTTPException(status_code=400, detail="Missing Details")

    email = normalize_email(fields["email"])
    if email is None:
        raise HTTPException(status_code=400, detail="Please enter a valid email")

    if len(fields["password"]) < 8:
        raise HTTPException(status_code=400, detail="Password must be at least 8 characters long")

    try:
        doctor_fees = float(fields["fees"])
    except ValueError:
        raise HTTPException(status_code=400, detail="Fees must be a number")
    if not math.isfinite(doctor_fees) or doctor_fees < 0:
        raise HTTPException(status_code=400, detail="Fees must be a number")

    parsed_address = parse_address(address)

    existing_doctor = await Doctor.find_one(Doctor.email == email)
    if existing_doctor:
        raise HTTPException(status_code=400, detail="Doctor with this email already exists")

    image_url = await store_image(image, "image")

    doctor = Doctor(
        full_name=fields["name"],
        email=email,
        hashed_password=hash_password(fields["password"]),
        image=image_url,
        speciality=fields["speciality"],
        degree=fields["degree"],
        experience=fields["experience"],
        about=fields["about"],
        fees=doctor_fees,
        address=parsed_address,
    )
    await doctor.insert()
    logger.info(f"Doctor {doctor.id} added by {current_admin}")

    return {
        "success": True,
        "message": "Doctor added successfully",
        "doctor": {
            "_id": str(doctor.id),
            "full_name": doctor.full_name,
            "email": doctor.email,
            "speciality": doctor.speciality,
            "image": doctor.image,
        },
    }


@router.api_route("/all-doctors", methods=["GET", "POST"])
async def all_doctors(current_admin: str = Depends(get_current_admin)):
    doctors = await Doctor.find_all().to_list()
    return {"success": True, "doctors": to_public_list(doctors)}


@router.post("/change-availability")
async def change_availability(
    request: AvailabilityChange, current_admin: str = Depends(get_current_admin)
):
    doctor = await Doctor.find_one(Doctor.id == parse_object_id(request.doc_id, "doctor"))
    if doctor is None:
        raise HTTPException(status_code=404, detail="Doctor not found")

    doctor.available = not doctor.available
    await doctor.save()
    logger.info(f"Doctor {doctor.id} availability set to {doctor.available}")
    return {"success": True, "message": "Availability Changed", "available": doctor.available}


@router.get("/appointments")
async def appointments_admin(current_admin: str = Depends(get_current_admin)):
    appointments = await Appointment.find_all().to_list()
    return {"success": True, "appointments": to_public_list(appointments)}


@router.post("/cancel-appointment")
async def appointment_cancel(
    request: AppointmentAction,
    background_tasks: BackgroundTasks,
    current_admin: str = Depends(get_current_admin),
):
    appointment = await get_appointment_or_404(request.appointment_id)
    await cancel_and_release(appointment)

    patient_email = appointment.user_data.get("email")
    if patient_email:
        background_tasks.add_task(
            send_appointment_update_email, patient_email, "Appointment Cancelled", appointment
        )
    return {"success": True, "message": "Appointment Cancelled"}


@router.get("/dashboard")
async def admin_dashboard(current_admin: str = Depends(get_current_admin)):
    latest_appointments = await Appointment.find_all().sort(-Appointment.id).limit(5).to_list()

    dash_data = {
        "doctors": await Doctor.find_all().count(),
        "appointments": await Appointment.find_all().count(),
        "patients": await User.find_all().count(),
        "latest_appointments": to_public_list(latest_appointments),
    }
    return {"success": True, "dash_data": dash_data}
