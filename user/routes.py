from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, UploadFile
from typing import Optional
from auth.auth_handler import UserRole, create_access_token, get_current_user, hash_password, verify_password
from appointment.slots import SlotUnavailableError, cancel_and_release, get_appointment_or_404, reserve_slot
from models.appointment import Appointment
from models.doctor import Doctor
from models.user import User
from schemas.user import AppointmentAction, AppointmentBooking, LoginRequest, UserRegister, normalize_email
from utils.email_utils import send_appointment_update_email
from utils.forms import parse_address
from utils.serializers import parse_object_id, to_public_dict, to_public_list
from utils.uploads import store_image
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user")


@router.post("/register", status_code=201)
async def register_user(user: UserRegister):
    if not user.name or not user.email or not user.password:
        raise HTTPException(status_code=400, detail="Missing Details")

    email = normalize_email(user.email)
    if email is None:
        raise HTTPException(status_code=400, detail="Enter a valid email")

    if len(user.password) < 8:
        raise HTTPException(status_code=400, detail="Enter a strong password")

    existing_user = await User.find_one(User.email == email)
    if existing_user:
        raise HTTPException(status_code=400, detail="Email already registered")

    new_user = User(
        full_name=user.name,
        email=email,
        hashed_password=hash_password(user.password),
    )
    await new_user.insert()
    logger.info(f"Registered user {new_user.id}")

    token = create_access_token(subject=str(new_user.id), role=UserRole.PATIENT)
    return {"success": True, "token": token}


@router.post("/login")
async def login_user(credentials: LoginRequest):
    email = normalize_email(credentials.email)
    user = await User.find_one(User.email == email) if email else None
    if not user:
        raise HTTPException(status_code=404, detail="User does not exist")
    if not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(subject=str(user.id), role=UserRole.PATIENT)
    return {"success": True, "token": token}


@router.get("/get-profile")
async def get_profile(current_user: User = Depends(get_current_user)):
    return {"success": True, "user_data": to_public_dict(current_user)}


@router.post("/update-profile")
async def update_profile(
    name: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    dob: Optional[str] = Form(None),
    gender: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
):
    if not name or not phone or not dob or not gender:
        raise HTTPException(status_code=400, detail="Data Missing")

    current_user.full_name = name
    current_user.phone_number = phone
    current_user.dob = dob
    current_user.gender = gender
    if address:
        current_user.address = parse_address(address)

    if image is not None:
        current_user.image = await store_image(image, "image")

    await current_user.save()
    return {"success": True, "message": "Profile Updated"}


@router.post("/book-appointment")
async def book_appointment(
    booking: AppointmentBooking,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
):
    doctor = await Doctor.find_one(Doctor.id == parse_object_id(booking.doc_id, "doctor"))
    if doctor is None:
        raise HTTPException(status_code=404, detail="Doctor not found")

    if not doctor.available:
        raise HTTPException(status_code=400, detail="Doctor not available")

    try:
        slots_booked = reserve_slot(doctor.slots_booked, booking.slot_date, booking.slot_time)
    except SlotUnavailableError:
        logger.warning(f"Slot {booking.slot_date} {booking.slot_time} already taken for doctor {doctor.id}")
        raise HTTPException(status_code=409, detail="Slot not available")

    appointment = Appointment(
        user_id=str(current_user.id),
        doc_id=str(doctor.id),
        slot_date=booking.slot_date,
        slot_time=booking.slot_time,
        user_data=to_public_dict(current_user),
        doc_data=to_public_dict(doctor, exclude={"slots_booked"}),
        amount=doctor.fees,
    )
    await appointment.insert()

    # Save new slots data in the doctor's record
    doctor.slots_booked = slots_booked
    await doctor.save()
    logger.info(f"Appointment {appointment.id} booked with doctor {doctor.id}")

    background_tasks.add_task(
        send_appointment_update_email, current_user.email, "Appointment Booked", appointment
    )
    return {"success": True, "message": "Appointment Booked", "appointment_id": str(appointment.id)}


@router.get("/appointments")
async def list_appointment(current_user: User = Depends(get_current_user)):
    appointments = await Appointment.find(Appointment.user_id == str(current_user.id)).to_list()
    return {"success": True, "appointments": to_public_list(appointments)}


@router.post("/cancel-appointment")
async def cancel_appointment(
    request: AppointmentAction,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
):
    appointment = await get_appointment_or_404(request.appointment_id)

    # Verify that the logged-in user is the owner of the appointment
    if appointment.user_id != str(current_user.id):
        logger.warning(f"User {current_user.id} tried to cancel appointment {appointment.id}")
        raise HTTPException(status_code=403, detail="Unauthorized action")

    await cancel_and_release(appointment)

    background_tasks.add_task(
        send_appointment_update_email, current_user.email, "Appointment Cancelled", appointment
    )
    return {"success": True, "message": "Appointment Cancelled"}
