from passlib.context import CryptContext
from fastapi import Header, HTTPException
from jose import JWTError, jwt
from bson import ObjectId
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from models.user import User
from models.doctor import Doctor
import logging
import config

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

NOT_AUTHORIZED = "Not Authorized Login Again"


class UserRole(str, Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(subject: str, role: UserRole, expires_minutes: Optional[int] = None) -> str:
    expire = datetime.utcnow() + timedelta(minutes=expires_minutes or config.JWT_EXPIRES_MINUTES)
    to_encode = {"sub": subject, "role": role.value, "exp": expire}
    return jwt.encode(to_encode, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])


def _subject_for_role(token: Optional[str], role: UserRole) -> str:
    if not token:
        raise HTTPException(status_code=401, detail=NOT_AUTHORIZED)
    try:
        payload = decode_access_token(token)
    except JWTError:
        logger.warning(f"Rejected invalid {role.value} token")
        raise HTTPException(status_code=401, detail=NOT_AUTHORIZED)

    subject = payload.get("sub")
    if not subject or payload.get("role") != role.value:
        raise HTTPException(status_code=401, detail=NOT_AUTHORIZED)
    return subject


async def get_current_admin(atoken: Optional[str] = Header(None)) -> str:
    email = _subject_for_role(atoken, UserRole.ADMIN)
    if not config.ADMIN_EMAIL or email != config.ADMIN_EMAIL:
        raise HTTPException(status_code=401, detail=NOT_AUTHORIZED)
    return email


async def get_current_doctor(dtoken: Optional[str] = Header(None)) -> Doctor:
    doc_id = _subject_for_role(dtoken, UserRole.DOCTOR)
    if not ObjectId.is_valid(doc_id):
        raise HTTPException(status_code=401, detail=NOT_AUTHORIZED)
    doctor = await Doctor.find_one(Doctor.id == ObjectId(doc_id))
    if doctor is None:
        raise HTTPException(status_code=401, detail=NOT_AUTHORIZED)
    return doctor


async def get_current_user(token: Optional[str] = Header(None)) -> User:
    user_id = _subject_for_role(token, UserRole.PATIENT)
    if not ObjectId.is_valid(user_id):
        raise HTTPException(status_code=401, detail=NOT_AUTHORIZED)
    user = await User.find_one(User.id == ObjectId(user_id))
    if user is None:
        raise HTTPException(status_code=401, detail=NOT_AUTHORIZED)
    return user
