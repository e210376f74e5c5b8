import asyncio

import pytest
from beanie import PydanticObjectId, init_beanie
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

import config
from auth.auth_handler import UserRole, create_access_token, hash_password
from database import DOCUMENT_MODELS
from main import app
from models.appointment import Appointment
from models.doctor import Doctor
from models.user import Address, User

ADMIN_EMAIL = 'admin@prescripto.com'
ADMIN_PASSWORD = 'admin-password'
PATIENT_PASSWORD = 'patient-password'
DOCTOR_PASSWORD = 'doctor-password'
WEBHOOK_SECRET = 'whsec_test_secret'


def run(coro):
    async def _await():
        return await coro

    return asyncio.run(_await())


@pytest.fixture(autouse=True)
def app_config(monkeypatch: pytest.MonkeyPatch, tmp_path):
    monkeypatch.setattr(config, 'ADMIN_EMAIL', ADMIN_EMAIL)
    monkeypatch.setattr(config, 'ADMIN_PASSWORD', ADMIN_PASSWORD)
    monkeypatch.setattr(config, 'JWT_SECRET_KEY', 'test-secret-key')
    monkeypatch.setattr(config, 'STRIPE_SECRET_KEY', 'sk_test_123')
    monkeypatch.setattr(config, 'STRIPE_WEBHOOK_SECRET', WEBHOOK_SECRET)
    monkeypatch.setattr(config, 'UPLOAD_DIR', str(tmp_path / 'uploads'))
    monkeypatch.setattr(config, 'MAIL_USERNAME', '')
    monkeypatch.setattr(config, 'MAIL_PASSWORD', '')
    return tmp_path / 'uploads'


@pytest.fixture(autouse=True)
def mongo_db(app_config):
    database = AsyncMongoMockClient()['prescripto_test']
    run(init_beanie(database=database, document_models=DOCUMENT_MODELS))
    return database


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def admin_headers() -> dict:
    return {'atoken': create_access_token(ADMIN_EMAIL, UserRole.ADMIN)}


@pytest.fixture
def make_patient(mongo_db):
    def _make_patient(email: str = 'jane@example.com', full_name: str = 'Jane Patient') -> User:
        user = User(full_name=full_name, email=email, hashed_password=hash_password(PATIENT_PASSWORD))
        run(user.insert())
        return user

    return _make_patient


@pytest.fixture
def patient(make_patient) -> User:
    return make_patient()


@pytest.fixture
def patient_headers(patient) -> dict:
    return {'token': create_access_token(str(patient.id), UserRole.PATIENT)}


@pytest.fixture
def make_doctor(mongo_db):
    def _make_doctor(email: str = 'house@example.com', **overrides) -> Doctor:
        fields = {
            'full_name': 'Dr. Gregory House',
            'email': email,
            'hashed_password': hash_password(DOCTOR_PASSWORD),
            'image': 'https://res.cloudinary.com/demo/image/upload/house.png',
            'speciality': 'General physician',
            'degree': 'MBBS',
            'experience': '4 Years',
            'about': 'Diagnostics.',
            'fees': 50.0,
            'address': Address(line1='221B Baker Street', line2='London'),
        }
        fields.update(overrides)
        doctor = Doctor(**fields)
        run(doctor.insert())
        return doctor

    return _make_doctor


@pytest.fixture
def doctor(make_doctor) -> Doctor:
    return make_doctor()


@pytest.fixture
def doctor_headers(doctor) -> dict:
    return {'dtoken': create_access_token(str(doctor.id), UserRole.DOCTOR)}


@pytest.fixture
def make_appointment(mongo_db):
    def _make_appointment(patient: User, doctor: Doctor, slot_date: str = '15_3_2026', slot_time: str = '10:30 AM', **overrides) -> Appointment:
        fields = {
            'user_id': str(patient.id),
            'doc_id': str(doctor.id),
            'slot_date': slot_date,
            'slot_time': slot_time,
            'user_data': {'full_name': patient.full_name, 'email': patient.email},
            'doc_data': {'full_name': doctor.full_name},
            'amount': doctor.fees,
        }
        fields.update(overrides)
        appointment = Appointment(**fields)
        run(appointment.insert())

        doctor.slots_booked.setdefault(slot_date, []).append(slot_time)
        run(doctor.save())
        return appointment

    return _make_appointment


def reload(document_class, document_id):
    return run(document_class.get(PydanticObjectId(str(document_id))))
