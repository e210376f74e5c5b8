from beanie import Document
from pydantic import BaseModel, EmailStr, Field

import config


class Address(BaseModel):
    line1: str = ""
    line2: str = ""


class User(Document):
    full_name: str
    email: EmailStr
    hashed_password: str
    image: str = Field(default_factory=lambda: config.DEFAULT_USER_IMAGE)
    address: Address = Field(default_factory=Address)
    gender: str = "Not Selected"
    dob: str = "Not Selected"
    phone_number: str = "0000000000"

    class Settings:
        name = "users"
