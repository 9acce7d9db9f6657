from __future__ import annotations

import re
from datetime import date
from typing import Optional

from pydantic import Field, field_validator, model_validator

from schemas.base import CamelModel

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
PAN_PATTERN = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
MIN_AGE_YEARS = 18


class AddressSchema(CamelModel):
    line1: str = Field(..., min_length=1)
    line2: Optional[str] = None
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    pincode: str = Field(..., pattern=r"^[0-9]{6}$")


def _age_on(dob: date, today: date) -> int:
    return today.year - dob.year - ((today.month, today.day) < (dob.month, dob.day))


class RegisterRequest(CamelModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=8, max_length=30)
    confirm_password: str
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    phone_number: str = Field(..., pattern=r"^[6-9]\d{9}$")
    date_of_birth: date
    pan_number: str
    aadhaar_number: str = Field(..., pattern=r"^[0-9]{12}$")
    address: AddressSchema

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("pan_number")
    @classmethod
    def _valid_pan(cls, v: str) -> str:
        v = v.strip().upper()
        if not PAN_PATTERN.match(v):
            raise ValueError("Invalid PAN format")
        return v

    @field_validator("date_of_birth")
    @classmethod
    def _adult(cls, v: date) -> date:
        today = date.today()
        if v > today or v < date(1900, 1, 1):
            raise ValueError("Invalid date of birth")
        if _age_on(v, today) < MIN_AGE_YEARS:
            raise ValueError("You must be at least 18 years old")
        return v

    @model_validator(mode="after")
    def _passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(CamelModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.strip().lower()


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class ChangePasswordRequest(CamelModel):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=30)
    confirm_new_password: str

    @model_validator(mode="after")
    def _passwords_match(self) -> "ChangePasswordRequest":
        if self.new_password != self.confirm_new_password:
            raise ValueError("Passwords do not match")
        return self
