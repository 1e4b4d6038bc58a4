"""Pydantic models for request validation.

Every write endpoint parses its body through one of these before any
database access; validation failures surface as app.errors.ValidationError.
"""
import re
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from app.errors import ValidationError

# Unpadded wire formats; the ledger matches them as opaque strings, so
# 01_04_2025 or 09:30 would name a different slot than 1_4_2025 or 9:30
SLOT_DATE_PATTERN = re.compile(r'^(?:[1-9]|[12]\d|3[01])_(?:[1-9]|1[0-2])_\d{4}$')
SLOT_TIME_PATTERN = re.compile(r'^(?:\d|1\d|2[0-3]):[0-5]\d$')

MIN_PASSWORD_LENGTH = 8


class RequestSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, coerce_numbers_to_str=True, extra='ignore')


class RegisterRequest(RequestSchema):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator('password')
    @classmethod
    def password_strength(cls, value):
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError('Please enter a strong password')
        return value


class LoginRequest(RequestSchema):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class VerifyEmailRequest(RequestSchema):
    user_id: int = Field(..., alias='userId')
    otp: str = Field(..., min_length=1)


class ResendOtpRequest(RequestSchema):
    user_id: int = Field(..., alias='userId')


class AddressSchema(RequestSchema):
    line1: str = ''
    line2: str = ''


class UpdateProfileRequest(RequestSchema):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=20)
    dob: str = Field(..., min_length=1)
    gender: str = Field(..., min_length=1)
    address: Optional[AddressSchema] = None
    image: Optional[str] = None


class BookAppointmentRequest(RequestSchema):
    doc_id: int = Field(..., alias='docId')
    slot_date: str = Field(..., alias='slotDate', description="Date-key, e.g. 1_4_2025")
    slot_time: str = Field(..., alias='slotTime', description="Time-string, e.g. 9:30")

    @field_validator('slot_date')
    @classmethod
    def slot_date_format(cls, value):
        if not SLOT_DATE_PATTERN.match(value):
            raise ValueError('slotDate must look like 1_4_2025')
        return value

    @field_validator('slot_time')
    @classmethod
    def slot_time_format(cls, value):
        if not SLOT_TIME_PATTERN.match(value):
            raise ValueError('slotTime must look like 9:30')
        return value


class AppointmentActionRequest(RequestSchema):
    appointment_id: int = Field(..., alias='appointmentId')


class VerifyStripeRequest(RequestSchema):
    appointment_id: int = Field(..., alias='appointmentId')
    success: Union[bool, str] = Field(..., description="'true' when the checkout redirected to success_url")


class VerifyRazorpayRequest(RequestSchema):
    razorpay_order_id: str = Field(..., min_length=1)


class AddDoctorRequest(RequestSchema):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    speciality: str = Field(..., min_length=1)
    degree: str = Field(..., min_length=1)
    experience: str = Field(..., min_length=1)
    about: str = Field(..., min_length=1)
    fees: int = Field(..., ge=0)
    address: AddressSchema = Field(default_factory=AddressSchema)
    image: Optional[str] = None


class DoctorIdRequest(RequestSchema):
    doc_id: int = Field(..., alias='docId')


class UpdateDoctorProfileRequest(RequestSchema):
    fees: int = Field(..., ge=0)
    available: bool
    address: Optional[AddressSchema] = None


def parse_request(schema, data) -> RequestSchema:
    """Validate a JSON body against a schema, raising ValidationError on failure"""
    if data is None:
        raise ValidationError('Request body must be JSON')
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(_first_error_message(e))


def _first_error_message(error: PydanticValidationError) -> str:
    errors = error.errors()
    if not errors:
        return 'Missing Details'
    first = errors[0]
    if first.get('type') == 'missing':
        return 'Missing Details'
    field = '.'.join(str(p) for p in first.get('loc', ()))
    if field == 'email':
        return 'Please enter a valid email'
    message = first.get('msg', 'Invalid value')
    # pydantic prefixes custom ValueError messages
    message = message.replace('Value error, ', '')
    return f'{field}: {message}' if field and field not in message else message


__all__ = [
    'RegisterRequest', 'LoginRequest', 'VerifyEmailRequest', 'ResendOtpRequest',
    'UpdateProfileRequest', 'BookAppointmentRequest', 'AppointmentActionRequest',
    'VerifyStripeRequest', 'VerifyRazorpayRequest', 'AddDoctorRequest',
    'DoctorIdRequest', 'UpdateDoctorProfileRequest', 'parse_request',
    'SLOT_DATE_PATTERN', 'SLOT_TIME_PATTERN',
]
