from .slot_ledger import try_reserve, release, is_booked, booked_times

from .booking_service import (
    book_appointment,
    cancel_appointment,
    cancel_appointment_for_doctor,
    cancel_appointment_as_admin,
    complete_appointment,
    list_user_appointments,
    list_doctor_appointments,
    filter_appointments,
)

from .auth_service import (
    generate_otp,
    issue_otp,
    register_user,
    verify_email,
    resend_otp,
    login_user,
)

from .email_service import send_email, send_verification_email

__all__ = [
    # Slot ledger
    "try_reserve",
    "release",
    "is_booked",
    "booked_times",
    # Booking
    "book_appointment",
    "cancel_appointment",
    "cancel_appointment_for_doctor",
    "cancel_appointment_as_admin",
    "complete_appointment",
    "list_user_appointments",
    "list_doctor_appointments",
    "filter_appointments",
    # Accounts
    "generate_otp",
    "issue_otp",
    "register_user",
    "verify_email",
    "resend_otp",
    "login_user",
    # Email
    "send_email",
    "send_verification_email",
]
