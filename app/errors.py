"""
Application error taxonomy.

Services raise these; the handler registered in create_app() turns them into
the uniform {"success": false, "message": ...} response.
"""


class AppError(Exception):
    """Base class for errors that map to a client-facing response"""
    status_code = 400
    default_message = 'Request failed'

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'success': False, 'message': self.message}


class ValidationError(AppError):
    status_code = 400
    default_message = 'Missing Details'


class AuthenticationError(AppError):
    status_code = 401
    default_message = 'Invalid credentials'


class Unauthorized(AppError):
    status_code = 403
    default_message = 'Unauthorized action'


class NotFound(AppError):
    status_code = 404
    default_message = 'Not found'


class Conflict(AppError):
    status_code = 409
    default_message = 'Conflict'


class Unavailable(AppError):
    status_code = 409
    default_message = 'Unavailable'


class ExternalServiceError(AppError):
    status_code = 502
    default_message = 'External service error'


# Booking
class DoctorUnavailable(Unavailable):
    default_message = 'Doctor Not Available'


class SlotAlreadyBooked(Conflict):
    default_message = 'Slot Not Available'


class AppointmentNotFound(NotFound):
    default_message = 'Appointment not found'


# Email verification
class InvalidOtp(ValidationError):
    default_message = 'Invalid OTP'


class OtpExpired(ValidationError):
    default_message = 'OTP expired. Please request a new one.'
