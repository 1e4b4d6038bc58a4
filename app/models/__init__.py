from .user import User
from .doctor import Doctor
from .slot_reservation import SlotReservation, SlotDate
from .appointment import Appointment
from .audit_log import AuditLog

__all__ = ["User", "Doctor", "SlotReservation", "SlotDate", "Appointment", "AuditLog"]
