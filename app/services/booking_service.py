"""
Appointment booking and cancellation.

Booking reserves the slot in the doctor's ledger and creates the appointment
in one transaction. Cancellation is a soft-cancel: the appointment row stays,
its slot goes back to the ledger.
"""
import logging

from sqlalchemy.exc import IntegrityError

from app.errors import (
    AppointmentNotFound,
    DoctorUnavailable,
    NotFound,
    SlotAlreadyBooked,
    Unauthorized,
    ValidationError,
)
from app.extensions import db
from app.models import Appointment, Doctor, User
from app.services import slot_ledger
from app.utils.audit import log_audit

logger = logging.getLogger(__name__)

APPOINTMENT_STATUSES = ('all', 'cancelled', 'completed', 'pending')


def book_appointment(user_id, doc_id, slot_date, slot_time):
    """
    Reserve (slot_date, slot_time) with a doctor for a patient.

    Raises:
        NotFound: doctor or user does not exist
        DoctorUnavailable: doctor is marked unavailable
        SlotAlreadyBooked: the slot is already in the doctor's ledger

    Returns:
        Appointment: the new appointment
    """
    doctor = Doctor.query.get(doc_id)
    if not doctor:
        raise NotFound('Doctor not found')
    if not doctor.available:
        raise DoctorUnavailable()

    user = User.query.get(user_id)
    if not user:
        raise NotFound('User not found')

    # Snapshot before the ledger write; the ledger itself is left out
    doc_data = doctor.to_dict(include_slots=False)
    user_data = user.to_dict()
    fees = doctor.fees

    if not slot_ledger.try_reserve(doctor.id, slot_date, slot_time):
        raise SlotAlreadyBooked()

    appointment = Appointment(
        user_id=user_id,
        doc_id=doc_id,
        user_data=user_data,
        doc_data=doc_data,
        amount=fees,
        slot_date=slot_date,
        slot_time=slot_time,
    )
    db.session.add(appointment)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise SlotAlreadyBooked()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Appointment %s booked: doctor %s on %s at %s", appointment.id, doc_id, slot_date, slot_time)
    log_audit('appointment', 'book', actor_id=user_id, actor_role='user', entity_id=appointment.id,
              details={'doc_id': doc_id, 'slot_date': slot_date, 'slot_time': slot_time})
    return appointment


def _get_appointment(appointment_id):
    appointment = Appointment.query.get(appointment_id)
    if not appointment:
        raise AppointmentNotFound()
    return appointment


def _cancel(appointment, actor_id, actor_role):
    """Soft-cancel and give the slot back to the ledger"""
    if appointment.cancelled:
        # The slot may already belong to someone else
        return appointment

    appointment.cancelled = True
    slot_ledger.release(appointment.doc_id, appointment.slot_date, appointment.slot_time)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Appointment %s cancelled by %s %s", appointment.id, actor_role, actor_id)
    log_audit('appointment', 'cancel', actor_id=actor_id, actor_role=actor_role, entity_id=appointment.id,
              details={'doc_id': appointment.doc_id, 'slot_date': appointment.slot_date,
                       'slot_time': appointment.slot_time})
    return appointment


def cancel_appointment(user_id, appointment_id):
    """
    Cancel a patient's own appointment.

    Raises:
        AppointmentNotFound: no such appointment
        Unauthorized: the appointment belongs to another patient
    """
    appointment = _get_appointment(appointment_id)
    if appointment.user_id != user_id:
        raise Unauthorized()
    return _cancel(appointment, user_id, 'user')


def cancel_appointment_for_doctor(doc_id, appointment_id):
    """Cancel an appointment from the doctor's side; must be the doctor's own"""
    appointment = _get_appointment(appointment_id)
    if appointment.doc_id != doc_id:
        raise Unauthorized()
    return _cancel(appointment, doc_id, 'doctor')


def cancel_appointment_as_admin(admin_id, appointment_id):
    """Cancel any appointment"""
    appointment = _get_appointment(appointment_id)
    return _cancel(appointment, admin_id, 'admin')


def complete_appointment(doc_id, appointment_id):
    """Mark a doctor's own appointment as completed"""
    appointment = _get_appointment(appointment_id)
    if appointment.doc_id != doc_id:
        raise Unauthorized()
    if appointment.cancelled:
        raise ValidationError('Appointment is cancelled')

    appointment.is_completed = True
    db.session.commit()
    log_audit('appointment', 'complete', actor_id=doc_id, actor_role='doctor', entity_id=appointment.id)
    return appointment


def list_user_appointments(user_id):
    return Appointment.query.filter_by(user_id=user_id).order_by(Appointment.id.desc()).all()


def list_doctor_appointments(doc_id):
    return Appointment.query.filter_by(doc_id=doc_id).order_by(Appointment.id.desc()).all()


def filter_appointments(doc_id=None, user_id=None, slot_date=None, status='all'):
    """
    Admin listing with optional filters.

    Status follows display priority: 'cancelled' beats 'completed', and
    'pending' means neither flag is set.
    """
    status = (status or 'all').lower()
    if status not in APPOINTMENT_STATUSES:
        raise ValidationError(f'Invalid status. Use one of: {", ".join(APPOINTMENT_STATUSES)}')

    query = Appointment.query
    if doc_id:
        query = query.filter(Appointment.doc_id == doc_id)
    if user_id:
        query = query.filter(Appointment.user_id == user_id)
    if slot_date:
        query = query.filter(Appointment.slot_date == slot_date)

    if status == 'cancelled':
        query = query.filter(Appointment.cancelled.is_(True))
    elif status == 'completed':
        query = query.filter(Appointment.cancelled.is_(False), Appointment.is_completed.is_(True))
    elif status == 'pending':
        query = query.filter(Appointment.cancelled.is_(False), Appointment.is_completed.is_(False))

    return query.order_by(Appointment.id.desc()).all()
