"""
Slot ledger: per-doctor record of booked (date_key, time) pairs.

A date-key looks like ``1_4_2025`` and a time like ``9:30``. Both are opaque
matching keys; no date parsing happens here.

Only try_reserve() and release() write to the ledger. Neither commits: the
caller commits the ledger change together with the appointment it belongs to.
"""
import logging

from sqlalchemy.exc import IntegrityError

from app.extensions import db
from app.models import SlotDate, SlotReservation

logger = logging.getLogger(__name__)


def is_booked(doctor_id, slot_date, slot_time):
    """Check whether a slot is already in the doctor's ledger"""
    return db.session.query(
        SlotReservation.query.filter_by(
            doctor_id=doctor_id,
            slot_date=slot_date,
            slot_time=slot_time,
        ).exists()
    ).scalar()


def try_reserve(doctor_id, slot_date, slot_time):
    """
    Insert the slot into the ledger only if it is absent.

    Returns True when the slot is now held by the current transaction and
    False when it was already taken. Losing a race to a concurrent booking
    rolls the session back, so call this before adding anything else to it.
    """
    if is_booked(doctor_id, slot_date, slot_time):
        return False

    _remember_date(doctor_id, slot_date)
    reservation = SlotReservation(doctor_id=doctor_id, slot_date=slot_date, slot_time=slot_time)
    db.session.add(reservation)
    try:
        db.session.flush()
    except IntegrityError:
        # Lost the race against a concurrent booking
        db.session.rollback()
        logger.info("Slot %s %s for doctor %s taken concurrently", slot_date, slot_time, doctor_id)
        return False
    return True


def release(doctor_id, slot_date, slot_time):
    """
    Remove every occurrence of slot_time from the doctor's date_key entry.

    Releasing a slot that is not booked is a no-op. The date_key itself stays
    in the ledger, possibly with no times. Returns the number of rows removed.
    """
    removed = SlotReservation.query.filter_by(
        doctor_id=doctor_id,
        slot_date=slot_date,
        slot_time=slot_time,
    ).delete(synchronize_session='fetch')
    if not removed:
        logger.debug("Release of %s %s for doctor %s found nothing to remove", slot_date, slot_time, doctor_id)
    return removed


def booked_times(doctor_id, slot_date):
    """Booked times for one date-key, in booking order"""
    rows = SlotReservation.query.filter_by(
        doctor_id=doctor_id, slot_date=slot_date
    ).order_by(SlotReservation.id).all()
    return [row.slot_time for row in rows]


def _remember_date(doctor_id, slot_date):
    """Record slot_date in the doctor's ledger; it is never removed by release()"""
    if SlotDate.query.filter_by(doctor_id=doctor_id, slot_date=slot_date).first():
        return
    try:
        with db.session.begin_nested():
            db.session.add(SlotDate(doctor_id=doctor_id, slot_date=slot_date))
    except IntegrityError:
        # A concurrent booking recorded the same date first
        logger.debug("Date %s for doctor %s recorded concurrently", slot_date, doctor_id)
