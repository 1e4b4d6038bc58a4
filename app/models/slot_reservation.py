from app.extensions import db
from .base import TimestampMixin


class SlotReservation(db.Model, TimestampMixin):
    """
    One booked time-string of a doctor's slot ledger.

    The unique constraint makes a reservation an insert-if-absent: two
    bookings of the same doctor/date/time cannot both commit.
    """
    __tablename__ = 'slot_reservations'
    __table_args__ = (
        db.UniqueConstraint('doctor_id', 'slot_date', 'slot_time', name='uq_slot_reservation'),
    )

    id = db.Column(db.Integer, primary_key=True)
    doctor_id = db.Column(db.Integer, db.ForeignKey('doctors.id', ondelete='CASCADE'), nullable=False, index=True)
    slot_date = db.Column(db.String(12), nullable=False)  # e.g., 1_4_2025
    slot_time = db.Column(db.String(5), nullable=False)   # e.g., 9:30

    def __repr__(self):
        return f"<SlotReservation doctor={self.doctor_id} {self.slot_date} {self.slot_time}>"


class SlotDate(db.Model, TimestampMixin):
    """
    A date-key that has appeared in a doctor's ledger.

    Kept after its last reservation is released, so the ledger still lists
    the date with no times.
    """
    __tablename__ = 'slot_dates'
    __table_args__ = (
        db.UniqueConstraint('doctor_id', 'slot_date', name='uq_slot_date'),
    )

    id = db.Column(db.Integer, primary_key=True)
    doctor_id = db.Column(db.Integer, db.ForeignKey('doctors.id', ondelete='CASCADE'), nullable=False, index=True)
    slot_date = db.Column(db.String(12), nullable=False)

    def __repr__(self):
        return f"<SlotDate doctor={self.doctor_id} {self.slot_date}>"
