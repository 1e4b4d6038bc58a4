from app.extensions import db, bcrypt
from .base import TimestampMixin
from .slot_reservation import SlotReservation, SlotDate


class Doctor(db.Model, TimestampMixin):
    __tablename__ = 'doctors'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    image = db.Column(db.String(500))
    speciality = db.Column(db.String(100), nullable=False)
    degree = db.Column(db.String(100), nullable=False)
    experience = db.Column(db.String(50), nullable=False)  # e.g., "4 Years"
    about = db.Column(db.Text, nullable=False)
    available = db.Column(db.Boolean, default=True, nullable=False)
    fees = db.Column(db.Integer, nullable=False)
    address = db.Column(db.JSON, default=lambda: {'line1': '', 'line2': ''})

    # Slot ledger rows, in booking order. Mutated only by app.services.slot_ledger
    slot_reservations = db.relationship(
        SlotReservation,
        order_by=SlotReservation.id,
        cascade='all, delete-orphan',
        lazy='select',
    )
    slot_dates = db.relationship(
        SlotDate,
        order_by=SlotDate.id,
        cascade='all, delete-orphan',
        lazy='select',
    )

    appointments = db.relationship('Appointment', backref='doctor', lazy='dynamic')

    def set_password(self, password):
        """Hash and set password"""
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        """Check if provided password matches hash"""
        return bcrypt.check_password_hash(self.password_hash, password)

    @property
    def slots_booked(self):
        """
        Read-only view of the ledger: {date_key: [time, ...]} in insertion order.

        A date whose times have all been released stays listed with [].
        """
        ledger = {entry.slot_date: [] for entry in self.slot_dates}
        for reservation in self.slot_reservations:
            ledger.setdefault(reservation.slot_date, []).append(reservation.slot_time)
        return ledger

    def to_dict(self, include_slots=True):
        data = {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'image': self.image,
            'speciality': self.speciality,
            'degree': self.degree,
            'experience': self.experience,
            'about': self.about,
            'available': self.available,
            'fees': self.fees,
            'address': self.address or {'line1': '', 'line2': ''},
        }
        if include_slots:
            data['slots_booked'] = self.slots_booked
        return data

    def __repr__(self):
        return f"<Doctor {self.name} ({self.speciality})>"
