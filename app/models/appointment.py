from app.extensions import db
from .base import TimestampMixin


class Appointment(db.Model, TimestampMixin):
    __tablename__ = 'appointments'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    doc_id = db.Column(db.Integer, db.ForeignKey('doctors.id'), nullable=False, index=True)

    # Snapshots taken at booking time
    user_data = db.Column(db.JSON, nullable=False)
    doc_data = db.Column(db.JSON, nullable=False)

    slot_date = db.Column(db.String(12), nullable=False)  # e.g., 1_4_2025
    slot_time = db.Column(db.String(5), nullable=False)   # e.g., 14:00
    amount = db.Column(db.Integer, nullable=False)

    # Independent flags; records are never deleted
    cancelled = db.Column(db.Boolean, default=False, nullable=False)
    is_completed = db.Column(db.Boolean, default=False, nullable=False)
    payment = db.Column(db.Boolean, default=False, nullable=False)

    # Last hosted checkout/order created for this appointment
    payment_gateway = db.Column(db.String(20), nullable=True)  # stripe, razorpay
    payment_ref = db.Column(db.String(255), nullable=True, index=True)

    @property
    def status(self):
        """Display status: cancellation wins over completion"""
        if self.cancelled:
            return 'cancelled'
        if self.is_completed:
            return 'completed'
        return 'pending'

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'doc_id': self.doc_id,
            'user_data': self.user_data,
            'doc_data': self.doc_data,
            'slot_date': self.slot_date,
            'slot_time': self.slot_time,
            'amount': self.amount,
            'cancelled': self.cancelled,
            'is_completed': self.is_completed,
            'payment': self.payment,
            'status': self.status,
            'date': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Appointment {self.user_id} - doctor {self.doc_id} on {self.slot_date} {self.slot_time}>"
