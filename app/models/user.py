from app.extensions import db, bcrypt
from .base import TimestampMixin


class User(db.Model, TimestampMixin):
    """Patient account"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # Profile
    image = db.Column(db.String(500))
    phone = db.Column(db.String(20), default='000000000')
    address = db.Column(db.JSON, default=lambda: {'line1': '', 'line2': ''})
    gender = db.Column(db.String(20), default='Not Selected')
    dob = db.Column(db.String(20), default='Not Selected')

    # Email verification
    is_verified = db.Column(db.Boolean, default=False, nullable=False)
    otp = db.Column(db.String(6), nullable=True)
    otp_expiry = db.Column(db.DateTime, nullable=True)

    appointments = db.relationship('Appointment', backref='user', lazy='dynamic')

    def set_password(self, password):
        """Hash and set password"""
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        """Check if provided password matches hash"""
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        # Never exposes password or OTP state
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'image': self.image,
            'phone': self.phone,
            'address': self.address or {'line1': '', 'line2': ''},
            'gender': self.gender,
            'dob': self.dob,
            'is_verified': self.is_verified,
        }

    def __repr__(self):
        return f"<User {self.name} ({self.email})>"
