import logging
import secrets
from datetime import timedelta

from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import create_access_token

from app.errors import AuthenticationError, NotFound, ValidationError
from app.extensions import db
from app.models import Appointment, Doctor, User
from app.schemas import AddDoctorRequest, AppointmentActionRequest, DoctorIdRequest, LoginRequest, parse_request
from app.services import booking_service
from app.utils.decorators import current_actor, require_role

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__, url_prefix='/api/admin')


@admin_bp.route('/login', methods=['POST'])
def login():
    """Admin panel login against ADMIN_EMAIL / ADMIN_PASSWORD"""
    payload = parse_request(LoginRequest, request.get_json(silent=True))
    admin_email = current_app.config.get('ADMIN_EMAIL') or ''
    admin_password = current_app.config.get('ADMIN_PASSWORD') or ''

    if not admin_password:
        logger.warning("Admin login attempted but ADMIN_PASSWORD is not set")
        raise AuthenticationError()

    email_ok = secrets.compare_digest(payload.email.lower(), admin_email.lower())
    password_ok = secrets.compare_digest(payload.password, admin_password)
    if not (email_ok and password_ok):
        raise AuthenticationError()

    token = create_access_token(
        identity=admin_email,
        additional_claims={'role': 'admin'},
        expires_delta=timedelta(hours=current_app.config.get('JWT_ACCESS_TOKEN_EXPIRES_HOURS', 24)),
    )
    return jsonify({'success': True, 'token': token}), 200


@admin_bp.route('/add-doctor', methods=['POST'])
@require_role('admin')
def add_doctor():
    """
    Body: { "name", "email", "password", "speciality", "degree",
            "experience", "about", "fees", "address"?, "image"? }
    """
    payload = parse_request(AddDoctorRequest, request.get_json(silent=True))
    email = payload.email.lower()
    if Doctor.query.filter_by(email=email).first():
        raise ValidationError('Doctor with this email already exists')

    doctor = Doctor(
        name=payload.name,
        email=email,
        speciality=payload.speciality,
        degree=payload.degree,
        experience=payload.experience,
        about=payload.about,
        fees=payload.fees,
        address=payload.address.model_dump(),
        image=payload.image,
        available=True,
    )
    doctor.set_password(payload.password)
    db.session.add(doctor)
    db.session.commit()

    logger.info("Doctor %s added", doctor.id)
    return jsonify({
        'success': True,
        'message': 'Doctor Added',
        'doctor': doctor.to_dict(include_slots=False)
    }), 201


@admin_bp.route('/all-doctors', methods=['GET'])
@require_role('admin')
def all_doctors():
    doctors = Doctor.query.order_by(Doctor.id).all()
    return jsonify({
        'success': True,
        'doctors': [d.to_dict() for d in doctors]
    }), 200


@admin_bp.route('/change-availability', methods=['POST'])
@require_role('admin')
def change_availability():
    """Body: { "docId" }"""
    payload = parse_request(DoctorIdRequest, request.get_json(silent=True))
    doctor = Doctor.query.get(payload.doc_id)
    if not doctor:
        raise NotFound('Doctor not found')

    doctor.available = not doctor.available
    db.session.commit()
    return jsonify({
        'success': True,
        'message': 'Availability Changed',
        'available': doctor.available
    }), 200


@admin_bp.route('/appointments', methods=['GET'])
@require_role('admin')
def list_appointments():
    """
    All appointments, newest first
    Query params:
        docId, userId: filter by doctor / patient
        slotDate: exact date-key, e.g. 1_4_2025
        status: all (default), cancelled, completed, pending
    """
    appointments = booking_service.filter_appointments(
        doc_id=request.args.get('docId', type=int),
        user_id=request.args.get('userId', type=int),
        slot_date=request.args.get('slotDate', type=str),
        status=request.args.get('status', 'all', type=str),
    )
    return jsonify({
        'success': True,
        'appointments': [a.to_dict() for a in appointments]
    }), 200


@admin_bp.route('/cancel-appointment', methods=['POST'])
@require_role('admin')
def cancel_appointment():
    """Body: { "appointmentId" }"""
    payload = parse_request(AppointmentActionRequest, request.get_json(silent=True))
    admin_id, _ = current_actor()
    booking_service.cancel_appointment_as_admin(admin_id, payload.appointment_id)
    return jsonify({'success': True, 'message': 'Appointment Cancelled'}), 200


@admin_bp.route('/dashboard', methods=['GET'])
@require_role('admin')
def dashboard():
    latest = Appointment.query.order_by(Appointment.id.desc()).limit(5).all()
    return jsonify({
        'success': True,
        'dashData': {
            'doctors': Doctor.query.count(),
            'patients': User.query.count(),
            'appointments': Appointment.query.count(),
            'latestAppointments': [a.to_dict() for a in latest]
        }
    }), 200
