from datetime import timedelta

from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import create_access_token

from app.errors import AuthenticationError, NotFound
from app.extensions import db
from app.models import Doctor
from app.schemas import AppointmentActionRequest, LoginRequest, UpdateDoctorProfileRequest, parse_request
from app.services import booking_service
from app.utils.decorators import current_actor, require_role

doctor_bp = Blueprint('doctor', __name__, url_prefix='/api/doctor')


def _current_doctor():
    doc_id, _ = current_actor()
    doctor = Doctor.query.get(doc_id)
    if not doctor:
        raise NotFound('Doctor not found')
    return doctor


@doctor_bp.route('/list', methods=['GET'])
def list_doctors():
    """Public doctor listing; booked slots are included so clients can hide them"""
    doctors = Doctor.query.order_by(Doctor.id).all()
    result = []
    for doctor in doctors:
        data = doctor.to_dict()
        data.pop('email', None)
        result.append(data)
    return jsonify({'success': True, 'doctors': result}), 200


@doctor_bp.route('/login', methods=['POST'])
def login():
    """Body: { "email", "password" }"""
    payload = parse_request(LoginRequest, request.get_json(silent=True))
    doctor = Doctor.query.filter_by(email=payload.email.lower()).first()
    if not doctor or not doctor.check_password(payload.password):
        raise AuthenticationError()

    token = create_access_token(
        identity=str(doctor.id),
        additional_claims={'role': 'doctor'},
        expires_delta=timedelta(hours=current_app.config.get('JWT_ACCESS_TOKEN_EXPIRES_HOURS', 24)),
    )
    return jsonify({'success': True, 'token': token}), 200


@doctor_bp.route('/appointments', methods=['GET'])
@require_role('doctor')
def list_appointments():
    doc_id, _ = current_actor()
    appointments = booking_service.list_doctor_appointments(doc_id)
    return jsonify({
        'success': True,
        'appointments': [a.to_dict() for a in appointments]
    }), 200


@doctor_bp.route('/complete-appointment', methods=['POST'])
@require_role('doctor')
def complete_appointment():
    """Body: { "appointmentId" }"""
    payload = parse_request(AppointmentActionRequest, request.get_json(silent=True))
    doc_id, _ = current_actor()
    booking_service.complete_appointment(doc_id, payload.appointment_id)
    return jsonify({'success': True, 'message': 'Appointment Completed'}), 200


@doctor_bp.route('/cancel-appointment', methods=['POST'])
@require_role('doctor')
def cancel_appointment():
    """Body: { "appointmentId" }"""
    payload = parse_request(AppointmentActionRequest, request.get_json(silent=True))
    doc_id, _ = current_actor()
    booking_service.cancel_appointment_for_doctor(doc_id, payload.appointment_id)
    return jsonify({'success': True, 'message': 'Appointment Cancelled'}), 200


@doctor_bp.route('/change-availability', methods=['POST'])
@require_role('doctor')
def change_availability():
    """Toggle the logged-in doctor's availability"""
    doctor = _current_doctor()
    doctor.available = not doctor.available
    db.session.commit()
    return jsonify({
        'success': True,
        'message': 'Availability Changed',
        'available': doctor.available
    }), 200


@doctor_bp.route('/profile', methods=['GET'])
@require_role('doctor')
def get_profile():
    doctor = _current_doctor()
    return jsonify({'success': True, 'profileData': doctor.to_dict()}), 200


@doctor_bp.route('/update-profile', methods=['POST'])
@require_role('doctor')
def update_profile():
    """Body: { "fees", "available", "address"? }"""
    payload = parse_request(UpdateDoctorProfileRequest, request.get_json(silent=True))
    doctor = _current_doctor()
    doctor.fees = payload.fees
    doctor.available = payload.available
    if payload.address is not None:
        doctor.address = payload.address.model_dump()
    db.session.commit()
    return jsonify({'success': True, 'message': 'Profile Updated'}), 200


@doctor_bp.route('/dashboard', methods=['GET'])
@require_role('doctor')
def dashboard():
    """
    Earnings count completed or paid appointments; latest five are newest first
    """
    doc_id, _ = current_actor()
    appointments = booking_service.list_doctor_appointments(doc_id)

    earnings = sum(a.amount for a in appointments if a.is_completed or a.payment)
    patients = {a.user_id for a in appointments}

    return jsonify({
        'success': True,
        'dashData': {
            'earnings': earnings,
            'appointments': len(appointments),
            'patients': len(patients),
            'latestAppointments': [a.to_dict() for a in appointments[:5]]
        }
    }), 200
