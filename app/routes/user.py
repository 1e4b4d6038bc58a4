from flask import Blueprint, request, jsonify
from app.errors import NotFound
from app.extensions import db
from app.models import User
from app.schemas import (
    AppointmentActionRequest,
    BookAppointmentRequest,
    LoginRequest,
    RegisterRequest,
    ResendOtpRequest,
    UpdateProfileRequest,
    VerifyEmailRequest,
    VerifyRazorpayRequest,
    VerifyStripeRequest,
    parse_request,
)
from app.services import auth_service, booking_service, payment_service
from app.utils.decorators import current_actor, require_role

user_bp = Blueprint('user', __name__, url_prefix='/api/user')


@user_bp.route('/register', methods=['POST'])
def register():
    """
    Create a patient account and email a verification code
    Body: { "name", "email", "password" }
    """
    payload = parse_request(RegisterRequest, request.get_json(silent=True))
    user = auth_service.register_user(payload.name, payload.email, payload.password)

    return jsonify({
        'success': True,
        'message': 'Please verify your email. An OTP has been sent to your email address.',
        'userId': user.id
    }), 201


@user_bp.route('/verify-email', methods=['POST'])
def verify_email():
    """
    Body: { "userId", "otp" }
    Returns a token once the account is verified
    """
    payload = parse_request(VerifyEmailRequest, request.get_json(silent=True))
    user = auth_service.verify_email(payload.user_id, payload.otp)

    return jsonify({
        'success': True,
        'message': 'Email verified successfully',
        'token': auth_service.create_user_token(user)
    }), 200


@user_bp.route('/resend-otp', methods=['POST'])
def resend_otp():
    """Body: { "userId" }"""
    payload = parse_request(ResendOtpRequest, request.get_json(silent=True))
    auth_service.resend_otp(payload.user_id)

    return jsonify({
        'success': True,
        'message': 'New OTP has been sent to your email address'
    }), 200


@user_bp.route('/login', methods=['POST'])
def login():
    """
    Body: { "email", "password" }
    Unverified accounts get a fresh OTP instead of a token
    """
    payload = parse_request(LoginRequest, request.get_json(silent=True))
    user, token = auth_service.login_user(payload.email, payload.password)

    if token is None:
        return jsonify({
            'success': False,
            'message': 'Your email is not verified. A new OTP has been sent to your email.',
            'requireVerification': True,
            'userId': user.id
        }), 403

    return jsonify({'success': True, 'token': token}), 200


@user_bp.route('/get-profile', methods=['GET'])
@require_role('user')
def get_profile():
    user_id, _ = current_actor()
    user = User.query.get(user_id)
    if not user:
        raise NotFound('User not found')
    return jsonify({'success': True, 'userData': user.to_dict()}), 200


@user_bp.route('/update-profile', methods=['POST'])
@require_role('user')
def update_profile():
    """Body: { "name", "phone", "dob", "gender", "address"?, "image"? }"""
    payload = parse_request(UpdateProfileRequest, request.get_json(silent=True))
    user_id, _ = current_actor()
    user = User.query.get(user_id)
    if not user:
        raise NotFound('User not found')

    user.name = payload.name
    user.phone = payload.phone
    user.dob = payload.dob
    user.gender = payload.gender
    if payload.address is not None:
        user.address = payload.address.model_dump()
    if payload.image:
        user.image = payload.image
    db.session.commit()

    return jsonify({'success': True, 'message': 'Profile Updated'}), 200


@user_bp.route('/book-appointment', methods=['POST'])
@require_role('user')
def book_appointment():
    """Body: { "docId", "slotDate": "1_4_2025", "slotTime": "10:00" }"""
    payload = parse_request(BookAppointmentRequest, request.get_json(silent=True))
    user_id, _ = current_actor()
    appointment = booking_service.book_appointment(user_id, payload.doc_id, payload.slot_date, payload.slot_time)

    return jsonify({
        'success': True,
        'message': 'Appointment Booked',
        'appointment': appointment.to_dict()
    }), 201


@user_bp.route('/appointments', methods=['GET'])
@require_role('user')
def list_appointments():
    user_id, _ = current_actor()
    appointments = booking_service.list_user_appointments(user_id)
    return jsonify({
        'success': True,
        'appointments': [a.to_dict() for a in appointments]
    }), 200


@user_bp.route('/cancel-appointment', methods=['POST'])
@require_role('user')
def cancel_appointment():
    """Body: { "appointmentId" }"""
    payload = parse_request(AppointmentActionRequest, request.get_json(silent=True))
    user_id, _ = current_actor()
    booking_service.cancel_appointment(user_id, payload.appointment_id)
    return jsonify({'success': True, 'message': 'Appointment Cancelled'}), 200


@user_bp.route('/payment-stripe', methods=['POST'])
@require_role('user')
def payment_stripe():
    """Body: { "appointmentId" }; the Origin header is used for redirect URLs"""
    payload = parse_request(AppointmentActionRequest, request.get_json(silent=True))
    user_id, _ = current_actor()
    origin = request.headers.get('Origin') or request.host_url.rstrip('/')
    session_url = payment_service.create_stripe_checkout(user_id, payload.appointment_id, origin)
    return jsonify({'success': True, 'session_url': session_url}), 200


@user_bp.route('/verify-stripe', methods=['POST'])
@require_role('user')
def verify_stripe():
    """Body: { "appointmentId", "success": "true" | "false" }"""
    payload = parse_request(VerifyStripeRequest, request.get_json(silent=True))
    if payment_service.verify_stripe(payload.appointment_id, payload.success):
        return jsonify({'success': True, 'message': 'Payment Successful'}), 200
    return jsonify({'success': False, 'message': 'Payment Failed'}), 400


@user_bp.route('/payment-razorpay', methods=['POST'])
@require_role('user')
def payment_razorpay():
    """Body: { "appointmentId" }"""
    payload = parse_request(AppointmentActionRequest, request.get_json(silent=True))
    user_id, _ = current_actor()
    order = payment_service.create_razorpay_order(user_id, payload.appointment_id)
    return jsonify({'success': True, 'order': order}), 200


@user_bp.route('/verify-razorpay', methods=['POST'])
@require_role('user')
def verify_razorpay():
    """Body: { "razorpay_order_id" }"""
    payload = parse_request(VerifyRazorpayRequest, request.get_json(silent=True))
    if payment_service.verify_razorpay(payload.razorpay_order_id):
        return jsonify({'success': True, 'message': 'Payment Successful'}), 200
    return jsonify({'success': False, 'message': 'Payment Failed'}), 400
