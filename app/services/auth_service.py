"""
Patient accounts and email verification.

An account is Unverified while it holds an OTP and Verified once a matching,
unexpired code has been presented. Issuing a code always replaces the
previous one. Verification email goes out through Celery after the OTP is
committed; delivery problems are logged and never fail the request.
"""
import logging
import secrets
from datetime import datetime, timedelta

from flask import current_app
from flask_jwt_extended import create_access_token

from app.errors import (
    AuthenticationError,
    InvalidOtp,
    NotFound,
    OtpExpired,
    ValidationError,
)
from app.extensions import db
from app.models import User
from app.utils.audit import log_audit

logger = logging.getLogger(__name__)

OTP_LENGTH = 6


def generate_otp():
    """Random 6-digit numeric code, 100000-999999"""
    return str(100000 + secrets.randbelow(900000))


def create_user_token(user):
    """JWT for a patient; identity is the user id"""
    return create_access_token(
        identity=str(user.id),
        additional_claims={'role': 'user'},
        expires_delta=timedelta(hours=current_app.config.get('JWT_ACCESS_TOKEN_EXPIRES_HOURS', 24)),
    )


def dispatch_verification_email(email, name, otp):
    """Queue the verification email. Returns False if it could not be queued."""
    from tasks.email_tasks import send_verification_email_task

    try:
        send_verification_email_task.delay(email, name, otp)
        return True
    except Exception as e:
        logger.error("Could not queue verification email for %s: %s", email, e)
        return False


def issue_otp(user, now=None):
    """Store a fresh OTP on the user, commit, then send it"""
    now = now or datetime.utcnow()
    user.otp = generate_otp()
    user.otp_expiry = now + timedelta(minutes=current_app.config.get('OTP_EXPIRY_MINUTES', 10))
    db.session.commit()

    logger.info("OTP issued for user %s", user.id)
    dispatch_verification_email(user.email, user.name, user.otp)
    return user.otp


def register_user(name, email, password):
    """
    Create an unverified account and send its first OTP.

    Returns:
        User: the new account
    """
    email = email.lower()
    if User.query.filter_by(email=email).first():
        raise ValidationError('User with this email already exists')

    user = User(name=name, email=email, is_verified=False)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.flush()
    except Exception:
        db.session.rollback()
        raise

    issue_otp(user)
    logger.info("User %s registered", user.id)
    return user


def verify_email(user_id, otp, now=None):
    """
    Check an OTP and mark the account verified.

    Expiry is checked before the code, so an expired code reports OtpExpired
    even when it matches.

    Returns:
        User: the verified account
    """
    user = User.query.get(user_id)
    if not user:
        raise NotFound('User not found')

    now = now or datetime.utcnow()
    if not user.otp or not user.otp_expiry:
        raise InvalidOtp()
    if now > user.otp_expiry:
        raise OtpExpired()
    if not secrets.compare_digest(user.otp.encode('utf-8'), str(otp).encode('utf-8')):
        raise InvalidOtp()

    user.is_verified = True
    user.otp = None
    user.otp_expiry = None
    db.session.commit()

    log_audit('user', 'verify_email', actor_id=user.id, actor_role='user', entity_id=user.id)
    return user


def resend_otp(user_id):
    user = User.query.get(user_id)
    if not user:
        raise NotFound('User not found')
    issue_otp(user)
    return user


def login_user(email, password):
    """
    Authenticate a patient.

    Returns:
        tuple: (user, token). token is None when the account is unverified,
        in which case a new OTP has been sent instead.
    """
    user = User.query.filter_by(email=email.lower()).first()
    if not user:
        raise AuthenticationError()

    if not user.is_verified:
        issue_otp(user)
        return user, None

    if not user.check_password(password):
        raise AuthenticationError()

    return user, create_user_token(user)
