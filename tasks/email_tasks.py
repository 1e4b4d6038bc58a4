"""
Celery tasks for outgoing email
"""
import logging
from app.extensions import celery
from app.services.email_service import send_verification_email

logger = logging.getLogger(__name__)


@celery.task(name='tasks.send_verification_email')
def send_verification_email_task(email, name, otp):
    """
    Deliver an email verification code (async via Celery)

    Args:
        email: Recipient address
        name: Recipient name
        otp: Verification code

    Returns:
        dict: Delivery result
    """
    result = send_verification_email(email, name, otp)
    if not result['success']:
        logger.error(f"Verification email to {email} failed: {result['error']}")
    return result
