"""
Appointment payments through hosted gateways.

Stripe uses a hosted checkout session, Razorpay a hosted order. Either flow
ends by setting Appointment.payment once the gateway reports the payment as
paid. Nothing is retried: a failed verification leaves payment False and the
client calls verify again.
"""
import logging

import razorpay
import stripe
from flask import current_app

from app.errors import AppointmentNotFound, ExternalServiceError, Unauthorized, ValidationError
from app.extensions import db
from app.models import Appointment
from app.utils.audit import log_audit

logger = logging.getLogger(__name__)


class StripeGateway:
    """Hosted checkout sessions"""
    name = 'stripe'

    def __init__(self, api_key, currency):
        self.api_key = api_key
        self.currency = currency.lower()

    def create_session(self, appointment, origin):
        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                success_url=f"{origin}/verify?success=true&appointmentId={appointment.id}",
                cancel_url=f"{origin}/verify?success=false&appointmentId={appointment.id}",
                line_items=[{
                    'price_data': {
                        'currency': self.currency,
                        'product_data': {'name': 'Appointment Fees'},
                        'unit_amount': appointment.amount * 100,
                    },
                    'quantity': 1,
                }],
                mode='payment',
                client_reference_id=str(appointment.id),
            )
        except stripe.StripeError as e:
            logger.error("Stripe session creation failed for appointment %s: %s", appointment.id, e)
            raise ExternalServiceError('Payment gateway error') from e
        return session.id, session.url

    def is_paid(self, session_id):
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=self.api_key)
        except stripe.StripeError as e:
            logger.error("Stripe session lookup failed for %s: %s", session_id, e)
            raise ExternalServiceError('Payment gateway error') from e
        return session.payment_status == 'paid'


class RazorpayGateway:
    """Hosted orders; the receipt carries the appointment id"""
    name = 'razorpay'

    def __init__(self, key_id, key_secret, currency):
        self.client = razorpay.Client(auth=(key_id, key_secret))
        self.currency = currency

    def create_order(self, appointment):
        try:
            return self.client.order.create(data={
                'amount': appointment.amount * 100,
                'currency': self.currency,
                'receipt': str(appointment.id),
            })
        except Exception as e:
            logger.error("Razorpay order creation failed for appointment %s: %s", appointment.id, e)
            raise ExternalServiceError('Payment gateway error') from e

    def fetch_order(self, order_id):
        try:
            return self.client.order.fetch(order_id)
        except Exception as e:
            logger.error("Razorpay order lookup failed for %s: %s", order_id, e)
            raise ExternalServiceError('Payment gateway error') from e


def get_stripe_gateway():
    key = current_app.config.get('STRIPE_SECRET_KEY')
    if not key:
        raise ExternalServiceError('Stripe is not configured')
    return StripeGateway(key, current_app.config['CURRENCY'])


def get_razorpay_gateway():
    key_id = current_app.config.get('RAZORPAY_KEY_ID')
    key_secret = current_app.config.get('RAZORPAY_KEY_SECRET')
    if not key_id or not key_secret:
        raise ExternalServiceError('Razorpay is not configured')
    return RazorpayGateway(key_id, key_secret, current_app.config['CURRENCY'])


def _payable_appointment(appointment_id, user_id=None):
    appointment = Appointment.query.get(appointment_id)
    if not appointment:
        raise AppointmentNotFound('Appointment Cancelled or not found')
    if user_id is not None and appointment.user_id != user_id:
        raise Unauthorized()
    if appointment.cancelled:
        raise ValidationError('Appointment Cancelled or not found')
    return appointment


def _mark_paid(appointment, gateway_name):
    appointment.payment = True
    db.session.commit()
    logger.info("Appointment %s paid via %s", appointment.id, gateway_name)
    log_audit('appointment', 'payment', actor_role='system', entity_id=appointment.id,
              details={'gateway': gateway_name, 'ref': appointment.payment_ref})


def create_stripe_checkout(user_id, appointment_id, origin):
    """
    Start a hosted checkout for a patient's appointment.

    Returns:
        str: session URL to redirect the patient to
    """
    appointment = _payable_appointment(appointment_id, user_id)
    session_id, session_url = get_stripe_gateway().create_session(appointment, origin)

    appointment.payment_gateway = StripeGateway.name
    appointment.payment_ref = session_id
    db.session.commit()
    return session_url


def verify_stripe(appointment_id, success):
    """
    Confirm a checkout after the redirect. The redirect flag alone is not
    trusted: the stored session must report payment_status == 'paid'.

    Returns:
        bool: whether the appointment is now paid
    """
    if str(success).lower() != 'true':
        return False

    appointment = _payable_appointment(appointment_id)
    if appointment.payment:
        return True
    if appointment.payment_gateway != StripeGateway.name or not appointment.payment_ref:
        logger.warning("Stripe verification for appointment %s without a checkout session", appointment_id)
        return False

    if not get_stripe_gateway().is_paid(appointment.payment_ref):
        logger.info("Stripe session %s not paid yet", appointment.payment_ref)
        return False

    _mark_paid(appointment, StripeGateway.name)
    return True


def create_razorpay_order(user_id, appointment_id):
    """
    Create a hosted order for a patient's appointment.

    Returns:
        dict: the gateway order, passed through to the client checkout
    """
    appointment = _payable_appointment(appointment_id, user_id)
    order = get_razorpay_gateway().create_order(appointment)

    appointment.payment_gateway = RazorpayGateway.name
    appointment.payment_ref = order.get('id')
    db.session.commit()
    return order


def verify_razorpay(order_id):
    """
    Confirm an order: it must be 'paid' and its receipt must point at a live
    appointment.

    Returns:
        bool: whether the appointment is now paid
    """
    order = get_razorpay_gateway().fetch_order(order_id)
    if order.get('status') != 'paid':
        logger.info("Razorpay order %s status is %s", order_id, order.get('status'))
        return False

    try:
        appointment_id = int(order.get('receipt'))
    except (TypeError, ValueError):
        logger.warning("Razorpay order %s has no usable receipt", order_id)
        return False

    appointment = _payable_appointment(appointment_id)
    if not appointment.payment:
        _mark_paid(appointment, RazorpayGateway.name)
    return True
