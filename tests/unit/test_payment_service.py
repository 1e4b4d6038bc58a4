"""Tests for hosted payment flows with mocked gateway SDKs."""
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import stripe

from app.errors import AppointmentNotFound, ExternalServiceError, Unauthorized, ValidationError
from app.models import Appointment
from app.services import booking_service, payment_service


@pytest.fixture
def appointment(user, doctor):
    return booking_service.book_appointment(user.id, doctor.id, "1_4_2025", "10:00")


@pytest.fixture
def razorpay_client():
    with patch('app.services.payment_service.razorpay.Client') as client_cls:
        client = MagicMock()
        client_cls.return_value = client
        yield client


def test_stripe_checkout_uses_fee_in_minor_units(user, appointment):
    session = SimpleNamespace(id="cs_test_1", url="https://checkout.stripe.test/cs_test_1")
    with patch('app.services.payment_service.stripe.checkout.Session.create', return_value=session) as create:
        url = payment_service.create_stripe_checkout(user.id, appointment.id, "http://localhost:5173")

    assert url == session.url
    kwargs = create.call_args.kwargs
    assert kwargs["line_items"][0]["price_data"]["unit_amount"] == 50000
    assert kwargs["line_items"][0]["price_data"]["currency"] == "inr"
    assert kwargs["success_url"] == f"http://localhost:5173/verify?success=true&appointmentId={appointment.id}"
    assert kwargs["mode"] == "payment"

    stored = Appointment.query.get(appointment.id)
    assert stored.payment_gateway == "stripe"
    assert stored.payment_ref == "cs_test_1"
    assert stored.payment is False


def test_stripe_checkout_refused_for_cancelled(user, appointment):
    booking_service.cancel_appointment(user.id, appointment.id)

    with patch('app.services.payment_service.stripe.checkout.Session.create') as create:
        with pytest.raises(ValidationError):
            payment_service.create_stripe_checkout(user.id, appointment.id, "http://localhost")
    create.assert_not_called()


def test_stripe_checkout_other_patient(other_user, appointment):
    with pytest.raises(Unauthorized):
        payment_service.create_stripe_checkout(other_user.id, appointment.id, "http://localhost")


def test_stripe_checkout_missing_appointment(user):
    with pytest.raises(AppointmentNotFound):
        payment_service.create_stripe_checkout(user.id, 999, "http://localhost")


def test_stripe_gateway_error_is_external(user, appointment):
    with patch('app.services.payment_service.stripe.checkout.Session.create',
               side_effect=stripe.StripeError("boom")):
        with pytest.raises(ExternalServiceError):
            payment_service.create_stripe_checkout(user.id, appointment.id, "http://localhost")


def _start_stripe(user, appointment):
    session = SimpleNamespace(id="cs_test_2", url="https://checkout.stripe.test/cs_test_2")
    with patch('app.services.payment_service.stripe.checkout.Session.create', return_value=session):
        payment_service.create_stripe_checkout(user.id, appointment.id, "http://localhost")


def test_verify_stripe_marks_paid_when_session_paid(user, appointment):
    _start_stripe(user, appointment)
    paid = SimpleNamespace(payment_status="paid")
    with patch('app.services.payment_service.stripe.checkout.Session.retrieve', return_value=paid) as retrieve:
        assert payment_service.verify_stripe(appointment.id, "true") is True

    assert retrieve.call_args.args[0] == "cs_test_2"
    assert Appointment.query.get(appointment.id).payment is True


def test_verify_stripe_unpaid_session_leaves_flag(user, appointment):
    _start_stripe(user, appointment)
    unpaid = SimpleNamespace(payment_status="unpaid")
    with patch('app.services.payment_service.stripe.checkout.Session.retrieve', return_value=unpaid):
        assert payment_service.verify_stripe(appointment.id, "true") is False

    assert Appointment.query.get(appointment.id).payment is False


def test_verify_stripe_failed_redirect(user, appointment):
    _start_stripe(user, appointment)
    with patch('app.services.payment_service.stripe.checkout.Session.retrieve') as retrieve:
        assert payment_service.verify_stripe(appointment.id, "false") is False
    retrieve.assert_not_called()


def test_verify_stripe_without_session(appointment):
    """A success redirect for an appointment that never started checkout is not trusted."""
    assert payment_service.verify_stripe(appointment.id, "true") is False
    assert Appointment.query.get(appointment.id).payment is False


def test_verify_stripe_refused_after_cancel(user, appointment):
    _start_stripe(user, appointment)
    booking_service.cancel_appointment(user.id, appointment.id)

    with pytest.raises(ValidationError):
        payment_service.verify_stripe(appointment.id, "true")


def test_razorpay_order_created_with_receipt(user, appointment, razorpay_client):
    razorpay_client.order.create.return_value = {"id": "order_1", "amount": 50000, "status": "created"}

    order = payment_service.create_razorpay_order(user.id, appointment.id)

    assert order["id"] == "order_1"
    razorpay_client.order.create.assert_called_once_with(data={
        "amount": 50000,
        "currency": "INR",
        "receipt": str(appointment.id),
    })
    stored = Appointment.query.get(appointment.id)
    assert stored.payment_gateway == "razorpay"
    assert stored.payment_ref == "order_1"


def test_verify_razorpay_paid(appointment, razorpay_client):
    razorpay_client.order.fetch.return_value = {"id": "order_1", "status": "paid", "receipt": str(appointment.id)}

    assert payment_service.verify_razorpay("order_1") is True
    assert Appointment.query.get(appointment.id).payment is True


def test_verify_razorpay_not_paid(appointment, razorpay_client):
    razorpay_client.order.fetch.return_value = {"id": "order_1", "status": "attempted", "receipt": str(appointment.id)}

    assert payment_service.verify_razorpay("order_1") is False
    assert Appointment.query.get(appointment.id).payment is False


def test_verify_razorpay_cancelled_appointment(user, appointment, razorpay_client):
    booking_service.cancel_appointment(user.id, appointment.id)
    razorpay_client.order.fetch.return_value = {"id": "order_1", "status": "paid", "receipt": str(appointment.id)}

    with pytest.raises(ValidationError):
        payment_service.verify_razorpay("order_1")
    assert Appointment.query.get(appointment.id).payment is False


def test_razorpay_gateway_error_is_external(appointment, razorpay_client):
    razorpay_client.order.fetch.side_effect = RuntimeError("gateway timeout")

    with pytest.raises(ExternalServiceError):
        payment_service.verify_razorpay("order_1")


def test_missing_gateway_config(app, user, appointment):
    app.config['STRIPE_SECRET_KEY'] = None
    with pytest.raises(ExternalServiceError):
        payment_service.create_stripe_checkout(user.id, appointment.id, "http://localhost")
