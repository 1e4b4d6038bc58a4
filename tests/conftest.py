"""Shared test fixtures."""
import pytest
from unittest.mock import patch
from flask_jwt_extended import create_access_token

from app import create_app
from app.extensions import db
from app.models import Doctor, User


@pytest.fixture
def app():
    """Application on an in-memory database, context pushed for the test."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def mailer():
    """Replace real delivery; tests inspect the calls."""
    with patch('tasks.email_tasks.send_verification_email') as send:
        send.return_value = {'success': True, 'error': None}
        yield send


def _make_user(name, email, verified=True, password='password123'):
    user = User(name=name, email=email, is_verified=verified)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def user(app):
    """Verified patient."""
    return _make_user('Alice Patient', 'alice@example.com')


@pytest.fixture
def other_user(app):
    return _make_user('Bob Patient', 'bob@example.com')


@pytest.fixture
def unverified_user(app):
    return _make_user('Carol Pending', 'carol@example.com', verified=False)


@pytest.fixture
def make_doctor(app):
    """Factory for doctors; defaults to an available doctor with fees 500."""
    counter = {'n': 0}

    def _create(available=True, fees=500, password='doctor-pass-123'):
        counter['n'] += 1
        doctor = Doctor(
            name=f"Dr. Test {counter['n']}",
            email=f"doctor{counter['n']}@example.com",
            speciality='General physician',
            degree='MBBS',
            experience='4 Years',
            about='Primary care.',
            fees=fees,
            available=available,
            address={'line1': 'Street 1', 'line2': 'City'},
        )
        doctor.set_password(password)
        db.session.add(doctor)
        db.session.commit()
        return doctor

    return _create


@pytest.fixture
def doctor(make_doctor):
    return make_doctor()


@pytest.fixture
def user_headers(user):
    token = create_access_token(identity=str(user.id), additional_claims={'role': 'user'})
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def other_user_headers(other_user):
    token = create_access_token(identity=str(other_user.id), additional_claims={'role': 'user'})
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def doctor_headers(doctor):
    token = create_access_token(identity=str(doctor.id), additional_claims={'role': 'doctor'})
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def admin_headers(app):
    token = create_access_token(identity=app.config['ADMIN_EMAIL'], additional_claims={'role': 'admin'})
    return {'Authorization': f'Bearer {token}'}
