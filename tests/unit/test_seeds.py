"""Tests for the database CLI commands."""
from app.models import Doctor
from app.seeds import DEMO_DOCTORS, DEMO_PASSWORD


def test_seed_doctors_command_is_idempotent(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["seed-doctors"])
    assert result.exit_code == 0
    assert f"Added {len(DEMO_DOCTORS)} doctor(s)." in result.output

    result = runner.invoke(args=["seed-doctors"])
    assert "Added 0 doctor(s)." in result.output

    assert Doctor.query.count() == len(DEMO_DOCTORS)
    seeded = Doctor.query.filter_by(email=DEMO_DOCTORS[0]["email"]).first()
    assert seeded.available is True
    assert seeded.check_password(DEMO_PASSWORD)
    assert seeded.slots_booked == {}


def test_init_db_command(app):
    result = app.test_cli_runner().invoke(args=["init-db"])
    assert result.exit_code == 0
    assert "Database tables created." in result.output
