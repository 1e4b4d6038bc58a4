"""
Database setup and demo data, exposed as Flask CLI commands:

    flask --app wsgi init-db
    flask --app wsgi seed-doctors
"""
import logging

import click

from app.extensions import db
from app.models import Doctor

logger = logging.getLogger(__name__)

DEMO_DOCTORS = [
    {
        "name": "Dr. Richard James",
        "email": "richard.james@healthsphere.com",
        "speciality": "General physician",
        "degree": "MBBS",
        "experience": "4 Years",
        "about": "Committed to comprehensive primary care, preventive medicine and early diagnosis.",
        "fees": 500,
        "address": {"line1": "17th Cross, Richmond", "line2": "Circle, Ring Road, London"},
    },
    {
        "name": "Dr. Emily Larson",
        "email": "emily.larson@healthsphere.com",
        "speciality": "Gynecologist",
        "degree": "MBBS",
        "experience": "3 Years",
        "about": "Focused on women's health across every stage of life.",
        "fees": 600,
        "address": {"line1": "27th Cross, Richmond", "line2": "Circle, Ring Road, London"},
    },
    {
        "name": "Dr. Sarah Patel",
        "email": "sarah.patel@healthsphere.com",
        "speciality": "Dermatologist",
        "degree": "MBBS",
        "experience": "1 Years",
        "about": "Treats skin, hair and nail conditions for patients of all ages.",
        "fees": 300,
        "address": {"line1": "37th Cross, Richmond", "line2": "Circle, Ring Road, London"},
    },
]

DEMO_PASSWORD = "doctor123"


def seed_doctors():
    """Insert demo doctors that are not there yet. Returns the number added."""
    added = 0
    for data in DEMO_DOCTORS:
        if Doctor.query.filter_by(email=data["email"]).first():
            continue
        doctor = Doctor(available=True, **data)
        doctor.set_password(DEMO_PASSWORD)
        db.session.add(doctor)
        added += 1
    db.session.commit()
    logger.info("Seeded %d doctors", added)
    return added


def register_commands(app):
    @app.cli.command("init-db")
    def init_db_command():
        """Create all tables."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("seed-doctors")
    def seed_doctors_command():
        """Add demo doctors (password: doctor123)."""
        added = seed_doctors()
        click.echo(f"Added {added} doctor(s).")
