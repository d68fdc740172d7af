from datetime import datetime, timedelta
import logging

import click
from flask import Flask

from extensions import db
from src.models import Appointment, Clinic, Document, Medicine, Patient, User


logger = logging.getLogger("cli")

DEMO_DOCTORS = [
    ("Sarah Jenkins", "sarah.jenkins@clinicforce.test"),
    ("Alan Grant", "alan.grant@clinicforce.test"),
    ("Emily Chen", "emily.chen@clinicforce.test"),
]

DEMO_PATIENTS = [
    # first, last, email, phone, chart_id, status, doctor index
    ("Michael", "Ross", "michael.ross@example.com", "+15550123456", 8821, "active", 0),
    ("Emma", "Watson", "emma.watson@example.com", "+15552345678", 8822, "active", 1),
    ("John", "Doe", "john.doe@example.com", "+15553456789", 8790, "inactive", 0),
    ("Alice", "Wong", "alice.w@example.com", "+15554567890", 8805, "critical", 2),
    ("Robert", "Brown", "r.brown@example.com", "+15555678901", 8810, "active", 1),
    ("Jane", "Smith", "jane.smith@example.com", "+15556789012", 8811, "active", 2),
]

DEMO_MEDICINES = [
    ("Amoxicillin", "Amoxil", "Capsule"),
    ("Ibuprofen", "Advil", "Tablet"),
    ("Paracetamol", "Tylenol", "Tablet"),
    ("Salbutamol", "Ventolin", "Inhaler"),
    ("Cetirizine", "Zyrtec", "Syrup"),
]


def seed_demo_data(subdomain: str = "demo") -> Clinic:
    """Insert a demo clinic with staff, patients, a week of appointments and medicines."""
    clinic = Clinic.query.filter_by(subdomain=subdomain).first()
    if clinic:
        logger.info(f"[seed] Clinic {subdomain!r} already exists, skipping.")
        return clinic

    clinic = Clinic(name="Clinicforce Demo", subdomain=subdomain, phone="+15550000000")
    db.session.add(clinic)
    db.session.flush()

    doctors = []
    for name, email in DEMO_DOCTORS:
        first, last = name.split(" ", 1)
        doctor = User(
            clinic_id=clinic.id, name=name, email=email,
            first_name=first, last_name=last, type="doctor",
        )
        db.session.add(doctor)
        doctors.append(doctor)
    db.session.flush()

    patients = []
    for first, last, email, phone, chart_id, status, doctor_idx in DEMO_PATIENTS:
        patient = Patient(
            clinic_id=clinic.id, first_name=first, last_name=last, email=email,
            phone=phone, chart_id=chart_id, status=status,
            assigned_doctor_id=doctors[doctor_idx].id,
        )
        db.session.add(patient)
        patients.append(patient)
    db.session.flush()

    today = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
    kinds = ["general", "follow-up", "general", "emergency"]
    for offset in range(-3, 4):
        for slot, patient in enumerate(patients[:4]):
            start = today + timedelta(days=offset, hours=9 + slot * 2, minutes=30 * (slot % 2))
            past = offset < 0
            db.session.add(
                Appointment(
                    clinic_id=clinic.id,
                    patient_id=patient.id,
                    doctor_id=patient.assigned_doctor_id,
                    title="General Checkup" if kinds[slot] == "general" else kinds[slot].title(),
                    type=kinds[slot],
                    status="completed" if past else ("confirmed" if slot % 2 == 0 else "pending"),
                    date=start,
                    duration=30 if slot % 2 else 60,
                )
            )

    for name, brand, form in DEMO_MEDICINES:
        db.session.add(
            Medicine(
                clinic_id=clinic.id, name=name, brand=brand, form=form,
                last_prescribed_date=today - timedelta(days=len(name)),
            )
        )

    db.session.add(
        Document(
            clinic_id=clinic.id,
            title="Hematology report",
            type="lab-report",
            assigned_to_id=patients[0].id,
            assigned_to_type="patient",
            file_key=f"clinics/{clinic.id}/patients/{patients[0].id}/hematology.pdf",
            file_name="hematology.pdf",
            file_size=184_320,
            mime_type="application/pdf",
        )
    )

    db.session.commit()
    logger.info(f"[seed] Created demo clinic {subdomain!r} (id={clinic.id})")
    return clinic


def register_cli(app: Flask):
    @app.cli.command("seed")
    @click.option("--subdomain", default="demo", show_default=True, help="Subdomain of the demo clinic.")
    def seed_command(subdomain):
        """Create the tables (if needed) and load demo data."""
        db.create_all()
        clinic = seed_demo_data(subdomain)
        click.echo(f"Seeded clinic {clinic.name} ({clinic.subdomain}).")
