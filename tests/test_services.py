import json
from datetime import date, datetime, timedelta

from extensions import db
from src.models import Appointment, Document, Medicine, Patient


def _patient(clinic, first="Michael", last="Ross", **fields):
    from src.services.patient_service import upsert_patient
    return upsert_patient(clinic.id, first_name=first, last_name=last, **fields)


def _appointment(clinic, patient, doctor, start, status="pending", **fields):
    from src.services.appointment_service import upsert_appointment
    return upsert_appointment(
        clinic.id, patient_id=patient.id, doctor_id=doctor.id, date=start, status=status, **fields
    )


# -------------------------------
# Patients
# -------------------------------

def test_new_patients_get_sequential_chart_ids(clinic, fake_redis):
    first = _patient(clinic)
    second = _patient(clinic, "Emma", "Watson")

    assert (first.chart_id, second.chart_id) == (1, 2)
    feed = fake_redis.lists[f"activity:{clinic.id}"]
    assert json.loads(feed[0])["title"] == "New patient"
    assert len(feed) == 2


def test_duplicate_chart_id_is_rejected(clinic):
    assert _patient(clinic, chart_id=8821) is not None
    assert _patient(clinic, "Emma", "Watson", chart_id=8821) is None
    # Session is usable again after the rollback
    assert Patient.query.filter_by(clinic_id=clinic.id).count() == 1


def test_update_keeps_chart_id_when_not_given(clinic):
    from src.services.patient_service import upsert_patient

    patient = _patient(clinic, chart_id=40)
    updated = upsert_patient(clinic.id, patient_id=patient.id, first_name="Mike", last_name="Ross", status="critical")

    assert updated.chart_id == 40
    assert updated.full_name == "Mike Ross"
    assert updated.status == "critical"


def test_patient_rows_include_last_completed_visit(clinic, doctor):
    from src.services.patient_service import list_patient_rows

    patient = _patient(clinic, assigned_doctor_id=doctor.id)
    _appointment(clinic, patient, doctor, datetime(2025, 9, 1, 9, 0), status="completed")
    _appointment(clinic, patient, doctor, datetime(2025, 9, 20, 9, 0), status="completed")
    _appointment(clinic, patient, doctor, datetime(2025, 10, 20, 9, 0), status="pending")
    _patient(clinic, "Emma", "Watson")

    rows = {row["name"]: row for row in list_patient_rows(clinic.id)}

    ross = rows["Michael Ross"]
    assert ross["last_visit"] == datetime(2025, 9, 20, 9, 0)
    assert ross["last_visit_human"] == "Sep 20, 2025"
    assert ross["assigned_doctor"] == "Dr. Sarah Jenkins"
    assert ross["chart_id"] == 1
    assert rows["Emma Watson"]["last_visit"] is None


def test_patient_rows_sort_chart_ids_numerically(clinic):
    from src.services.patient_service import list_patient_rows
    from src.ui.tables import sort_rows

    for chart_id, last in ((100, "Hundred"), (9, "Nine"), (10, "Ten")):
        _patient(clinic, "Pat", last, chart_id=chart_id)

    rows = sort_rows(list_patient_rows(clinic.id), "chart_id", "asc")
    assert [row["chart_id"] for row in rows] == [9, 10, 100]


def test_delete_patient_with_history_only_deactivates(clinic, doctor):
    from src.services.patient_service import delete_patient, list_patient_rows

    kept = _patient(clinic)
    _appointment(clinic, kept, doctor, datetime(2025, 9, 1, 9, 0))
    dropped = _patient(clinic, "Emma", "Watson")
    dropped_id = dropped.id

    assert delete_patient(clinic.id, kept.id)
    assert delete_patient(clinic.id, dropped_id)
    assert not delete_patient(clinic.id, 9999)

    assert db.session.get(Patient, dropped_id) is None
    assert db.session.get(Patient, kept.id).status == "inactive"
    assert list_patient_rows(clinic.id) == []


def test_patient_detail_lists_history_and_documents(clinic, doctor):
    from src.services.patient_service import get_patient_detail

    patient = _patient(clinic, assigned_doctor_id=doctor.id)
    _appointment(clinic, patient, doctor, datetime(2025, 9, 1, 9, 0), status="completed")
    _appointment(clinic, patient, doctor, datetime(2025, 10, 1, 9, 0))
    db.session.add(
        Document(
            clinic_id=clinic.id, title="X-ray", type="x-ray", assigned_to_id=patient.id,
            assigned_to_type="patient", file_key="k", file_name="chest.png",
            file_size=2048, mime_type="image/png",
        )
    )
    db.session.commit()

    detail = get_patient_detail(clinic.id, patient.id)

    assert detail["assigned_doctor"] == "Dr. Sarah Jenkins"
    assert [a["date"].month for a in detail["appointments"]] == [10, 9]
    assert [d["file_name"] for d in detail["documents"]] == ["chest.png"]
    assert get_patient_detail(clinic.id, 9999) is None


# -------------------------------
# Appointments
# -------------------------------

def test_appointment_requires_clinic_patient_and_doctor(clinic, doctor):
    from src.services.appointment_service import upsert_appointment

    patient = _patient(clinic)
    assert upsert_appointment(clinic.id, patient_id=patient.id, doctor_id=9999, date=datetime(2025, 10, 5, 9)) is None
    assert upsert_appointment(clinic.id, patient_id=9999, doctor_id=doctor.id, date=datetime(2025, 10, 5, 9)) is None


def test_appointment_defaults(clinic, doctor):
    patient = _patient(clinic)
    appt = _appointment(clinic, patient, doctor, datetime(2025, 10, 5, 9, 0), status=None, type="follow-up")

    assert appt.status == "pending"
    assert appt.title == "Follow-up visit"
    assert appt.end == datetime(2025, 10, 5, 9, 30)


def test_moving_an_appointment_marks_it_rescheduled(clinic, doctor):
    from src.services.appointment_service import upsert_appointment

    patient = _patient(clinic)
    appt = _appointment(clinic, patient, doctor, datetime(2025, 10, 5, 9, 0), status="confirmed")

    moved = upsert_appointment(
        clinic.id, appointment_id=appt.id, patient_id=patient.id, doctor_id=doctor.id,
        date=datetime(2025, 10, 6, 11, 0),
    )
    assert moved.status == "rescheduled"

    kept = upsert_appointment(
        clinic.id, appointment_id=appt.id, patient_id=patient.id, doctor_id=doctor.id,
        date=datetime(2025, 10, 7, 11, 0), status="confirmed",
    )
    assert kept.status == "confirmed"


def test_calendar_events_are_limited_to_range(clinic, doctor):
    from src.services.appointment_service import list_calendar_events, list_day_schedule

    patient = _patient(clinic)
    _appointment(clinic, patient, doctor, datetime(2025, 10, 4, 23, 30))
    _appointment(clinic, patient, doctor, datetime(2025, 10, 5, 14, 0), type="emergency")
    _appointment(clinic, patient, doctor, datetime(2025, 10, 5, 9, 0))
    _appointment(clinic, patient, doctor, datetime(2025, 10, 6, 0, 0))

    events = list_calendar_events(clinic.id, date(2025, 10, 5), date(2025, 10, 5))
    assert [e.start.hour for e in events] == [9, 14]
    assert events[0].title == "Michael Ross"
    assert events[0].doctor_name == "Dr. Sarah Jenkins"

    schedule = list_day_schedule(clinic.id, date(2025, 10, 5))
    assert [(row["time"], row["visit_type"]) for row in schedule] == [
        ("09:00 AM", "General"),
        ("02:00 PM", "Emergency"),
    ]


def test_delete_appointment(clinic, doctor, fake_redis):
    from src.services.appointment_service import delete_appointment

    patient = _patient(clinic)
    appt = _appointment(clinic, patient, doctor, datetime(2025, 10, 5, 9, 0))

    assert delete_appointment(clinic.id, appt.id)
    assert not delete_appointment(clinic.id, appt.id)
    assert Appointment.query.count() == 0
    assert json.loads(fake_redis.lists[f"activity:{clinic.id}"][0])["title"] == "Appointment removed"


# -------------------------------
# Medicines
# -------------------------------

def test_medicines_are_soft_deleted(clinic):
    from src.services.medicine_service import (
        delete_medicine,
        list_medicine_forms,
        list_medicine_rows,
        upsert_medicine,
    )

    ibuprofen = upsert_medicine(clinic.id, name="Ibuprofen", brand="Advil", form="Tablet",
                                last_prescribed_date=datetime(2025, 9, 30))
    upsert_medicine(clinic.id, name="Paracetamol", form="Tablet")
    upsert_medicine(clinic.id, name="Cetirizine", form="Syrup")

    assert list_medicine_forms(clinic.id) == ["Syrup", "Tablet"]
    assert delete_medicine(clinic.id, ibuprofen.id)

    rows = list_medicine_rows(clinic.id)
    assert [row["name"] for row in rows] == ["Cetirizine", "Paracetamol"]
    assert rows[0]["last_prescribed_human"] == "—"
    assert Medicine.query.count() == 3


# -------------------------------
# Dashboard + reports
# -------------------------------

def test_home_snapshot(clinic, doctor):
    from src.services.dashboard_service import get_home_snapshot

    now = datetime(2025, 10, 5, 8, 0)
    patient = _patient(clinic)
    _appointment(clinic, patient, doctor, datetime(2025, 10, 5, 9, 0))
    _appointment(clinic, patient, doctor, datetime(2025, 10, 5, 10, 0), status="confirmed")
    _appointment(clinic, patient, doctor, datetime(2025, 10, 4, 10, 0), status="completed")

    snapshot = get_home_snapshot(clinic.id, now)

    cards = {card.label: card for card in snapshot["stat_cards"]}
    assert cards["Total Patients"].value == "1"
    assert cards["Appointments Today"].value == 2
    assert cards["Appointments Today"].delta == "+100%"
    assert cards["Pending Appointments"].value == 1
    assert [row["time"] for row in snapshot["today_appointments"]] == ["09:00 AM", "10:00 AM"]
    assert snapshot["today_label"] == "Sunday, Oct 05"
    assert snapshot["activity"][0].title == "Appointment booked"


def test_appointment_report(clinic, doctor):
    from src.services.dashboard_service import get_appointment_report

    patient = _patient(clinic)
    for day, status in ((1, "completed"), (2, "completed"), (3, "completed"), (4, "no-show")):
        _appointment(clinic, patient, doctor, datetime(2025, 9, day, 9, 0), status=status)

    report = get_appointment_report(clinic.id)

    assert report["total"] == 4
    assert report["no_show_rate"] == 25.0
    assert dict(report["by_status"])["completed"] == 3
    assert dict(report["by_type"])["General"] == 4
    assert report["per_doctor"] == [{"doctor": "Dr. Sarah Jenkins", "total": 4, "completed": 3}]


def test_patient_report_counts_by_status(clinic):
    from src.services.dashboard_service import get_patient_report

    _patient(clinic, gender="female", blood_group="O+")
    _patient(clinic, "Emma", "Watson", status="critical")

    report = get_patient_report(clinic.id, datetime.utcnow(), months=3)

    assert dict(report["by_status"]) == {"active": 1, "inactive": 0, "critical": 1}
    assert dict(report["by_gender"]) == {"female": 1, "unspecified": 1}
    assert len(report["new_per_month"]) == 3
    assert report["new_per_month"][-1]["count"] == 2


def test_clinic_report(clinic):
    from src.services.dashboard_service import get_clinic_report

    _patient(clinic)
    report = get_clinic_report(clinic.id)
    assert report == {"patients": 1, "doctors": 1, "staff": 2, "appointments": 0, "medicines": 0}


# -------------------------------
# Activity feed + clinic resolution
# -------------------------------

def test_activity_feed_marks_recent_entries_unread(fake_redis):
    from src.services.activity_service import list_recent_activity, record_activity

    now = datetime(2025, 10, 5, 12, 0)
    old = {"title": "Old", "body": None, "created_at": (now - timedelta(hours=5)).isoformat()}
    fake_redis.lpush("activity:1", json.dumps(old))
    fake_redis.lpush("activity:1", "{not json")
    assert record_activity(1, "Fresh", "body")

    events = list_recent_activity(1, now=datetime.utcnow())
    assert [e.title for e in events] == ["Fresh", "Old"]
    assert events[0].unread and events[0].body == "body"
    assert not events[1].unread
    assert fake_redis.ttls["activity:1"] == 7 * 24 * 3600


def test_activity_feed_survives_redis_outage(broken_redis):
    from src.services import activity_service

    assert activity_service.record_activity(1, "Lost") is False
    assert activity_service.list_recent_activity(1) == []


def test_activity_client_reads_redis_settings_from_config(app, monkeypatch):
    from src.services import activity_service

    monkeypatch.setattr(activity_service, "r", None)
    app.config.update(REDIS_HOST="redis.internal", REDIS_PORT=6390)

    with app.app_context():
        client = activity_service._client()
        assert activity_service._client() is client

    kwargs = client.connection_pool.connection_kwargs
    assert (kwargs["host"], kwargs["port"]) == ("redis.internal", 6390)
    assert kwargs["socket_connect_timeout"] == activity_service.REDIS_TIMEOUT_SEC


def test_current_clinic_prefers_configured_subdomain(app, clinic):
    from src.models import Clinic
    from src.services.clinic_service import get_current_clinic

    other = Clinic(name="Hillside", subdomain="hillside")
    db.session.add(other)
    db.session.commit()

    app.config["CLINIC_SUBDOMAIN"] = "hillside"
    with app.app_context():
        assert get_current_clinic().subdomain == "hillside"

    app.config["CLINIC_SUBDOMAIN"] = None
    with app.app_context():
        assert get_current_clinic().subdomain == "riverside"


def test_local_now_follows_clinic_timezone(app, app_ctx):
    from src.services.clinic_service import clinic_timezone, local_now

    app.config["CLINIC_TIMEZONE"] = "Asia/Karachi"
    assert clinic_timezone().zone == "Asia/Karachi"
    assert local_now().tzinfo is None

    app.config["CLINIC_TIMEZONE"] = "Mars/Olympus"
    assert clinic_timezone().zone == "UTC"
