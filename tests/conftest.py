import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from app.models import Appointment, Doctor, Patient, Review


@pytest.fixture(scope="session")
def app_and_engine():
    import importlib
    main_mod = importlib.import_module("app.main")

    from app.database import engine
    from app.models import Base

    Base.metadata.create_all(bind=engine)

    return main_mod.app, engine


@pytest.fixture()
def client(app_and_engine):
    app, _ = app_and_engine
    return TestClient(app)


@pytest.fixture(autouse=True)
def _clean_db(app_and_engine):
    _, engine = app_and_engine
    from app.models import Base

    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture()
def seeded(app_and_engine):
    """Patients 1/4, doctors 2/5; appointment 3 is 1->2, 6 is 4->5, 7 is 4->2."""
    from app.database import get_db_session

    with get_db_session() as db:
        db.add_all([
            Patient(id=1, full_name="An Nguyen"),
            Patient(id=4, full_name="Binh Tran"),
            Doctor(id=2, full_name="Dr. Chau Le", specialty="Cardiology"),
            Doctor(id=5, full_name="Dr. Dung Pham", specialty="Dermatology"),
        ])
        db.flush()
        db.add_all([
            Appointment(id=3, patient_id=1, doctor_id=2),
            Appointment(id=6, patient_id=4, doctor_id=5),
            Appointment(id=7, patient_id=4, doctor_id=2),
        ])
        db.commit()


class FakePatientStore:
    def __init__(self, *patients: Patient):
        self.rows = {p.id: p for p in patients}
        self.calls = []

    def find_by_id(self, patient_id: int) -> Optional[Patient]:
        self.calls.append(patient_id)
        return self.rows.get(patient_id)


class FakeDoctorStore:
    def __init__(self, *doctors: Doctor):
        self.rows = {d.id: d for d in doctors}
        self.calls = []

    def find_by_id(self, doctor_id: int) -> Optional[Doctor]:
        self.calls.append(doctor_id)
        return self.rows.get(doctor_id)


class FakeAppointmentStore:
    def __init__(self, *appointments: Appointment):
        self.rows = {a.id: a for a in appointments}
        self.calls = []

    def find_by_id(self, appointment_id: int) -> Optional[Appointment]:
        self.calls.append(appointment_id)
        return self.rows.get(appointment_id)


class FakeReviewStore:
    def __init__(self, *reviews: Review):
        self.rows: List[Review] = list(reviews)
        self.saved: List[Review] = []
        self.average: Optional[float] = None

    def find_by_id(self, review_id: int) -> Optional[Review]:
        return next((r for r in self.rows if r.id == review_id), None)

    def find_by_appointment_id(self, appointment_id: int) -> Optional[Review]:
        return next((r for r in self.rows if r.appointment_id == appointment_id), None)

    def find_by_patient_id(self, patient_id: int) -> List[Review]:
        return [r for r in self.rows if r.patient_id == patient_id]

    def find_by_doctor_id(self, doctor_id: int) -> List[Review]:
        return [r for r in self.rows if r.doctor_id == doctor_id]

    def average_rating_by_doctor(self, doctor_id: int) -> Optional[float]:
        return self.average

    def count_by_doctor(self, doctor_id: int) -> int:
        return len(self.find_by_doctor_id(doctor_id))

    def save(self, review: Review) -> Review:
        if review.id is None:
            review.id = max((r.id for r in self.rows), default=0) + 1
            self.rows.append(review)
        self.saved.append(review)
        return review
