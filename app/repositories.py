"""Data-access collaborators used by :class:`app.service.ReviewService`.

Each store is described by a ``Protocol`` so the service can be exercised with
in-memory fakes; the ``Sql*`` classes are the SQLAlchemy-backed versions used
by the HTTP application.
"""

from typing import List, Optional, Protocol

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import ConflictError
from app.models import Appointment, Doctor, Patient, Review
from app.utils.logging import get_logger

logger = get_logger(__name__)


class PatientStore(Protocol):
    def find_by_id(self, patient_id: int) -> Optional[Patient]: ...


class DoctorStore(Protocol):
    def find_by_id(self, doctor_id: int) -> Optional[Doctor]: ...


class AppointmentStore(Protocol):
    def find_by_id(self, appointment_id: int) -> Optional[Appointment]: ...


class ReviewStore(Protocol):
    def find_by_id(self, review_id: int) -> Optional[Review]: ...

    def find_by_appointment_id(self, appointment_id: int) -> Optional[Review]: ...

    def find_by_patient_id(self, patient_id: int) -> List[Review]: ...

    def find_by_doctor_id(self, doctor_id: int) -> List[Review]: ...

    def average_rating_by_doctor(self, doctor_id: int) -> Optional[float]: ...

    def count_by_doctor(self, doctor_id: int) -> int: ...

    def save(self, review: Review) -> Review: ...


class SqlPatientStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, patient_id: int) -> Optional[Patient]:
        return self.db.get(Patient, patient_id)


class SqlDoctorStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, doctor_id: int) -> Optional[Doctor]:
        return self.db.get(Doctor, doctor_id)


class SqlAppointmentStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, appointment_id: int) -> Optional[Appointment]:
        return self.db.get(Appointment, appointment_id)


class SqlReviewStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, review_id: int) -> Optional[Review]:
        return self.db.get(Review, review_id)

    def find_by_appointment_id(self, appointment_id: int) -> Optional[Review]:
        return self.db.execute(
            select(Review).where(Review.appointment_id == appointment_id)
        ).scalar_one_or_none()

    def find_by_patient_id(self, patient_id: int) -> List[Review]:
        return list(
            self.db.execute(
                select(Review).where(Review.patient_id == patient_id).order_by(Review.id)
            ).scalars().all()
        )

    def find_by_doctor_id(self, doctor_id: int) -> List[Review]:
        return list(
            self.db.execute(
                select(Review).where(Review.doctor_id == doctor_id).order_by(Review.id)
            ).scalars().all()
        )

    def average_rating_by_doctor(self, doctor_id: int) -> Optional[float]:
        avg = self.db.execute(
            select(func.avg(Review.rating)).where(Review.doctor_id == doctor_id)
        ).scalar_one()
        return float(avg) if avg is not None else None

    def count_by_doctor(self, doctor_id: int) -> int:
        return self.db.execute(
            select(func.count(Review.id)).where(Review.doctor_id == doctor_id)
        ).scalar_one()

    def save(self, review: Review) -> Review:
        self.db.add(review)
        try:
            self.db.commit()
        except IntegrityError as e:
            # uq_reviews_appointment_id catches submissions that raced past the service check
            self.db.rollback()
            logger.warning("Review insert rejected by constraint", appointment_id=review.appointment_id)
            raise ConflictError("Appointment already reviewed") from e
        self.db.refresh(review)
        return review
