from typing import List, Optional

from app.exceptions import ConflictError, NotFoundError
from app.mapper import ReviewMapper
from app.repositories import AppointmentStore, DoctorStore, PatientStore, ReviewStore
from app.schemas import DoctorRatingOut, ReviewCreate, ReviewOut, ReviewUpdate
from app.utils.logging import get_logger

logger = get_logger(__name__)


class ReviewService:
    """Patient reviews of doctors, one per appointment.

    Lookups that miss raise :class:`NotFoundError`; ownership mismatches and
    duplicate submissions raise :class:`ConflictError`. Anything else raised
    by a collaborator propagates unchanged.
    """

    def __init__(
        self,
        patients: PatientStore,
        doctors: DoctorStore,
        appointments: AppointmentStore,
        reviews: ReviewStore,
        mapper: ReviewMapper,
    ):
        self.patients = patients
        self.doctors = doctors
        self.appointments = appointments
        self.reviews = reviews
        self.mapper = mapper

    def create(self, dto: ReviewCreate) -> ReviewOut:
        # checks run in a fixed order and stop at the first failure
        patient = self.patients.find_by_id(dto.patient_id)
        if patient is None:
            logger.warning("Review rejected: patient not found", patient_id=dto.patient_id)
            raise NotFoundError("Patient not found")

        doctor = self.doctors.find_by_id(dto.doctor_id)
        if doctor is None:
            logger.warning("Review rejected: doctor not found", doctor_id=dto.doctor_id)
            raise NotFoundError("Doctor not found")

        appointment = self.appointments.find_by_id(dto.appointment_id)
        if appointment is None:
            logger.warning("Review rejected: appointment not found", appointment_id=dto.appointment_id)
            raise NotFoundError("Appointment not found")

        if appointment.patient_id != dto.patient_id or appointment.doctor_id != dto.doctor_id:
            logger.warning(
                "Review rejected: appointment ownership mismatch",
                appointment_id=dto.appointment_id,
                patient_id=dto.patient_id,
                doctor_id=dto.doctor_id,
            )
            raise ConflictError("Appointment does not belong to this patient and doctor")

        if self.reviews.find_by_appointment_id(dto.appointment_id) is not None:
            logger.warning("Review rejected: appointment already reviewed", appointment_id=dto.appointment_id)
            raise ConflictError("Appointment already reviewed")

        review = self.mapper.create_to_entity(dto, patient, doctor, appointment)
        saved = self.reviews.save(review)
        logger.info("Review created", review_id=saved.id, appointment_id=dto.appointment_id)
        return self.mapper.to_response(saved)

    def get_by_id(self, review_id: int) -> ReviewOut:
        review = self.reviews.find_by_id(review_id)
        if review is None:
            raise NotFoundError("Review not found")
        return self.mapper.to_response(review)

    def get_by_appointment(self, appointment_id: int) -> ReviewOut:
        review = self.reviews.find_by_appointment_id(appointment_id)
        if review is None:
            raise NotFoundError("Review not found for appointment")
        return self.mapper.to_response(review)

    def get_by_patient(self, patient_id: int) -> List[ReviewOut]:
        return [self.mapper.to_response(r) for r in self.reviews.find_by_patient_id(patient_id)]

    def get_by_doctor(self, doctor_id: int) -> List[ReviewOut]:
        return [self.mapper.to_response(r) for r in self.reviews.find_by_doctor_id(doctor_id)]

    def get_average_rating_by_doctor(self, doctor_id: int) -> Optional[float]:
        """Average rating, or ``None`` when the doctor has no reviews."""
        return self.reviews.average_rating_by_doctor(doctor_id)

    def get_rating_summary_by_doctor(self, doctor_id: int) -> DoctorRatingOut:
        return DoctorRatingOut(
            doctor_id=doctor_id,
            avg_rating=self.get_average_rating_by_doctor(doctor_id),
            count=self.reviews.count_by_doctor(doctor_id),
        )

    def update(self, review_id: int, dto: ReviewUpdate) -> ReviewOut:
        review = self.reviews.find_by_id(review_id)
        if review is None:
            raise NotFoundError("Review not found")

        self.mapper.apply_update(review, dto)
        saved = self.reviews.save(review)
        logger.info("Review updated", review_id=review_id, fields=sorted(dto.model_fields_set))
        return self.mapper.to_response(saved)
