from app.models import Appointment, Doctor, Patient, Review, REVIEW_STATUS_ACTIVE
from app.schemas import ReviewCreate, ReviewOut, ReviewUpdate


class ReviewMapper:
    """Converts between review payloads and ``Review`` rows."""

    def create_to_entity(
        self,
        dto: ReviewCreate,
        patient: Patient,
        doctor: Doctor,
        appointment: Appointment,
    ) -> Review:
        return Review(
            patient_id=patient.id,
            doctor_id=doctor.id,
            appointment_id=appointment.id,
            rating=dto.rating,
            comment=dto.comment,
            status=REVIEW_STATUS_ACTIVE,
        )

    def apply_update(self, entity: Review, dto: ReviewUpdate) -> None:
        for field, value in dto.changes().items():
            setattr(entity, field, value)

    def to_response(self, entity: Review) -> ReviewOut:
        return ReviewOut.model_validate(entity)
