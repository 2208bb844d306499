import pytest
from pydantic import ValidationError

from app.schemas import ReviewCreate, ReviewUpdate


@pytest.mark.parametrize("rating", [0, 6, -1])
def test_create_rating_out_of_range_rejected(rating):
    with pytest.raises(ValidationError):
        ReviewCreate(patient_id=1, doctor_id=2, appointment_id=3, rating=rating, comment="Too high")


def test_create_comment_optional():
    dto = ReviewCreate(patient_id=1, doctor_id=2, appointment_id=3, rating=1)
    assert dto.comment is None


def test_update_tracks_only_sent_fields():
    dto = ReviewUpdate.model_validate({"rating": 2})
    assert dto.changes() == {"rating": 2}


def test_update_empty_payload_changes_nothing():
    assert ReviewUpdate().changes() == {}


@pytest.mark.parametrize("field", ["rating", "status"])
def test_update_rejects_null_for_required_columns(field):
    with pytest.raises(ValidationError):
        ReviewUpdate.model_validate({field: None})


def test_update_rating_out_of_range_rejected():
    with pytest.raises(ValidationError):
        ReviewUpdate(rating=7)


def test_create_rejects_boolean_rating():
    with pytest.raises(ValidationError):
        ReviewCreate.model_validate({"patient_id": 1, "doctor_id": 2, "appointment_id": 3, "rating": True})


@pytest.mark.parametrize("field", ["patient_id", "doctor_id", "appointment_id"])
def test_create_rejects_ids_beyond_integer_column(field):
    payload = {"patient_id": 1, "doctor_id": 2, "appointment_id": 3, "rating": 4}
    payload[field] = 2**31

    with pytest.raises(ValidationError):
        ReviewCreate.model_validate(payload)
