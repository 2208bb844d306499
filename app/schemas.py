from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Annotated, Optional

# ids are INTEGER columns; larger values never reach the driver
ID_MAX = 2**31 - 1

EntityId = Annotated[int, Field(ge=1, le=ID_MAX)]


class ReviewCreate(BaseModel):
    patient_id: EntityId
    doctor_id: EntityId
    appointment_id: EntityId
    rating: int = Field(ge=1, le=5, strict=True)
    comment: Optional[str] = None


class ReviewUpdate(BaseModel):
    """Partial update: only fields present in ``model_fields_set`` are applied.

    ``comment`` may be sent as ``null`` to clear it. ``rating`` and ``status``
    are required columns, so an explicit ``null`` for either is rejected.
    """

    rating: Optional[int] = Field(default=None, ge=1, le=5, strict=True)
    comment: Optional[str] = None
    status: Optional[str] = Field(default=None, min_length=1, max_length=20)

    @field_validator("rating", "status")
    @classmethod
    def _not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} may be omitted but not null")
        return value

    def changes(self) -> dict:
        return self.model_dump(include=self.model_fields_set)


class ReviewOut(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    appointment_id: int
    rating: int
    comment: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DoctorRatingOut(BaseModel):
    doctor_id: int
    avg_rating: Optional[float] = None
    count: int
