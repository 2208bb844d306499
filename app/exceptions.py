class ReviewServiceError(Exception):
    """Base class for errors signalled by the review service."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(ReviewServiceError):
    """A referenced patient, doctor, appointment or review does not exist."""


class ConflictError(ReviewServiceError):
    """The request contradicts stored state (ownership mismatch, duplicate review)."""
