from fastapi import FastAPI, Depends, HTTPException, Path, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import select
from typing import Annotated, List

from prometheus_fastapi_instrumentator import Instrumentator

from app.config import CORS_ORIGINS
from app.database import get_db_session, engine
from app.exceptions import ConflictError, NotFoundError
from app.mapper import ReviewMapper
from app.models import Base
from app.repositories import SqlAppointmentStore, SqlDoctorStore, SqlPatientStore, SqlReviewStore
from app.schemas import ID_MAX, ReviewCreate, ReviewOut, ReviewUpdate, DoctorRatingOut
from app.service import ReviewService
from app.utils.logging import add_context, clear_context, configure_logging, get_logger

logger = get_logger(__name__)

app = FastAPI(title="Doctor Review Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Instrumentator().instrument(app).expose(app)

PathId = Annotated[int, Path(ge=1, le=ID_MAX)]


@app.middleware("http")
async def log_context_middleware(request: Request, call_next):
    """Bind the request method and path to every log line emitted while handling it."""
    clear_context()
    add_context(method=request.method, path=request.url.path)
    try:
        return await call_next(request)
    finally:
        clear_context()


@app.exception_handler(NotFoundError)
def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.detail})


@app.exception_handler(ConflictError)
def conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": exc.detail})


def get_db():
    with get_db_session() as db:
        yield db


def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    return ReviewService(
        patients=SqlPatientStore(db),
        doctors=SqlDoctorStore(db),
        appointments=SqlAppointmentStore(db),
        reviews=SqlReviewStore(db),
        mapper=ReviewMapper(),
    )


@app.on_event("startup")
def on_startup():
    configure_logging()
    Base.metadata.create_all(bind=engine)
    logger.info("Review service started")


@app.post("/reviews", response_model=ReviewOut, status_code=201)
def create_review(payload: ReviewCreate, service: ReviewService = Depends(get_review_service)):
    return service.create(payload)


@app.get("/reviews/{review_id}", response_model=ReviewOut)
def get_review(review_id: PathId, service: ReviewService = Depends(get_review_service)):
    return service.get_by_id(review_id)


@app.patch("/reviews/{review_id}", response_model=ReviewOut)
def update_review(
    review_id: PathId,
    payload: ReviewUpdate,
    service: ReviewService = Depends(get_review_service),
):
    return service.update(review_id, payload)


@app.get("/appointments/{appointment_id}/review", response_model=ReviewOut)
def get_appointment_review(appointment_id: PathId, service: ReviewService = Depends(get_review_service)):
    return service.get_by_appointment(appointment_id)


@app.get("/patients/{patient_id}/reviews", response_model=List[ReviewOut])
def list_patient_reviews(patient_id: PathId, service: ReviewService = Depends(get_review_service)):
    return service.get_by_patient(patient_id)


@app.get("/doctors/{doctor_id}/reviews", response_model=List[ReviewOut])
def list_doctor_reviews(doctor_id: PathId, service: ReviewService = Depends(get_review_service)):
    return service.get_by_doctor(doctor_id)


@app.get("/doctors/{doctor_id}/rating", response_model=DoctorRatingOut)
def get_doctor_rating(doctor_id: PathId, service: ReviewService = Depends(get_review_service)):
    return service.get_rating_summary_by_doctor(doctor_id)


@app.get("/health", tags=["health"])
def health(db: Session = Depends(get_db)):
    try:
        db.execute(select(1))
    except Exception as e:
        logger.error("Health check failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Database unavailable: {e}",
        )
    return {"status": "ok", "db": "ok"}
