import logging
from contextlib import asynccontextmanager
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from config.logging_config import setup_logging
from core.errors import AcquisitionError, EnrollmentError, StoreError
from core.models import Contact
from core.session import RecognitionSession

logger = logging.getLogger(__name__)


# ============================================================================
# DATA MODELS
# ============================================================================
class RecognizeRequest(BaseModel):
    image: str
    subject: str = ''
    lecture_time: str = ''


class RegisterRequest(BaseModel):
    name: str
    images: List[str]
    email: Optional[str] = None
    phone: Optional[str] = None
    parent_email: Optional[str] = None
    parent_phone: Optional[str] = None


class ClassesHeldRequest(BaseModel):
    subject: str
    total: float


# ============================================================================
# APP FACTORY
# ============================================================================
def get_session(request: Request) -> RecognitionSession:
    session = getattr(request.app.state, 'session', None)
    if session is None:
        raise HTTPException(503, "Camera, models and data are not ready")
    return session


def _load_frame(session, image):
    try:
        return session.provider.load_image(image)
    except AcquisitionError as e:
        raise HTTPException(400, str(e)) from e


def create_app(session=None):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.session is None:
            try:
                app.state.session = RecognitionSession.from_settings()
                logger.info("Camera, models, and data are ready.")
            except (AcquisitionError, StoreError):
                logger.exception("Recognition session failed to start")
        yield

    app = FastAPI(title="Face Attendance Tracker", lifespan=lifespan)
    app.state.session = session
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_credentials=True,
                       allow_methods=["*"], allow_headers=["*"])

    # ------------------------------------------------------------------------
    # RECOGNITION
    # ------------------------------------------------------------------------
    @app.post("/api/recognize")
    def recognize(req: RecognizeRequest, request: Request):
        session = get_session(request)
        frame = _load_frame(session, req.image)
        try:
            outcome = session.recognize(frame, req.subject, req.lecture_time)
        except ValueError as e:
            raise HTTPException(400, str(e)) from e
        except AcquisitionError as e:
            raise HTTPException(503, str(e)) from e
        except StoreError as e:
            logger.error("Error marking attendance: %s", e)
            raise HTTPException(502, "Attendance was NOT recorded. Please try again.") from e
        return {
            "status": outcome.status,
            "message": outcome.message,
            "name": outcome.identity,
            "distance": outcome.distance,
            "attendance_status": outcome.attendance_status,
            "subject": outcome.subject,
            "counters": outcome.counters,
            "percentage": outcome.percentage,
            "notifications": outcome.notifications,
        }

    # ------------------------------------------------------------------------
    # ROSTER
    # ------------------------------------------------------------------------
    @app.post("/api/register")
    def register(req: RegisterRequest, request: Request):
        session = get_session(request)
        frames = [_load_frame(session, image) for image in req.images]
        contact = Contact(email=req.email, phone=req.phone,
                          parent_email=req.parent_email, parent_phone=req.parent_phone)
        if contact.is_empty:
            contact = None
        try:
            report = session.enroll(req.name, frames, contact)
        except EnrollmentError as e:
            raise HTTPException(400, str(e)) from e
        return {
            "status": "success",
            "name": report.name,
            "count": report.stored,
            "warnings": report.warnings,
        }

    @app.post("/api/roster/reload")
    def reload_roster(request: Request):
        count = get_session(request).reload_roster()
        return {"status": "success", "identities": count}

    @app.get("/api/users")
    def get_users(request: Request):
        return get_session(request).identities()

    # ------------------------------------------------------------------------
    # CLASSES HELD / STATS / EXPORT
    # ------------------------------------------------------------------------
    @app.get("/api/classes-held")
    def get_classes_held(request: Request):
        try:
            return get_session(request).classes_held()
        except StoreError as e:
            raise HTTPException(502, str(e)) from e

    @app.post("/api/classes-held")
    def save_classes_held(req: ClassesHeldRequest, request: Request):
        session = get_session(request)
        try:
            total = session.save_classes_held(req.subject, req.total)
        except ValueError as e:
            raise HTTPException(400, str(e)) from e
        except StoreError as e:
            raise HTTPException(502, "Error saving classes held. Please try again.") from e
        return {"status": "success", "subject": req.subject.strip(), "total": total}

    @app.get("/api/stats")
    def get_stats(request: Request):
        try:
            return get_session(request).stats()
        except StoreError as e:
            raise HTTPException(502, str(e)) from e

    @app.get("/api/export")
    def export_attendance(request: Request):
        try:
            content = get_session(request).export_csv()
        except StoreError as e:
            raise HTTPException(502, str(e)) from e
        if content is None:
            raise HTTPException(404, "No attendance records to export.")
        return PlainTextResponse(
            content,
            media_type="text/csv",
            headers={"Content-Disposition": "attachment; filename=attendance.csv"},
        )

    return app


app = create_app()

if __name__ == "__main__":
    setup_logging()
    uvicorn.run(app, host="0.0.0.0", port=8000)
