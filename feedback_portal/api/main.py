"""
Hospital Feedback API - FastAPI backend for the feedback portal.

Provides REST endpoints for:
- Submitting citizen feedback (public)
- Admin login/logout
- Listing, reading and replying to feedback (admin)
- Drafting replies with the suggestion service (admin)
"""

import logging
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from feedback_portal import __version__
from feedback_portal.config import (
    API_HOST,
    API_PORT,
    DATA_DIR,
    DEBUG,
    DEPARTMENTS,
    HOSPITAL_NAME,
    MAX_IMAGES,
    configure_logging,
)
from feedback_portal.exceptions import (
    AuthError,
    DuplicateFeedbackError,
    FeedbackNotFoundError,
    ValidationError,
)
from feedback_portal.feedback import triage
from feedback_portal.feedback.models import FeedbackRecord, StatusFilter
from feedback_portal.feedback.storage import FeedbackStore, open_store
from feedback_portal.feedback.submission import SubmissionInput, submit
from feedback_portal.session.gate import Session, SessionRegistry
from feedback_portal.suggestions.service import SuggestionService


logger = logging.getLogger(__name__)


# =============================================================================
# Pydantic Models for Request/Response
# =============================================================================

class FeedbackSubmitRequest(BaseModel):
    """Request body for the public feedback form."""
    fullName: str = Field(..., description="Full name of the citizen", max_length=200)
    phoneNumber: Optional[str] = Field(default=None, description="Contact phone number", max_length=30)
    department: str = Field(..., description="Department the feedback is about")
    content: str = Field(..., description="Complaint or suggestion", max_length=5000)
    date: Optional[str] = Field(default=None, description="Date of the visit (YYYY-MM-DD)")
    time: Optional[str] = Field(default=None, description="Time of the visit (HH:MM)")
    images: list[str] = Field(default_factory=list, description="Encoded image payloads (data URLs)")

    model_config = {
        "json_schema_extra": {
            "example": {
                "fullName": "Nguyen Van A",
                "phoneNumber": "0912345678",
                "department": "Khoa Nội",
                "content": "Chờ quá lâu",
                "images": [],
            }
        }
    }


class FeedbackSubmitResponse(BaseModel):
    """Acknowledgement shown to the citizen after submitting."""
    id: str
    status: str
    createdAt: str


class FeedbackOut(BaseModel):
    """A feedback record as shown in the admin inbox."""
    id: str
    fullName: str
    phoneNumber: Optional[str] = None
    department: str
    content: str
    date: str
    time: str
    images: list[str]
    status: str
    createdAt: str
    adminReply: Optional[str] = None
    repliedAt: Optional[str] = None


class FeedbackListResponse(BaseModel):
    items: list[FeedbackOut]
    total: int
    status: str


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    token: str
    username: str


class ReplyRequest(BaseModel):
    text: str = Field(..., description="Reply sent to the citizen", max_length=5000)


class SuggestionResponse(BaseModel):
    id: str
    text: str


class StatsResponse(BaseModel):
    total: int
    pending: int
    resolved: int
    by_department: dict[str, int]


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    store: bool
    record_count: int
    llm: bool


# =============================================================================
# Application Setup
# =============================================================================

app = FastAPI(
    title="Hospital Feedback API",
    description="""
    Public feedback portal for hospital patients and visitors.

    Citizens submit complaints and suggestions for a department, with up to
    two photos. Hospital staff log in to triage the inbox, read each
    submission and reply, optionally starting from a drafted suggestion.
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Service instances (initialized on startup)
store: Optional[FeedbackStore] = None
suggestion_service: Optional[SuggestionService] = None
sessions = SessionRegistry()


# =============================================================================
# Startup/Shutdown Events
# =============================================================================

@app.on_event("startup")
async def startup_event():
    """Open the feedback store and the suggestion service."""
    global store, suggestion_service

    configure_logging()
    logger.info("Initializing hospital feedback API...")

    store = open_store(DATA_DIR)
    suggestion_service = SuggestionService()

    logger.info(f"  Feedback records: {len(store)}")
    logger.info(f"  Suggestion model: {suggestion_service.llm.model} at {suggestion_service.llm.host}")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    global store, suggestion_service
    store = None
    suggestion_service = None
    logger.info("Hospital feedback API shutdown complete")


# =============================================================================
# Dependencies
# =============================================================================

def get_store() -> FeedbackStore:
    """Get the store instance or raise an error."""
    if store is None:
        raise HTTPException(
            status_code=503,
            detail="Feedback store not initialized. Check server logs.",
        )
    return store


def get_suggestion_service() -> SuggestionService:
    if suggestion_service is None:
        raise HTTPException(
            status_code=503,
            detail="Suggestion service not initialized. Check server logs.",
        )
    return suggestion_service


def get_sessions() -> SessionRegistry:
    return sessions


def bearer_token(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    """Token from an 'Authorization: Bearer <token>' header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_admin(
    token: Optional[str] = Depends(bearer_token),
    registry: SessionRegistry = Depends(get_sessions),
) -> Session:
    session = registry.get(token)
    if not session.is_admin:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Vui lòng đăng nhập quản trị",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


# =============================================================================
# Helper Functions
# =============================================================================

def record_to_out(record: FeedbackRecord) -> FeedbackOut:
    """Convert a FeedbackRecord to its response model."""
    return FeedbackOut(**record.to_dict())


def find_record(feedback_store: FeedbackStore, feedback_id: str) -> FeedbackRecord:
    try:
        return feedback_store.require(feedback_id)
    except FeedbackNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# =============================================================================
# Public Endpoints
# =============================================================================

@app.get("/", tags=["Info"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Hospital Feedback API",
        "hospital": HOSPITAL_NAME,
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health", response_model=HealthResponse, tags=["Info"])
def health_check(
    feedback_store: FeedbackStore = Depends(get_store),
    service: SuggestionService = Depends(get_suggestion_service),
):
    """Check the health of the API and its components."""
    llm_ok = service.is_available()
    return HealthResponse(
        status="healthy" if llm_ok else "degraded",
        store=True,
        record_count=len(feedback_store),
        llm=llm_ok,
    )


@app.get("/departments", tags=["Info"])
async def list_departments():
    """Departments accepted on the feedback form."""
    return {
        "hospital": HOSPITAL_NAME,
        "departments": DEPARTMENTS,
        "max_images": MAX_IMAGES,
    }


@app.post(
    "/feedback",
    response_model=FeedbackSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Feedback"],
)
def submit_feedback(
    request: FeedbackSubmitRequest,
    feedback_store: FeedbackStore = Depends(get_store),
):
    """
    Submit a complaint or suggestion.

    Returns the tracking id. Invalid input is rejected with 422 and a
    per-field error map; nothing is stored in that case.
    """
    data = SubmissionInput(
        full_name=request.fullName,
        phone_number=request.phoneNumber,
        department=request.department,
        content=request.content,
        date=request.date,
        time=request.time,
        images=request.images,
    )

    try:
        record = submit(data, existing_ids=feedback_store.ids())
        try:
            feedback_store.append(record)
        except DuplicateFeedbackError:
            # Another submission took the id after ids() was read
            logger.warning(f"Feedback id {record.id} taken concurrently, regenerating")
            record = submit(data, existing_ids=feedback_store.ids())
            feedback_store.append(record)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail={"errors": e.errors})
    except DuplicateFeedbackError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return FeedbackSubmitResponse(
        id=record.id,
        status=record.status.value,
        createdAt=record.created_at,
    )


# =============================================================================
# Admin Endpoints
# =============================================================================

@app.post("/admin/login", response_model=LoginResponse, tags=["Admin"])
async def admin_login(
    request: LoginRequest,
    registry: SessionRegistry = Depends(get_sessions),
):
    """Log in with the admin credential and receive a bearer token."""
    try:
        token = registry.open(request.username, request.password)
    except AuthError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    return LoginResponse(token=token, username=request.username)


@app.post("/admin/logout", tags=["Admin"])
async def admin_logout(
    session: Session = Depends(require_admin),
    token: Optional[str] = Depends(bearer_token),
    registry: SessionRegistry = Depends(get_sessions),
):
    """End the admin session. Stored feedback is untouched."""
    registry.close(token)
    return {"status": "logged_out", "username": session.username}


@app.get("/admin/feedback", response_model=FeedbackListResponse, tags=["Admin"])
def admin_list_feedback(
    status_filter: StatusFilter = Query(default=StatusFilter.ALL, alias="status", description="ALL, PENDING or RESOLVED"),
    q: Optional[str] = Query(default=None, description="Search name, phone, id or content"),
    session: Session = Depends(require_admin),
    feedback_store: FeedbackStore = Depends(get_store),
):
    """
    The admin inbox, newest first.

    Example: /admin/feedback?status=PENDING&q=khoa+nhi
    """
    records = feedback_store.all()
    if q:
        records = triage.search(records, q)
    items = triage.list_feedback(records, status_filter)
    return FeedbackListResponse(
        items=[record_to_out(r) for r in items],
        total=len(items),
        status=status_filter.value,
    )


@app.get("/admin/stats", response_model=StatsResponse, tags=["Admin"])
def admin_stats(
    session: Session = Depends(require_admin),
    feedback_store: FeedbackStore = Depends(get_store),
):
    """Counts for the dashboard header."""
    return StatsResponse(**triage.summarize(feedback_store.all()))


@app.get("/admin/feedback/{feedback_id}", response_model=FeedbackOut, tags=["Admin"])
def admin_get_feedback(
    feedback_id: str,
    session: Session = Depends(require_admin),
    feedback_store: FeedbackStore = Depends(get_store),
):
    """Get a specific feedback record by ID."""
    return record_to_out(find_record(feedback_store, feedback_id))


@app.post("/admin/feedback/{feedback_id}/suggestion", response_model=SuggestionResponse, tags=["Admin"])
def admin_suggest_reply(
    feedback_id: str,
    session: Session = Depends(require_admin),
    feedback_store: FeedbackStore = Depends(get_store),
    service: SuggestionService = Depends(get_suggestion_service),
):
    """
    Draft a reply with the suggestion service.

    Always succeeds: if the model is unreachable a standard reply naming
    the department is returned instead. Runs on the worker thread pool,
    so a slow model does not hold up other requests.
    """
    record = find_record(feedback_store, feedback_id)
    text = triage.request_suggestion(record, service)
    return SuggestionResponse(id=record.id, text=text)


@app.post("/admin/feedback/{feedback_id}/reply", response_model=FeedbackOut, tags=["Admin"])
def admin_reply(
    feedback_id: str,
    request: ReplyRequest,
    session: Session = Depends(require_admin),
    feedback_store: FeedbackStore = Depends(get_store),
):
    """Reply to a feedback record and mark it resolved."""
    record = find_record(feedback_store, feedback_id)

    try:
        updated = triage.reply(record, request.text)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail={"errors": e.errors})

    feedback_store.replace(updated)
    logger.info(f"Admin '{session.username}' replied to feedback {updated.id}")
    return record_to_out(updated)


# =============================================================================
# Run with Uvicorn
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    print(f"Starting Hospital Feedback API on {API_HOST}:{API_PORT}")
    print(f"Documentation: http://localhost:{API_PORT}/docs")

    uvicorn.run(
        "feedback_portal.api.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=DEBUG,
    )
