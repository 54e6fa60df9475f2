"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

import re
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List, Any, Union
from datetime import datetime, timezone
from enum import Enum


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Dates are stored as naive UTC, like datetime.utcnow()."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    admin = "admin"


class Gender(str, Enum):
    male = "Male"
    female = "Female"
    other = "Other"
    undisclosed = "Prefer not to say"


class Grade(str, Enum):
    sixth = "6th"
    seventh = "7th"
    eighth = "8th"
    ninth = "9th"
    tenth = "10th"
    eleventh = "11th"
    twelfth = "12th"
    graduate = "Graduate"
    other = "Other"


class ProfileVisibility(str, Enum):
    public = "public"
    private = "private"
    friends = "friends"


class FinancialStatus(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class QuestionType(str, Enum):
    mcq = "mcq"
    rating = "rating"
    scenario = "scenario"


class ScoringMethod(str, Enum):
    simple = "simple"
    weighted = "weighted"
    adaptive = "adaptive"


class EventType(str, Enum):
    application_deadline = "Application Deadline"
    exam_date = "Exam Date"
    result_declaration = "Result Declaration"
    counseling = "Counseling"
    admission_closed = "Admission Closed"
    other = "Other"


class RecurrencePattern(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    yearly = "yearly"


class ReminderType(str, Enum):
    email = "email"
    sms = "sms"
    push = "push"


class ApplicationStatus(str, Enum):
    applied = "Applied"
    under_review = "Under Review"
    accepted = "Accepted"
    rejected = "Rejected"
    waitlisted = "Waitlisted"
    withdrawn = "Withdrawn"
    documents_submitted = "Documents Submitted"
    interview_scheduled = "Interview Scheduled"
    interview_completed = "Interview Completed"


class PaymentStatus(str, Enum):
    pending = "Pending"
    paid = "Paid"
    failed = "Failed"
    refunded = "Refunded"


class AdmissionCategory(str, Enum):
    general = "General"
    obc = "OBC"
    sc = "SC"
    st = "ST"
    ews = "EWS"
    other = "Other"


class NotificationType(str, Enum):
    application_deadline = "Application Deadline"
    exam_date = "Exam Date"
    result_declaration = "Result Declaration"
    counseling = "Counseling"
    admission_closed = "Admission Closed"
    interview_scheduled = "Interview Scheduled"
    document_submission = "Document Submission"
    general = "General"


class NotificationPriority(str, Enum):
    low = "Low"
    medium = "Medium"
    high = "High"
    urgent = "Urgent"


# ============================================================
# USER SCHEMAS
# ============================================================

AVATAR_URL_PATTERN = re.compile(r"^https?://.+\.(jpg|jpeg|png|gif)$", re.IGNORECASE)
MAX_INTERESTS = 10


class PrivacySettings(BaseModel):
    profile_visibility: ProfileVisibility = ProfileVisibility.private
    show_email: bool = False
    show_location: bool = False
    show_academic_info: bool = False


class ProfileFields(BaseModel):
    age: Optional[int] = Field(None, ge=10, le=100)
    gender: Optional[Gender] = None
    grade: Optional[Grade] = None
    academic_interests: Optional[List[str]] = None
    location: Optional[str] = Field(None, max_length=100)
    avatar: Optional[str] = Field(None, max_length=500)
    gpa: Optional[float] = Field(None, ge=0, le=10)
    financial_status: Optional[FinancialStatus] = None

    @field_validator("academic_interests")
    @classmethod
    def clean_interests(cls, value):
        if value is None:
            return value
        cleaned = [item.strip() for item in value if item and item.strip()]
        if len(cleaned) > MAX_INTERESTS:
            raise ValueError(f"At most {MAX_INTERESTS} academic interests are allowed")
        return cleaned

    @field_validator("location")
    @classmethod
    def strip_location(cls, value):
        return value.strip() if value is not None else value

    @field_validator("avatar")
    @classmethod
    def check_avatar_url(cls, value):
        if value is None:
            return value
        if not AVATAR_URL_PATTERN.match(value):
            raise ValueError("Avatar must be an http(s) URL to a jpg, jpeg, png or gif image")
        return value


class RegisterRequest(ProfileFields):
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value):
        return value.lower()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value):
        return value.lower()


class ProfileUpdate(ProfileFields):
    """Profile changes. Email, password and role are not part of this schema."""
    pass


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: dict


# ============================================================
# QUIZ SCHEMAS
# ============================================================

class AnswerSubmit(BaseModel):
    answer: Union[int, float, str]
    time_taken: Optional[float] = Field(None, ge=0, description="Seconds spent on the question")
    confidence: Optional[int] = Field(None, ge=0, le=100)


# ============================================================
# CAREER SCHEMAS
# ============================================================

class CareerCompareRequest(BaseModel):
    career_ids: List[str] = []


# ============================================================
# REVIEW SCHEMAS
# ============================================================

class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    title: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1, max_length=1000)


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    content: Optional[str] = Field(None, min_length=1, max_length=1000)


# ============================================================
# ADMISSION EVENT SCHEMAS
# ============================================================

class Reminder(BaseModel):
    type: ReminderType = ReminderType.email
    time_before: int = Field(..., ge=0, description="Minutes before the event")


class AdmissionEventCreate(BaseModel):
    college: str
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    event_type: EventType
    program: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    is_all_day: bool = False
    is_recurring: bool = False
    recurrence_pattern: Optional[RecurrencePattern] = None
    reminders: List[Reminder] = []

    @field_validator("start_date", "end_date")
    @classmethod
    def to_utc(cls, value):
        return as_naive_utc(value)


class AdmissionEventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    event_type: Optional[EventType] = None
    program: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_all_day: Optional[bool] = None
    is_recurring: Optional[bool] = None
    recurrence_pattern: Optional[RecurrencePattern] = None
    reminders: Optional[List[Reminder]] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def to_utc(cls, value):
        return as_naive_utc(value)


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ExamScore(BaseModel):
    name: str
    score: float


class ApplicationDocument(BaseModel):
    name: str
    url: str
    uploaded_at: Optional[datetime] = None


class Interview(BaseModel):
    scheduled_date: Optional[datetime] = None
    location: Optional[str] = None
    mode: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("scheduled_date")
    @classmethod
    def to_utc(cls, value):
        return as_naive_utc(value)


class EligibilityRequest(BaseModel):
    college_id: str
    program: str
    academic_score: float = Field(..., ge=0)
    test_scores: Optional[List[ExamScore]] = None


class ApplicationCreate(BaseModel):
    college_id: str
    program: str = Field(..., min_length=1)
    academic_score: Optional[float] = Field(None, ge=0)
    test_scores: List[ExamScore] = []
    documents: List[ApplicationDocument] = []
    notes: Optional[str] = None


class ApplicationUpdate(BaseModel):
    academic_score: Optional[float] = Field(None, ge=0)
    test_scores: Optional[List[ExamScore]] = None
    documents: Optional[List[ApplicationDocument]] = None
    notes: Optional[str] = None
    status: Optional[ApplicationStatus] = None
    status_notes: Optional[str] = None
    interview: Optional[Interview] = None
    payment_status: Optional[PaymentStatus] = None


# ============================================================
# CUTOFF SCHEMAS
# ============================================================

class CutoffPredictRequest(BaseModel):
    college_id: str
    program: str
    category: AdmissionCategory = AdmissionCategory.general
    academic_year: Optional[str] = Field(None, pattern=r"^\d{4}-\d{4}$")
    target_year: Optional[int] = Field(None, ge=1900, le=2200)


class CutoffCompareRequest(BaseModel):
    college_ids: List[str] = Field(..., min_length=1)
    program: str
    category: AdmissionCategory = AdmissionCategory.general


# ============================================================
# SEGMENTATION SCHEMAS
# ============================================================

class GpaRange(BaseModel):
    min_gpa: Optional[float] = Field(None, ge=0, le=10)
    max_gpa: Optional[float] = Field(None, ge=0, le=10)


class SegmentCriteria(BaseModel):
    academic_performance: Optional[GpaRange] = None
    interests: List[str] = []
    location: Optional[str] = None
    financial_status: Optional[FinancialStatus] = None


class SegmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    criteria: SegmentCriteria = SegmentCriteria()
    recommendations: List[str] = []


# ============================================================
# ANALYTICS SCHEMAS
# ============================================================

class ComparativeRequest(BaseModel):
    user_ids: List[str] = []
    segment_ids: List[str] = []


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
    data: Optional[Any] = None


class ErrorResponse(BaseModel):
    detail: str
