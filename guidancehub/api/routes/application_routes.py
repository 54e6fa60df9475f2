"""
Application Routes

POST /applications/check - Check eligibility for a college program
GET /applications - My applications (filter by status)
GET /applications/{application_id} - Get application details
GET /applications/{application_id}/history - Status history
POST /applications - Apply to a college program
PUT /applications/{application_id} - Update application
DELETE /applications/{application_id} - Withdraw application (only while "Applied")
"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Query

from guidancehub.core.auth import get_current_user
from guidancehub.db.mongodb import get_collection, COLLECTIONS
from guidancehub.services.application_service import (
    find_program, check_eligibility, history_entry, APPLIED_ONLY_FIELDS
)
from guidancehub.services.mongo_service import serialize_doc, serialize_docs, parse_object_id, paginate, page_meta
from guidancehub.schemas.schemas import (
    EligibilityRequest, ApplicationCreate, ApplicationUpdate, ApplicationStatus, PaymentStatus,
    MessageResponse
)

router = APIRouter(prefix="/applications", tags=["Applications"])


def _require_college(college_id: str) -> dict:
    college = get_collection(COLLECTIONS["colleges"]).find_one(
        {"_id": parse_object_id(college_id, "College not found")}
    )
    if not college:
        raise HTTPException(status_code=404, detail="College not found")
    return college


def _require_own_application(application_id: str, user: dict) -> dict:
    application = get_collection(COLLECTIONS["applications"]).find_one({
        "_id": parse_object_id(application_id, "Application not found"),
        "student": user["_id"],
        "is_active": True,
    })
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    return application


@router.post("/check")
async def check_application_eligibility(data: EligibilityRequest, user: dict = Depends(get_current_user)):
    """Check the student's scores against the college's admission requirements."""
    college = _require_college(data.college_id)
    program = find_program(college, data.program)
    if not program:
        raise HTTPException(status_code=404, detail="Program not found in this college")

    test_scores = [t.model_dump() for t in data.test_scores] if data.test_scores is not None else None
    is_eligible, reasons = check_eligibility(college, data.academic_score, test_scores)
    requirements = college.get("admission_requirements") or {}

    return serialize_doc({
        "is_eligible": is_eligible,
        "ineligibility_reasons": reasons,
        "college": {"_id": college["_id"], "name": college.get("name"), "type": college.get("type")},
        "program": {
            "name": program.get("name"),
            "level": program.get("level"),
            "duration": program.get("duration"),
        },
        "requirements": {
            "gpa": requirements.get("gpa"),
            "standardized_tests": requirements.get("standardized_tests", []),
            "additional_requirements": requirements.get("additional_requirements", []),
        },
        "user_scores": {"academic_score": data.academic_score, "test_scores": test_scores},
    })


@router.get("")
async def list_applications(
    status: Optional[ApplicationStatus] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    user: dict = Depends(get_current_user)
):
    """My active applications, newest first."""
    query = {"student": user["_id"], "is_active": True}
    if status:
        query["status"] = status.value

    applications, total = paginate(
        get_collection(COLLECTIONS["applications"]), query, [("application_date", -1)], page, page_size
    )
    colleges = {
        c["_id"]: c
        for c in get_collection(COLLECTIONS["colleges"]).find(
            {"_id": {"$in": [a["college"] for a in applications]}}, {"name": 1, "address": 1}
        )
    }
    for application in applications:
        application["college"] = colleges.get(application["college"], {"_id": application["college"]})

    return {"applications": serialize_docs(applications), **page_meta(total, page, page_size)}


@router.get("/{application_id}")
async def get_application(application_id: str, user: dict = Depends(get_current_user)):
    application = _require_own_application(application_id, user)
    college = get_collection(COLLECTIONS["colleges"]).find_one({"_id": application["college"]})
    if college:
        application["college"] = college
    return serialize_doc(application)


@router.get("/{application_id}/history")
async def get_application_history(application_id: str, user: dict = Depends(get_current_user)):
    application = _require_own_application(application_id, user)
    return serialize_doc({
        "application_id": application["_id"],
        "current_status": application["status"],
        "status_history": application.get("status_history", []),
    })


@router.post("", status_code=201)
async def create_application(data: ApplicationCreate, user: dict = Depends(get_current_user)):
    """Apply to a college program. One application per college program."""
    college = _require_college(data.college_id)
    applications = get_collection(COLLECTIONS["applications"])

    duplicate = applications.find_one({
        "student": user["_id"],
        "college": college["_id"],
        "program": data.program,
        "is_active": True,
    })
    if duplicate:
        raise HTTPException(status_code=400, detail="You have already applied to this program")

    now = datetime.utcnow()
    application = {
        "student": user["_id"],
        "college": college["_id"],
        "program": data.program,
        "status": ApplicationStatus.applied.value,
        "application_date": now,
        "status_history": [history_entry(ApplicationStatus.applied.value, "Application submitted")],
        "academic_score": data.academic_score,
        "test_scores": [t.model_dump() for t in data.test_scores],
        "documents": [d.model_dump() for d in data.documents],
        "payment_status": PaymentStatus.pending.value,
        "interview": None,
        "notes": data.notes,
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }
    application["_id"] = applications.insert_one(application).inserted_id
    return serialize_doc(application)


@router.put("/{application_id}")
async def update_application(
    application_id: str,
    data: ApplicationUpdate,
    user: dict = Depends(get_current_user)
):
    """
    Update an application.

    Scores, documents and notes can only change while the status is "Applied".
    A status change is appended to the status history.
    """
    application = _require_own_application(application_id, user)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    locked = [f for f in APPLIED_ONLY_FIELDS if f in changes]
    if locked and application["status"] != ApplicationStatus.applied.value:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot update {', '.join(locked)} once the application is {application['status']}"
        )

    updates = {field: changes[field] for field in APPLIED_ONLY_FIELDS if field in changes}
    if data.interview is not None:
        updates["interview"] = data.interview.model_dump()
    if data.payment_status is not None:
        updates["payment_status"] = data.payment_status.value

    push = None
    if data.status is not None and data.status.value != application["status"]:
        updates["status"] = data.status.value
        push = {"status_history": history_entry(data.status.value, data.status_notes)}

    updates["updated_at"] = datetime.utcnow()
    operation = {"$set": updates}
    if push:
        operation["$push"] = push

    applications = get_collection(COLLECTIONS["applications"])
    applications.update_one({"_id": application["_id"]}, operation)
    return serialize_doc(applications.find_one({"_id": application["_id"]}))


@router.delete("/{application_id}", response_model=MessageResponse)
async def withdraw_application(application_id: str, user: dict = Depends(get_current_user)):
    application = _require_own_application(application_id, user)
    if application["status"] != ApplicationStatus.applied.value:
        raise HTTPException(status_code=400, detail="Only applications in Applied status can be withdrawn")

    get_collection(COLLECTIONS["applications"]).update_one(
        {"_id": application["_id"]},
        {"$set": {"is_active": False, "updated_at": datetime.utcnow()}}
    )
    return MessageResponse(message="Application withdrawn successfully")
