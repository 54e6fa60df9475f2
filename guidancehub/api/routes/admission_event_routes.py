"""
Admission Event Routes

GET /admission-events - List events with filters and pagination
GET /admission-events/upcoming - Next upcoming events
GET /admission-events/{event_id} - Get event details
POST /admission-events - Create event (admin only)
PUT /admission-events/{event_id} - Update event (admin only)
DELETE /admission-events/{event_id} - Delete event (admin only)
"""

from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends, Query

from guidancehub.core.auth import get_current_admin
from guidancehub.db.mongodb import get_collection, COLLECTIONS
from guidancehub.services.mongo_service import serialize_doc, serialize_docs, parse_object_id, paginate, page_meta
from guidancehub.schemas.schemas import (
    AdmissionEventCreate, AdmissionEventUpdate, EventType, MessageResponse, as_naive_utc
)

router = APIRouter(prefix="/admission-events", tags=["Admission Events"])

SORT_FIELDS = {"start_date", "end_date", "title", "created_at"}


def _attach_colleges(events: List[dict], fields: dict) -> List[dict]:
    """Replace each event's college id with {_id, **fields} of the college."""
    colleges = {
        c["_id"]: c
        for c in get_collection(COLLECTIONS["colleges"]).find(
            {"_id": {"$in": [e["college"] for e in events]}}, fields
        )
    }
    for event in events:
        event["college"] = colleges.get(event["college"], {"_id": event["college"]})
    return events


def _require_event(event_id: str) -> dict:
    event = get_collection(COLLECTIONS["admission_events"]).find_one(
        {"_id": parse_object_id(event_id, "Admission event not found"), "is_active": True}
    )
    if not event:
        raise HTTPException(status_code=404, detail="Admission event not found")
    return event


@router.get("")
async def list_events(
    college: Optional[str] = None,
    program: Optional[str] = None,
    event_type: Optional[EventType] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    sort_by: str = "start_date",
    sort_order: str = Query("asc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100)
):
    """Active events; `start_date`/`end_date` bound the event start."""
    if sort_by not in SORT_FIELDS:
        raise HTTPException(status_code=400, detail=f"Cannot sort by '{sort_by}'")

    query = {"is_active": True}
    if college:
        query["college"] = parse_object_id(college, "College not found")
    if program:
        query["program"] = program
    if event_type:
        query["event_type"] = event_type.value
    if start_date or end_date:
        query["start_date"] = {}
        if start_date:
            query["start_date"]["$gte"] = as_naive_utc(start_date)
        if end_date:
            query["start_date"]["$lte"] = as_naive_utc(end_date)

    events, total = paginate(
        get_collection(COLLECTIONS["admission_events"]),
        query,
        [(sort_by, -1 if sort_order == "desc" else 1)],
        page, page_size
    )
    events = _attach_colleges(events, {"name": 1})
    return {"events": serialize_docs(events), **page_meta(total, page, page_size)}


@router.get("/upcoming")
async def upcoming_events(limit: int = Query(5, ge=1, le=50)):
    """Active events starting from now, soonest first."""
    events = list(
        get_collection(COLLECTIONS["admission_events"])
        .find({"is_active": True, "start_date": {"$gte": datetime.utcnow()}})
        .sort("start_date", 1)
        .limit(limit)
    )
    return serialize_docs(_attach_colleges(events, {"name": 1}))


@router.get("/{event_id}")
async def get_event(event_id: str):
    event = _require_event(event_id)
    return serialize_doc(_attach_colleges([event], {"name": 1, "address": 1})[0])


@router.post("", status_code=201)
async def create_event(data: AdmissionEventCreate, admin: dict = Depends(get_current_admin)):
    """Create an admission event for an existing college."""
    college_id = parse_object_id(data.college, "College not found")
    if not get_collection(COLLECTIONS["colleges"]).find_one({"_id": college_id}):
        raise HTTPException(status_code=404, detail="College not found")

    now = datetime.utcnow()
    event = {
        **data.model_dump(mode="python"),
        "college": college_id,
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }
    event["event_type"] = data.event_type.value
    event["recurrence_pattern"] = data.recurrence_pattern.value if data.recurrence_pattern else None
    event["reminders"] = [r.model_dump(mode="json") for r in data.reminders]

    event["_id"] = get_collection(COLLECTIONS["admission_events"]).insert_one(event).inserted_id
    return serialize_doc(event)


@router.put("/{event_id}")
async def update_event(event_id: str, data: AdmissionEventUpdate, admin: dict = Depends(get_current_admin)):
    event = _require_event(event_id)
    updates = data.model_dump(exclude_unset=True, exclude_none=True, mode="python")
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    if data.event_type is not None:
        updates["event_type"] = data.event_type.value
    if "recurrence_pattern" in updates:
        updates["recurrence_pattern"] = data.recurrence_pattern.value if data.recurrence_pattern else None
    if data.reminders is not None:
        updates["reminders"] = [r.model_dump(mode="json") for r in data.reminders]
    updates["updated_at"] = datetime.utcnow()

    events = get_collection(COLLECTIONS["admission_events"])
    events.update_one({"_id": event["_id"]}, {"$set": updates})
    return serialize_doc(events.find_one({"_id": event["_id"]}))


@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event(event_id: str, admin: dict = Depends(get_current_admin)):
    event = _require_event(event_id)
    get_collection(COLLECTIONS["admission_events"]).delete_one({"_id": event["_id"]})
    return MessageResponse(message="Admission event removed")
