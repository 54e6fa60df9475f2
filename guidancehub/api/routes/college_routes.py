"""
College Routes

GET /colleges - Search colleges with filters, sorting, pagination
GET /colleges/nearby - Colleges within a radius of a point
GET /colleges/programs/{program_name} - Colleges offering a program
GET /colleges/{college_id} - Get college details
"""

from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Optional

from guidancehub.services.college_service import (
    CollegeService, get_college_service, build_college_query, DEFAULT_RADIUS_KM
)
from guidancehub.services.mongo_service import serialize_doc, serialize_docs, parse_object_id, page_meta

router = APIRouter(prefix="/colleges", tags=["Colleges"])

SORT_FIELDS = {"name", "established", "student_capacity", "fees.undergraduate", "admission_requirements.gpa"}


@router.get("")
async def list_colleges(
    search: Optional[str] = None,
    type: Optional[str] = None,
    program: Optional[str] = None,
    facility: Optional[str] = None,
    min_gpa: Optional[float] = None,
    max_gpa: Optional[float] = None,
    min_fees: Optional[float] = None,
    max_fees: Optional[float] = None,
    accreditation: Optional[str] = None,
    established_after: Optional[int] = None,
    established_before: Optional[int] = None,
    capacity_min: Optional[int] = None,
    capacity_max: Optional[int] = None,
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    radius: float = Query(DEFAULT_RADIUS_KM, gt=0, description="Kilometres"),
    sort_by: str = "name",
    sort_order: str = Query("asc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    colleges: CollegeService = Depends(get_college_service)
):
    """
    Search colleges.

    With latitude and longitude, results are limited to `radius` km and
    sorted by distance instead of `sort_by`.
    """
    if sort_by not in SORT_FIELDS:
        raise HTTPException(status_code=400, detail=f"Cannot sort by '{sort_by}'")

    query = build_college_query(
        search=search, type=type, program=program, facility=facility,
        min_gpa=min_gpa, max_gpa=max_gpa, min_fees=min_fees, max_fees=max_fees,
        accreditation=accreditation,
        established_after=established_after, established_before=established_before,
        capacity_min=capacity_min, capacity_max=capacity_max,
    )
    location = (latitude, longitude, radius) if latitude is not None and longitude is not None else None

    docs, total = colleges.search(query, page, page_size, sort_by, sort_order, location)
    return {"colleges": serialize_docs(docs), **page_meta(total, page, page_size)}


@router.get("/nearby")
async def nearby_colleges(
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    radius: float = Query(DEFAULT_RADIUS_KM, gt=0, description="Kilometres"),
    colleges: CollegeService = Depends(get_college_service)
):
    """Active colleges within `radius` km, nearest first."""
    if latitude is None or longitude is None:
        raise HTTPException(status_code=400, detail="Longitude and latitude are required")
    return serialize_docs(colleges.nearby(latitude, longitude, radius))


@router.get("/programs/{program_name}")
async def colleges_by_program(program_name: str, colleges: CollegeService = Depends(get_college_service)):
    return serialize_docs(colleges.by_program(program_name))


@router.get("/{college_id}")
async def get_college(college_id: str, colleges: CollegeService = Depends(get_college_service)):
    college = colleges.collection.find_one({"_id": parse_object_id(college_id, "College not found")})
    if not college or not college.get("is_active"):
        raise HTTPException(status_code=404, detail="College not found")
    return serialize_doc(college)
