"""
College Directory Service

Builds MongoDB filters for the college search and computes distances
for location searches.

Distances are great-circle (haversine) distances in km computed with
numpy over the colleges' [lng, lat] points, so location searches only
need the stored coordinates and no geo index.
"""

import re
import numpy as np
from typing import List, Optional, Tuple

from guidancehub.db.mongodb import get_collection, COLLECTIONS

EARTH_RADIUS_KM = 6371.0
DEFAULT_RADIUS_KM = 50


def _contains(text: str) -> dict:
    """Case-insensitive substring match on user input."""
    return {"$regex": re.escape(text), "$options": "i"}


def _range(minimum=None, maximum=None) -> Optional[dict]:
    bounds = {}
    if minimum is not None:
        bounds["$gte"] = minimum
    if maximum is not None:
        bounds["$lte"] = maximum
    return bounds or None


def build_college_query(
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
) -> dict:
    query = {"is_active": True}

    if search:
        query["$or"] = [
            {"name": _contains(search)},
            {"address.city": _contains(search)},
            {"address.state": _contains(search)},
        ]
    if type:
        query["type"] = type
    if program:
        query["programs.name"] = _contains(program)
    if facility:
        query["facilities"] = _contains(facility)
    if accreditation:
        query["accreditation.status"] = accreditation

    ranges = {
        "admission_requirements.gpa": _range(min_gpa, max_gpa),
        "fees.undergraduate": _range(min_fees, max_fees),
        "established": _range(established_after, established_before),
        "student_capacity": _range(capacity_min, capacity_max),
    }
    query.update({field: bounds for field, bounds in ranges.items() if bounds})
    return query


def haversine_km(lat: float, lng: float, points: np.ndarray) -> np.ndarray:
    """Distances (km) from (lat, lng) to an (n, 2) array of [lng, lat] points."""
    lat1, lng1 = np.radians(lat), np.radians(lng)
    lng2, lat2 = np.radians(points[:, 0]), np.radians(points[:, 1])
    a = (
        np.sin((lat2 - lat1) / 2) ** 2
        + np.cos(lat1) * np.cos(lat2) * np.sin((lng2 - lng1) / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * np.arcsin(np.sqrt(a))


def within_radius(colleges: List[dict], lat: float, lng: float, radius_km: float) -> List[dict]:
    """Colleges within `radius_km`, nearest first, each with a `distance` in km."""
    located = [
        c for c in colleges
        if len(((c.get("location") or {}).get("coordinates") or [])) == 2
    ]
    if not located:
        return []

    points = np.array([c["location"]["coordinates"] for c in located], dtype=float)
    distances = haversine_km(lat, lng, points)
    order = np.argsort(distances, kind="stable")

    nearby = []
    for index in order:
        distance = float(distances[index])
        if distance <= radius_km:
            nearby.append({**located[int(index)], "distance": round(distance, 2)})
    return nearby


class CollegeService:

    def __init__(self):
        self.collection = get_collection(COLLECTIONS["colleges"])

    def search(
        self,
        query: dict,
        page: int,
        page_size: int,
        sort_by: str = "name",
        sort_order: str = "asc",
        location: Optional[Tuple[float, float, float]] = None,
    ) -> Tuple[List[dict], int]:
        """
        One page of colleges plus the total count.

        With `location` = (lat, lng, radius_km) the page is ordered by distance.
        """
        skip = (page - 1) * page_size
        if location:
            lat, lng, radius = location
            matches = within_radius(list(self.collection.find(query)), lat, lng, radius)
            return matches[skip:skip + page_size], len(matches)

        direction = -1 if sort_order == "desc" else 1
        total = self.collection.count_documents(query)
        cursor = self.collection.find(query).sort(sort_by, direction).skip(skip).limit(page_size)
        return list(cursor), total

    def nearby(self, lat: float, lng: float, radius_km: float = DEFAULT_RADIUS_KM) -> List[dict]:
        return within_radius(list(self.collection.find({"is_active": True})), lat, lng, radius_km)

    def by_program(self, program_name: str) -> List[dict]:
        return list(self.collection.find({"is_active": True, "programs.name": _contains(program_name)}))


def get_college_service() -> CollegeService:
    return CollegeService()
