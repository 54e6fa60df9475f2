"""
Analytics Routes

GET /analytics/segment-analytics - Segment distribution (admin only)
GET /analytics/segment/{segment_id}/analytics - Segment demographics (admin only)
GET /analytics/user/{user_id} - Progress of one user (self or admin)
POST /analytics/comparative - Compare users / segments (admin only)
"""

from fastapi import APIRouter, HTTPException, Depends

from guidancehub.core.auth import get_current_user, get_current_admin
from guidancehub.db.mongodb import get_collection, COLLECTIONS
from guidancehub.services.analytics_service import AnalyticsService, get_analytics_service
from guidancehub.services.mongo_service import serialize_doc, parse_object_id, is_object_id
from guidancehub.schemas.schemas import ComparativeRequest

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/segment-analytics")
async def segment_analytics(
    admin: dict = Depends(get_current_admin),
    analytics: AnalyticsService = Depends(get_analytics_service)
):
    return serialize_doc(analytics.segment_overview())


@router.get("/segment/{segment_id}/analytics")
async def segment_details(
    segment_id: str,
    admin: dict = Depends(get_current_admin),
    analytics: AnalyticsService = Depends(get_analytics_service)
):
    segment = get_collection(COLLECTIONS["segments"]).find_one(
        {"_id": parse_object_id(segment_id, "Segment not found")}
    )
    if not segment:
        raise HTTPException(status_code=404, detail="Segment not found")
    return serialize_doc(analytics.segment_details(segment))


@router.get("/user/{user_id}")
async def user_analytics(
    user_id: str,
    user: dict = Depends(get_current_user),
    analytics: AnalyticsService = Depends(get_analytics_service)
):
    """Category trends and skill development. Users may only see their own data."""
    if str(user["_id"]) != user_id and user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Access denied")
    return serialize_doc(analytics.user_analytics(parse_object_id(user_id, "User not found")))


@router.post("/comparative")
async def comparative_analytics(
    request: ComparativeRequest,
    admin: dict = Depends(get_current_admin),
    analytics: AnalyticsService = Depends(get_analytics_service)
):
    if not request.user_ids and not request.segment_ids:
        raise HTTPException(status_code=400, detail="Please provide user_ids or segment_ids for comparison")

    user_ids = [parse_object_id(uid) for uid in request.user_ids if is_object_id(uid)]
    segment_ids = [parse_object_id(sid) for sid in request.segment_ids if is_object_id(sid)]
    return serialize_doc(analytics.comparative(user_ids, segment_ids))
