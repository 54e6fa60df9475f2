"""
Segmentation Routes

POST /segmentation/classify - Classify current user into a segment
GET /segmentation/user-segments - My segment memberships
GET /segmentation/segments - List segments
POST /segmentation/segments - Create segment (admin only)
"""

from fastapi import APIRouter, Depends

from guidancehub.core.auth import get_current_user, get_current_admin
from guidancehub.services.mongo_service import serialize_doc, serialize_docs
from guidancehub.services.segmentation_service import SegmentationService, get_segmentation_service
from guidancehub.schemas.schemas import SegmentCreate

router = APIRouter(prefix="/segmentation", tags=["Segmentation"])


@router.post("/classify")
async def classify(
    user: dict = Depends(get_current_user),
    segmentation: SegmentationService = Depends(get_segmentation_service)
):
    """Find the best matching segment. `segment` is null when nothing matches."""
    segment, confidence = segmentation.classify(user)
    return {"segment": serialize_doc(segment), "confidence_score": confidence}


@router.get("/user-segments")
async def my_segments(
    user: dict = Depends(get_current_user),
    segmentation: SegmentationService = Depends(get_segmentation_service)
):
    return serialize_docs(segmentation.user_segments(user["_id"]))


@router.get("/segments")
async def list_segments(segmentation: SegmentationService = Depends(get_segmentation_service)):
    return serialize_docs(segmentation.list_segments())


@router.post("/segments", status_code=201)
async def create_segment(
    data: SegmentCreate,
    admin: dict = Depends(get_current_admin),
    segmentation: SegmentationService = Depends(get_segmentation_service)
):
    segment = segmentation.create_segment(data.model_dump(mode="json"))
    return serialize_doc(segment)
