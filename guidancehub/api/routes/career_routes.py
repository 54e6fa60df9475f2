"""
Career Routes

GET /careers - List active career paths
POST /careers/compare - Compare selected career paths
GET /careers/recommendations/{assessment_id} - Career matches from quiz results
GET /careers/{career_id} - Get a career path
"""

from fastapi import APIRouter, HTTPException, Depends

from guidancehub.core.auth import get_current_user
from guidancehub.core.config import get_settings
from guidancehub.db.mongodb import get_collection, COLLECTIONS
from guidancehub.services.matching_service import rank_careers
from guidancehub.services.mongo_service import serialize_doc, serialize_docs, parse_object_id, is_object_id
from guidancehub.services.quiz_service import QuizService, get_quiz_service
from guidancehub.schemas.schemas import CareerCompareRequest

router = APIRouter(prefix="/careers", tags=["Careers"])
settings = get_settings()

COMPARISON_METRICS = [
    "salary_range",
    "job_growth",
    "education_level",
    "required_skills",
]


@router.get("")
async def list_careers():
    """List active career paths by title."""
    careers = get_collection(COLLECTIONS["career_paths"]).find({"is_active": True}).sort("title", 1)
    return serialize_docs(careers)


@router.post("/compare")
async def compare_careers(request: CareerCompareRequest):
    """Side-by-side data for the requested career paths."""
    if not request.career_ids:
        raise HTTPException(status_code=400, detail="Please provide career path IDs to compare")

    if not all(is_object_id(career_id) for career_id in request.career_ids):
        raise HTTPException(status_code=404, detail="One or more career paths not found")

    ids = [parse_object_id(career_id) for career_id in request.career_ids]
    careers = list(get_collection(COLLECTIONS["career_paths"]).find({"_id": {"$in": ids}, "is_active": True}))
    if len({c["_id"] for c in careers}) != len(set(ids)):
        raise HTTPException(status_code=404, detail="One or more career paths not found")

    by_id = {c["_id"]: c for c in careers}
    rows = [
        {
            "_id": career_id,
            "title": by_id[career_id]["title"],
            "description": by_id[career_id].get("description"),
            **{metric: by_id[career_id].get(metric) for metric in COMPARISON_METRICS},
        }
        for career_id in ids
    ]
    return serialize_doc({"career_paths": rows, "comparison_metrics": COMPARISON_METRICS})


@router.get("/recommendations/{assessment_id}")
async def get_recommendations(
    assessment_id: str,
    user: dict = Depends(get_current_user),
    quiz: QuizService = Depends(get_quiz_service)
):
    """Top career paths for the user's completed attempt."""
    assessment = quiz.resolve_assessment(assessment_id)
    attempt = quiz.require_completed_attempt(user["_id"], assessment["_id"])

    careers = list(get_collection(COLLECTIONS["career_paths"]).find({"is_active": True}))
    ranked = rank_careers(careers, attempt.get("category_scores", []), limit=settings.recommendation_limit)
    return serialize_docs(ranked)


@router.get("/{career_id}")
async def get_career(career_id: str):
    oid = parse_object_id(career_id, "Career path not found")
    career = get_collection(COLLECTIONS["career_paths"]).find_one({"_id": oid, "is_active": True})
    if not career:
        raise HTTPException(status_code=404, detail="Career path not found")
    return serialize_doc(career)
