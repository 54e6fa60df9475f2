"""
Review Routes

GET /reviews/colleges/{college_id} - Approved reviews of a college (paginated)
GET /reviews/colleges/{college_id}/average - Average approved rating
POST /reviews/colleges/{college_id} - Review a college (one per user)
PUT /reviews/{review_id} - Edit own review (needs re-approval)
DELETE /reviews/{review_id} - Delete own review
POST /reviews/{review_id}/helpful - Mark review as helpful
PUT /reviews/{review_id}/approve - Approve a review (admin only)
"""

from datetime import datetime
from fastapi import APIRouter, HTTPException, Depends, Query
from pymongo.errors import DuplicateKeyError

from guidancehub.core.auth import get_current_user, get_current_admin
from guidancehub.db.mongodb import get_collection, COLLECTIONS
from guidancehub.services.mongo_service import serialize_doc, serialize_docs, parse_object_id, paginate, page_meta
from guidancehub.services.quiz_service import round_half_up
from guidancehub.schemas.schemas import ReviewCreate, ReviewUpdate, MessageResponse

router = APIRouter(prefix="/reviews", tags=["Reviews"])


def _require_college(college_id: str) -> dict:
    college = get_collection(COLLECTIONS["colleges"]).find_one(
        {"_id": parse_object_id(college_id, "College not found")}
    )
    if not college:
        raise HTTPException(status_code=404, detail="College not found")
    return college


def _require_own_review(review_id: str, user: dict) -> dict:
    review = get_collection(COLLECTIONS["reviews"]).find_one(
        {"_id": parse_object_id(review_id, "Review not found")}
    )
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")
    if review["user"] != user["_id"]:
        raise HTTPException(status_code=403, detail="Not authorized to modify this review")
    return review


@router.get("/colleges/{college_id}")
async def list_college_reviews(
    college_id: str,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100)
):
    """Approved reviews, newest first, with the reviewer's email."""
    college = _require_college(college_id)
    reviews, total = paginate(
        get_collection(COLLECTIONS["reviews"]),
        {"college": college["_id"], "is_approved": True},
        [("created_at", -1)],
        page, page_size
    )

    emails = {
        u["_id"]: u["email"]
        for u in get_collection(COLLECTIONS["users"]).find(
            {"_id": {"$in": [r["user"] for r in reviews]}}, {"email": 1}
        )
    }
    for review in reviews:
        review["user"] = {"_id": review["user"], "email": emails.get(review["user"])}

    return {"reviews": serialize_docs(reviews), **page_meta(total, page, page_size)}


@router.get("/colleges/{college_id}/average")
async def average_rating(college_id: str):
    college = _require_college(college_id)
    result = list(get_collection(COLLECTIONS["reviews"]).aggregate([
        {"$match": {"college": college["_id"], "is_approved": True}},
        {"$group": {"_id": "$college", "average": {"$avg": "$rating"}, "count": {"$sum": 1}}},
    ]))
    if not result:
        return {"average_rating": 0, "total_reviews": 0}
    return {
        "average_rating": round_half_up(result[0]["average"], 1),
        "total_reviews": result[0]["count"],
    }


@router.post("/colleges/{college_id}", status_code=201)
async def create_review(college_id: str, data: ReviewCreate, user: dict = Depends(get_current_user)):
    """Review a college. Reviews are published after admin approval."""
    college = _require_college(college_id)
    reviews = get_collection(COLLECTIONS["reviews"])
    if reviews.find_one({"college": college["_id"], "user": user["_id"]}):
        raise HTTPException(status_code=400, detail="You have already reviewed this college")

    now = datetime.utcnow()
    review = {
        "college": college["_id"],
        "user": user["_id"],
        "rating": data.rating,
        "title": data.title.strip(),
        "content": data.content.strip(),
        "is_approved": False,
        "helpful_count": 0,
        "created_at": now,
        "updated_at": now,
    }
    try:
        review["_id"] = reviews.insert_one(review).inserted_id
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="You have already reviewed this college")
    return serialize_doc(review)


@router.put("/{review_id}")
async def update_review(review_id: str, data: ReviewUpdate, user: dict = Depends(get_current_user)):
    review = _require_own_review(review_id, user)
    updates = data.model_dump(exclude_unset=True, exclude_none=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    updates.update({"is_approved": False, "updated_at": datetime.utcnow()})
    reviews = get_collection(COLLECTIONS["reviews"])
    reviews.update_one({"_id": review["_id"]}, {"$set": updates})
    return serialize_doc(reviews.find_one({"_id": review["_id"]}))


@router.delete("/{review_id}", response_model=MessageResponse)
async def delete_review(review_id: str, user: dict = Depends(get_current_user)):
    review = _require_own_review(review_id, user)
    get_collection(COLLECTIONS["reviews"]).delete_one({"_id": review["_id"]})
    return MessageResponse(message="Review removed")


@router.post("/{review_id}/helpful")
async def mark_helpful(review_id: str, user: dict = Depends(get_current_user)):
    reviews = get_collection(COLLECTIONS["reviews"])
    oid = parse_object_id(review_id, "Review not found")
    result = reviews.update_one({"_id": oid}, {"$inc": {"helpful_count": 1}})
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Review not found")
    return {"helpful_count": reviews.find_one({"_id": oid})["helpful_count"]}


@router.put("/{review_id}/approve")
async def approve_review(review_id: str, admin: dict = Depends(get_current_admin)):
    reviews = get_collection(COLLECTIONS["reviews"])
    oid = parse_object_id(review_id, "Review not found")
    result = reviews.update_one({"_id": oid}, {"$set": {"is_approved": True, "updated_at": datetime.utcnow()}})
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Review not found")
    return serialize_doc(reviews.find_one({"_id": oid}))
