"""
Student Segmentation Service

Places students into segments (High Achievers, Rural Students, ...) using
calculate_segment_match from the matching service. Memberships live in
user_segments; each segment keeps a running user_count.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from guidancehub.db.mongodb import get_collection, COLLECTIONS
from guidancehub.services.matching_service import best_segment

logger = logging.getLogger(__name__)

DEFAULT_SEGMENTS = [
    {
        "name": "High Achievers",
        "description": "Students with excellent academic performance and strong interest in competitive fields",
        "criteria": {
            "academic_performance": {"min_gpa": 8.5, "max_gpa": 10},
            "interests": ["Science", "Mathematics", "Engineering", "Medicine"],
        },
    },
    {
        "name": "Creative Thinkers",
        "description": "Students with interests in arts, literature, and creative fields",
        "criteria": {
            "interests": ["Arts", "Literature", "Music", "Design", "Writing"],
        },
    },
    {
        "name": "Rural Students",
        "description": "Students from rural areas who may need additional support",
        "criteria": {"location": "Rural"},
    },
    {
        "name": "Financial Need",
        "description": "Students who may require financial assistance for higher education",
        "criteria": {"financial_status": "low"},
    },
    {
        "name": "STEM Enthusiasts",
        "description": "Students with strong interest in Science, Technology, Engineering, and Mathematics",
        "criteria": {
            "interests": ["Science", "Technology", "Engineering", "Mathematics", "Computer Science"],
        },
    },
]


def ensure_default_segments() -> int:
    """Insert the default segments into an empty collection. Returns how many were created."""
    segments = get_collection(COLLECTIONS["segments"])
    if segments.count_documents({}) > 0:
        return 0

    now = datetime.utcnow()
    docs = [
        {**segment, "user_count": 0, "recommendations": [], "created_at": now}
        for segment in DEFAULT_SEGMENTS
    ]
    segments.insert_many(docs)
    logger.info("Created %d default student segments", len(docs))
    return len(docs)


class SegmentationService:

    def __init__(self):
        self.segments = get_collection(COLLECTIONS["segments"])
        self.memberships = get_collection(COLLECTIONS["user_segments"])

    def list_segments(self) -> List[dict]:
        return list(self.segments.find().sort("name", 1))

    def create_segment(self, data: dict) -> dict:
        doc = {**data, "user_count": 0, "created_at": datetime.utcnow()}
        doc["_id"] = self.segments.insert_one(doc).inserted_id
        return doc

    def classify(self, user: dict) -> Tuple[Optional[dict], float]:
        """
        Store the user's best matching segment.

        A user already in that segment keeps the existing membership and
        the segment count is not incremented again.
        """
        segment, confidence = best_segment(user, self.list_segments())
        if segment is None:
            return None, confidence

        existing = self.memberships.find_one({"user": user["_id"], "segment": segment["_id"]})
        if existing:
            return segment, confidence

        try:
            self.memberships.insert_one({
                "user": user["_id"],
                "segment": segment["_id"],
                "classification_date": datetime.utcnow(),
                "confidence_score": confidence,
            })
        except DuplicateKeyError:
            return segment, confidence

        self.segments.update_one({"_id": segment["_id"]}, {"$inc": {"user_count": 1}})
        segment["user_count"] = segment.get("user_count", 0) + 1
        logger.info("User %s classified into segment '%s' (%.2f)", user["_id"], segment["name"], confidence)
        return segment, confidence

    def user_segments(self, user_id: ObjectId) -> List[dict]:
        memberships = list(self.memberships.find({"user": user_id}).sort("classification_date", -1))
        segment_ids = [m["segment"] for m in memberships]
        segments = {s["_id"]: s for s in self.segments.find({"_id": {"$in": segment_ids}})}
        return [
            {**membership, "segment": segments.get(membership["segment"], membership["segment"])}
            for membership in memberships
        ]


def get_segmentation_service() -> SegmentationService:
    return SegmentationService()
