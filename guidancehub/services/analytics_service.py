"""
Analytics Service

PURPOSE:
Read-only reports built from completed quiz attempts, segment
memberships and career paths.

REPORTS:
- Segment overview and per-segment demographics (admin)
- One user's category trends and skill development
- Category comparisons across a group of users
- Chart data and comparative analysis for one completed attempt
"""

import numpy as np
from collections import Counter, defaultdict
from typing import Dict, List, Optional

from bson import ObjectId

from guidancehub.db.mongodb import get_collection, COLLECTIONS
from guidancehub.services.matching_service import rank_careers
from guidancehub.services.quiz_service import round_half_up

STRENGTH_RATIO = 0.7
IMPROVEMENT_RATIO = 0.4
TOP_CATEGORY_COUNT = 3
MEMBER_PREVIEW_LIMIT = 20
RECENT_CLASSIFICATIONS_LIMIT = 10


def _category_ratio(category_score: dict) -> float:
    max_score = category_score.get("max_score") or 0
    if max_score <= 0:
        return 0.0
    return category_score.get("score", 0) / max_score


# ============================================================
# ATTEMPT REPORTS (pure)
# ============================================================

def build_visualization_data(attempt: dict, assessment: dict) -> dict:
    """Chart-ready data for one completed attempt."""
    category_scores = [
        {
            "category": score["category"],
            "score": score["score"],
            "max_score": score.get("max_score", 0),
            "normalized_score": round_half_up(min(100.0, max(0.0, _category_ratio(score) * 100)), 2),
        }
        for score in attempt.get("category_scores", [])
    ]

    progress_over_time = [
        {
            "question_number": index + 1,
            "cumulative_score": point["cumulative_score"],
            "time_elapsed": point.get("time_elapsed", 0),
        }
        for index, point in enumerate(attempt.get("progress_tracking", []))
    ]

    time_analytics = attempt.get("time_analytics") or {}
    difficulty_analytics = attempt.get("difficulty_analytics") or {}

    return {
        "category_scores": category_scores,
        "progress_over_time": progress_over_time,
        "difficulty_distribution": difficulty_analytics.get("difficulty_distribution", []),
        "performance_by_difficulty": difficulty_analytics.get("performance_by_difficulty", []),
        "time_distribution": time_analytics.get("time_distribution", []),
        "overall_stats": {
            "total_questions": len(assessment.get("questions", [])),
            "answered_questions": len(attempt.get("responses", [])),
            "total_time": time_analytics.get("total_time", 0),
            "average_time_per_question": time_analytics.get("average_time_per_question", 0),
            "score": attempt.get("score", 0),
            "max_possible_score": attempt.get("max_score", 0),
        },
    }


def build_comparative_analysis(attempt: dict, careers: List[dict]) -> dict:
    """Top categories, strengths and weak spots of an attempt, plus related careers."""
    category_scores = sorted(attempt.get("category_scores", []), key=lambda s: s["score"], reverse=True)

    top_categories = []
    for score in category_scores[:TOP_CATEGORY_COUNT]:
        name = score["category"].lower()
        related = [
            {"_id": career["_id"], "title": career["title"]}
            for career in careers
            if name in [c.lower() for c in career.get("categories", [])]
        ]
        top_categories.append({
            "category": score["category"],
            "score": score["score"],
            "related_careers": related,
        })

    strengths = [
        {"category": s["category"], "percentage": round_half_up(_category_ratio(s) * 100, 2)}
        for s in category_scores if _category_ratio(s) >= STRENGTH_RATIO
    ]
    improvements = [
        {"category": s["category"], "percentage": round_half_up(_category_ratio(s) * 100, 2)}
        for s in category_scores if _category_ratio(s) < IMPROVEMENT_RATIO
    ]

    total = attempt.get("score", 0)
    max_score = attempt.get("max_score", 0)
    recommended = rank_careers(careers, category_scores, limit=TOP_CATEGORY_COUNT)

    return {
        "top_categories": top_categories,
        "overall_analysis": {
            "total_score": total,
            "max_possible_score": max_score,
            "percentage_score": round_half_up(total / max_score * 100) if max_score else 0,
            "strengths": strengths,
            "areas_for_improvement": improvements,
            "recommended_paths": [
                {"_id": c["_id"], "title": c["title"], "match_score": c["match_score"]}
                for c in recommended
            ],
        },
    }


# ============================================================
# USER / GROUP REPORTS
# ============================================================

class AnalyticsService:

    def __init__(self):
        self.users = get_collection(COLLECTIONS["users"])
        self.attempts = get_collection(COLLECTIONS["user_responses"])
        self.assessments = get_collection(COLLECTIONS["assessments"])
        self.careers = get_collection(COLLECTIONS["career_paths"])
        self.segments = get_collection(COLLECTIONS["segments"])
        self.memberships = get_collection(COLLECTIONS["user_segments"])

    def _completed_attempts(self, user_id: ObjectId) -> List[dict]:
        return list(self.attempts.find({"user": user_id, "is_completed": True}).sort("end_time", 1))

    def segment_overview(self) -> dict:
        total_users = self.users.count_documents({})
        segments = []
        for segment in self.segments.find().sort("user_count", -1):
            count = segment.get("user_count", 0)
            segments.append({
                "segment_id": segment["_id"],
                "segment_name": segment["name"],
                "user_count": count,
                "percentage": round_half_up(count / total_users * 100, 2) if total_users else 0,
            })

        recent = list(
            self.memberships.find().sort("classification_date", -1).limit(RECENT_CLASSIFICATIONS_LIMIT)
        )
        emails = {
            u["_id"]: u["email"]
            for u in self.users.find({"_id": {"$in": [m["user"] for m in recent]}}, {"email": 1})
        }
        names = {s["segment_id"]: s["segment_name"] for s in segments}

        return {
            "total_users": total_users,
            "segments": segments,
            "recent_classifications": [
                {
                    "user": m["user"],
                    "email": emails.get(m["user"]),
                    "segment": m["segment"],
                    "segment_name": names.get(m["segment"]),
                    "confidence_score": m.get("confidence_score"),
                    "classification_date": m.get("classification_date"),
                }
                for m in recent
            ],
        }

    def segment_details(self, segment: dict) -> dict:
        memberships = list(self.memberships.find({"segment": segment["_id"]}).sort("confidence_score", -1))
        members = {
            u["_id"]: u
            for u in self.users.find(
                {"_id": {"$in": [m["user"] for m in memberships]}},
                {"password": 0}
            )
        }

        age_groups, genders, grades, locations = Counter(), Counter(), Counter(), Counter()
        for membership in memberships:
            user = members.get(membership["user"])
            if not user:
                continue
            if user.get("age"):
                age_groups[str(user["age"] // 10 * 10)] += 1
            if user.get("gender"):
                genders[user["gender"]] += 1
            if user.get("grade"):
                grades[user["grade"]] += 1
            if user.get("location"):
                locations[user["location"]] += 1

        confidences = [m.get("confidence_score", 0) for m in memberships]
        average_confidence = float(np.mean(confidences)) if confidences else 0.0

        return {
            "segment": segment,
            "total_users": len(memberships),
            "average_confidence": round_half_up(average_confidence, 2),
            "demographics": {
                "age_groups": dict(age_groups),
                "genders": dict(genders),
                "grades": dict(grades),
                "locations": dict(locations),
            },
            "users": [
                {
                    "user": members.get(m["user"], m["user"]),
                    "confidence_score": m.get("confidence_score"),
                    "classification_date": m.get("classification_date"),
                }
                for m in memberships[:MEMBER_PREVIEW_LIMIT]
            ],
        }

    def user_analytics(self, user_id: ObjectId) -> dict:
        attempts = self._completed_attempts(user_id)
        titles = {
            a["_id"]: a.get("title")
            for a in self.assessments.find({"_id": {"$in": [x["assessment"] for x in attempts]}}, {"title": 1})
        }

        category_trends: Dict[str, List[dict]] = defaultdict(list)
        skill_development: Dict[str, dict] = {}
        for attempt in attempts:
            for score in attempt.get("category_scores", []):
                category = score["category"]
                category_trends[category].append({
                    "assessment_id": attempt["assessment"],
                    "assessment_title": titles.get(attempt["assessment"]),
                    "score": score["score"],
                    "date": attempt.get("end_time"),
                })
                if category not in skill_development:
                    skill_development[category] = {
                        "initial_score": score["score"],
                        "current_score": score["score"],
                        "improvement": 0,
                    }
                else:
                    entry = skill_development[category]
                    entry["current_score"] = score["score"]
                    entry["improvement"] = entry["current_score"] - entry["initial_score"]

        careers = list(self.careers.find(
            {"is_active": True, "categories": {"$in": list(skill_development)}}
        ).limit(10))

        return {
            "progress": {
                "total_assessments": len(attempts),
                "completed_assessments": len(attempts),
                "overall_progress": 100 if attempts else 0,
            },
            "category_trends": dict(category_trends),
            "skill_development": skill_development,
            "career_paths_explored": len(careers),
            "recommended_career_paths": careers[:5],
        }

    def _category_averages(self, user_id: ObjectId) -> Dict[str, float]:
        per_category: Dict[str, List[float]] = defaultdict(list)
        for attempt in self._completed_attempts(user_id):
            for score in attempt.get("category_scores", []):
                per_category[score["category"]].append(score["score"])
        return {category: float(np.mean(values)) for category, values in per_category.items()}

    def comparative(self, user_ids: List[ObjectId], segment_ids: List[ObjectId]) -> dict:
        """Per-category average, min and max of each user's average category score."""
        selected = list(user_ids)
        if segment_ids:
            selected += [m["user"] for m in self.memberships.find({"segment": {"$in": segment_ids}})]

        # Only users that still exist, each counted once
        existing = {u["_id"] for u in self.users.find({"_id": {"$in": selected}}, {"_id": 1})}
        unique_users = [uid for uid in dict.fromkeys(selected) if uid in existing]

        per_category: Dict[str, List[float]] = defaultdict(list)
        for user_id in unique_users:
            for category, average in self._category_averages(user_id).items():
                per_category[category].append(average)

        category_scores = {}
        for category, values in per_category.items():
            scores = np.array(values, dtype=float)
            category_scores[category] = {
                "average_score": float(scores.mean()),
                "min_score": float(scores.min()),
                "max_score": float(scores.max()),
                "user_count": int(scores.size),
            }

        return {
            "users_compared": len(unique_users),
            "comparative_data": {
                "category_scores": category_scores,
                "total_users": len(unique_users),
            },
        }


def get_analytics_service() -> AnalyticsService:
    return AnalyticsService()
