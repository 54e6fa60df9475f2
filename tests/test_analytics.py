"""
Tests for analytics reports.
"""

from datetime import datetime, timedelta

import pytest
from bson import ObjectId

from guidancehub.db.mongodb import COLLECTIONS
from guidancehub.services.analytics_service import build_visualization_data, build_comparative_analysis
from guidancehub.services.segmentation_service import ensure_default_segments


def add_attempt(mongo_db, user_id, assessment_id, scores, days_ago=0):
    end = datetime.utcnow() - timedelta(days=days_ago)
    mongo_db[COLLECTIONS["user_responses"]].insert_one({
        "user": user_id,
        "assessment": assessment_id,
        "responses": [],
        "start_time": end - timedelta(minutes=10),
        "end_time": end,
        "is_completed": True,
        "category_scores": [
            {"category": category, "score": score, "max_score": 10, "question_count": 2}
            for category, score in scores.items()
        ],
    })


@pytest.fixture
def history(mongo_db, student, quiz, careers):
    assessment_id = quiz["assessment"]["_id"]
    add_attempt(mongo_db, student["oid"], assessment_id, {"math": 4, "logic": 5}, days_ago=10)
    add_attempt(mongo_db, student["oid"], assessment_id, {"math": 7, "logic": 5}, days_ago=1)


class TestUserAnalytics:
    """Test GET /analytics/user/{user_id}."""

    def test_own_analytics(self, client, student, history):
        response = client.get(f"/api/analytics/user/{student['id']}", headers=student["headers"])
        assert response.status_code == 200
        data = response.json()

        assert data["progress"]["completed_assessments"] == 2
        assert data["progress"]["overall_progress"] == 100
        assert [point["score"] for point in data["category_trends"]["math"]] == [4, 7]
        assert data["category_trends"]["math"][0]["assessment_title"] == "Career Interest Assessment"
        assert data["skill_development"]["math"] == {"initial_score": 4, "current_score": 7, "improvement": 3}
        assert data["skill_development"]["logic"]["improvement"] == 0
        assert data["career_paths_explored"] == 1
        assert [c["title"] for c in data["recommended_career_paths"]] == ["Software Engineer"]

    def test_without_attempts(self, client, student):
        response = client.get(f"/api/analytics/user/{student['id']}", headers=student["headers"])
        data = response.json()
        assert data["progress"]["total_assessments"] == 0
        assert data["skill_development"] == {}

    def test_other_users_denied(self, client, student, make_student, history):
        other = make_student("other@example.com")
        response = client.get(f"/api/analytics/user/{student['id']}", headers=other["headers"])
        assert response.status_code == 403
        assert response.json()["detail"] == "Access denied"

    def test_admin_can_view(self, client, admin, student, history):
        response = client.get(f"/api/analytics/user/{student['id']}", headers=admin["headers"])
        assert response.status_code == 200
        assert response.json()["progress"]["completed_assessments"] == 2


class TestSegmentAnalytics:
    """Test the admin segment reports."""

    @pytest.fixture
    def classified(self, client, make_student):
        ensure_default_segments()
        achiever = make_student(
            "achiever@example.com", gpa=9.5, age=17, gender="Female", grade="12th",
            location="Pune", academic_interests=["Science", "Mathematics"],
        )
        client.post("/api/segmentation/classify", headers=achiever["headers"])
        return achiever

    def test_requires_admin(self, client, student):
        assert client.get("/api/analytics/segment-analytics", headers=student["headers"]).status_code == 403

    def test_overview(self, client, admin, classified):
        response = client.get("/api/analytics/segment-analytics", headers=admin["headers"])
        assert response.status_code == 200
        data = response.json()
        assert data["total_users"] == 2

        top = data["segments"][0]
        assert top["segment_name"] == "High Achievers"
        assert top["user_count"] == 1
        assert top["percentage"] == 50.0

        recent = data["recent_classifications"]
        assert len(recent) == 1
        assert recent[0]["email"] == "achiever@example.com"
        assert recent[0]["segment_name"] == "High Achievers"

    def test_segment_details(self, client, admin, classified, mongo_db):
        segment = mongo_db[COLLECTIONS["segments"]].find_one({"name": "High Achievers"})
        response = client.get(f"/api/analytics/segment/{segment['_id']}/analytics", headers=admin["headers"])
        assert response.status_code == 200
        data = response.json()
        assert data["total_users"] == 1
        assert data["average_confidence"] == 0.75
        assert data["demographics"] == {
            "age_groups": {"10": 1},
            "genders": {"Female": 1},
            "grades": {"12th": 1},
            "locations": {"Pune": 1},
        }
        assert data["users"][0]["user"]["email"] == "achiever@example.com"
        assert "password" not in data["users"][0]["user"]

    def test_unknown_segment(self, client, admin):
        response = client.get(f"/api/analytics/segment/{ObjectId()}/analytics", headers=admin["headers"])
        assert response.status_code == 404
        assert response.json()["detail"] == "Segment not found"


class TestComparative:
    """Test POST /analytics/comparative."""

    def test_requires_ids(self, client, admin):
        response = client.post("/api/analytics/comparative", json={}, headers=admin["headers"])
        assert response.status_code == 400

    def test_compare_users(self, client, admin, student, make_student, quiz, mongo_db):
        other = make_student("other@example.com")
        assessment_id = quiz["assessment"]["_id"]
        add_attempt(mongo_db, student["oid"], assessment_id, {"math": 4}, days_ago=2)
        add_attempt(mongo_db, student["oid"], assessment_id, {"math": 8}, days_ago=1)
        add_attempt(mongo_db, other["oid"], assessment_id, {"math": 2, "logic": 9})

        response = client.post(
            "/api/analytics/comparative",
            json={"user_ids": [student["id"], other["id"], student["id"], str(ObjectId())]},
            headers=admin["headers"],
        )
        assert response.status_code == 200
        data = response.json()
        assert data["users_compared"] == 2
        math = data["comparative_data"]["category_scores"]["math"]
        assert math == {"average_score": 4.0, "min_score": 2.0, "max_score": 6.0, "user_count": 2}
        assert data["comparative_data"]["category_scores"]["logic"]["user_count"] == 1

    def test_compare_segment(self, client, admin, make_student, mongo_db):
        ensure_default_segments()
        achiever = make_student("achiever@example.com", gpa=9.5, academic_interests=["Science"])
        client.post("/api/segmentation/classify", headers=achiever["headers"])
        segment = mongo_db[COLLECTIONS["segments"]].find_one({"name": "High Achievers"})

        response = client.post(
            "/api/analytics/comparative",
            json={"segment_ids": [str(segment["_id"])]},
            headers=admin["headers"],
        )
        assert response.status_code == 200
        assert response.json()["users_compared"] == 1


class TestAttemptReports:
    """Test the pure attempt report builders."""

    ATTEMPT = {
        "score": 12,
        "max_score": 20,
        "responses": [{}, {}],
        "category_scores": [
            {"category": "Math", "score": 9, "max_score": 10},
            {"category": "Arts", "score": 1, "max_score": 10},
            {"category": "Logic", "score": 5, "max_score": 0},
        ],
        "progress_tracking": [{"cumulative_score": 4, "time_elapsed": 10}, {"cumulative_score": 12}],
        "time_analytics": {"total_time": 90, "average_time_per_question": 45, "time_distribution": []},
    }

    def test_visualization(self):
        data = build_visualization_data(self.ATTEMPT, {"questions": [1, 2, 3]})
        normalized = {s["category"]: s["normalized_score"] for s in data["category_scores"]}
        assert normalized == {"Math": 90.0, "Arts": 10.0, "Logic": 0}
        assert data["progress_over_time"][1] == {"question_number": 2, "cumulative_score": 12, "time_elapsed": 0}
        assert data["overall_stats"]["total_questions"] == 3
        assert data["overall_stats"]["answered_questions"] == 2
        assert data["difficulty_distribution"] == []

    def test_comparative_analysis(self):
        careers = [
            {"_id": "c1", "title": "Mathematician", "categories": ["math"]},
            {"_id": "c2", "title": "Painter", "categories": ["arts"]},
        ]
        data = build_comparative_analysis(self.ATTEMPT, careers)
        assert [c["category"] for c in data["top_categories"]] == ["Math", "Logic", "Arts"]
        assert data["top_categories"][0]["related_careers"] == [{"_id": "c1", "title": "Mathematician"}]

        overall = data["overall_analysis"]
        assert overall["percentage_score"] == 60
        assert overall["strengths"] == [{"category": "Math", "percentage": 90.0}]
        assert [s["category"] for s in overall["areas_for_improvement"]] == ["Logic", "Arts"]
        assert overall["recommended_paths"][0]["title"] == "Mathematician"
