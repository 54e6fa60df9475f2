"""
Tests for notifications and the two dispatch jobs.
"""

from datetime import datetime, timedelta

import pytest
from bson import ObjectId

from guidancehub.db.mongodb import COLLECTIONS
from guidancehub.services.notification_service import NotificationService


@pytest.fixture
def inbox(student):
    service = NotificationService()
    created = [
        service.create(student["oid"], "General", "Welcome", "Welcome to GuidanceHub"),
        service.create(student["oid"], "Exam Date", "CUET soon", "CUET is next week", priority="High"),
    ]
    return {str(n["_id"]): n for n in created}


class TestInbox:
    """Test reading and managing own notifications."""

    def test_list(self, client, student, inbox):
        response = client.get("/api/notifications", headers=student["headers"])
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert {n["_id"] for n in data["notifications"]} == set(inbox)
        assert all(n["is_read"] is False for n in data["notifications"])

    def test_filter_by_type(self, client, student, inbox):
        response = client.get("/api/notifications", params={"type": "Exam Date"}, headers=student["headers"])
        assert [n["title"] for n in response.json()["notifications"]] == ["CUET soon"]

    def test_other_users_notifications_hidden(self, client, make_student, inbox):
        other = make_student("other@example.com")
        response = client.get("/api/notifications", headers=other["headers"])
        assert response.json()["total"] == 0

        notification_id = next(iter(inbox))
        assert client.get(f"/api/notifications/{notification_id}", headers=other["headers"]).status_code == 404
        assert client.put(f"/api/notifications/{notification_id}/read", headers=other["headers"]).status_code == 404
        assert client.delete(f"/api/notifications/{notification_id}", headers=other["headers"]).status_code == 404

    def test_mark_read_and_filter(self, client, student, inbox):
        notification_id = next(iter(inbox))
        response = client.put(f"/api/notifications/{notification_id}/read", headers=student["headers"])
        assert response.status_code == 200
        assert response.json()["is_read"] is True

        response = client.get("/api/notifications", params={"is_read": False}, headers=student["headers"])
        assert response.json()["total"] == 1

    def test_dismiss(self, client, student, inbox):
        notification_id = next(iter(inbox))
        response = client.put(f"/api/notifications/{notification_id}/dismiss", headers=student["headers"])
        assert response.status_code == 200
        assert response.json()["is_dismissed"] is True

    def test_read_all(self, client, student, inbox):
        response = client.put("/api/notifications/read-all", headers=student["headers"])
        assert response.status_code == 200
        assert response.json()["data"] == {"updated": 2}
        response = client.get("/api/notifications", params={"is_read": False}, headers=student["headers"])
        assert response.json()["total"] == 0

    def test_get_and_delete(self, client, student, inbox):
        notification_id = next(iter(inbox))
        response = client.get(f"/api/notifications/{notification_id}", headers=student["headers"])
        assert response.status_code == 200
        assert response.json()["_id"] == notification_id

        response = client.delete(f"/api/notifications/{notification_id}", headers=student["headers"])
        assert response.status_code == 200
        assert client.get(f"/api/notifications/{notification_id}", headers=student["headers"]).status_code == 404

    def test_unknown_notification(self, client, student):
        assert client.get(f"/api/notifications/{ObjectId()}", headers=student["headers"]).status_code == 404
        assert client.get("/api/notifications/bad-id", headers=student["headers"]).status_code == 404


class TestAdmissionDeadlines:
    """Test the admission deadline dispatch job."""

    @pytest.fixture
    def events(self, mongo_db, college):
        now = datetime.utcnow()
        docs = [
            {"title": "Soon", "event_type": "Application Deadline", "program": "Bachelor of Science",
             "start_date": now + timedelta(days=3)},
            {"title": "Later", "event_type": "Application Deadline", "start_date": now + timedelta(days=30)},
            {"title": "Exam", "event_type": "Exam Date", "start_date": now + timedelta(days=2)},
            {"title": "Cancelled", "event_type": "Application Deadline", "start_date": now + timedelta(days=1),
             "is_active": False},
        ]
        for doc in docs:
            doc.setdefault("is_active", True)
            doc.update({"_id": ObjectId(), "college": college["_id"]})
        mongo_db[COLLECTIONS["admission_events"]].insert_many(docs)
        return docs

    def test_requires_admin(self, client, student):
        response = client.post("/api/notifications/admission-deadlines", headers=student["headers"])
        assert response.status_code == 403

    def test_notifies_every_user_once(self, client, admin, student, events, mongo_db):
        response = client.post("/api/notifications/admission-deadlines", headers=admin["headers"])
        assert response.status_code == 200
        assert response.json()["notifications_sent"] == 2

        notification = mongo_db[COLLECTIONS["notifications"]].find_one({"user": student["oid"]})
        assert notification["type"] == "Application Deadline"
        assert notification["priority"] == "High"
        assert notification["title"] == "Application Deadline: Delhi University"
        assert "Bachelor of Science" in notification["message"]
        assert notification["related_entity"]["id"] == events[0]["_id"]
        assert notification["action_links"][0]["url"] == f"/colleges/{events[0]['college']}"

        response = client.post("/api/notifications/admission-deadlines", headers=admin["headers"])
        assert response.json()["notifications_sent"] == 0


class TestApplicationUpdates:
    """Test the application status dispatch job."""

    @pytest.fixture
    def applications(self, mongo_db, student, college):
        now = datetime.utcnow()
        docs = [
            {"status": "Accepted", "program": "Bachelor of Science", "updated_at": now},
            {"status": "Interview Scheduled", "program": "Bachelor of Arts", "updated_at": now},
            {"status": "Under Review", "program": "Bachelor of Commerce", "updated_at": now},
            {"status": "Rejected", "program": "Bachelor of Law", "updated_at": now - timedelta(days=3)},
        ]
        for doc in docs:
            doc.update({"student": student["oid"], "college": college["_id"], "is_active": True})
        mongo_db[COLLECTIONS["applications"]].insert_many(docs)
        return docs

    def test_requires_admin(self, client, student):
        response = client.post("/api/notifications/application-updates", headers=student["headers"])
        assert response.status_code == 403

    def test_notifies_recent_decisions(self, client, admin, student, applications, mongo_db):
        response = client.post("/api/notifications/application-updates", headers=admin["headers"])
        assert response.status_code == 200
        assert response.json()["notifications_sent"] == 2

        notifications = {
            n["title"]: n for n in mongo_db[COLLECTIONS["notifications"]].find({"user": student["oid"]})
        }
        accepted = notifications["Application Accepted: Delhi University"]
        assert accepted["priority"] == "Urgent"
        assert accepted["type"] == "General"
        assert "Bachelor of Science" in accepted["message"]

        interview = notifications["Interview Scheduled: Delhi University"]
        assert interview["priority"] == "High"
        assert interview["type"] == "Interview Scheduled"


class TestCreateNotification:
    """Test NotificationService.create."""

    def test_default_priority(self, student):
        notification = NotificationService().create(student["oid"], "General", "Hello", "Welcome aboard")
        assert notification["priority"] == "Medium"
        assert notification["is_read"] is False
        assert notification["action_links"] == []

    def test_unknown_priority(self, student):
        with pytest.raises(ValueError):
            NotificationService().create(student["oid"], "General", "Hello", "Welcome aboard", priority="Critical")
