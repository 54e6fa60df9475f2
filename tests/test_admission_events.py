"""
Tests for admission events.
"""

from datetime import datetime, timedelta

import pytest
from bson import ObjectId

from guidancehub.db.mongodb import COLLECTIONS


def event_payload(college, /, **overrides):
    payload = {
        "college": str(college["_id"]),
        "title": "Application deadline",
        "event_type": "Application Deadline",
        "program": "Bachelor of Science",
        "start_date": (datetime.utcnow() + timedelta(days=10)).isoformat(),
        "reminders": [{"type": "email", "time_before": 1440}],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def event(client, admin, college):
    response = client.post("/api/admission-events", json=event_payload(college), headers=admin["headers"])
    assert response.status_code == 201
    return response.json()


class TestCreateEvent:
    """Test creating events."""

    def test_create_event(self, event, college):
        assert event["college"] == str(college["_id"])
        assert event["event_type"] == "Application Deadline"
        assert event["is_active"] is True
        assert event["reminders"] == [{"type": "email", "time_before": 1440}]

    def test_timezone_aware_dates_are_stored_as_utc(self, client, admin, college, mongo_db):
        response = client.post(
            "/api/admission-events",
            json=event_payload(college, start_date="2030-06-01T10:00:00+05:30"),
            headers=admin["headers"],
        )
        assert response.status_code == 201
        stored = mongo_db[COLLECTIONS["admission_events"]].find_one({"_id": ObjectId(response.json()["_id"])})
        assert stored["start_date"] == datetime(2030, 6, 1, 4, 30)

    def test_students_cannot_create(self, client, student, college):
        response = client.post("/api/admission-events", json=event_payload(college), headers=student["headers"])
        assert response.status_code == 403

    def test_requires_auth(self, client, college):
        assert client.post("/api/admission-events", json=event_payload(college)).status_code == 401

    def test_unknown_college(self, client, admin, college):
        payload = event_payload(college, college=str(ObjectId()))
        response = client.post("/api/admission-events", json=payload, headers=admin["headers"])
        assert response.status_code == 404
        assert response.json()["detail"] == "College not found"

    def test_invalid_event_type(self, client, admin, college):
        payload = event_payload(college, event_type="Party")
        assert client.post("/api/admission-events", json=payload, headers=admin["headers"]).status_code == 422


class TestListEvents:
    """Test listing and reading events."""

    @pytest.fixture
    def events(self, client, admin, make_college, college):
        other = make_college("IIT Bombay")
        payloads = [
            event_payload(college, title="DU deadline"),
            event_payload(college, title="DU exam", event_type="Exam Date",
                          start_date=(datetime.utcnow() + timedelta(days=20)).isoformat()),
            event_payload(other, title="IIT counseling", event_type="Counseling", program="B.Tech",
                          start_date=(datetime.utcnow() + timedelta(days=5)).isoformat()),
            event_payload(college, title="Last year's deadline", start_date="2020-01-01T00:00:00"),
        ]
        for payload in payloads:
            assert client.post("/api/admission-events", json=payload, headers=admin["headers"]).status_code == 201
        return {"college": college, "other": other}

    def test_list_sorted_by_start(self, client, events):
        response = client.get("/api/admission-events")
        assert response.status_code == 200
        data = response.json()
        assert [e["title"] for e in data["events"]] == [
            "Last year's deadline", "IIT counseling", "DU deadline", "DU exam"
        ]
        assert data["total"] == 4
        assert data["events"][1]["college"]["name"] == "IIT Bombay"

    def test_filters(self, client, events):
        response = client.get("/api/admission-events", params={"college": str(events["other"]["_id"])})
        assert [e["title"] for e in response.json()["events"]] == ["IIT counseling"]

        response = client.get("/api/admission-events", params={"event_type": "Exam Date"})
        assert [e["title"] for e in response.json()["events"]] == ["DU exam"]

        response = client.get("/api/admission-events", params={"start_date": "2025-01-01T00:00:00"})
        assert response.json()["total"] == 3

    def test_sort_descending_and_paginate(self, client, events):
        response = client.get(
            "/api/admission-events",
            params={"sort_by": "start_date", "sort_order": "desc", "page_size": 2},
        )
        data = response.json()
        assert [e["title"] for e in data["events"]] == ["DU exam", "DU deadline"]
        assert data["total_pages"] == 2

    def test_upcoming(self, client, events):
        response = client.get("/api/admission-events/upcoming", params={"limit": 2})
        assert response.status_code == 200
        assert [e["title"] for e in response.json()] == ["IIT counseling", "DU deadline"]

    def test_get_event_with_address(self, client, event):
        response = client.get(f"/api/admission-events/{event['_id']}")
        assert response.status_code == 200
        college = response.json()["college"]
        assert college["name"] == "Delhi University"
        assert college["address"]["city"] == "New Delhi"

    def test_get_unknown_event(self, client):
        assert client.get(f"/api/admission-events/{ObjectId()}").status_code == 404
        assert client.get("/api/admission-events/nope").status_code == 404


class TestUpdateDeleteEvent:
    """Test admin updates and deletion."""

    def test_update_event(self, client, admin, event):
        response = client.put(
            f"/api/admission-events/{event['_id']}",
            json={"title": "Extended deadline", "event_type": "Other"},
            headers=admin["headers"],
        )
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Extended deadline"
        assert data["event_type"] == "Other"
        assert data["program"] == "Bachelor of Science"

    def test_null_fields_are_ignored(self, client, admin, event, mongo_db):
        url = f"/api/admission-events/{event['_id']}"
        response = client.put(
            url, json={"title": None, "event_type": None, "start_date": None}, headers=admin["headers"]
        )
        assert response.status_code == 400

        response = client.put(url, json={"title": None, "program": "Bachelor of Arts"}, headers=admin["headers"])
        assert response.status_code == 200

        stored = mongo_db[COLLECTIONS["admission_events"]].find_one({"_id": ObjectId(event["_id"])})
        assert stored["title"] == "Application deadline"
        assert stored["event_type"] == "Application Deadline"
        assert stored["start_date"] is not None
        assert stored["program"] == "Bachelor of Arts"

    def test_update_requires_admin(self, client, student, event):
        response = client.put(f"/api/admission-events/{event['_id']}", json={"title": "x"}, headers=student["headers"])
        assert response.status_code == 403

    def test_delete_event(self, client, admin, event):
        response = client.delete(f"/api/admission-events/{event['_id']}", headers=admin["headers"])
        assert response.status_code == 200
        assert response.json()["message"] == "Admission event removed"
        assert client.get(f"/api/admission-events/{event['_id']}").status_code == 404
