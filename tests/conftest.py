# Test configuration
import os
import sys
import tempfile
from datetime import datetime
from pathlib import Path

# Add project root to sys.path so 'guidancehub' can be imported without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables BEFORE importing guidancehub modules
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-testing-only-32chars"
os.environ["MONGODB_DB"] = "guidancehub_test"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="guidancehub-uploads-")
os.environ["MAX_AVATAR_SIZE_MB"] = "1"
os.environ["LOG_LEVEL"] = "WARNING"

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from guidancehub.core.auth import create_user_token, hash_password
from guidancehub.db import mongodb
from guidancehub.main import app

STUDENT_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def mongo_db(monkeypatch):
    """Fresh in-memory database for every test."""
    client = mongomock.MongoClient()
    db = client["guidancehub_test"]
    monkeypatch.setattr(mongodb, "_client", client)
    monkeypatch.setattr(mongodb, "_db", db)
    mongodb.init_mongo_indexes()
    yield db


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_student(client):
    """Register a student through the API."""

    def _make(email="student@example.com", **profile):
        response = client.post(
            "/api/users/register",
            json={"email": email, "password": STUDENT_PASSWORD, **profile},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return {
            "id": body["user"]["_id"],
            "oid": ObjectId(body["user"]["_id"]),
            "headers": bearer(body["access_token"]),
            "user": body["user"],
        }

    return _make


@pytest.fixture
def student(make_student):
    return make_student()


@pytest.fixture
def admin(mongo_db):
    """Admins are created directly in the database."""
    now = datetime.utcnow()
    user = {
        "email": "admin@example.com",
        "password": hash_password("adminpass"),
        "role": "admin",
        "academic_interests": [],
        "created_at": now,
        "updated_at": now,
    }
    user["_id"] = mongo_db[mongodb.COLLECTIONS["users"]].insert_one(user).inserted_id
    return {"id": str(user["_id"]), "oid": user["_id"], "headers": bearer(create_user_token(user["_id"]))}


# ============================================================
# SAMPLE DATA
# ============================================================

@pytest.fixture
def make_college(mongo_db):
    def _make(name="Delhi University", **fields):
        college = {
            "name": name,
            "description": "Sample college",
            "address": {"city": "New Delhi", "state": "Delhi", "country": "India"},
            "location": {"type": "Point", "coordinates": [77.2167, 28.5900]},
            "type": "University",
            "programs": [
                {"name": "Bachelor of Arts", "level": "Bachelor", "duration": 3},
                {"name": "Bachelor of Science", "level": "Bachelor", "duration": 3},
            ],
            "admission_requirements": {
                "gpa": 8.5,
                "standardized_tests": [{"name": "CUET", "minimum_score": 70}],
                "additional_requirements": ["Personal interview"],
            },
            "facilities": ["Library", "Hostel"],
            "accreditation": {"status": "Accredited", "agency": "NAAC"},
            "established": 1922,
            "student_capacity": 50000,
            "fees": {"undergraduate": 20000, "postgraduate": 30000},
            "is_active": True,
            "created_at": datetime.utcnow(),
        }
        college.update(fields)
        college["_id"] = mongo_db[mongodb.COLLECTIONS["colleges"]].insert_one(college).inserted_id
        return college

    return _make


@pytest.fixture
def college(make_college):
    return make_college()


def rating_question(difficulty, categories, text="How much do you enjoy it?"):
    return {
        "_id": ObjectId(),
        "text": text,
        "type": "rating",
        "options": [{"text": str(value), "value": value} for value in range(1, 6)],
        "categories": categories,
        "difficulty": difficulty,
    }


def choice_question(kind, difficulty, categories, values, text="Pick one"):
    return {
        "_id": ObjectId(),
        "text": text,
        "type": kind,
        "options": [{"text": value.title(), "value": value} for value in values],
        "categories": categories,
        "difficulty": difficulty,
    }


def sample_questions():
    """Rating (math/logic, difficulty 2), mcq (logic, 4), scenario (leadership, 3)."""
    return [
        rating_question(2, ["math", "logic"], "How do you feel about solving complex mathematical problems?"),
        choice_question("mcq", 4, ["logic"], ["creativity", "logic", "math"], "Which activity is most engaging?"),
        choice_question("scenario", 3, ["leadership"], ["direct", "authority", "motivational"],
                        "A team member is not contributing. What do you do?"),
    ]


@pytest.fixture
def quiz(mongo_db):
    """One active assessment over the sample questions."""
    questions = sample_questions()
    mongo_db[mongodb.COLLECTIONS["questions"]].insert_many(questions)
    assessment = {
        "title": "Career Interest Assessment",
        "questions": [q["_id"] for q in questions],
        "categories": ["math", "logic", "leadership"],
        "is_active": True,
        "created_at": datetime.utcnow(),
    }
    assessment["_id"] = mongo_db[mongodb.COLLECTIONS["assessments"]].insert_one(assessment).inserted_id
    return {"assessment": assessment, "questions": questions}


@pytest.fixture
def careers(mongo_db):
    docs = [
        {"title": "Software Engineer", "categories": ["logic", "math"], "job_growth": "22%",
         "education_level": "Bachelor's degree", "salary_range": {"min": 600000, "max": 2500000},
         "required_skills": ["Programming"]},
        {"title": "Teacher", "description": "Teaches and mentors school students",
         "categories": ["communication", "leadership"], "job_growth": "5%",
         "education_level": "B.Ed", "salary_range": {"min": 300000, "max": 1000000},
         "required_skills": ["Patience"]},
        {"title": "Medical Doctor", "categories": ["science"], "job_growth": "7%",
         "education_level": "MBBS", "salary_range": {"min": 900000, "max": 4000000},
         "required_skills": ["Biology"]},
    ]
    for doc in docs:
        doc.update({"_id": ObjectId(), "is_active": True})
    mongo_db[mongodb.COLLECTIONS["career_paths"]].insert_many(docs)
    return docs
