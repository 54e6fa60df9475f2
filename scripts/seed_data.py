#!/usr/bin/env python3
"""
Seed Data Script

Populates MongoDB with sample data for local development:
questions + one assessment, career paths, colleges, historical admissions,
admission events and the default student segments.

Run: python scripts/seed_data.py [--reset]
"""
import argparse
import sys
from datetime import datetime, timedelta

sys.path.insert(0, '.')

from guidancehub.db.mongodb import get_collection, init_mongo_indexes, test_mongo_connection, COLLECTIONS
from guidancehub.schemas.schemas import QuestionType, ScoringMethod
from guidancehub.services.segmentation_service import ensure_default_segments


def rating_options(labels):
    return [{"text": label, "value": value} for value, label in enumerate(labels, start=1)]


QUESTIONS = [
    {
        "text": "How do you feel about solving complex mathematical problems?",
        "type": QuestionType.rating.value,
        "options": rating_options(["I dislike it", "I'm neutral", "I enjoy it", "I love it", "I'm passionate about it"]),
        "categories": ["math", "logic"],
        "difficulty": 2,
    },
    {
        "text": "Which of the following activities do you find most engaging?",
        "type": QuestionType.mcq.value,
        "options": [
            {"text": "Writing creative stories", "value": "creativity"},
            {"text": "Solving puzzles", "value": "logic"},
            {"text": "Working with numbers", "value": "math"},
            {"text": "Conducting experiments", "value": "science"},
            {"text": "Helping others", "value": "social"},
        ],
        "categories": ["creativity", "logic", "math", "science", "social"],
        "difficulty": 1,
    },
    {
        "text": "How would you handle a team member who is not contributing to a group project?",
        "type": QuestionType.scenario.value,
        "options": [
            {"text": "Confront them directly", "value": "direct"},
            {"text": "Speak to the teacher", "value": "authority"},
            {"text": "Try to motivate them", "value": "motivational"},
            {"text": "Take on their responsibilities", "value": "responsible"},
        ],
        "categories": ["leadership", "communication"],
        "difficulty": 3,
    },
    {
        "text": "How much do you enjoy designing experiments to test an idea?",
        "type": QuestionType.rating.value,
        "options": rating_options(["Not at all", "A little", "Somewhat", "A lot", "It's my favourite thing"]),
        "categories": ["science"],
        "difficulty": 4,
    },
    {
        "text": "How comfortable are you presenting in front of a group?",
        "type": QuestionType.rating.value,
        "options": rating_options(["Very uncomfortable", "Uncomfortable", "Neutral", "Comfortable", "Very comfortable"]),
        "categories": ["communication", "leadership"],
        "difficulty": 3,
    },
]

CAREER_PATHS = [
    {
        "title": "Software Engineer",
        "description": "Designs, builds and maintains software systems.",
        "education_level": "Bachelor's degree",
        "salary_range": {"min": 600000, "max": 2500000},
        "job_growth": "22%",
        "required_skills": ["Programming", "Problem solving", "Algorithms"],
        "categories": ["logic", "math", "technology"],
    },
    {
        "title": "Data Scientist",
        "description": "Extracts insights from data with statistics and machine learning.",
        "education_level": "Master's degree",
        "salary_range": {"min": 800000, "max": 3000000},
        "job_growth": "36%",
        "required_skills": ["Statistics", "Python", "Machine learning"],
        "categories": ["math", "science", "logic"],
    },
    {
        "title": "Medical Doctor",
        "description": "Diagnoses and treats illness.",
        "education_level": "MBBS",
        "salary_range": {"min": 900000, "max": 4000000},
        "job_growth": "7%",
        "required_skills": ["Biology", "Empathy", "Decision making"],
        "categories": ["science", "social"],
    },
    {
        "title": "Teacher",
        "description": "Educates students and plans lessons.",
        "education_level": "Bachelor's degree + B.Ed",
        "salary_range": {"min": 300000, "max": 1000000},
        "job_growth": "5%",
        "required_skills": ["Communication", "Patience", "Subject knowledge"],
        "categories": ["communication", "social"],
    },
    {
        "title": "Marketing Manager",
        "description": "Plans campaigns and leads marketing teams.",
        "education_level": "MBA",
        "salary_range": {"min": 700000, "max": 2800000},
        "job_growth": "10%",
        "required_skills": ["Communication", "Creativity", "Analytics"],
        "categories": ["creativity", "communication", "leadership"],
    },
]

COLLEGES = [
    {
        "name": "Delhi University",
        "description": "Premier university offering undergraduate and postgraduate programs.",
        "address": {"street": "University Enclave", "city": "New Delhi", "state": "Delhi",
                    "country": "India", "zip_code": "110021"},
        "location": {"type": "Point", "coordinates": [77.2167, 28.5900]},
        "contact": {"phone": "+91-11-27661111", "email": "contact@du.ac.in", "website": "https://www.du.ac.in"},
        "type": "University",
        "programs": [
            {"name": "Bachelor of Arts", "level": "Bachelor", "duration": 3},
            {"name": "Bachelor of Science", "level": "Bachelor", "duration": 3},
        ],
        "admission_requirements": {
            "gpa": 8.5,
            "standardized_tests": [{"name": "CUET", "minimum_score": 70}],
            "additional_requirements": ["Entrance exam", "Personal interview"],
        },
        "facilities": ["Library", "Hostel", "Sports Complex"],
        "accreditation": {"status": "Accredited", "agency": "NAAC"},
        "established": 1922,
        "student_capacity": 50000,
        "fees": {"undergraduate": 20000, "postgraduate": 30000},
    },
    {
        "name": "IIT Bombay",
        "description": "Engineering and technology institute.",
        "address": {"street": "Powai", "city": "Mumbai", "state": "Maharashtra",
                    "country": "India", "zip_code": "400076"},
        "location": {"type": "Point", "coordinates": [72.9133, 19.1334]},
        "contact": {"phone": "+91-22-25722545", "email": "info@iitb.ac.in", "website": "https://www.iitb.ac.in"},
        "type": "Institute",
        "programs": [
            {"name": "B.Tech Computer Science", "level": "Bachelor", "duration": 4},
            {"name": "M.Tech Data Science", "level": "Master", "duration": 2},
        ],
        "admission_requirements": {
            "gpa": 9.0,
            "standardized_tests": [{"name": "JEE Advanced", "minimum_score": 200}],
            "additional_requirements": [],
        },
        "facilities": ["Library", "Hostel", "Research Labs"],
        "accreditation": {"status": "Accredited", "agency": "NBA"},
        "established": 1958,
        "student_capacity": 12000,
        "fees": {"undergraduate": 220000, "postgraduate": 150000},
    },
]


def reset(db_collections):
    for name in db_collections:
        get_collection(COLLECTIONS[name]).delete_many({})
    print("    Cleared existing sample data")


def seed():
    now = datetime.utcnow()

    question_ids = get_collection(COLLECTIONS["questions"]).insert_many(
        [{**q, "time_limit": 60, "is_active": True, "created_at": now} for q in QUESTIONS]
    ).inserted_ids
    print(f"    ✅ Inserted {len(question_ids)} questions")

    get_collection(COLLECTIONS["assessments"]).insert_one({
        "title": "Career Interest Assessment",
        "description": "Discover the fields that fit your interests and strengths.",
        "questions": question_ids,
        "categories": sorted({c for q in QUESTIONS for c in q["categories"]}),
        "time_limit": 30,
        "is_active": True,
        "scoring": ScoringMethod.adaptive.value,
        "created_at": now,
    })
    print("    ✅ Inserted assessment")

    get_collection(COLLECTIONS["career_paths"]).insert_many(
        [{**c, "related_paths": [], "is_active": True, "created_at": now} for c in CAREER_PATHS]
    )
    print(f"    ✅ Inserted {len(CAREER_PATHS)} career paths")

    college_ids = get_collection(COLLECTIONS["colleges"]).insert_many(
        [{**c, "is_active": True, "created_at": now} for c in COLLEGES]
    ).inserted_ids
    print(f"    ✅ Inserted {len(college_ids)} colleges")

    history = []
    for college_id, college in zip(college_ids, COLLEGES):
        program = college["programs"][0]["name"]
        for offset, year in enumerate(range(2020, 2024)):
            seats, applicants = 500, 4000 + offset * 500
            history.append({
                "college": college_id,
                "program": program,
                "academic_year": f"{year}-{year + 1}",
                "category": "General",
                "cutoff_score": 85 + offset * 1.5,
                "cutoff_rank": 1500 - offset * 100,
                "total_seats": seats,
                "total_applicants": applicants,
                "seats_filled": seats,
                "admission_rate": round(seats / applicants, 3),
            })
    get_collection(COLLECTIONS["historical_admissions"]).insert_many(history)
    print(f"    ✅ Inserted {len(history)} historical admission records")

    events = [
        {
            "college": college_id,
            "title": f"{college['name']} application deadline",
            "event_type": "Application Deadline",
            "program": college["programs"][0]["name"],
            "start_date": now + timedelta(days=5 + index * 10),
            "is_all_day": True,
            "is_recurring": False,
            "reminders": [{"type": "email", "time_before": 1440}],
            "is_active": True,
            "created_at": now,
        }
        for index, (college_id, college) in enumerate(zip(college_ids, COLLEGES))
    ]
    get_collection(COLLECTIONS["admission_events"]).insert_many(events)
    print(f"    ✅ Inserted {len(events)} admission events")

    created = ensure_default_segments()
    print(f"    ✅ Default segments created: {created}")


def main():
    parser = argparse.ArgumentParser(description="Seed GuidanceHub sample data")
    parser.add_argument("--reset", action="store_true", help="Clear sample collections first")
    args = parser.parse_args()

    print("=" * 50)
    print("GuidanceHub seed")
    print("=" * 50)

    if not test_mongo_connection():
        print("❌ MongoDB is not reachable")
        sys.exit(1)

    init_mongo_indexes()
    if args.reset:
        reset([
            "questions", "assessments", "career_paths", "colleges",
            "historical_admissions", "admission_events",
        ])
    seed()
    print("\nDone.")


if __name__ == "__main__":
    main()
