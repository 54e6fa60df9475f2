"""
Application Service - eligibility rules and status history for
college applications.
"""

from datetime import datetime
from typing import List, Optional, Tuple

# Fields a student may only change while the application is still "Applied"
APPLIED_ONLY_FIELDS = ("academic_score", "test_scores", "documents", "notes")


def find_program(college: dict, program_name: str) -> Optional[dict]:
    """College program with the given name (case-insensitive)."""
    wanted = program_name.strip().lower()
    for program in college.get("programs", []):
        if str(program.get("name", "")).lower() == wanted:
            return program
    return None


def check_eligibility(
    college: dict,
    academic_score: float,
    test_scores: Optional[List[dict]] = None,
) -> Tuple[bool, List[str]]:
    """
    Compare a student's scores with the college's admission requirements.

    Test minimums are only checked when the student supplied test scores.

    Returns:
        (is_eligible, reasons) where reasons explain every failed requirement
    """
    requirements = college.get("admission_requirements") or {}
    reasons = []

    min_gpa = requirements.get("gpa")
    if min_gpa and academic_score < min_gpa:
        reasons.append(f"Academic score ({academic_score}) is below the minimum required ({min_gpa})")

    required_tests = requirements.get("standardized_tests") or []
    if test_scores is not None:
        scores = {str(t["name"]).lower(): t["score"] for t in test_scores}
        for test in required_tests:
            score = scores.get(str(test["name"]).lower())
            minimum = test.get("minimum_score") or 0
            if score is None:
                reasons.append(f"Missing required test: {test['name']}")
            elif score < minimum:
                reasons.append(f"{test['name']} score ({score}) is below the minimum required ({minimum})")

    return not reasons, reasons


def history_entry(status: str, notes: Optional[str] = None) -> dict:
    return {"status": status, "date": datetime.utcnow(), "notes": notes}
