"""
Cutoff Prediction Service

Predicts next cutoffs from the latest historical admission record:
- competition is assumed to grow 0.5%-2% per year (drawn at random)
- the cutoff score moves with the year gap, the cutoff rank against it
- very selective programs (admission rate < 10%) get a 2% higher cutoff,
  open ones (> 50%) a 2% lower cutoff
"""

import random
from typing import List, Optional

from bson import ObjectId

from guidancehub.db.mongodb import get_collection, COLLECTIONS

MIN_GROWTH_PCT = 0.5
GROWTH_SPREAD_PCT = 1.5
SELECTIVE_RATE = 0.1
OPEN_RATE = 0.5

FACTORS_CONSIDERED = [
    "Historical cutoff scores",
    "Admission rates",
    "Year-over-year trends",
]


def data_year(academic_year: str) -> int:
    """Leading year of an academic year such as "2022-2023"."""
    return int(str(academic_year).split("-")[0])


def predict_cutoff(record: dict, target_year: Optional[int] = None, rng: Optional[random.Random] = None) -> dict:
    rng = rng or random.Random()
    year_gap = target_year - data_year(record["academic_year"]) if target_year else 1
    growth = MIN_GROWTH_PCT + rng.random() * GROWTH_SPREAD_PCT

    cutoff = record["cutoff_score"]
    rank = record.get("cutoff_rank")

    if year_gap > 0:
        change = growth * year_gap / 100
        cutoff = cutoff * (1 + change)
        if rank:
            rank = max(1, rank * (1 - change))
    elif year_gap < 0:
        change = growth * abs(year_gap) / 100
        cutoff = cutoff * (1 - change)
        if rank:
            rank = rank * (1 + change)

    admission_rate = record.get("admission_rate")
    if admission_rate:
        if admission_rate < SELECTIVE_RATE:
            cutoff *= 1.02
        elif admission_rate > OPEN_RATE:
            cutoff *= 0.98

    return {
        "predicted_cutoff_score": round(cutoff, 2),
        "predicted_cutoff_rank": round(rank) if rank else None,
        "confidence": "Moderate",
        "methodology": "Simple trend analysis based on historical data",
        "factors_considered": list(FACTORS_CONSIDERED),
    }


def summarize_record(record: dict) -> dict:
    return {
        "academic_year": record.get("academic_year"),
        "cutoff_score": record.get("cutoff_score"),
        "cutoff_rank": record.get("cutoff_rank"),
        "total_seats": record.get("total_seats"),
        "total_applicants": record.get("total_applicants"),
        "admission_rate": record.get("admission_rate"),
    }


class HistoricalAdmissionService:
    """Reads historical_admissions records for a (college, program, category)."""

    def __init__(self):
        self.collection = get_collection(COLLECTIONS["historical_admissions"])

    def latest(self, college_id: ObjectId, program: str, category: str,
               academic_year: Optional[str] = None) -> Optional[dict]:
        query = {"college": college_id, "program": program, "category": category}
        if academic_year:
            query["academic_year"] = academic_year
        return self.collection.find_one(query, sort=[("academic_year", -1)])

    def history(self, college_id: ObjectId, program: str, category: str, limit: int = 5) -> List[dict]:
        cursor = self.collection.find(
            {"college": college_id, "program": program, "category": category}
        ).sort("academic_year", -1).limit(limit)
        return list(cursor)


def get_historical_admission_service() -> HistoricalAdmissionService:
    return HistoricalAdmissionService()
