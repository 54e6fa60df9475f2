"""
Cutoff Routes

POST /cutoff/predict - Predict cutoff for a college program
GET /cutoff/history - Historical cutoffs, newest first
POST /cutoff/compare - Latest cutoffs across colleges
"""

import random
from fastapi import APIRouter, HTTPException, Depends, Query

from guidancehub.db.mongodb import get_collection, COLLECTIONS
from guidancehub.services.cutoff_service import (
    HistoricalAdmissionService, get_historical_admission_service, data_year, predict_cutoff, summarize_record
)
from guidancehub.services.mongo_service import serialize_doc, serialize_docs, parse_object_id, is_object_id
from guidancehub.schemas.schemas import CutoffPredictRequest, CutoffCompareRequest, AdmissionCategory

router = APIRouter(prefix="/cutoff", tags=["Cutoff Prediction"])

_rng = random.Random()


def get_prediction_rng() -> random.Random:
    return _rng


def _college_summary(college: dict) -> dict:
    return {"_id": college["_id"], "name": college.get("name"), "type": college.get("type")}


@router.post("/predict")
async def predict(
    request: CutoffPredictRequest,
    history: HistoricalAdmissionService = Depends(get_historical_admission_service),
    rng: random.Random = Depends(get_prediction_rng)
):
    """Predict the cutoff from the latest (or requested year's) historical record."""
    college = get_collection(COLLECTIONS["colleges"]).find_one(
        {"_id": parse_object_id(request.college_id, "College not found")}
    )
    if not college:
        raise HTTPException(status_code=404, detail="College not found")

    record = history.latest(college["_id"], request.program, request.category.value, request.academic_year)
    if not record:
        raise HTTPException(status_code=404, detail="No historical data found for this program and category")

    # A requested academic year is also the year being predicted
    target_year = request.target_year
    if target_year is None and request.academic_year:
        target_year = data_year(request.academic_year)

    return serialize_doc({
        "college": _college_summary(college),
        "program": request.program,
        "category": request.category.value,
        "target_year": target_year,
        "historical_data": summarize_record(record),
        "prediction": predict_cutoff(record, target_year, rng),
    })


@router.get("/history")
async def cutoff_history(
    college_id: str,
    program: str,
    category: AdmissionCategory = AdmissionCategory.general,
    limit: int = Query(5, ge=1, le=50),
    history: HistoricalAdmissionService = Depends(get_historical_admission_service)
):
    """Historical records for charting."""
    college_oid = parse_object_id(college_id, "No historical data found for this program and category")
    records = history.history(college_oid, program, category.value, limit)
    if not records:
        raise HTTPException(status_code=404, detail="No historical data found for this program and category")
    return [summarize_record(record) for record in records]


@router.post("/compare")
async def compare_cutoffs(
    request: CutoffCompareRequest,
    history: HistoricalAdmissionService = Depends(get_historical_admission_service)
):
    """Latest cutoff per college. Unknown colleges are skipped."""
    colleges = get_collection(COLLECTIONS["colleges"])
    comparison = []
    for college_id in request.college_ids:
        if not is_object_id(college_id):
            continue
        college = colleges.find_one({"_id": parse_object_id(college_id)})
        if not college:
            continue
        record = history.latest(college["_id"], request.program, request.category.value)
        if record:
            comparison.append({"college": _college_summary(college), **summarize_record(record)})

    if not comparison:
        raise HTTPException(status_code=404, detail="No historical data found for the specified colleges and program")
    return serialize_docs(comparison)
