"""
Quiz Routes

GET /quiz/assessments - List active assessments
GET /quiz/assessments/{assessment_id} - Get assessment with questions ("1" = default)
POST /quiz/assessments/{assessment_id}/start - Start (or resume) an attempt
GET /quiz/assessments/{assessment_id}/next-question - Adaptive next question + progress
POST /quiz/assessments/{assessment_id}/questions/{question_id} - Submit an answer
POST /quiz/assessments/{assessment_id}/pause - Pause the attempt
POST /quiz/assessments/{assessment_id}/resume - Resume a paused attempt
POST /quiz/assessments/{assessment_id}/complete - Score the attempt
GET /quiz/results/{assessment_id} - Completed attempt
GET /quiz/results/{assessment_id}/visualization - Chart data for the results
GET /quiz/results/{assessment_id}/comparative-analysis - Strengths, weak spots, careers
"""

from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from guidancehub.core.auth import get_current_user
from guidancehub.db.mongodb import get_collection, COLLECTIONS
from guidancehub.services.mongo_service import serialize_doc, serialize_docs
from guidancehub.services.quiz_service import QuizService, get_quiz_service
from guidancehub.services.analytics_service import build_visualization_data, build_comparative_analysis
from guidancehub.schemas.schemas import AnswerSubmit

router = APIRouter(prefix="/quiz", tags=["Quiz"])


@router.get("/assessments")
async def list_assessments(quiz: QuizService = Depends(get_quiz_service)):
    """List active assessments (question ids only)."""
    return serialize_docs(quiz.list_assessments())


@router.get("/assessments/{assessment_id}")
async def get_assessment(assessment_id: str, quiz: QuizService = Depends(get_quiz_service)):
    """Get an assessment with its questions."""
    assessment = quiz.resolve_assessment(assessment_id)
    return serialize_doc(quiz.with_questions(assessment))


@router.post("/assessments/{assessment_id}/start")
async def start_assessment(
    assessment_id: str,
    user: dict = Depends(get_current_user),
    quiz: QuizService = Depends(get_quiz_service)
):
    """Start an attempt. An unfinished attempt is returned instead of a new one (200)."""
    assessment = quiz.resolve_assessment(assessment_id)
    attempt, created = quiz.start(user["_id"], assessment)

    if not created:
        return {"message": "Assessment already started", "user_response": serialize_doc(attempt)}

    return JSONResponse(
        status_code=201,
        content=jsonable_encoder({"message": "Assessment started", "user_response": serialize_doc(attempt)}),
    )


@router.get("/assessments/{assessment_id}/next-question")
async def next_question(
    assessment_id: str,
    user: dict = Depends(get_current_user),
    quiz: QuizService = Depends(get_quiz_service)
):
    """Pick the next question adaptively."""
    assessment = quiz.resolve_assessment(assessment_id)
    attempt = quiz.require_open_attempt(user["_id"], assessment["_id"])

    question, progress = quiz.next_question(attempt, assessment)
    if question is None:
        raise HTTPException(status_code=404, detail="No more questions available.")

    return {"question": serialize_doc(question), "progress": progress}


@router.post("/assessments/{assessment_id}/questions/{question_id}")
async def submit_answer(
    assessment_id: str,
    question_id: str,
    data: AnswerSubmit,
    user: dict = Depends(get_current_user),
    quiz: QuizService = Depends(get_quiz_service)
):
    """Record an answer. Answering a question again replaces the earlier answer."""
    assessment = quiz.resolve_assessment(assessment_id)
    attempt = quiz.require_open_attempt(user["_id"], assessment["_id"])

    attempt = quiz.submit_answer(
        attempt, assessment, question_id,
        answer=data.answer, time_taken=data.time_taken, confidence=data.confidence
    )
    return {"message": "Answer submitted", "user_response": serialize_doc(attempt)}


@router.post("/assessments/{assessment_id}/pause")
async def pause_assessment(
    assessment_id: str,
    user: dict = Depends(get_current_user),
    quiz: QuizService = Depends(get_quiz_service)
):
    assessment = quiz.resolve_assessment(assessment_id)
    attempt = quiz.pause(quiz.require_open_attempt(user["_id"], assessment["_id"]))
    return {"message": "Assessment paused", "user_response": serialize_doc(attempt)}


@router.post("/assessments/{assessment_id}/resume")
async def resume_assessment(
    assessment_id: str,
    user: dict = Depends(get_current_user),
    quiz: QuizService = Depends(get_quiz_service)
):
    assessment = quiz.resolve_assessment(assessment_id)
    attempt = quiz.resume(quiz.require_open_attempt(user["_id"], assessment["_id"]))
    return {"message": "Assessment resumed", "user_response": serialize_doc(attempt)}


@router.post("/assessments/{assessment_id}/complete")
async def complete_assessment(
    assessment_id: str,
    user: dict = Depends(get_current_user),
    quiz: QuizService = Depends(get_quiz_service)
):
    """Score the attempt and store its analytics."""
    assessment = quiz.resolve_assessment(assessment_id)
    attempt = quiz.complete(quiz.require_open_attempt(user["_id"], assessment["_id"]), assessment)
    return {"message": "Assessment completed", "user_response": serialize_doc(attempt)}


@router.get("/results/{assessment_id}")
async def get_results(
    assessment_id: str,
    user: dict = Depends(get_current_user),
    quiz: QuizService = Depends(get_quiz_service)
):
    """Completed attempt with the answered questions filled in."""
    assessment = quiz.resolve_assessment(assessment_id)
    attempt = quiz.require_completed_attempt(user["_id"], assessment["_id"])
    return serialize_doc(quiz.with_answered_questions(attempt))


@router.get("/results/{assessment_id}/visualization")
async def get_visualization(
    assessment_id: str,
    user: dict = Depends(get_current_user),
    quiz: QuizService = Depends(get_quiz_service)
):
    assessment = quiz.resolve_assessment(assessment_id)
    attempt = quiz.require_completed_attempt(user["_id"], assessment["_id"])
    return serialize_doc(build_visualization_data(attempt, assessment))


@router.get("/results/{assessment_id}/comparative-analysis")
async def get_comparative_analysis(
    assessment_id: str,
    user: dict = Depends(get_current_user),
    quiz: QuizService = Depends(get_quiz_service)
):
    assessment = quiz.resolve_assessment(assessment_id)
    attempt = quiz.require_completed_attempt(user["_id"], assessment["_id"])
    careers = list(get_collection(COLLECTIONS["career_paths"]).find({"is_active": True}))
    return serialize_doc(build_comparative_analysis(attempt, careers))
