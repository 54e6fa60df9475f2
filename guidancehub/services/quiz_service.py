"""
Adaptive Quiz Service

PURPOSE:
Score quiz attempts and pick the next question adaptively.

HOW IT WORKS:
1. Every answer is scored from its question:
   - rating questions: value of the chosen option, weighted by difficulty / 3
   - mcq / scenario questions: difficulty points (1-5)
2. Category scores, time and difficulty analytics are derived from the
   same per-answer scores when an attempt is completed
3. The next question targets the difficulty of the last answered one,
   nudged up or down depending on the answer

The scoring helpers are pure functions over plain question/response dicts.
QuizService wraps them with the MongoDB reads and writes.
"""

import logging
import math
import random
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from fastapi import HTTPException

from guidancehub.db.mongodb import get_collection, COLLECTIONS
from guidancehub.services.mongo_service import is_object_id
from guidancehub.schemas.schemas import QuestionType

logger = logging.getLogger(__name__)

DEFAULT_ASSESSMENT_ALIAS = "1"
MEDIUM_DIFFICULTY = 3
MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5
DIFFICULTY_SHIFT_CHANCE = 0.3

DIFFICULTY_LABELS = {
    1: "Very Easy",
    2: "Easy",
    3: "Medium",
    4: "Hard",
    5: "Very Hard",
}

# (label, inclusive upper bound in seconds); None means unbounded
TIME_BUCKETS = [
    ("0-30s", 30),
    ("30-60s", 60),
    ("1-2m", 120),
    ("2-5m", 300),
    ("5m+", None),
]


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round .5 away from zero for positive values (round() rounds to even)."""
    factor = 10 ** ndigits
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if ndigits == 0 else rounded


# ============================================================
# PER-ANSWER SCORING
# ============================================================

def _numeric(value: Any) -> float:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    return 0


def _difficulty(question: dict) -> int:
    return question.get("difficulty") or MEDIUM_DIFFICULTY


def find_option(question: dict, answer: Any) -> Optional[dict]:
    """Option whose value equals the answer, or None."""
    for option in question.get("options", []):
        value = option.get("value")
        if type(value) is type(answer) or (
            isinstance(value, (int, float)) and isinstance(answer, (int, float))
        ):
            if value == answer:
                return option
    return None


def rating_value(question: dict, answer: Any) -> Optional[float]:
    """Numeric value of the chosen rating option (None if no option matches)."""
    option = find_option(question, answer)
    if option is None:
        return None
    return _numeric(option.get("value"))


def score_answer(question: dict, answer: Any) -> float:
    """Weighted score of one answer."""
    if question.get("type") == QuestionType.rating.value:
        value = rating_value(question, answer)
        if value is None:
            return 0
        return value * _difficulty(question) / 3
    return _difficulty(question)


def max_question_score(question: dict) -> float:
    if question.get("type") == QuestionType.rating.value:
        values = [_numeric(option.get("value")) for option in question.get("options", [])]
        if not values:
            return 0
        return max(values) * _difficulty(question) / 3
    return _difficulty(question)


# ============================================================
# ATTEMPT-LEVEL SCORING
# ============================================================

def _answered(questions_by_id: Dict[str, dict], responses: List[dict]):
    """Yield (response, question) pairs for responses whose question is known."""
    for response in responses:
        question = questions_by_id.get(str(response.get("question")))
        if question is not None:
            yield response, question


def calculate_total_score(questions_by_id: Dict[str, dict], responses: List[dict]) -> int:
    total = sum(score_answer(q, r.get("answer")) for r, q in _answered(questions_by_id, responses))
    return round_half_up(total)


def calculate_max_score(questions: List[dict]) -> int:
    return round_half_up(sum(max_question_score(q) for q in questions))


def calculate_category_scores(questions_by_id: Dict[str, dict], responses: List[dict]) -> List[dict]:
    """
    Per-category totals.

    Rating answers add their raw value to the total and the weighted value to
    the weighted score; other answers add 1 and their difficulty. Every
    answered question adds its difficulty to the category maximum.
    """
    stats: Dict[str, dict] = {}

    for response, question in _answered(questions_by_id, responses):
        difficulty = _difficulty(question)
        for category in question.get("categories", []):
            entry = stats.setdefault(category, {
                "total_score": 0, "question_count": 0, "weighted_score": 0, "max_score": 0
            })
            entry["question_count"] += 1

            if question.get("type") == QuestionType.rating.value:
                value = rating_value(question, response.get("answer"))
                if value is not None:
                    entry["total_score"] += value
                    entry["weighted_score"] += value * difficulty / 3
            else:
                entry["total_score"] += 1
                entry["weighted_score"] += difficulty

            entry["max_score"] += difficulty

    results = []
    for category, entry in stats.items():
        count = entry["question_count"]
        average = entry["total_score"] / count if count else 0
        results.append({
            "category": category,
            "score": round_half_up(entry["weighted_score"]),
            "max_score": entry["max_score"],
            "average_score": round_half_up(average, 2),
            "question_count": count,
            "weighted_score": entry["weighted_score"],
        })
    return results


def calculate_time_distribution(responses: List[dict]) -> List[dict]:
    counts = {label: 0 for label, _ in TIME_BUCKETS}
    for response in responses:
        taken = response.get("time_taken")
        if not taken:
            continue
        for label, upper in TIME_BUCKETS:
            if upper is None or taken <= upper:
                counts[label] += 1
                break
    return [{"range": label, "count": counts[label]} for label, _ in TIME_BUCKETS]


def calculate_difficulty_distribution(questions_by_id: Dict[str, dict], responses: List[dict]) -> List[dict]:
    counts = {level: 0 for level in DIFFICULTY_LABELS}
    for _, question in _answered(questions_by_id, responses):
        level = question.get("difficulty")
        if level in counts:
            counts[level] += 1
    return [
        {"difficulty": level, "count": counts[level], "label": DIFFICULTY_LABELS[level]}
        for level in DIFFICULTY_LABELS
    ]


def calculate_performance_by_difficulty(questions_by_id: Dict[str, dict], responses: List[dict]) -> List[dict]:
    """
    Answers are subjective (ratings, preferences), so every completed
    answer counts as correct.
    """
    totals = {level: 0 for level in DIFFICULTY_LABELS}
    for _, question in _answered(questions_by_id, responses):
        level = question.get("difficulty")
        if level in totals:
            totals[level] += 1

    performance = []
    for level, total in totals.items():
        correct = total
        accuracy = correct / total * 100 if total else 0
        performance.append({
            "difficulty": level,
            "total_questions": total,
            "correct_answers": correct,
            "accuracy": round_half_up(accuracy, 2),
        })
    return performance


def calculate_progress_tracking(
    questions_by_id: Dict[str, dict],
    responses: List[dict],
    timestamp: Optional[datetime] = None,
) -> List[dict]:
    timestamp = timestamp or datetime.utcnow()
    tracking = []
    cumulative = 0
    for index, response in enumerate(responses):
        question = questions_by_id.get(str(response.get("question")))
        if question is None:
            continue
        cumulative += score_answer(question, response.get("answer"))
        tracking.append({
            "timestamp": timestamp,
            "question_index": index,
            "cumulative_score": round_half_up(cumulative),
            "time_elapsed": response.get("time_taken") or 0,
        })
    return tracking


def calculate_time_analytics(
    start_time: datetime,
    end_time: datetime,
    total_pause_ms: float,
    responses: List[dict],
) -> dict:
    """Active seconds spent on the attempt (pauses excluded)."""
    elapsed_ms = (end_time - start_time).total_seconds() * 1000 - (total_pause_ms or 0)
    total_time = elapsed_ms / 1000
    average = total_time / len(responses) if responses else 0
    return {
        "total_time": total_time,
        "average_time_per_question": average,
        "time_distribution": calculate_time_distribution(responses),
    }


def score_attempt(attempt: dict, questions: List[dict], end_time: Optional[datetime] = None) -> dict:
    """Every field written to an attempt when it is completed."""
    end_time = end_time or datetime.utcnow()
    questions_by_id = {str(q["_id"]): q for q in questions}
    responses = attempt.get("responses", [])

    return {
        "end_time": end_time,
        "is_completed": True,
        "is_paused": False,
        "score": calculate_total_score(questions_by_id, responses),
        "max_score": calculate_max_score(questions),
        "category_scores": calculate_category_scores(questions_by_id, responses),
        "time_analytics": calculate_time_analytics(
            attempt["start_time"], end_time, attempt.get("total_pause_time", 0), responses
        ),
        "difficulty_analytics": {
            "difficulty_distribution": calculate_difficulty_distribution(questions_by_id, responses),
            "performance_by_difficulty": calculate_performance_by_difficulty(questions_by_id, responses),
        },
        "progress_tracking": calculate_progress_tracking(questions_by_id, responses, end_time),
    }


# ============================================================
# ADAPTIVE QUESTION SELECTION
# ============================================================

def target_difficulty(last_question: Optional[dict], last_answer: Any, rng: random.Random) -> int:
    """
    Difficulty to aim for after the last answer.

    A high rating (>= 3) on an easy question moves up one level; a low
    rating on a hard question moves down one level. Other question types
    have no right answer, so they drift by one level 30% of the time.
    """
    if last_question is None:
        return MEDIUM_DIFFICULTY

    difficulty = _difficulty(last_question)
    if last_question.get("type") == QuestionType.rating.value:
        value = rating_value(last_question, last_answer) or 0
        if difficulty <= 2 and value >= 3:
            return min(MAX_DIFFICULTY, difficulty + 1)
        if difficulty >= 4 and value < 3:
            return max(MIN_DIFFICULTY, difficulty - 1)
        return difficulty

    if rng.random() < DIFFICULTY_SHIFT_CHANCE:
        step = 1 if rng.random() > 0.5 else -1
        return min(MAX_DIFFICULTY, max(MIN_DIFFICULTY, difficulty + step))
    return difficulty


def select_next_question(
    questions: List[dict],
    responses: List[dict],
    rng: Optional[random.Random] = None,
) -> Optional[dict]:
    """Pick the next unanswered question, or None when all are answered."""
    rng = rng or random.Random()
    answered = {str(r.get("question")) for r in responses}
    available = [q for q in questions if str(q["_id"]) not in answered]
    if not available:
        return None

    if not responses:
        medium = [q for q in available if q.get("difficulty") == MEDIUM_DIFFICULTY]
        return rng.choice(medium) if medium else available[0]

    questions_by_id = {str(q["_id"]): q for q in questions}
    last = responses[-1]
    target = target_difficulty(questions_by_id.get(str(last.get("question"))), last.get("answer"), rng)

    matching = [q for q in available if _difficulty(q) == target]
    if matching:
        return rng.choice(matching)
    return min(available, key=lambda q: abs(_difficulty(q) - target))


def calculate_progress(total_questions: int, answered: int) -> int:
    if total_questions == 0:
        return 0
    return round_half_up(answered / total_questions * 100)


# ============================================================
# DATABASE ACCESS
# ============================================================

class QuizService:
    """
    Handles assessments and user attempts (user_responses collection).
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.assessments = get_collection(COLLECTIONS["assessments"])
        self.questions = get_collection(COLLECTIONS["questions"])
        self.attempts = get_collection(COLLECTIONS["user_responses"])
        self.rng = rng or random.Random()

    def list_assessments(self) -> List[dict]:
        return list(self.assessments.find({"is_active": True}).sort("created_at", 1))

    def resolve_assessment(self, assessment_id: str) -> dict:
        """Find an assessment; "1" stands for the first active one."""
        if assessment_id == DEFAULT_ASSESSMENT_ALIAS:
            assessment = self.assessments.find_one({"is_active": True}, sort=[("created_at", 1)])
        elif is_object_id(assessment_id):
            assessment = self.assessments.find_one({"_id": ObjectId(assessment_id)})
        else:
            assessment = None

        if not assessment:
            raise HTTPException(status_code=404, detail="Assessment not found")
        return assessment

    def get_questions(self, assessment: dict) -> List[dict]:
        """Questions of an assessment, in assessment order."""
        ids = assessment.get("questions", [])
        found = {q["_id"]: q for q in self.questions.find({"_id": {"$in": ids}})}
        return [found[qid] for qid in ids if qid in found]

    def with_questions(self, assessment: dict) -> dict:
        populated = dict(assessment)
        populated["questions"] = self.get_questions(assessment)
        return populated

    def find_attempt(self, user_id: ObjectId, assessment_id: ObjectId, completed: bool) -> Optional[dict]:
        return self.attempts.find_one(
            {"user": user_id, "assessment": assessment_id, "is_completed": completed},
            sort=[("start_time", -1)]
        )

    def require_open_attempt(self, user_id: ObjectId, assessment_id: ObjectId) -> dict:
        attempt = self.find_attempt(user_id, assessment_id, completed=False)
        if not attempt:
            raise HTTPException(status_code=404, detail="Assessment not started")
        return attempt

    def require_completed_attempt(self, user_id: ObjectId, assessment_id: ObjectId) -> dict:
        attempt = self.find_attempt(user_id, assessment_id, completed=True)
        if not attempt:
            raise HTTPException(status_code=404, detail="Completed assessment not found")
        return attempt

    def start(self, user_id: ObjectId, assessment: dict) -> Tuple[dict, bool]:
        """Return (attempt, created). An unfinished attempt is reused."""
        existing = self.find_attempt(user_id, assessment["_id"], completed=False)
        if existing:
            return existing, False

        attempt = {
            "user": user_id,
            "assessment": assessment["_id"],
            "responses": [],
            "start_time": datetime.utcnow(),
            "end_time": None,
            "is_completed": False,
            "is_paused": False,
            "paused_at": None,
            "total_pause_time": 0,
            "score": 0,
            "max_score": 0,
            "category_scores": [],
        }
        attempt["_id"] = self.attempts.insert_one(attempt).inserted_id
        logger.info("User %s started assessment %s", user_id, assessment["_id"])
        return attempt, True

    def next_question(self, attempt: dict, assessment: dict) -> Tuple[Optional[dict], int]:
        questions = self.get_questions(assessment)
        responses = attempt.get("responses", [])
        question = select_next_question(questions, responses, self.rng)
        return question, calculate_progress(len(assessment.get("questions", [])), len(responses))

    def submit_answer(
        self,
        attempt: dict,
        assessment: dict,
        question_id: str,
        answer: Any,
        time_taken: Optional[float] = None,
        confidence: Optional[int] = None,
    ) -> dict:
        """
        Record an answer.

        Answering the same question again replaces the answer; time and
        confidence keep their earlier values unless new ones are sent.
        """
        question_oid = ObjectId(question_id) if is_object_id(question_id) else None
        if question_oid is None or question_oid not in assessment.get("questions", []):
            raise HTTPException(status_code=400, detail="Question is not part of this assessment")

        entry = {
            "question": question_oid,
            "answer": answer,
            "time_taken": time_taken,
            "confidence": confidence,
        }
        responses = list(attempt.get("responses", []))
        for index, existing in enumerate(responses):
            if existing.get("question") == question_oid:
                if time_taken is None:
                    entry["time_taken"] = existing.get("time_taken")
                if confidence is None:
                    entry["confidence"] = existing.get("confidence")
                responses[index] = entry
                break
        else:
            responses.append(entry)

        self.attempts.update_one({"_id": attempt["_id"]}, {"$set": {"responses": responses}})
        attempt["responses"] = responses
        return attempt

    def pause(self, attempt: dict) -> dict:
        if attempt.get("is_paused"):
            raise HTTPException(status_code=400, detail="Assessment is already paused")
        paused_at = datetime.utcnow()
        self.attempts.update_one(
            {"_id": attempt["_id"]},
            {"$set": {"is_paused": True, "paused_at": paused_at}}
        )
        attempt.update({"is_paused": True, "paused_at": paused_at})
        return attempt

    def resume(self, attempt: dict) -> dict:
        if not attempt.get("is_paused"):
            raise HTTPException(status_code=400, detail="Assessment is not paused")
        paused_ms = (datetime.utcnow() - attempt["paused_at"]).total_seconds() * 1000
        total_pause = (attempt.get("total_pause_time") or 0) + paused_ms
        self.attempts.update_one(
            {"_id": attempt["_id"]},
            {"$set": {"is_paused": False, "paused_at": None, "total_pause_time": total_pause}}
        )
        attempt.update({"is_paused": False, "paused_at": None, "total_pause_time": total_pause})
        return attempt

    def complete(self, attempt: dict, assessment: dict) -> dict:
        if attempt.get("is_paused") and attempt.get("paused_at"):
            attempt = self.resume(attempt)
        results = score_attempt(attempt, self.get_questions(assessment))
        self.attempts.update_one({"_id": attempt["_id"]}, {"$set": results})
        attempt.update(results)
        logger.info(
            "Assessment %s completed by user %s: score %s/%s",
            assessment["_id"], attempt["user"], results["score"], results["max_score"]
        )
        return attempt

    def with_answered_questions(self, attempt: dict) -> dict:
        """Attempt copy whose responses carry the full question documents."""
        ids = [r.get("question") for r in attempt.get("responses", [])]
        found = {q["_id"]: q for q in self.questions.find({"_id": {"$in": ids}})}
        populated = dict(attempt)
        populated["responses"] = [
            {**r, "question": found.get(r.get("question"), r.get("question"))}
            for r in attempt.get("responses", [])
        ]
        return populated


def get_quiz_service() -> QuizService:
    return QuizService()
