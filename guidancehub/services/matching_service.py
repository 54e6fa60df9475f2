"""
Category & Segment Matching Service

PURPOSE:
Match students against career paths (from quiz category scores) and
against student segments (from profile fields).

HOW IT WORKS:
1. Career matching compares every career category with every quiz category:
   - exact (case-insensitive) match: score * 1.5, weight ln(questions + 1)
   - partial match (one name contains the other): score * 0.5, half weight
   - each extra exact match adds a 10% bonus
   - the sum is normalised by the total weight
2. Segment matching averages one score per segment criterion
   (GPA range, interest overlap, location, financial status)
3. Results are ranked with numpy, highest score first
"""

import math
import numpy as np
from typing import List, Dict, Optional, Tuple


EXACT_MATCH_MULTIPLIER = 1.5
PARTIAL_MATCH_MULTIPLIER = 0.5
PARTIAL_WEIGHT_FACTOR = 0.5
EXTRA_MATCH_BONUS = 0.1


# ============================================================
# CAREER MATCHING
# ============================================================

def calculate_career_match(career: dict, category_scores: List[dict]) -> Tuple[float, int]:
    """
    Score one career path against a user's category scores.

    Returns:
        (match_score, matched_categories)
    """
    match_score = 0.0
    matched = 0
    total_weight = 0.0

    for career_category in career.get("categories", []):
        career_name = career_category.lower()
        for user_category in category_scores:
            user_name = str(user_category.get("category", "")).lower()
            user_score = user_category.get("score", 0) or 0
            weight = math.log((user_category.get("question_count", 0) or 0) + 1)

            if career_name == user_name:
                match_score += user_score * EXACT_MATCH_MULTIPLIER * weight
                matched += 1
                total_weight += weight
            elif career_name in user_name or user_name in career_name:
                partial_weight = weight * PARTIAL_WEIGHT_FACTOR
                match_score += user_score * PARTIAL_MATCH_MULTIPLIER * partial_weight
                total_weight += partial_weight

    if matched > 1 and total_weight > 0:
        match_score *= 1 + (matched - 1) * EXTRA_MATCH_BONUS

    normalized = match_score / total_weight if total_weight > 0 else match_score
    return normalized, matched


def rank_careers(careers: List[dict], category_scores: List[dict], limit: int = 5) -> List[dict]:
    """Top `limit` careers by match score, each annotated with its score."""
    if not careers:
        return []

    scored = [calculate_career_match(career, category_scores) for career in careers]
    scores = np.array([score for score, _ in scored], dtype=float)
    # Stable sort keeps catalogue order for equal scores
    order = np.argsort(-scores, kind="stable")[:limit]

    ranked = []
    for index in order:
        score, matched = scored[int(index)]
        ranked.append({
            **careers[int(index)],
            "match_score": float(score),
            "matched_categories": matched,
        })
    return ranked


# ============================================================
# SEGMENT MATCHING
# ============================================================

def _criterion_scores(user: dict, criteria: dict) -> List[float]:
    scores = []

    gpa_range = criteria.get("academic_performance")
    if gpa_range:
        user_gpa = user.get("gpa") or 0
        min_gpa = gpa_range.get("min_gpa")
        max_gpa = gpa_range.get("max_gpa")
        within = (not min_gpa or user_gpa >= min_gpa) and (not max_gpa or user_gpa <= max_gpa)
        scores.append(1.0 if within else 0.0)

    interests = criteria.get("interests") or []
    if interests:
        user_interests = user.get("academic_interests") or []
        overlap = sum(1 for interest in user_interests if interest in interests)
        scores.append(overlap / len(interests))

    location = criteria.get("location")
    if location:
        scores.append(1.0 if location in (user.get("location") or "") else 0.0)

    financial_status = criteria.get("financial_status")
    if financial_status:
        scores.append(1.0 if user.get("financial_status") == financial_status else 0.0)

    return scores


def calculate_segment_match(user: dict, segment: dict) -> float:
    """Share of the segment's criteria the user satisfies (0-1)."""
    scores = _criterion_scores(user, segment.get("criteria") or {})
    if not scores:
        return 0.0
    return float(np.mean(scores))


def best_segment(user: dict, segments: List[dict]) -> Tuple[Optional[dict], float]:
    """Segment with the highest positive match score (first wins ties)."""
    best, highest = None, 0.0
    for segment in segments:
        score = calculate_segment_match(user, segment)
        if score > highest:
            best, highest = segment, score
    return best, highest
