"""
Unit tests for career and segment matching.
"""

import math

import pytest

from guidancehub.services.matching_service import (
    calculate_career_match,
    rank_careers,
    calculate_segment_match,
    best_segment,
)
from guidancehub.services.segmentation_service import DEFAULT_SEGMENTS


class TestCareerMatch:
    """Test matching one career path against quiz category scores."""

    def test_single_exact_match(self):
        score, matched = calculate_career_match(
            {"categories": ["Math"]},
            [{"category": "math", "score": 6, "question_count": 2}],
        )
        assert score == pytest.approx(9.0)
        assert matched == 1

    def test_multiple_exact_matches_get_bonus(self):
        category_scores = [
            {"category": "math", "score": 6, "question_count": 2},
            {"category": "science", "score": 4, "question_count": 1},
        ]
        score, matched = calculate_career_match({"categories": ["math", "science"]}, category_scores)

        raw = 6 * 1.5 * math.log(3) + 4 * 1.5 * math.log(2)
        expected = raw * 1.1 / (math.log(3) + math.log(2))
        assert score == pytest.approx(expected)
        assert matched == 2

    def test_partial_match(self):
        score, matched = calculate_career_match(
            {"categories": ["science"]},
            [{"category": "computer science", "score": 8, "question_count": 3}],
        )
        assert score == pytest.approx(4.0)
        assert matched == 0

    def test_no_match(self):
        score, matched = calculate_career_match(
            {"categories": ["arts"]},
            [{"category": "math", "score": 6, "question_count": 2}],
        )
        assert score == 0
        assert matched == 0

    def test_zero_weight_is_not_normalised(self):
        score, matched = calculate_career_match(
            {"categories": ["math"]},
            [{"category": "math", "score": 6, "question_count": 0}],
        )
        assert score == 0
        assert matched == 1

    def test_career_without_categories(self):
        assert calculate_career_match({}, [{"category": "math", "score": 6, "question_count": 2}]) == (0.0, 0)


class TestRankCareers:
    """Test ranking career paths."""

    CATEGORY_SCORES = [
        {"category": "logic", "score": 5, "question_count": 2},
        {"category": "leadership", "score": 3, "question_count": 1},
    ]

    def test_highest_score_first(self):
        careers = [
            {"title": "Teacher", "categories": ["leadership"]},
            {"title": "Doctor", "categories": ["science"]},
            {"title": "Engineer", "categories": ["logic"]},
        ]
        ranked = rank_careers(careers, self.CATEGORY_SCORES)
        assert [c["title"] for c in ranked] == ["Engineer", "Teacher", "Doctor"]
        assert ranked[0]["match_score"] == pytest.approx(7.5)
        assert ranked[0]["matched_categories"] == 1
        assert ranked[2]["match_score"] == 0

    def test_limit(self):
        careers = [{"title": f"Career {i}", "categories": ["logic"]} for i in range(8)]
        assert len(rank_careers(careers, self.CATEGORY_SCORES, limit=5)) == 5

    def test_ties_keep_catalogue_order(self):
        careers = [{"title": name, "categories": ["arts"]} for name in ("A", "B", "C")]
        assert [c["title"] for c in rank_careers(careers, self.CATEGORY_SCORES)] == ["A", "B", "C"]

    def test_no_careers(self):
        assert rank_careers([], self.CATEGORY_SCORES) == []


class TestSegmentMatch:
    """Test segment matching from profile fields."""

    def segment(self, name):
        return next(s for s in DEFAULT_SEGMENTS if s["name"] == name)

    def test_gpa_and_interests(self):
        user = {"gpa": 9.1, "academic_interests": ["Science", "Mathematics", "Arts"]}
        assert calculate_segment_match(user, self.segment("High Achievers")) == pytest.approx(0.75)

    def test_gpa_out_of_range(self):
        user = {"gpa": 7.0, "academic_interests": []}
        assert calculate_segment_match(user, self.segment("High Achievers")) == 0

    def test_location_contained(self):
        assert calculate_segment_match({"location": "Rural Karnataka"}, self.segment("Rural Students")) == 1.0
        assert calculate_segment_match({"location": "Bengaluru"}, self.segment("Rural Students")) == 0.0

    def test_financial_status(self):
        assert calculate_segment_match({"financial_status": "low"}, self.segment("Financial Need")) == 1.0
        assert calculate_segment_match({}, self.segment("Financial Need")) == 0.0

    def test_segment_without_criteria(self):
        assert calculate_segment_match({"gpa": 9}, {"name": "Empty", "criteria": {}}) == 0.0

    def test_best_segment(self):
        user = {"gpa": 6.0, "academic_interests": ["Science", "Technology", "Engineering"], "location": "Pune"}
        segment, score = best_segment(user, DEFAULT_SEGMENTS)
        assert segment["name"] == "STEM Enthusiasts"
        assert score == pytest.approx(0.6)

    def test_best_segment_none_matches(self):
        segment, score = best_segment({"location": "Pune"}, DEFAULT_SEGMENTS)
        assert segment is None
        assert score == 0.0
