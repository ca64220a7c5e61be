"""Tests for parsing structured AI output."""

import pytest

from hirescore.core.exceptions import ParseError
from hirescore.schemas.analysis import AnalysisResult
from hirescore.schemas.matching import MatchEvaluation
from hirescore.services.llm.parsing import clamp_score, first_json_object, parse_tool_arguments


class TestFirstJsonObject:
    """Tests for first_json_object."""

    def test_single_object(self):
        assert first_json_object('{"a": 1}') == '{"a": 1}'

    def test_concatenated_objects(self):
        """Only the first of several concatenated objects is kept."""
        assert first_json_object('{"a": 1}{"b": 2}') == '{"a": 1}'

    def test_nested_object(self):
        raw = 'prefix {"a": {"b": [1, 2]}} trailing'
        assert first_json_object(raw) == '{"a": {"b": [1, 2]}}'

    def test_braces_inside_strings(self):
        raw = '{"text": "a } b { c", "quote": "say \\"}\\""}{"x": 1}'
        assert first_json_object(raw) == '{"text": "a } b { c", "quote": "say \\"}\\""}'

    def test_no_object(self):
        with pytest.raises(ParseError):
            first_json_object("no json here")

    def test_unbalanced(self):
        with pytest.raises(ParseError):
            first_json_object('{"a": {"b": 1}')


class TestParseToolArguments:
    """Tests for parse_tool_arguments."""

    def test_valid(self):
        assert parse_tool_arguments(' {"score": 80} ') == {"score": 80}

    def test_concatenated(self):
        assert parse_tool_arguments('{"score": 80}{"score": 10}') == {"score": 80}

    def test_invalid_json(self):
        with pytest.raises(ParseError):
            parse_tool_arguments('{"score": }')

    def test_array_is_rejected(self):
        with pytest.raises(ParseError):
            parse_tool_arguments("[1, 2, 3]")


class TestClampScore:
    """Tests for clamp_score."""

    @pytest.mark.parametrize(
        "value,expected",
        [(85, 85), (150, 100), (-5, 0), ("87.6", 88), (72.4, 72), (0, 0)],
    )
    def test_clamps(self, value, expected):
        assert clamp_score(value) == expected

    @pytest.mark.parametrize("value", [None, "high", float("inf"), [80]])
    def test_invalid(self, value):
        with pytest.raises(ParseError):
            clamp_score(value)


class TestAnalysisResult:
    """Tests for validating scorer output."""

    def test_scores_are_clamped(self):
        result = AnalysisResult.model_validate(
            {
                "skills_score": 120,
                "experience_score": -3,
                "education_score": "55",
                "overall_score": 99.6,
            }
        )
        assert result.skills_score == 100
        assert result.experience_score == 0
        assert result.education_score == 55
        assert result.overall_score == 100

    def test_skills_are_normalized(self):
        """Unnamed skills are dropped and unknown levels become None."""
        result = AnalysisResult.model_validate(
            {
                "skills_score": 80,
                "experience_score": 80,
                "education_score": 80,
                "overall_score": 80,
                "skills": [
                    {"name": " Python ", "proficiency": "Expert"},
                    {"name": "Go", "proficiency": "guru"},
                    {"name": "", "proficiency": "expert"},
                    "SQL",
                    42,
                ],
            }
        )
        assert [(s.name, s.proficiency) for s in result.skills] == [
            ("Python", "expert"),
            ("Go", None),
            ("SQL", None),
        ]

    def test_missing_score_fails(self):
        with pytest.raises(ValueError):
            AnalysisResult.model_validate({"skills_score": 80})

    def test_none_text_fields(self):
        result = AnalysisResult.model_validate(
            {
                "skills_score": 1,
                "experience_score": 1,
                "education_score": 1,
                "overall_score": 1,
                "recommendations": None,
                "summary": None,
            }
        )
        assert result.recommendations == ""
        assert result.summary == ""


class TestMatchEvaluation:
    """Tests for validating matcher output."""

    def test_unknown_recommendation(self):
        evaluation = MatchEvaluation.model_validate(
            {
                "match_score": 70,
                "skills_match": 70,
                "experience_match": 70,
                "education_match": 70,
                "recommendation": "hire_now",
                "missing_skills": "Kubernetes",
            }
        )
        assert evaluation.recommendation is None
        assert evaluation.missing_skills == []

    def test_details(self):
        evaluation = MatchEvaluation.model_validate(
            {
                "match_score": 90,
                "skills_match": 95,
                "experience_match": 85,
                "education_match": 80,
                "strengths": ["Python"],
                "recommendation": "strong_match",
            }
        )
        details = evaluation.details()
        assert details["strengths"] == ["Python"]
        assert details["recommendation"] == "strong_match"
        assert "match_score" not in details
