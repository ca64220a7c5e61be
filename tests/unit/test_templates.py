"""Tests for email templates."""

from hirescore.services import templates


class TestApplyTemplate:
    """Tests for placeholder substitution."""

    def test_substitutes_variables(self):
        result = templates.apply_template("Hi {{ name }}, {{role}}", {"name": "Jane", "role": "SRE"})
        assert result == "Hi Jane, SRE"

    def test_unknown_placeholders_are_kept(self):
        assert templates.apply_template("Hi {{name}}", {}) == "Hi {{name}}"

    def test_none_renders_empty(self):
        assert templates.apply_template("[{{x}}]", {"x": None}) == "[]"

    def test_non_string_values(self):
        assert templates.apply_template("{{score}}/100", {"score": 87}) == "87/100"


class TestDefaultTemplates:
    """Tests for the built-in templates."""

    def test_all_keys_present(self):
        for key in (
            templates.CANDIDATE_HIGH_SCORE,
            templates.RECRUITER_ALERT,
            templates.STATUS_CHANGE,
            templates.TEAM_STATUS_CHANGE,
            templates.ANALYSIS_RESULT,
            templates.INTERVIEW_REMINDER,
        ):
            assert key in templates.DEFAULT_TEMPLATES

    def test_render_candidate_template(self):
        content = templates.render(
            templates.DEFAULT_TEMPLATES[templates.CANDIDATE_HIGH_SCORE],
            {
                "candidate_name": "Jane",
                "job_role": "Backend Engineer",
                "match_score": "85",
                "score_message": "Strong Match!",
                "threshold": "80",
            },
        )
        assert content.subject == "Great News! You're a Strong Match for Backend Engineer"
        assert "Jane" in content.html
        assert "85" in content.html

    def test_render_recruiter_subject(self):
        content = templates.render(
            templates.DEFAULT_TEMPLATES[templates.RECRUITER_ALERT],
            {"count": "2", "plural": "s"},
        )
        assert content.subject == "🎯 2 High-Scoring Candidates Found!"

    def test_render_escapes_body_values(self):
        content = templates.render(
            templates.EmailContent(
                subject="Hello {{candidate_name}}",
                html="<p>{{candidate_name}}</p>{{candidates_list}}",
            ),
            {
                "candidate_name": "<b>Tom & Jerry</b>",
                "candidates_list": "<div>Alice</div>",
            },
        )
        assert content.html == (
            "<p>&lt;b&gt;Tom &amp; Jerry&lt;/b&gt;</p><div>Alice</div>"
        )
        assert content.subject == "Hello <b>Tom & Jerry</b>"


class TestHelpers:
    """Tests for template helper functions."""

    def test_score_message(self):
        assert templates.score_message(95) == "Outstanding Match!"
        assert templates.score_message(90) == "Outstanding Match!"
        assert templates.score_message(85) == "Strong Match!"

    def test_candidates_list_is_escaped(self):
        fragment = templates.candidates_list_html(
            [{"name": "<script>", "job_role": None, "score": 91}]
        )
        assert "&lt;script&gt;" in fragment
        assert "<script>" not in fragment
        assert "91%" in fragment

    def test_status_message_with_role(self):
        message = templates.status_message("interview", "Data Engineer")
        assert "interview for the Data Engineer position" in message

    def test_status_message_unknown_status(self):
        message = templates.status_message("reviewed", None)
        assert message == "Your application status is now Under Review."
