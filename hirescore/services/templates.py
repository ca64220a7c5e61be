"""Email templates with ``{{variable}}`` substitution."""

import html
import re
from dataclasses import dataclass
from typing import Any

_VARIABLE = re.compile(r"\{\{\s*(\w+)\s*\}\}")

HTML_VARIABLES = frozenset({"candidates_list"})

CANDIDATE_HIGH_SCORE = "candidate_high_score"
RECRUITER_ALERT = "recruiter_alert"
STATUS_CHANGE = "status_change"
TEAM_STATUS_CHANGE = "team_status_change"
ANALYSIS_RESULT = "analysis_result"
INTERVIEW_REMINDER = "interview_reminder"

STATUS_EMOJIS = {
    "new": "🆕",
    "reviewed": "👁️",
    "interview": "💬",
    "offer": "🎁",
    "hired": "✅",
    "rejected": "❌",
}

STATUS_LABELS = {
    "new": "New Application",
    "reviewed": "Under Review",
    "interview": "Interview Stage",
    "offer": "Offer Extended",
    "hired": "Hired",
    "rejected": "Application Closed",
}

STATUS_MESSAGES = {
    "interview": (
        "Great news! We'd like to invite you for an interview{{job_role_phrase}}. "
        "Our team will reach out shortly with available time slots and interview details."
    ),
    "offer": (
        "Congratulations! We're pleased to extend an offer for the {{job_role}}. "
        "Please check your email for the detailed offer letter and next steps."
    ),
    "hired": (
        "Welcome to the team! We're excited to have you join us. "
        "Our HR team will be in touch with onboarding details and your start date."
    ),
}

_LAYOUT = """<!DOCTYPE html>
<html>
<body style="font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
{body}
  </div>
</body>
</html>"""


@dataclass(frozen=True)
class EmailContent:
    """Subject and HTML body of an email."""

    subject: str
    html: str


DEFAULT_TEMPLATES: dict[str, EmailContent] = {
    CANDIDATE_HIGH_SCORE: EmailContent(
        subject="Great News! You're a Strong Match for {{job_role}}",
        html=_LAYOUT.format(
            body="""    <h1>{{score_message}}</h1>
    <p>Dear {{candidate_name}},</p>
    <p>Your profile scored <strong>{{match_score}}%</strong> against the requirements
    for <strong>{{job_role}}</strong>, above our {{threshold}}% threshold.</p>
    <p>Our recruitment team will review your application and contact you soon.</p>"""
        ),
    ),
    RECRUITER_ALERT: EmailContent(
        subject="🎯 {{count}} High-Scoring Candidate{{plural}} Found!",
        html=_LAYOUT.format(
            body="""    <h1>High-Scoring Candidates</h1>
    <p>Hello{{recruiter_greeting}},</p>
    <p>{{count}} candidate{{plural}} scored at or above {{threshold}}% in the latest matching run:</p>
    {{candidates_list}}"""
        ),
    ),
    STATUS_CHANGE: EmailContent(
        subject="{{status_emoji}} Application Update: {{status_label}}{{job_role_suffix}}",
        html=_LAYOUT.format(
            body="""    <h1>{{status_emoji}} {{status_label}}</h1>
    <p>Dear {{candidate_name}},</p>
    <p>{{status_message}}</p>"""
        ),
    ),
    TEAM_STATUS_CHANGE: EmailContent(
        subject="{{status_emoji}} {{candidate_name}} moved to {{status_label}}",
        html=_LAYOUT.format(
            body="""    <h2>Candidate Status Update</h2>
    <p><strong>{{candidate_name}}</strong> ({{job_role}}) moved from
    {{old_status_label}} to <strong>{{status_label}}</strong>.</p>
    <p>Overall score: {{overall_score}}</p>"""
        ),
    ),
    ANALYSIS_RESULT: EmailContent(
        subject="Your Application Analysis Results - {{job_role}}",
        html=_LAYOUT.format(
            body="""    <h1>Application Analysis Complete</h1>
    <p>Dear {{candidate_name}},</p>
    <p>Thank you for applying for <strong>{{job_role}}</strong>. Here are your results:</p>
    <ul>
      <li>Overall: {{overall_score}}/100</li>
      <li>Skills: {{skills_score}}/100</li>
      <li>Experience: {{experience_score}}/100</li>
      <li>Education: {{education_score}}/100</li>
    </ul>
    <p>{{recommendations}}</p>"""
        ),
    ),
    INTERVIEW_REMINDER: EmailContent(
        subject="Reminder: Schedule Interview - {{candidate_name}}",
        html=_LAYOUT.format(
            body="""    <h2>Interview Scheduling Reminder</h2>
    <p>This is a reminder to schedule an interview for <strong>{{candidate_name}}</strong>.</p>
    <p><strong>Job Role:</strong> {{job_role}}<br>
    <strong>Email:</strong> {{candidate_email}}<br>
    <strong>Overall Score:</strong> {{overall_score}}</p>
    <p>This candidate has been in 'Reviewed' status for more than {{days}} days.</p>"""
        ),
    ),
}


def apply_template(template: str, variables: dict[str, Any]) -> str:
    """Substitute ``{{name}}`` placeholders; unknown placeholders are kept."""

    def replace(match: re.Match) -> str:
        key = match.group(1)
        if key not in variables:
            return match.group(0)
        value = variables[key]
        return "" if value is None else str(value)

    return _VARIABLE.sub(replace, template)


def render(content: EmailContent, variables: dict[str, Any]) -> EmailContent:
    """Render both subject and body of a template.

    Values are HTML-escaped in the body, except for ``HTML_VARIABLES`` which
    are pre-rendered fragments.
    """
    html_variables = {
        key: value
        if key in HTML_VARIABLES or value is None
        else html.escape(str(value))
        for key, value in variables.items()
    }
    return EmailContent(
        subject=apply_template(content.subject, variables),
        html=apply_template(content.html, html_variables),
    )


def score_message(score: int) -> str:
    return "Outstanding Match!" if score >= 90 else "Strong Match!"


def candidates_list_html(candidates: list[dict[str, Any]]) -> str:
    """Render the HTML fragment listing high-scoring candidates."""
    items = [
        '<div style="display: flex; justify-content: space-between; padding: 8px 0;">'
        f"<div><strong>{html.escape(c['name'])}</strong>"
        f'<div style="color: #666; font-size: 14px;">{html.escape(c["job_role"] or "")}</div></div>'
        f"<span>{c['score']}%</span></div>"
        for c in candidates
    ]
    return "\n".join(items)


def status_message(status: str, job_role: str | None) -> str:
    """Return the candidate-facing paragraph for a key status."""
    template = STATUS_MESSAGES.get(status, "Your application status is now {{status}}.")
    return apply_template(
        template,
        {
            "job_role": job_role or "position",
            "job_role_phrase": f" for the {job_role} position" if job_role else "",
            "status": STATUS_LABELS.get(status, status),
        },
    )
