"""Prompt building utilities for AI gateway interactions."""

import json
from typing import Any

from hirescore.services.llm.profiles import ScoringProfile

EXTRACTION_PROMPT = """Extract ALL text content from this document. This is a resume/CV.
Please provide:
1. The complete text content from the document
2. Extract: Name, Email, Phone (if present)
3. All work experience details
4. All education details
5. All skills mentioned
6. Any certifications or achievements

Format the output as a clean, readable resume text that can be analyzed by an AI system."""

MATCH_SYSTEM_PROMPT = "You are an expert HR analyst specializing in candidate-job matching."

INTERVIEW_SYSTEM_PROMPT = (
    "You are an expert HR interviewer. Generate interview questions in JSON format."
)


def build_analysis_prompt(
    profile: ScoringProfile, resume_text: str, cover_letter: str | None = None
) -> str:
    """Build the resume scoring prompt for a scoring profile."""
    prompt = (
        "You are analyzing a candidate application for a recruitment program.\n\n"
        f"RESUME/CV:\n{resume_text}\n\n"
    )
    if cover_letter:
        prompt += f"COVER LETTER:\n{cover_letter}\n\n"
    prompt += f"ANALYSIS REQUIREMENTS:\n\n{profile.instructions}"
    return prompt


def _format_skills(skills: list[dict[str, Any]]) -> str:
    formatted = [
        f"{s.get('name')} ({s.get('level') or 'unspecified'})" for s in skills
    ]
    return ", ".join(formatted) or "None listed"


def build_match_prompt(requirement: dict[str, Any], candidate: dict[str, Any]) -> str:
    """Build the prompt comparing a candidate profile with a job requirement."""
    required = ", ".join(requirement.get("required_skills") or []) or "None specified"
    preferred = ", ".join(requirement.get("preferred_skills") or []) or "None specified"

    scores = candidate.get("ai_scores")
    if scores:
        scores_text = (
            f"Skills: {scores['skills']}/100, "
            f"Experience: {scores['experience']}/100, "
            f"Education: {scores['education']}/100, "
            f"Overall: {scores['overall']}/100"
        )
    else:
        scores_text = "Not analyzed"

    return (
        "You are evaluating how well a candidate matches specific job requirements.\n\n"
        "JOB REQUIREMENTS:\n"
        f"- Role: {requirement.get('job_role')}\n"
        f"- Description: {requirement.get('description') or 'Not specified'}\n"
        f"- Minimum Experience: {requirement.get('min_experience_years', 0)} years\n"
        f"- Required Skills: {required}\n"
        f"- Preferred Skills: {preferred}\n"
        f"- Education Level: {requirement.get('education_level') or 'Not specified'}\n"
        f"- Additional Requirements: {json.dumps(requirement.get('requirements') or {})}\n\n"
        "CANDIDATE PROFILE:\n"
        f"- Name: {candidate.get('name', 'Unknown')}\n"
        f"- Skills: {_format_skills(candidate.get('skills', []))}\n"
        f"- AI Analysis Scores: {scores_text}\n"
        f"- Summary: {json.dumps(candidate.get('summary') or {})}\n\n"
        "Evaluate the candidate's fit for this specific role and provide match scores."
    )


def build_interview_prompt(job_role: str | None, candidate: dict[str, Any]) -> str:
    """Build the prompt asking for tailored interview questions."""
    scores = candidate.get("ai_scores") or {}
    return (
        "Based on the following candidate profile, generate 5 tailored interview "
        f"questions that assess their fit for the {job_role or 'open'} position.\n\n"
        f"Candidate: {candidate.get('name', 'Unknown')}\n"
        f"Skills: {_format_skills(candidate.get('skills', []))}\n"
        f"Experience Score: {scores.get('experience', 'N/A')}\n"
        f"Skills Score: {scores.get('skills', 'N/A')}\n"
        f"Education Score: {scores.get('education', 'N/A')}\n\n"
        "Generate questions that:\n"
        "1. Assess technical skills and experience\n"
        "2. Evaluate problem-solving abilities\n"
        "3. Check cultural fit\n"
        "4. Verify key qualifications\n"
        "5. Explore career goals and motivation"
    )
