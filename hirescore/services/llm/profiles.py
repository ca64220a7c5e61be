"""Scoring profiles selecting prompt, model and score fields per analysis."""

from dataclasses import dataclass, field
from typing import Any

from hirescore.core.config import settings

SCORE_FIELDS = ("skills_score", "experience_score", "education_score", "overall_score")
PROFICIENCY_LEVELS = ["beginner", "intermediate", "advanced", "expert"]

ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert HR analyst specializing in candidate evaluation for "
    "employment and upskilling programs. Provide detailed, objective assessments."
)

STANDARD_INSTRUCTIONS = """Score the candidate on a 0-100 scale:

1. SKILLS: technical and soft skills, their relevance and proficiency.
   List every skill mentioned with a proficiency level.
2. EXPERIENCE: duration, responsibilities and achievements of past roles.
3. EDUCATION: degrees, certifications and training.
4. OVERALL: holistic fit combining all of the above.

Keep the summary and recommendations short (2-3 sentences each)."""

DETAILED_INSTRUCTIONS = """Conduct a THOROUGH and DETAILED analysis of EVERY section of the resume.

1. SKILLS ASSESSMENT (0-100):
   - Evaluate ALL technical skills mentioned
   - Assess soft skills and competencies
   - Consider skill relevance and proficiency level
   - Extract EVERY skill mentioned (aim for 8-15 skills)

2. EXPERIENCE EVALUATION (0-100):
   - Analyze ALL work experiences listed
   - Consider duration, responsibilities, and achievements
   - Evaluate career progression and relevance
   - Note specific accomplishments and metrics

3. EDUCATION REVIEW (0-100):
   - Examine ALL educational qualifications
   - Consider certifications, courses, and training
   - Evaluate relevance to applied position
   - Note academic achievements and honors

4. OVERALL FIT (0-100):
   - Holistic assessment combining all factors
   - Consider cultural fit and potential
   - Evaluate alignment with job requirements

Provide a comprehensive analysis that captures EVERY detail from the resume."""

_SCORE_DESCRIPTIONS = {
    "skills_score": "Score for technical and soft skills (0-100)",
    "experience_score": "Score for work experience (0-100)",
    "education_score": "Score for educational background (0-100)",
    "overall_score": "Overall recommendation score (0-100)",
}


@dataclass(frozen=True)
class ScoringProfile:
    """Named bundle of prompt, model and output contract for one analysis."""

    name: str
    model: str
    instructions: str
    system_prompt: str = ANALYSIS_SYSTEM_PROMPT
    score_fields: tuple[str, ...] = SCORE_FIELDS
    include_details: bool = False
    tool_name: str = "analyze_candidate"
    extra_properties: dict[str, Any] = field(default_factory=dict)

    def tool_schema(self) -> dict[str, Any]:
        """Return the function-calling tool the scorer must answer with."""
        properties: dict[str, Any] = {
            name: {"type": "number", "description": _SCORE_DESCRIPTIONS.get(name, name)}
            for name in self.score_fields
        }
        properties["skills"] = {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "proficiency": {"type": "string", "enum": PROFICIENCY_LEVELS},
                },
                "required": ["name", "proficiency"],
                "additionalProperties": False,
            },
        }
        properties["recommendations"] = {
            "type": "string",
            "description": "Recommendations covering fit, strengths and development areas",
        }
        properties["summary"] = {
            "type": "string",
            "description": "Summary of experience, education, key strengths and potential",
        }
        if self.include_details:
            properties["experience_details"] = {
                "type": "string",
                "description": "Breakdown of work experience, key roles, achievements and years",
            }
            properties["education_details"] = {
                "type": "string",
                "description": "Educational background, certifications and relevant training",
            }
        properties.update(self.extra_properties)

        return {
            "type": "function",
            "function": {
                "name": self.tool_name,
                "description": "Analyze a candidate and return structured assessment",
                "parameters": {
                    "type": "object",
                    "properties": properties,
                    "required": list(properties),
                    "additionalProperties": False,
                },
            },
        }


def build_profiles() -> dict[str, ScoringProfile]:
    """Build the available profiles from current settings."""
    return {
        "standard": ScoringProfile(
            name="standard",
            model=settings.analysis_model,
            instructions=STANDARD_INSTRUCTIONS,
        ),
        "detailed": ScoringProfile(
            name="detailed",
            model=settings.detailed_analysis_model,
            instructions=DETAILED_INSTRUCTIONS,
            include_details=True,
        ),
    }


def get_scoring_profile(name: str | None = None) -> ScoringProfile:
    """Return the profile called ``name`` or the configured default."""
    profiles = build_profiles()
    key = name or settings.default_scoring_profile
    if key not in profiles:
        raise ValueError(
            f"Unknown scoring profile: {key}. Available: {', '.join(sorted(profiles))}"
        )
    return profiles[key]
