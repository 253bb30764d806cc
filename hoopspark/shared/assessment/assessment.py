"""
Synthetic assessment engine.

Given a skill category and an optional self-rating, returns a deterministic
score with the category's fixed issues and suggestion text. Nothing here
looks at the video itself.

Scoring policy (frozen, reproduce exactly):
- with a self-rating: clamp it to [0, 10], base = 6.0 + rating * 0.35
- without one: base = 7.4
- score = round(base, 1), clamped to [6.0, 9.5]
"""

import math
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel

from hoopspark.shared.rounding import round_half_up
from hoopspark.shared.skills import SkillCategory, classify, get_skill

SCORE_MIN = 6.0
SCORE_MAX = 9.5
SCORE_BASE = 6.0
SCORE_SLOPE = 0.35
SCORE_DEFAULT = 7.4
RATING_MIN = 0.0
RATING_MAX = 10.0


class Assessment(BaseModel):
    """Feedback payload returned to the caller and stored as a feedback row."""
    score: float
    skill_area: str
    issues: List[str]
    suggestions: str
    provenance_tag: str

    def to_feedback_fields(self) -> dict:
        """Column values for a feedback row (provenance stored as ai_response)."""
        return {
            "score": self.score,
            "skill_area": self.skill_area,
            "issues": list(self.issues),
            "suggestions": self.suggestions,
            "ai_response": self.provenance_tag,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Assessment":
        """Parses a stored or remote payload that may carry ai_response instead of provenance_tag."""
        data = dict(payload)
        if "provenance_tag" not in data and "ai_response" in data:
            data["provenance_tag"] = data["ai_response"]
        return cls.model_validate(data)


def to_number(value: Any) -> Optional[float]:
    """Parses a self-rating from a number or numeric string. Returns None if not finite."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def calculate_score(self_rating: Optional[float] = None) -> float:
    """Computes the bounded synthetic score."""
    rating = to_number(self_rating)
    if rating is None:
        base = SCORE_DEFAULT
    else:
        base = SCORE_BASE + min(max(rating, RATING_MIN), RATING_MAX) * SCORE_SLOPE
    return min(SCORE_MAX, max(SCORE_MIN, round_half_up(base, 1)))


def provenance_for(label: str) -> str:
    return f"Edge analysis ({label})"


def assess(category, self_rating: Optional[float] = None) -> Assessment:
    """
    Builds the assessment for a category.

    Args:
        category: SkillCategory (or its value); unknown values fall back to GENERAL
        self_rating: Optional 0-10 self estimate; numeric strings are accepted

    Returns:
        Assessment, identical for identical inputs
    """
    skill = get_skill(category)
    return Assessment(
        score=calculate_score(self_rating),
        skill_area=skill.label,
        issues=list(skill.issues),
        suggestions=skill.suggestions,
        provenance_tag=provenance_for(skill.label),
    )


def resolve_skill_focus(skill_focus: Optional[str] = None, stored_focus: Optional[str] = None,
                        questionnaire: Optional[Mapping[str, Any]] = None) -> str:
    """Picks the first non-empty focus: request, stored video row, questionnaire, 'General'."""
    if isinstance(skill_focus, str) and skill_focus:
        return skill_focus
    if isinstance(stored_focus, str) and stored_focus:
        return stored_focus
    if questionnaire and isinstance(questionnaire.get("focus"), str) and questionnaire["focus"]:
        return questionnaire["focus"]
    return "General"


def compute_analysis(focus: str, questionnaire: Optional[Mapping[str, Any]] = None) -> Assessment:
    """Classifies the focus text and assesses it using questionnaire['self_rating']."""
    self_rating = questionnaire.get("self_rating") if questionnaire else None
    return assess(classify(focus), self_rating)


__all__ = [
    "Assessment", "SkillCategory", "assess", "calculate_score", "classify",
    "compute_analysis", "resolve_skill_focus", "to_number",
]
