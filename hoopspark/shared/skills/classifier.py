"""
Skill focus classifier.

Lower-cases the free-text skill focus and returns the first category, in
registry order, that has a keyword occurring anywhere in it. Matching is on
substrings, not whole words: "information" contains "form" and classifies
as shooting.
"""

from typing import Optional

from hoopspark.shared.skills.base import SkillCategory
from hoopspark.shared.skills.registry import get_all_skills


def classify(raw_text: Optional[str]) -> SkillCategory:
    """Maps free text to a SkillCategory. Empty or unmatched text is GENERAL."""
    text = (raw_text or "").lower()
    for skill in get_all_skills():
        if skill.matches(text):
            return skill.category
    return SkillCategory.GENERAL
