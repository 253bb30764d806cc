"""
Skill registry - ordered registry of all skill implementations.

Registration order is classification priority: the first registered skill
whose keywords match wins. GENERAL is registered last and always present.
"""

from typing import Dict, List

from hoopspark.shared.skills.base import SkillBase, SkillCategory
from hoopspark.shared.skills.catalog import (
    BallHandling,
    Defense,
    Finishing,
    Footwork,
    General,
    Shooting,
)

_SKILL_REGISTRY: Dict[SkillCategory, SkillBase] = {}


def register_skill(skill: SkillBase) -> None:
    """Register a skill implementation (appended to the priority order)."""
    _SKILL_REGISTRY[skill.category] = skill


def get_skill(category) -> SkillBase:
    """
    Get skill implementation by category.

    Args:
        category: SkillCategory or its string value

    Returns:
        The registered skill, or the GENERAL skill for unknown categories
    """
    try:
        category = SkillCategory(category)
    except ValueError:
        return _SKILL_REGISTRY[SkillCategory.GENERAL]
    return _SKILL_REGISTRY.get(category, _SKILL_REGISTRY[SkillCategory.GENERAL])


def get_all_skills() -> List[SkillBase]:
    """Get all registered skills in priority order."""
    return list(_SKILL_REGISTRY.values())


def _register_skills():
    for skill in (Shooting(), BallHandling(), Defense(), Finishing(), Footwork(), General()):
        register_skill(skill)


_register_skills()
