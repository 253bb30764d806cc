"""Skill catalog, registry and classifier."""

from .base import SkillBase, SkillCategory
from .classifier import classify
from .registry import get_skill, get_all_skills

__all__ = ['SkillBase', 'SkillCategory', 'classify', 'get_skill', 'get_all_skills']
