"""
Base interface for skill categories.

Every skill category implements this class so the classifier and the
assessment engine can treat the catalog uniformly.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Tuple


class SkillCategory(str, Enum):
    """Closed set of skill categories. GENERAL is the fallback."""
    SHOOTING = "shooting"
    BALL_HANDLING = "ball-handling"
    DEFENSE = "defense"
    FINISHING = "finishing"
    FOOTWORK = "footwork"
    GENERAL = "general"


class SkillBase(ABC):
    """
    Base class for skill implementations.

    A skill owns the keywords that select it and the fixed feedback content
    returned for it.
    """

    @property
    @abstractmethod
    def category(self) -> SkillCategory:
        """Return the category this skill implements."""
        pass

    @property
    @abstractmethod
    def label(self) -> str:
        """Return the display label (e.g., 'Ball Handling')."""
        pass

    @property
    @abstractmethod
    def keywords(self) -> Tuple[str, ...]:
        """
        Return lower-case keywords matched as substrings of the skill focus.

        An empty tuple means the skill is never selected by keywords
        (the fallback category).
        """
        pass

    @property
    @abstractmethod
    def issues(self) -> List[str]:
        """Return the ordered issue list reported for this skill."""
        pass

    @property
    @abstractmethod
    def suggestions(self) -> str:
        """Return the suggestion text reported for this skill."""
        pass

    def matches(self, text: str) -> bool:
        """True if any keyword occurs in the (already lower-cased) text."""
        return any(keyword in text for keyword in self.keywords)
