"""Basketball skill catalog: keywords and fixed feedback per category."""

from typing import List, Tuple

from hoopspark.shared.skills.base import SkillBase, SkillCategory


class Shooting(SkillBase):
    category = SkillCategory.SHOOTING
    label = "Shooting"
    keywords: Tuple[str, ...] = ("shoot", "shooting", "jumper", "jump shot", "form")

    @property
    def issues(self) -> List[str]:
        return ["Inconsistent release point", "Flat arc on longer shots"]

    @property
    def suggestions(self) -> str:
        return "Form shooting 3×10 from 5 spots; add 3×15 one-motion reps; finish with 25 FTs focusing on arc."


class BallHandling(SkillBase):
    category = SkillCategory.BALL_HANDLING
    label = "Ball Handling"
    keywords: Tuple[str, ...] = ("handle", "handling", "dribble", "dribbling", "crossover",
                                 "ball handling", "ball-handling")

    @property
    def issues(self) -> List[str]:
        return ["High dribble at speed", "Inconsistent off-hand control", "Head down on first move"]

    @property
    def suggestions(self) -> str:
        return "Pound-cross and in-out 3×30s; zig-zag cones keeping hips low and eyes up; stationary combo 3×45s."


class Defense(SkillBase):
    category = SkillCategory.DEFENSE
    label = "Defense"
    keywords: Tuple[str, ...] = ("defense", "defensive", "closeout", "on-ball", "onball", "steal")

    @property
    def issues(self) -> List[str]:
        return ["Slow first step on closeouts", "Upright stance in slides"]

    @property
    def suggestions(self) -> str:
        return "Closeout reps 4×6 with stick hand; lane-slide shuttles 4×20y maintaining hip height; mirror drill 3×30s."


class Finishing(SkillBase):
    category = SkillCategory.FINISHING
    label = "Finishing"
    keywords: Tuple[str, ...] = ("finish", "finishing", "layup", "layups", "rim", "mikan")

    @property
    def issues(self) -> List[str]:
        return ["Inside-hand usage inconsistent", "Weak off-foot takeoff near rim"]

    @property
    def suggestions(self) -> str:
        return "Mikan + reverse Mikan 3×30s; 1-foot and 2-foot finishes 3×8 each side; add pad contact finishes."


class Footwork(SkillBase):
    category = SkillCategory.FOOTWORK
    label = "Footwork"
    keywords: Tuple[str, ...] = ("footwork", "pivot", "pivots", "euro", "steps", "balance")

    @property
    def issues(self) -> List[str]:
        return ["Extra steps on pivots", "Poor balance out of jump stop"]

    @property
    def suggestions(self) -> str:
        return "Jump-stop to front/reverse pivots 3×8 each side; stride-stop into shot/drive 3×8; cadence cues."


class General(SkillBase):
    """Fallback when no other skill matches."""
    category = SkillCategory.GENERAL
    label = "General"
    keywords: Tuple[str, ...] = ()

    @property
    def issues(self) -> List[str]:
        return ["Footwork drifts left", "Closeouts too upright"]

    @property
    def suggestions(self) -> str:
        return "Mikan series 3×30s; slides 3×25y keeping consistent hip height; simple plant-foot cues on finishes."
