import pytest

from hoopspark.shared.skills import SkillCategory, classify, get_all_skills, get_skill


@pytest.mark.parametrize("text, expected", [
    ("Pivot and footwork drills", SkillCategory.FOOTWORK),
    ("ball handling reps", SkillCategory.BALL_HANDLING),
    ("Ball-Handling", SkillCategory.BALL_HANDLING),
    ("CROSSOVER into pull-up", SkillCategory.BALL_HANDLING),
    ("Jump shot", SkillCategory.SHOOTING),
    ("closeout drills", SkillCategory.DEFENSE),
    ("Mikan series", SkillCategory.FINISHING),
    ("layups off two feet", SkillCategory.FINISHING),
    ("euro step", SkillCategory.FOOTWORK),
    ("", SkillCategory.GENERAL),
    (None, SkillCategory.GENERAL),
    ("conditioning", SkillCategory.GENERAL),
])
def test_classify(text, expected):
    assert classify(text) == expected


def test_substring_match_is_not_word_bounded():
    assert classify("more information please") == SkillCategory.SHOOTING


def test_first_matching_category_wins():
    # shooting is checked before finishing
    assert classify("shoot then finish") == SkillCategory.SHOOTING
    assert classify("dribble to the rim") == SkillCategory.BALL_HANDLING


def test_classify_is_idempotent():
    assert classify("steal and finish") == classify("steal and finish") == SkillCategory.DEFENSE


def test_registry_order_and_fallback():
    categories = [skill.category for skill in get_all_skills()]
    assert categories == [
        SkillCategory.SHOOTING, SkillCategory.BALL_HANDLING, SkillCategory.DEFENSE,
        SkillCategory.FINISHING, SkillCategory.FOOTWORK, SkillCategory.GENERAL,
    ]
    assert get_skill("not-a-category").category == SkillCategory.GENERAL
    assert get_skill("ball-handling").label == "Ball Handling"


def test_catalog_issue_counts():
    for skill in get_all_skills():
        assert 2 <= len(skill.issues) <= 3
        assert skill.suggestions
