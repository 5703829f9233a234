"""Point, level and badge rules for issue submissions.

Everything here is pure: the same input state always yields the same
output state, and nothing touches the database.
"""

from typing import Iterable, NamedTuple

from civic_reporter.models.account import AccountLevel

POINTS_PER_ISSUE = 10

SILVER_THRESHOLD = 50
GOLD_THRESHOLD = 100

ACTIVE_CITIZEN = "Active Citizen"
COMMUNITY_HERO = "Community Hero"

# (badge, minimum points) in award order
BADGE_THRESHOLDS: tuple[tuple[str, int], ...] = (
    (ACTIVE_CITIZEN, 10),
    (COMMUNITY_HERO, 50),
)


class GamificationState(NamedTuple):
    """Points, level and badges of one account."""

    points: int
    level: str
    badges: list[str]


def level_for(points: int) -> str:
    """Map a point total to its level tier."""
    if points >= GOLD_THRESHOLD:
        return AccountLevel.GOLD.value
    if points >= SILVER_THRESHOLD:
        return AccountLevel.SILVER.value
    return AccountLevel.BRONZE.value


def badges_for(points: int, existing: Iterable[str] = ()) -> list[str]:
    """
    Return the badge list after reaching ``points``.

    Existing badges are kept in order (duplicates dropped) and never
    revoked; threshold badges not yet held are appended.
    """
    badges: list[str] = []
    for badge in existing:
        if badge not in badges:
            badges.append(badge)
    for badge, minimum in BADGE_THRESHOLDS:
        if points >= minimum and badge not in badges:
            badges.append(badge)
    return badges


def evaluate(points: int, badges: Iterable[str] = ()) -> GamificationState:
    """Derive level and badges for a point total."""
    return GamificationState(points, level_for(points), badges_for(points, badges))


def apply_submission(state: GamificationState) -> GamificationState:
    """State after one more issue submission."""
    return evaluate(state.points + POINTS_PER_ISSUE, state.badges)
