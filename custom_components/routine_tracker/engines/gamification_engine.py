"""Gamification Engine - Pure logic for badge evaluation and XP values.

This engine provides stateless functions for:
- The badge catalog, in a fixed declaration order
- Building the evaluation context (log counts by kind, current streak)
- Deciding which badges newly qualify given their persisted statuses
- XP values for logs and badge levels

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
The GamificationManager owns persistence, XP grants, events and toast flags.

Badge conditions are plain predicates over an EvaluationContext, kept in an
ordered list of (key, predicate) pairs and evaluated by iteration. Crossing
several thresholds in one batch (a bulk import) therefore awards every newly
qualifying badge in the same pass, in declaration order.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .. import const

if TYPE_CHECKING:
    from ..type_defs import EvaluationContext


# =============================================================================
# TYPE ALIASES
# =============================================================================

BadgePredicate = Callable[["EvaluationContext"], bool]


def _never(_context: EvaluationContext) -> bool:
    """Condition for milestone badges that are only awarded explicitly."""
    return False


def _at_least(counter: str, threshold: int) -> BadgePredicate:
    """Build a threshold predicate over one context counter."""

    def predicate(context: EvaluationContext) -> bool:
        return context.get(counter, 0) >= threshold  # type: ignore[misc]

    return predicate


def _both_at_least(first: str, second: str, threshold: int) -> BadgePredicate:
    """Build a composite predicate requiring two counters to reach a threshold."""

    def predicate(context: EvaluationContext) -> bool:
        return (
            context.get(first, 0) >= threshold  # type: ignore[misc]
            and context.get(second, 0) >= threshold  # type: ignore[misc]
        )

    return predicate


# =============================================================================
# BADGE CATALOG
# =============================================================================


@dataclass(frozen=True)
class BadgeDefinition:
    """Static description of one badge."""

    key: str
    name: str
    description: str
    level: str
    icon: str
    condition: BadgePredicate

    @property
    def xp_reward(self) -> int:
        """Return the XP granted when this badge is earned."""
        return const.BADGE_LEVEL_XP_REWARD.get(self.level, 0)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the static fields for attributes and service responses."""
        return {
            "key": self.key,
            "name": self.name,
            "description": self.description,
            "level": self.level,
            "icon": self.icon,
            "xp_reward": self.xp_reward,
        }


BADGES: tuple[BadgeDefinition, ...] = (
    BadgeDefinition(
        const.BADGE_NEW_BEGINNINGS,
        "New Beginnings",
        "You finished setting up. Welcome to the family!",
        const.BADGE_LEVEL_BRONZE,
        "mdi:sprout",
        _never,
    ),
    BadgeDefinition(
        const.BADGE_SAY_CHEESE,
        "Say Cheese",
        "You took your first selfie. Smile!",
        const.BADGE_LEVEL_BRONZE,
        "mdi:camera",
        _at_least(const.CONTEXT_PHOTO_COUNT, 1),
    ),
    BadgeDefinition(
        const.BADGE_EXPLORER,
        "Explorer",
        "You visited the marketplace for the first time. Explore!",
        const.BADGE_LEVEL_BRONZE,
        "mdi:compass-outline",
        _never,
    ),
    BadgeDefinition(
        const.BADGE_TESTING_WATERS,
        "Testing the Waters",
        "You completed your first exercise. Keep it up!",
        const.BADGE_LEVEL_BRONZE,
        "mdi:weight-lifter",
        _at_least(const.CONTEXT_EXERCISE_COUNT, 1),
    ),
    BadgeDefinition(
        const.BADGE_FACE_GYM_RAT,
        "Face Gym Rat",
        "You completed 10 exercises. You're on a roll!",
        const.BADGE_LEVEL_SILVER,
        "mdi:weight-lifter",
        _at_least(const.CONTEXT_EXERCISE_COUNT, 10),
    ),
    BadgeDefinition(
        const.BADGE_FACE_GYM_ENTHUSIAST,
        "Face Gym Enthusiast",
        "You completed 30 exercises. You're getting serious!",
        const.BADGE_LEVEL_SILVER,
        "mdi:weight-lifter",
        _at_least(const.CONTEXT_EXERCISE_COUNT, 30),
    ),
    BadgeDefinition(
        const.BADGE_FACE_GYM_SWEAT,
        "Face Gym Sweat",
        "You completed 50 exercises. You're sweating it out!",
        const.BADGE_LEVEL_GOLD,
        "mdi:weight-lifter",
        _at_least(const.CONTEXT_EXERCISE_COUNT, 50),
    ),
    BadgeDefinition(
        const.BADGE_FACE_GYM_OBSESSED,
        "Face Gym Obsessed",
        "You completed 100 exercises. You're obsessed!",
        const.BADGE_LEVEL_GOLD,
        "mdi:weight-lifter",
        _at_least(const.CONTEXT_EXERCISE_COUNT, 100),
    ),
    BadgeDefinition(
        const.BADGE_TESTING_PEN,
        "Testing the Pen",
        "You completed your first self-log. Tell us more!",
        const.BADGE_LEVEL_BRONZE,
        "mdi:pencil",
        _at_least(const.CONTEXT_SELF_REPORT_COUNT, 1),
    ),
    BadgeDefinition(
        const.BADGE_JUNIOR_REPORTER,
        "Junior Reporter",
        "You completed 10 self-logs. You're getting the hang of it!",
        const.BADGE_LEVEL_BRONZE,
        "mdi:pencil",
        _at_least(const.CONTEXT_SELF_REPORT_COUNT, 10),
    ),
    BadgeDefinition(
        const.BADGE_MEDIOR_REPORTER,
        "Medior Reporter",
        "You completed 30 self-logs. You're a pro!",
        const.BADGE_LEVEL_SILVER,
        "mdi:pencil",
        _at_least(const.CONTEXT_SELF_REPORT_COUNT, 30),
    ),
    BadgeDefinition(
        const.BADGE_SENIOR_REPORTER,
        "Senior Reporter",
        "You completed 50 self-logs. You're a master!",
        const.BADGE_LEVEL_GOLD,
        "mdi:pencil",
        _at_least(const.CONTEXT_SELF_REPORT_COUNT, 50),
    ),
    BadgeDefinition(
        const.BADGE_ESTABLISHED_REPORTER,
        "Established Reporter",
        "You completed 100 self-logs. You're a legend!",
        const.BADGE_LEVEL_GOLD,
        "mdi:pencil",
        _at_least(const.CONTEXT_SELF_REPORT_COUNT, 100),
    ),
    BadgeDefinition(
        const.BADGE_NARCISSUS,
        "Narcissus",
        "You completed 200 exercises and 200 self-logs. You're the ultimate face gym enthusiast!",
        const.BADGE_LEVEL_PLATINUM,
        "mdi:mirror",
        _both_at_least(
            const.CONTEXT_EXERCISE_COUNT, const.CONTEXT_SELF_REPORT_COUNT, 200
        ),
    ),
    BadgeDefinition(
        const.BADGE_BEGINNER_TASK_MASTER,
        "Beginner Task Master",
        "You completed 10 tasks. You're getting the hang of it!",
        const.BADGE_LEVEL_BRONZE,
        "mdi:lightning-bolt",
        _at_least(const.CONTEXT_TASK_COUNT, 10),
    ),
    BadgeDefinition(
        const.BADGE_DILIGENT_TASK_MASTER,
        "Dilligent Task Master",
        "You completed 30 tasks. You're dilligent!",
        const.BADGE_LEVEL_SILVER,
        "mdi:lightning-bolt",
        _at_least(const.CONTEXT_TASK_COUNT, 30),
    ),
    BadgeDefinition(
        const.BADGE_PRO_TASK_MASTER,
        "Pro Task Master",
        "You completed 50 tasks. You're a master!",
        const.BADGE_LEVEL_GOLD,
        "mdi:lightning-bolt",
        _at_least(const.CONTEXT_TASK_COUNT, 50),
    ),
    BadgeDefinition(
        const.BADGE_ESTABLISHED_TASK_MASTER,
        "Established Task Master",
        "You completed 100 tasks. You're a legend!",
        const.BADGE_LEVEL_GOLD,
        "mdi:lightning-bolt",
        _at_least(const.CONTEXT_TASK_COUNT, 100),
    ),
    BadgeDefinition(
        const.BADGE_WEEK_WARRIOR,
        "Week Warrior",
        "You logged something 7 days in a row. Momentum!",
        const.BADGE_LEVEL_SILVER,
        "mdi:fire",
        _at_least(const.CONTEXT_CURRENT_STREAK, 7),
    ),
    BadgeDefinition(
        const.BADGE_MONTHLY_MOMENTUM,
        "Monthly Momentum",
        "You logged something 30 days in a row. Unstoppable!",
        const.BADGE_LEVEL_GOLD,
        "mdi:fire",
        _at_least(const.CONTEXT_CURRENT_STREAK, 30),
    ),
)

BADGES_BY_KEY: Mapping[str, BadgeDefinition] = {badge.key: badge for badge in BADGES}

# Ordered (key, predicate) pairs; iteration order is the award order
BADGE_CONDITIONS: tuple[tuple[str, BadgePredicate], ...] = tuple(
    (badge.key, badge.condition) for badge in BADGES
)


# =============================================================================
# GAMIFICATION ENGINE
# =============================================================================


class GamificationEngine:
    """Pure logic engine for badge evaluation.

    PURITY CONTRACT:
    - All data comes in as arguments (logs, streak, persisted statuses)
    - No side effects, no storage access, no state mutation
    - The manager decides what to persist and which events to emit
    """

    @staticmethod
    def build_context(
        logs: Iterable[Mapping[str, Any]],
        photo_logs: Iterable[Mapping[str, Any]] = (),
        current_streak: int = 0,
    ) -> EvaluationContext:
        """Count logs by kind into an EvaluationContext.

        `logs` may already contain photo logs; a log appearing in both
        arguments (same id) is counted once.

        Args:
            logs: Task, exercise and media-upload logs (all logs is fine)
            photo_logs: Self-report/photo logs
            current_streak: Current streak from StatisticsEngine
        """
        seen_ids: set[str] = set()
        exercise_count = task_count = self_report_count = photo_count = 0

        for log in (*logs, *photo_logs):
            log_id = log.get(const.DATA_LOG_ID)
            if log_id:
                if log_id in seen_ids:
                    continue
                seen_ids.add(log_id)

            log_type = log.get(const.DATA_LOG_TYPE)
            if log_type == const.LOG_TYPE_EXERCISE:
                exercise_count += 1
            elif log_type == const.LOG_TYPE_TASK:
                task_count += 1
            elif log_type == const.LOG_TYPE_PHOTO:
                self_report_count += 1

            if log.get(const.DATA_LOG_PHOTO_URI) or (
                log_type == const.LOG_TYPE_MEDIA_UPLOAD
                and log.get(const.DATA_LOG_MEDIA_URL)
            ):
                photo_count += 1

        return {
            const.CONTEXT_EXERCISE_COUNT: exercise_count,
            const.CONTEXT_TASK_COUNT: task_count,
            const.CONTEXT_SELF_REPORT_COUNT: self_report_count,
            const.CONTEXT_PHOTO_COUNT: photo_count,
            const.CONTEXT_CURRENT_STREAK: max(0, int(current_streak)),
        }  # type: ignore[return-value]

    @staticmethod
    def is_earned(statuses: Mapping[str, Any], badge_key: str) -> bool:
        """Return True when the persisted status of `badge_key` is EARNED."""
        state = statuses.get(badge_key)
        if not isinstance(state, Mapping):
            return False
        return state.get(const.DATA_BADGE_STATUS) == const.BADGE_STATUS_EARNED

    @classmethod
    def evaluate(
        cls,
        context: EvaluationContext,
        statuses: Mapping[str, Any],
    ) -> list[str]:
        """Return the keys of badges that qualify and are not yet earned.

        Args:
            context: Counters from build_context()
            statuses: Persisted {badge_key: {"status": ...}} map

        Returns:
            Newly qualifying badge keys in declaration order. Already earned
            badges are skipped without evaluating their condition.
        """
        newly_earned: list[str] = []
        for key, predicate in BADGE_CONDITIONS:
            if cls.is_earned(statuses, key):
                continue
            if predicate(context):
                newly_earned.append(key)
        return newly_earned

    @staticmethod
    def xp_for_log(log_type: str | None) -> int:
        """Return the XP granted for appending a log of `log_type`."""
        return const.LOG_TYPE_XP.get(log_type or "", 0)

    @staticmethod
    def get_badge(badge_key: str) -> BadgeDefinition | None:
        """Return the badge definition for `badge_key`, if any."""
        return BADGES_BY_KEY.get(badge_key)
