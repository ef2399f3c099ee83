"""Tests for GamificationEngine - pure badge evaluation, no HA fixtures needed."""

from __future__ import annotations

from custom_components.routine_tracker import const
from custom_components.routine_tracker.engines.gamification_engine import (
    BADGES,
    GamificationEngine,
)
from tests.helpers import make_log


def _earned(*keys: str) -> dict[str, dict[str, str]]:
    return {key: {const.DATA_BADGE_STATUS: const.BADGE_STATUS_EARNED} for key in keys}


def _context(**counters: int):
    context = GamificationEngine.build_context([])
    context.update(counters)  # type: ignore[typeddict-item]
    return context


# =============================================================================
# TEST: BADGE CATALOG
# =============================================================================


class TestBadgeCatalog:
    """Static badge definitions."""

    def test_keys_unique(self) -> None:
        """Every badge key is unique."""
        keys = [badge.key for badge in BADGES]
        assert len(keys) == len(set(keys))

    def test_xp_reward_by_level(self) -> None:
        """XP rewards follow the badge level."""
        assert GamificationEngine.get_badge(const.BADGE_TESTING_WATERS).xp_reward == 10  # type: ignore[union-attr]
        assert GamificationEngine.get_badge(const.BADGE_FACE_GYM_RAT).xp_reward == 25  # type: ignore[union-attr]
        assert GamificationEngine.get_badge(const.BADGE_FACE_GYM_SWEAT).xp_reward == 50  # type: ignore[union-attr]
        assert GamificationEngine.get_badge(const.BADGE_NARCISSUS).xp_reward == 100  # type: ignore[union-attr]

    def test_unknown_badge(self) -> None:
        """Unknown keys have no definition."""
        assert GamificationEngine.get_badge("gold-star") is None

    def test_xp_for_log(self) -> None:
        """Per-log XP depends on the log kind."""
        assert GamificationEngine.xp_for_log(const.LOG_TYPE_EXERCISE) == 10
        assert GamificationEngine.xp_for_log(const.LOG_TYPE_TASK) == 2
        assert GamificationEngine.xp_for_log(None) == 0


# =============================================================================
# TEST: CONTEXT
# =============================================================================


class TestBuildContext:
    """Counting logs into the evaluation context."""

    def test_counts_by_kind(self) -> None:
        """Exercise, task, self-report and photo logs are counted."""
        logs = [
            make_log(const.LOG_TYPE_EXERCISE),
            make_log(const.LOG_TYPE_EXERCISE),
            make_log(const.LOG_TYPE_TASK),
            make_log(const.LOG_TYPE_PHOTO, photo_uri="file://1.jpg"),
            make_log(const.LOG_TYPE_MEDIA_UPLOAD, media_url="https://x/1.jpg"),
        ]
        context = GamificationEngine.build_context(logs, current_streak=4)
        assert context == {
            const.CONTEXT_EXERCISE_COUNT: 2,
            const.CONTEXT_TASK_COUNT: 1,
            const.CONTEXT_SELF_REPORT_COUNT: 1,
            const.CONTEXT_PHOTO_COUNT: 2,
            const.CONTEXT_CURRENT_STREAK: 4,
        }

    def test_logs_in_both_lists_counted_once(self) -> None:
        """A log passed as log and photo log is deduplicated by id."""
        photo = make_log(const.LOG_TYPE_PHOTO, photo_uri="file://1.jpg")
        context = GamificationEngine.build_context([photo], [photo])
        assert context[const.CONTEXT_SELF_REPORT_COUNT] == 1
        assert context[const.CONTEXT_PHOTO_COUNT] == 1

    def test_negative_streak_clamped(self) -> None:
        """The streak counter never goes below zero."""
        assert GamificationEngine.build_context([], current_streak=-2)[
            const.CONTEXT_CURRENT_STREAK
        ] == 0


# =============================================================================
# TEST: EVALUATION
# =============================================================================


class TestEvaluate:
    """Deciding which badges newly qualify."""

    def test_first_exercise(self) -> None:
        """One exercise earns Testing the Waters only."""
        context = GamificationEngine.build_context([make_log()])
        assert GamificationEngine.evaluate(context, {}) == [const.BADGE_TESTING_WATERS]

    def test_bulk_import_awards_every_threshold_in_order(self) -> None:
        """60 exercises in one batch award each crossed threshold in order."""
        context = GamificationEngine.build_context([make_log() for _ in range(60)])
        assert GamificationEngine.evaluate(context, {}) == [
            const.BADGE_TESTING_WATERS,
            const.BADGE_FACE_GYM_RAT,
            const.BADGE_FACE_GYM_ENTHUSIAST,
            const.BADGE_FACE_GYM_SWEAT,
        ]

    def test_idempotent(self) -> None:
        """Earned badges are never returned again."""
        context = _context(**{const.CONTEXT_EXERCISE_COUNT: 12})
        first = GamificationEngine.evaluate(context, {})
        assert GamificationEngine.evaluate(context, _earned(*first)) == []

    def test_narcissus_needs_both_counters(self) -> None:
        """The composite badge needs 200 exercises and 200 self-reports."""
        earned_before = _earned(
            *(badge.key for badge in BADGES if badge.key != const.BADGE_NARCISSUS)
        )
        only_exercises = _context(
            **{const.CONTEXT_EXERCISE_COUNT: 250, const.CONTEXT_SELF_REPORT_COUNT: 199}
        )
        both = _context(
            **{const.CONTEXT_EXERCISE_COUNT: 200, const.CONTEXT_SELF_REPORT_COUNT: 200}
        )
        assert GamificationEngine.evaluate(only_exercises, earned_before) == []
        assert GamificationEngine.evaluate(both, earned_before) == [
            const.BADGE_NARCISSUS
        ]

    def test_streak_badges(self) -> None:
        """Streak badges follow the current streak."""
        assert GamificationEngine.evaluate(
            _context(**{const.CONTEXT_CURRENT_STREAK: 7}), {}
        ) == [const.BADGE_WEEK_WARRIOR]

    def test_first_photo(self) -> None:
        """A first photo earns Say Cheese and Testing the Pen."""
        context = GamificationEngine.build_context(
            [make_log(const.LOG_TYPE_PHOTO, photo_uri="file://1.jpg")]
        )
        assert GamificationEngine.evaluate(context, {}) == [
            const.BADGE_SAY_CHEESE,
            const.BADGE_TESTING_PEN,
        ]

    def test_milestones_never_awarded_by_evaluation(self) -> None:
        """Explicit-only badges never qualify through counters."""
        huge = _context(
            **{
                const.CONTEXT_EXERCISE_COUNT: 1000,
                const.CONTEXT_TASK_COUNT: 1000,
                const.CONTEXT_SELF_REPORT_COUNT: 1000,
                const.CONTEXT_PHOTO_COUNT: 1000,
                const.CONTEXT_CURRENT_STREAK: 1000,
            }
        )
        awarded = GamificationEngine.evaluate(huge, {})
        assert const.BADGE_NEW_BEGINNINGS not in awarded
        assert const.BADGE_EXPLORER not in awarded
        assert len(awarded) == len(BADGES) - 2

    def test_corrupted_status_is_not_earned(self) -> None:
        """A malformed status entry does not block the award."""
        context = GamificationEngine.build_context([make_log()])
        statuses = {const.BADGE_TESTING_WATERS: "earned"}
        assert GamificationEngine.evaluate(context, statuses) == [
            const.BADGE_TESTING_WATERS
        ]
