"""Type definitions for Routine Tracker data structures.

Hybrid approach: TypedDict for structures with fixed keys (persisted records,
engine results) and dict[str, Any] where keys are decided at runtime
(catalog lookups, per-badge status maps keyed by badge key).

TypedDict is static analysis only. Runtime code still uses .get() with
defaults because persisted data may be incomplete or hand-edited.

This module must not import from coordinator.py or any manager.
"""

from typing import Any, NotRequired, TypedDict

# =============================================================================
# Type Aliases
# =============================================================================

RoutineId = str  # UUID string
GoalId = str  # UUID string
ItemId = str  # Catalog template id ("chin-tuck")
InstanceId = str  # UUID string of one item attached to one routine/goal
BadgeKey = str  # "testing-waters"
ISODatetime = str  # "2026-01-18T12:30:00+00:00"
ISODate = str  # "2026-01-18"

# Catalog templates carry free-form content fields (media, prompts, colors)
CatalogTemplate = dict[str, Any]


# =============================================================================
# Persisted Records
# =============================================================================


class ScheduleEntryData(TypedDict):
    """One persisted schedule entry of a recurrence rule."""

    time_of_day: str  # "HH:MM" or "random"
    day_of_week: NotRequired[int]  # 1..7, weekly rules only


class ItemReferenceData(TypedDict, total=False):
    """Per-instance configuration of a catalog item inside a routine/goal.

    Only instance_id, item_id and type are guaranteed; every other field is
    an override that wins over the catalog template when present.
    """

    instance_id: InstanceId
    item_id: ItemId
    type: str
    name: str
    area: str
    category: str
    description: str
    duration: int
    instructions: list[str]
    notifications_enabled: bool
    recurrence: str
    schedules: list[ScheduleEntryData]
    notification_times: list[str]  # Legacy "09:00" / "monday-09:00" strings
    added_at: ISODatetime


class RoutineData(TypedDict):
    """A user routine: an ordered bundle of exercises and tasks."""

    internal_id: RoutineId
    name: str
    description: str
    items: list[ItemReferenceData]
    created_at: ISODatetime
    updated_at: ISODatetime


class GoalData(TypedDict):
    """A user goal: an ordered bundle of recurring activities."""

    internal_id: GoalId
    name: str
    description: str
    category: str
    items: list[ItemReferenceData]
    created_at: ISODatetime
    updated_at: ISODatetime


class LogRecordData(TypedDict):
    """An append-only completion record.

    Kind-specific payload fields are optional: photo_uri (photo logs),
    media_url (media uploads), duration (exercise logs), notes (any).
    """

    id: str
    type: str  # task | exercise | photo | media_upload
    completed_at: ISODatetime
    item_id: NotRequired[ItemId]
    activity_id: NotRequired[ItemId]
    routine_id: NotRequired[RoutineId]
    goal_id: NotRequired[GoalId]
    photo_uri: NotRequired[str]
    media_url: NotRequired[str]
    duration: NotRequired[int]
    notes: NotRequired[str]


class BadgeStateData(TypedDict):
    """Per-user status of one badge."""

    status: str  # not_earned | earned
    earned_at: NotRequired[ISODatetime]


class GamificationData(TypedDict):
    """Badge statuses, XP running total and toast bookkeeping."""

    xp: int
    badges: dict[BadgeKey, BadgeStateData]
    shown_toasts: list[BadgeKey]


class OnboardingStatusData(TypedDict):
    """Progress through one onboarding flow."""

    step: int
    status: str  # not_started | in_progress | completed | skipped


# =============================================================================
# Engine Results
# =============================================================================


class ConsistencyStats(TypedDict):
    """Result of StatisticsEngine.compute_consistency()."""

    current_streak: int
    longest_streak: int
    total_active_days: int


class ItemStats(TypedDict):
    """Completion counters for one catalog item."""

    item_id: ItemId
    count: int
    last_completed_at: ISODatetime | None


class TimingStats(TypedDict):
    """Hour-of-day distribution of completions."""

    by_hour: dict[int, int]
    most_common_hour: int | None
    total: int


class EvaluationContext(TypedDict):
    """Counters the badge predicates are evaluated against.

    Built by GamificationEngine.build_context() from the latest log set and
    the consistency stats computed over it.
    """

    exercise_count: int
    task_count: int
    self_report_count: int
    photo_count: int
    current_streak: int


class ScheduleSummary(TypedDict):
    """Outcome of one NotificationManager.async_schedule_all() pass."""

    last_scheduled: ISODatetime | None
    trigger_count: int
    skipped_random: int
    failures: list[dict[str, Any]]
    next_reminder: ISODatetime | None
