"""Engine modules for Routine Tracker integration.

Contains pure computation engines (no Home Assistant imports):
- schedule_engine: Recurrence parsing, due-today checks, next occurrence
- catalog_engine: Catalog join producing resolved or orphaned items
- routine_engine: Pending-item resolution against today's logs
- statistics_engine: Streaks, counters, time series
- gamification_engine: Badge table, evaluation context, XP values
"""

# Use relative imports within package to avoid mypy module resolution issues
from .catalog_engine import CatalogEngine, OrphanedItem, ResolvedItem, ScheduledItem
from .gamification_engine import BADGES, BadgeDefinition, GamificationEngine
from .routine_engine import RoutineEngine
from .schedule_engine import RecurrenceEngine, RecurrenceRule, ScheduleEntry
from .statistics_engine import StatisticsEngine

__all__ = [
    "BADGES",
    "BadgeDefinition",
    "CatalogEngine",
    "GamificationEngine",
    "OrphanedItem",
    "RecurrenceEngine",
    "RecurrenceRule",
    "ResolvedItem",
    "RoutineEngine",
    "ScheduleEntry",
    "ScheduledItem",
    "StatisticsEngine",
]
