"""Manager modules for Routine Tracker integration.

Managers orchestrate workflows and coordinate between engines.
They are stateful, event-aware, and own every side effect.
"""

from .base_manager import BaseManager
from .gamification_manager import GamificationManager
from .log_manager import LogManager
from .notification_manager import NotificationManager
from .onboarding_manager import OnboardingManager
from .routine_manager import RoutineManager

__all__ = [
    "BaseManager",
    "GamificationManager",
    "LogManager",
    "NotificationManager",
    "OnboardingManager",
    "RoutineManager",
]
