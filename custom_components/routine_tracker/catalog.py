# File: catalog.py
"""Static content catalogs for Routine Tracker.

Read-only templates keyed by a stable id. Routines and goals store only a
reference (item_id) plus per-instance overrides; the Catalog Join merges the
two at read time so catalog text updates reach existing routines.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

from . import const

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .type_defs import CatalogTemplate


# ------------------------------------------------------------------------------------------------
# Exercises
# ------------------------------------------------------------------------------------------------
EXERCISES: tuple[CatalogTemplate, ...] = (
    {
        "id": "tongue-posture",
        "name": "Tongue Posture (Mewing)",
        "area": "Skull support",
        "duration": 12,
        "description": "Proper tongue posture trains the muscles that support the mid-face and skull base.",
        "instructions": [
            "Close your lips gently.",
            "Place the entire tongue flat against the roof of your mouth, not just the tip.",
            "Keep your teeth lightly touching.",
            "Breathe through your nose.",
        ],
    },
    {
        "id": "chin-tuck",
        "name": "Chin Tucks",
        "area": "Neck posture",
        "duration": 45,
        "description": "Chin tucks help align your cervical spine and strengthen deep neck flexors.",
        "instructions": [
            "Stand or sit upright.",
            "Pull your chin straight back (not down), making a 'double chin'.",
            "Hold for 5 seconds, then relax. Repeat.",
        ],
    },
    {
        "id": "smile-symmetry",
        "name": "Smile Symmetry Drill",
        "area": "Zygomatic control",
        "duration": 60,
        "description": "This trains symmetric engagement of the zygomatic muscles involved in smiling.",
        "instructions": [
            "Look in a mirror.",
            "Smile slowly, focusing on even pull from both sides.",
            "Hold for 3 to 5 seconds, then relax.",
            "Repeat, correcting imbalances consciously.",
        ],
    },
    {
        "id": "chewing",
        "name": "Chewing (Mastic Gum)",
        "area": "Masseter hypertrophy",
        "duration": 300,
        "description": "Chewing tough gum targets the masseter muscles, enhancing jawline definition.",
        "instructions": [
            "Use a piece of firm mastic gum.",
            "Chew evenly on both sides.",
            "Focus on controlled, deliberate motion.",
        ],
    },
    {
        "id": "fish-face",
        "name": "Fish Face",
        "area": "Buccinator tone",
        "duration": 45,
        "description": "This facial isometric strengthens the buccinator and improves cheek definition.",
        "instructions": [
            "Suck in your cheeks like making a 'fish face'.",
            "Hold for 10 seconds.",
            "Relax and repeat.",
        ],
    },
    {
        "id": "jaw-push-resist",
        "name": "Jaw Push-Resist",
        "area": "Jaw strength",
        "duration": 60,
        "description": "This isometric exercise strengthens jaw muscles through resistance.",
        "instructions": [
            "Place your hand against your chin.",
            "Push your jaw forward while resisting with your hand.",
            "Hold for 5 seconds. Repeat from other directions (left, right).",
        ],
    },
    {
        "id": "neck-curl-ups",
        "name": "Neck Curl-Ups",
        "area": "Cervical tone",
        "duration": 60,
        "description": "Neck curl-ups strengthen the anterior neck muscles and improve head posture.",
        "instructions": [
            "Lie on your back with knees bent, tongue pressed to the roof of your mouth.",
            "Lift your chin toward your chest without lifting shoulders.",
            "Hold briefly and return slowly.",
        ],
    },
)

# ------------------------------------------------------------------------------------------------
# Tasks
# ------------------------------------------------------------------------------------------------
TASKS: tuple[CatalogTemplate, ...] = (
    {
        "id": "progress-photo",
        "name": "Take a Progress Photo",
        "area": "Tracking",
        "description": "Capture a front and side photo in the same light to compare over time.",
    },
    {
        "id": "hydration",
        "name": "Drink 2L of Water",
        "area": "Skin health",
        "description": "Stay hydrated throughout the day to support skin elasticity.",
    },
    {
        "id": "sleep-on-back",
        "name": "Sleep on Your Back",
        "area": "Facial symmetry",
        "description": "Sleeping on your back avoids pressing one side of the face into the pillow.",
    },
    {
        "id": "skincare-evening",
        "name": "Evening Skincare",
        "area": "Skin health",
        "description": "Cleanse and moisturize before bed.",
    },
)

# ------------------------------------------------------------------------------------------------
# Goal activities
# ------------------------------------------------------------------------------------------------
ACTIVITIES: tuple[CatalogTemplate, ...] = (
    {
        "id": "daily-guided-meditation",
        "name": "Daily Guided Meditation",
        "description": "A 10-minute guided meditation to center yourself.",
        "category": const.GOAL_CATEGORY_SELF_CARE,
        "recurrence": const.RECURRENCE_DAILY,
        "schedules": [{const.SCHEDULE_TIME_OF_DAY: "07:00"}],
    },
    {
        "id": "daily-morning-journaling",
        "name": "Morning Journaling",
        "description": "Spend a few minutes journaling to set intentions and practice gratitude.",
        "category": const.GOAL_CATEGORY_SELF_CARE,
        "recurrence": const.RECURRENCE_DAILY,
        "schedules": [{const.SCHEDULE_TIME_OF_DAY: "07:15"}],
    },
    {
        "id": "piano-c-major-scale-practice",
        "name": "C Major Scale Practice",
        "description": "Practice the C Major scale with both hands.",
        "category": const.GOAL_CATEGORY_HOBBY,
        "recurrence": const.RECURRENCE_WEEKLY,
        "schedules": [
            {const.SCHEDULE_TIME_OF_DAY: "18:00", const.SCHEDULE_DAY_OF_WEEK: 1},
            {const.SCHEDULE_TIME_OF_DAY: "18:00", const.SCHEDULE_DAY_OF_WEEK: 3},
            {const.SCHEDULE_TIME_OF_DAY: "18:00", const.SCHEDULE_DAY_OF_WEEK: 5},
        ],
    },
    {
        "id": "piano-basic-chord-voicings",
        "name": "Basic Chord Voicings (C, G, Am, F)",
        "description": "Learn and practice basic voicings for C Major, G Major, A minor, and F Major chords.",
        "category": const.GOAL_CATEGORY_HOBBY,
        "recurrence": const.RECURRENCE_WEEKLY,
        "schedules": [
            {const.SCHEDULE_TIME_OF_DAY: "18:00", const.SCHEDULE_DAY_OF_WEEK: 2},
            {const.SCHEDULE_TIME_OF_DAY: "18:00", const.SCHEDULE_DAY_OF_WEEK: 4},
        ],
    },
    {
        "id": "piano-sight-reading-simple",
        "name": "Sight-Reading Simple Piece",
        "description": "Practice sight-reading a short, simple musical piece.",
        "category": const.GOAL_CATEGORY_HOBBY,
        "recurrence": const.RECURRENCE_WEEKLY,
        "schedules": [
            {const.SCHEDULE_TIME_OF_DAY: "11:00", const.SCHEDULE_DAY_OF_WEEK: 6},
        ],
    },
)


def _index(templates: tuple[CatalogTemplate, ...]) -> Mapping[str, CatalogTemplate]:
    return MappingProxyType({template["id"]: template for template in templates})


# Lookup tables by item type
CATALOGS: Mapping[str, Mapping[str, CatalogTemplate]] = MappingProxyType(
    {
        const.ITEM_TYPE_EXERCISE: _index(EXERCISES),
        const.ITEM_TYPE_TASK: _index(TASKS),
        const.ITEM_TYPE_ACTIVITY: _index(ACTIVITIES),
    }
)
