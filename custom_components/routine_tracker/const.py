# File: const.py
"""Constants for the Routine Tracker integration.

This file centralizes storage keys, defaults, event signal names, service
names, field names and translation keys so the engines, managers and
platforms agree on a single vocabulary.
"""

import logging

from homeassistant.const import Platform

# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
ROUTINE_TRACKER_TITLE = "Routine Tracker"

# Integration Domain
DOMAIN = "routine_tracker"

# Logger
LOGGER = logging.getLogger(__package__)

# Supported Platforms
PLATFORMS = [
    Platform.SENSOR,
]

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORAGE_MANAGER = "storage_manager"
STORAGE_KEY = "routine_tracker_data"
STORAGE_VERSION = 1
SCHEMA_VERSION = 1

# ------------------------------------------------------------------------------------------------
# Configuration Keys
# ------------------------------------------------------------------------------------------------
CONF_NOTIFY_SERVICE = "notify_service"
CONF_UPDATE_INTERVAL = "update_interval"

DEFAULT_NOTIFY_SERVICE = ""
DEFAULT_UPDATE_INTERVAL = 5  # minutes
DEFAULT_ZERO = 0

# ------------------------------------------------------------------------------------------------
# Storage Buckets
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_META_CREATED_AT = "created_at"

DATA_ROUTINES = "routines"
DATA_GOALS = "goals"
DATA_LOGS = "logs"
DATA_GAMIFICATION = "gamification"
DATA_ONBOARDING = "onboarding"
DATA_NOTIFICATIONS = "notifications"

# Shared owner fields (routines and goals)
DATA_INTERNAL_ID = "internal_id"
DATA_NAME = "name"
DATA_DESCRIPTION = "description"
DATA_CATEGORY = "category"
DATA_ITEMS = "items"
DATA_CREATED_AT = "created_at"
DATA_UPDATED_AT = "updated_at"

# Item reference fields (per-instance overrides attached to a routine/goal)
DATA_ITEM_INSTANCE_ID = "instance_id"
DATA_ITEM_ID = "item_id"
DATA_ITEM_TYPE = "type"
DATA_ITEM_NAME = "name"
DATA_ITEM_AREA = "area"
DATA_ITEM_CATEGORY = "category"
DATA_ITEM_DESCRIPTION = "description"
DATA_ITEM_DURATION = "duration"
DATA_ITEM_INSTRUCTIONS = "instructions"
DATA_ITEM_RECURRENCE = "recurrence"
DATA_ITEM_SCHEDULES = "schedules"
DATA_ITEM_NOTIFICATION_TIMES = "notification_times"
DATA_ITEM_NOTIFICATIONS_ENABLED = "notifications_enabled"
DATA_ITEM_ADDED_AT = "added_at"

# Fields a reference may override on top of its catalog template
ITEM_OVERRIDE_FIELDS = (
    DATA_ITEM_NAME,
    DATA_ITEM_AREA,
    DATA_ITEM_CATEGORY,
    DATA_ITEM_DESCRIPTION,
    DATA_ITEM_DURATION,
    DATA_ITEM_INSTRUCTIONS,
    DATA_ITEM_NOTIFICATIONS_ENABLED,
)

# Schedule entry fields
SCHEDULE_TIME_OF_DAY = "time_of_day"
SCHEDULE_DAY_OF_WEEK = "day_of_week"

# Log fields
DATA_LOG_ID = "id"
DATA_LOG_TYPE = "type"
DATA_LOG_ITEM_ID = "item_id"
DATA_LOG_ACTIVITY_ID = "activity_id"
DATA_LOG_ROUTINE_ID = "routine_id"
DATA_LOG_GOAL_ID = "goal_id"
DATA_LOG_COMPLETED_AT = "completed_at"
DATA_LOG_PHOTO_URI = "photo_uri"
DATA_LOG_MEDIA_URL = "media_url"
DATA_LOG_NOTES = "notes"
DATA_LOG_DURATION = "duration"

# Gamification fields
DATA_GAMIFICATION_XP = "xp"
DATA_GAMIFICATION_BADGES = "badges"
DATA_GAMIFICATION_SHOWN_TOASTS = "shown_toasts"
DATA_BADGE_STATUS = "status"
DATA_BADGE_EARNED_AT = "earned_at"

# Onboarding fields
DATA_ONBOARDING_STEP = "step"
DATA_ONBOARDING_STATUS = "status"

# Notification bookkeeping fields
DATA_NOTIFICATIONS_LAST_SCHEDULED = "last_scheduled"
DATA_NOTIFICATIONS_TRIGGER_COUNT = "trigger_count"
DATA_NOTIFICATIONS_SKIPPED_RANDOM = "skipped_random"
DATA_NOTIFICATIONS_FAILURES = "failures"
DATA_NOTIFICATIONS_NEXT_REMINDER = "next_reminder"

# ------------------------------------------------------------------------------------------------
# Items, Owners and Logs
# ------------------------------------------------------------------------------------------------
ITEM_TYPE_TASK = "task"
ITEM_TYPE_EXERCISE = "exercise"
ITEM_TYPE_ACTIVITY = "activity"
ITEM_TYPES = [ITEM_TYPE_TASK, ITEM_TYPE_EXERCISE, ITEM_TYPE_ACTIVITY]

OWNER_KIND_ROUTINE = "routine"
OWNER_KIND_GOAL = "goal"

LOG_TYPE_TASK = "task"
LOG_TYPE_EXERCISE = "exercise"
LOG_TYPE_PHOTO = "photo"
LOG_TYPE_MEDIA_UPLOAD = "media_upload"
LOG_TYPES = [LOG_TYPE_TASK, LOG_TYPE_EXERCISE, LOG_TYPE_PHOTO, LOG_TYPE_MEDIA_UPLOAD]

# Log kind recorded when an item of a given type is completed
ITEM_TYPE_TO_LOG_TYPE = {
    ITEM_TYPE_TASK: LOG_TYPE_TASK,
    ITEM_TYPE_EXERCISE: LOG_TYPE_EXERCISE,
    ITEM_TYPE_ACTIVITY: LOG_TYPE_EXERCISE,
}

GOAL_CATEGORY_SELF_CARE = "self-care"
GOAL_CATEGORY_HOBBY = "hobby"
GOAL_CATEGORY_PRODUCTIVITY = "productivity"
GOAL_CATEGORY_FITNESS = "fitness"
GOAL_CATEGORY_FINANCE = "finance"
GOAL_CATEGORY_CUSTOM = "custom"
GOAL_CATEGORIES = [
    GOAL_CATEGORY_SELF_CARE,
    GOAL_CATEGORY_HOBBY,
    GOAL_CATEGORY_PRODUCTIVITY,
    GOAL_CATEGORY_FITNESS,
    GOAL_CATEGORY_FINANCE,
    GOAL_CATEGORY_CUSTOM,
]

# ------------------------------------------------------------------------------------------------
# Recurrence
# ------------------------------------------------------------------------------------------------
RECURRENCE_DAILY = "daily"
RECURRENCE_WEEKLY = "weekly"
RECURRENCE_TYPES = [RECURRENCE_DAILY, RECURRENCE_WEEKLY]

TIME_OF_DAY_RANDOM = "random"

# ISO weekday numbering: 1 = Monday ... 7 = Sunday
WEEKDAY_NAMES = [
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
]
DAY_OF_WEEK_MIN = 1
DAY_OF_WEEK_MAX = 7

# Separator used by legacy "monday-09:00" notification time strings
NOTIFICATION_TIME_DAY_SEPARATOR = "-"

# Default schedules applied when a catalog item is added without one
DEFAULT_EXERCISE_TIME_OF_DAY = "09:00"
DEFAULT_TASK_TIME_OF_DAY = "09:00"
DEFAULT_TASK_DAY_OF_WEEK = 1

# ------------------------------------------------------------------------------------------------
# Gamification
# ------------------------------------------------------------------------------------------------
BADGE_LEVEL_BRONZE = "bronze"
BADGE_LEVEL_SILVER = "silver"
BADGE_LEVEL_GOLD = "gold"
BADGE_LEVEL_PLATINUM = "platinum"

BADGE_STATUS_NOT_EARNED = "not_earned"
BADGE_STATUS_EARNED = "earned"

# Fixed XP reward granted when a badge of the given level is earned
BADGE_LEVEL_XP_REWARD = {
    BADGE_LEVEL_BRONZE: 10,
    BADGE_LEVEL_SILVER: 25,
    BADGE_LEVEL_GOLD: 50,
    BADGE_LEVEL_PLATINUM: 100,
}

# XP granted for each appended log, by log kind
LOG_TYPE_XP = {
    LOG_TYPE_EXERCISE: 10,
    LOG_TYPE_PHOTO: 5,
    LOG_TYPE_TASK: 2,
    LOG_TYPE_MEDIA_UPLOAD: 5,
}

# Badge keys (declaration order lives in GamificationEngine.BADGES)
BADGE_TESTING_WATERS = "testing-waters"
BADGE_FACE_GYM_RAT = "face-gym-rat"
BADGE_FACE_GYM_ENTHUSIAST = "face-gym-enthusiast"
BADGE_FACE_GYM_SWEAT = "face-gym-sweat"
BADGE_FACE_GYM_OBSESSED = "face-gym-obsessed"
BADGE_TESTING_PEN = "testing-pen"
BADGE_JUNIOR_REPORTER = "junior-reporter"
BADGE_MEDIOR_REPORTER = "medior-reporter"
BADGE_SENIOR_REPORTER = "senior-reporter"
BADGE_ESTABLISHED_REPORTER = "established-reporter"
BADGE_BEGINNER_TASK_MASTER = "beginner-task-master"
BADGE_DILIGENT_TASK_MASTER = "dilligent-task-master"
BADGE_PRO_TASK_MASTER = "pro-task-master"
BADGE_ESTABLISHED_TASK_MASTER = "established-task-master"
BADGE_WEEK_WARRIOR = "week-warrior"
BADGE_MONTHLY_MOMENTUM = "monthly-momentum"
BADGE_NARCISSUS = "narcissus"
BADGE_SAY_CHEESE = "say-cheese"
BADGE_NEW_BEGINNINGS = "new-beginnings"
BADGE_EXPLORER = "explorer"

# Evaluation context keys
CONTEXT_EXERCISE_COUNT = "exercise_count"
CONTEXT_TASK_COUNT = "task_count"
CONTEXT_SELF_REPORT_COUNT = "self_report_count"
CONTEXT_PHOTO_COUNT = "photo_count"
CONTEXT_CURRENT_STREAK = "current_streak"

# ------------------------------------------------------------------------------------------------
# Onboarding
# ------------------------------------------------------------------------------------------------
ONBOARDING_STATUS_NOT_STARTED = "not_started"
ONBOARDING_STATUS_IN_PROGRESS = "in_progress"
ONBOARDING_STATUS_COMPLETED = "completed"
ONBOARDING_STATUS_SKIPPED = "skipped"
ONBOARDING_STATUSES = [
    ONBOARDING_STATUS_NOT_STARTED,
    ONBOARDING_STATUS_IN_PROGRESS,
    ONBOARDING_STATUS_COMPLETED,
    ONBOARDING_STATUS_SKIPPED,
]
ONBOARDING_FINISHED_STATUSES = (
    ONBOARDING_STATUS_COMPLETED,
    ONBOARDING_STATUS_SKIPPED,
)
ONBOARDING_FLOW_INITIAL_SETUP = "initial_setup"

# ------------------------------------------------------------------------------------------------
# Manager Event Signals (suffixes, scoped per config entry)
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_LOG_APPENDED = "log_appended"
SIGNAL_SUFFIX_ROUTINES_CHANGED = "routines_changed"
SIGNAL_SUFFIX_BADGE_EARNED = "badge_earned"
SIGNAL_SUFFIX_XP_CHANGED = "xp_changed"
SIGNAL_SUFFIX_ONBOARDING_CHANGED = "onboarding_changed"
SIGNAL_SUFFIX_NOTIFICATIONS_SCHEDULED = "notifications_scheduled"

# ------------------------------------------------------------------------------------------------
# Notifications
# ------------------------------------------------------------------------------------------------
NOTIFY_DOMAIN = "notify"
NOTIFY_TITLE = "title"
NOTIFY_MESSAGE = "message"
NOTIFY_DATA = "data"
NOTIFY_ACTIONS = "actions"
NOTIFY_ACTION = "action"
NOTIFY_TAG = "tag"

NOTIFICATION_EVENT = "mobile_app_notification_action"
NOTIFICATION_TITLE = "Your Glow Up"
NOTIFICATION_MESSAGE_TASK = "Don't forget to complete your task: {name}!"
NOTIFICATION_MESSAGE_PROGRESS = "Don't forget to log your progress for {name}!"
NOTIFICATION_ACTION_OPEN_TITLE = "Open"
NOTIFICATION_ACTION_SEPARATOR = "|"
NOTIFICATION_ENTRY_ID_LENGTH = 8

ACTION_OPEN_ITEM = "OPEN_ITEM"

# Bus event fired when a reminder is tapped (deep-link target)
EVENT_OPEN_ITEM = f"{DOMAIN}_open_item"

# Bus event fired for each newly earned badge (UI toast source)
EVENT_BADGE_EARNED = f"{DOMAIN}_badge_earned"

# Trigger payload keys
PAYLOAD_ITEM_ID = "item_id"
PAYLOAD_INSTANCE_ID = "instance_id"
PAYLOAD_OWNER_ID = "owner_id"
PAYLOAD_OWNER_KIND = "owner_kind"
PAYLOAD_ENTRY_ID = "entry_id"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_CREATE_ROUTINE = "create_routine"
SERVICE_DELETE_ROUTINE = "delete_routine"
SERVICE_CREATE_GOAL = "create_goal"
SERVICE_DELETE_GOAL = "delete_goal"
SERVICE_ADD_ITEM = "add_item"
SERVICE_UPDATE_ITEM = "update_item"
SERVICE_REMOVE_ITEM = "remove_item"
SERVICE_LOG_COMPLETION = "log_completion"
SERVICE_SCHEDULE_NOTIFICATIONS = "schedule_notifications"
SERVICE_EVALUATE_BADGES = "evaluate_badges"
SERVICE_AWARD_BADGE = "award_badge"
SERVICE_MARK_BADGE_TOAST_SHOWN = "mark_badge_toast_shown"
SERVICE_SET_ONBOARDING_STATUS = "set_onboarding_status"
SERVICE_RESET_ALL_DATA = "reset_all_data"
SERVICE_GET_PENDING_ITEMS = "get_pending_items"
SERVICE_GET_CONSISTENCY = "get_consistency"
SERVICE_RESOLVE_ITEMS = "resolve_items"

FIELD_ROUTINE_ID = "routine_id"
FIELD_GOAL_ID = "goal_id"
FIELD_OWNER_ID = "owner_id"
FIELD_NAME = "name"
FIELD_DESCRIPTION = "description"
FIELD_CATEGORY = "category"
FIELD_ITEM_ID = "item_id"
FIELD_ITEM_TYPE = "item_type"
FIELD_INSTANCE_ID = "instance_id"
FIELD_RECURRENCE = "recurrence"
FIELD_SCHEDULES = "schedules"
FIELD_INSTRUCTIONS = "instructions"
FIELD_NOTIFICATIONS_ENABLED = "notifications_enabled"
FIELD_LOG_TYPE = "log_type"
FIELD_COMPLETED_AT = "completed_at"
FIELD_PHOTO_URI = "photo_uri"
FIELD_MEDIA_URL = "media_url"
FIELD_NOTES = "notes"
FIELD_DURATION = "duration"
FIELD_BADGE_KEY = "badge_key"
FIELD_FLOW_KEY = "flow_key"
FIELD_STEP = "step"
FIELD_STATUS = "status"
FIELD_USE_DEFAULT_SCHEDULE = "use_default_schedule"
FIELD_ITEMS = "items"
FIELD_DAYS = "days"

# ------------------------------------------------------------------------------------------------
# Translation Keys
# ------------------------------------------------------------------------------------------------
TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"
TRANS_KEY_ERROR_NOT_FOUND = "not_found"
TRANS_KEY_ERROR_PERSISTENCE = "persistence_failed"
TRANS_KEY_ERROR_NOTIFICATION_PERMISSION = "notification_permission_denied"
TRANS_KEY_ERROR_INVALID_SCHEDULE = "invalid_schedule"
TRANS_KEY_ERROR_UNKNOWN_BADGE = "unknown_badge"
TRANS_KEY_ERROR_NO_ENTRY = "no_entry_loaded"
TRANS_KEY_ERROR_INVALID_NOTIFY_SERVICE = "invalid_notify_service"
TRANS_KEY_ERROR_INVALID_NAME = "invalid_name"
TRANS_KEY_ERROR_UNKNOWN_ITEM = "unknown_item"
TRANS_KEY_ERROR_INVALID_LOG = "invalid_log"

TRANS_KEY_SENSOR_XP = "xp"
TRANS_KEY_SENSOR_CURRENT_STREAK = "current_streak"
TRANS_KEY_SENSOR_PENDING_ITEMS = "pending_items"
TRANS_KEY_SENSOR_BADGES_EARNED = "badges_earned"

# Placeholder names used in translated error messages
TRANS_PLACEHOLDER_ENTITY_TYPE = "entity_type"
TRANS_PLACEHOLDER_ENTITY_ID = "entity_id"
TRANS_PLACEHOLDER_ERROR = "error"
TRANS_PLACEHOLDER_SERVICE = "service"
TRANS_PLACEHOLDER_BADGE_KEY = "badge_key"
TRANS_PLACEHOLDER_ITEM_ID = "item_id"

# Entity types named in NotFoundError
ENTITY_TYPE_ROUTINE = "routine"
ENTITY_TYPE_GOAL = "goal"
ENTITY_TYPE_ITEM = "item"
ENTITY_TYPE_OWNER = "routine or goal"

# ------------------------------------------------------------------------------------------------
# Sensors
# ------------------------------------------------------------------------------------------------
SENSOR_UID_SUFFIX_XP = "_xp"
SENSOR_UID_SUFFIX_CURRENT_STREAK = "_current_streak"
SENSOR_UID_SUFFIX_PENDING_ITEMS = "_pending_items"
SENSOR_UID_SUFFIX_BADGES_EARNED = "_badges_earned"

ATTR_LONGEST_STREAK = "longest_streak"
ATTR_TOTAL_ACTIVE_DAYS = "total_active_days"
ATTR_PENDING_ITEMS = "items"
ATTR_EARNED_BADGES = "earned"
ATTR_TOAST_PENDING = "toast_pending"

# Coordinator snapshot keys
SNAPSHOT_PENDING = "pending"
SNAPSHOT_CONSISTENCY = "consistency"
SNAPSHOT_XP = "xp"
SNAPSHOT_EARNED_BADGES = "earned_badges"

# Statistics
STATS_TIME_SERIES_DAYS = 30
STATS_CURRENT_STREAK = "current_streak"
STATS_LONGEST_STREAK = "longest_streak"
STATS_TOTAL_ACTIVE_DAYS = "total_active_days"
