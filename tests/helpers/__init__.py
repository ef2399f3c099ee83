"""Test helpers for Routine Tracker tests.

This module re-exports all helpers for convenient imports:

    from tests.helpers import (
        # Builders (pure engine tests)
        make_log, make_reference, make_item,

        # Workflows (service calls against a loaded entry)
        create_routine, create_goal, add_item, log_completion,

        # Validation
        sensor_entity_id, sensor_state,
    )

See individual modules for full documentation:
- builders.py: Plain dict / dataclass factories for engine tests
- workflows.py: Service-call shortcuts for integration tests
- validation.py: Sensor lookups through the entity registry
"""

from tests.helpers.builders import make_item, make_log, make_reference
from tests.helpers.validation import sensor_entity_id, sensor_state
from tests.helpers.workflows import (
    add_item,
    call_service,
    create_goal,
    create_routine,
    finish_onboarding,
    log_completion,
)

__all__ = [
    "add_item",
    "call_service",
    "create_goal",
    "create_routine",
    "finish_onboarding",
    "log_completion",
    "make_item",
    "make_log",
    "make_reference",
    "sensor_entity_id",
    "sensor_state",
]
