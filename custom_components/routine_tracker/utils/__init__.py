# File: utils/__init__.py
"""Pure Python utilities for Routine Tracker.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Submodules:
    - dt_utils: Timezone handling, timestamp parsing, local-day projection

Usage:
    from ..utils import dt_utils
"""

from . import dt_utils

__all__ = ["dt_utils"]
