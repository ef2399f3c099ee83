"""Tests for the GamificationManager (XP ledger, awards, toasts)."""

import asyncio
from unittest.mock import AsyncMock, patch

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ServiceValidationError
import pytest
from pytest_homeassistant_custom_component.common import async_capture_events

from custom_components.routine_tracker import const
from custom_components.routine_tracker.coordinator import RoutineTrackerCoordinator
from custom_components.routine_tracker.exceptions import PersistenceError
from tests.helpers import call_service, finish_onboarding, make_log


async def test_onboarding_awards_new_beginnings(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator
) -> None:
    """Finishing initial setup awards new-beginnings and fires the bus event."""
    events = async_capture_events(hass, const.EVENT_BADGE_EARNED)

    await finish_onboarding(hass)

    gm = coordinator.gamification_manager
    assert gm.earned_badges() == [const.BADGE_NEW_BEGINNINGS]
    assert gm.xp == const.BADGE_LEVEL_XP_REWARD[const.BADGE_LEVEL_BRONZE]
    assert len(events) == 1
    assert events[0].data[const.FIELD_BADGE_KEY] == const.BADGE_NEW_BEGINNINGS
    assert events[0].data[const.ATTR_TOAST_PENDING] is True


async def test_skipped_onboarding_also_awards(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator
) -> None:
    """Skipping initial setup counts as finishing it."""
    await finish_onboarding(hass, const.ONBOARDING_STATUS_SKIPPED)

    assert coordinator.gamification_manager.earned_badges() == [
        const.BADGE_NEW_BEGINNINGS
    ]


async def test_in_progress_onboarding_awards_nothing(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator
) -> None:
    """Intermediate onboarding steps award nothing."""
    await call_service(
        hass,
        const.SERVICE_SET_ONBOARDING_STATUS,
        {const.FIELD_STATUS: const.ONBOARDING_STATUS_IN_PROGRESS, const.FIELD_STEP: 2},
    )
    await hass.async_block_till_done()

    assert coordinator.gamification_manager.earned_badges() == []
    assert coordinator.onboarding_manager.get_status(
        const.ONBOARDING_FLOW_INITIAL_SETUP
    ) == {const.DATA_ONBOARDING_STEP: 2, const.DATA_ONBOARDING_STATUS: "in_progress"}


async def test_award_badge_once(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator
) -> None:
    """Explicit awards are idempotent."""
    first = await call_service(
        hass,
        const.SERVICE_AWARD_BADGE,
        {const.FIELD_BADGE_KEY: const.BADGE_EXPLORER},
        return_response=True,
    )
    second = await call_service(
        hass,
        const.SERVICE_AWARD_BADGE,
        {const.FIELD_BADGE_KEY: const.BADGE_EXPLORER},
        return_response=True,
    )

    assert first == {"awarded": True}
    assert second == {"awarded": False}
    assert coordinator.gamification_manager.xp == 10


async def test_award_unknown_badge(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator
) -> None:
    """Unknown badge keys are rejected."""
    with pytest.raises(ServiceValidationError):
        await coordinator.gamification_manager.async_award_badge("gold-star")


async def test_mark_toast_shown(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator
) -> None:
    """Marking a toast shown clears its pending flag."""
    gm = coordinator.gamification_manager
    await gm.async_award_badge(const.BADGE_EXPLORER)

    explorer = next(b for b in gm.get_badge_statuses() if b["key"] == const.BADGE_EXPLORER)
    assert explorer[const.ATTR_TOAST_PENDING] is True

    await call_service(
        hass,
        const.SERVICE_MARK_BADGE_TOAST_SHOWN,
        {const.FIELD_BADGE_KEY: const.BADGE_EXPLORER},
    )

    explorer = next(b for b in gm.get_badge_statuses() if b["key"] == const.BADGE_EXPLORER)
    assert explorer[const.ATTR_TOAST_PENDING] is False
    assert explorer[const.DATA_BADGE_STATUS] == const.BADGE_STATUS_EARNED
    assert gm.shown_toasts == [const.BADGE_EXPLORER]


async def test_concurrent_appends_award_once(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator
) -> None:
    """Rapid appends grant XP per log and award each badge exactly once."""
    events = async_capture_events(hass, const.EVENT_BADGE_EARNED)

    await asyncio.gather(
        *(
            coordinator.log_manager.async_append_log(
                {
                    const.DATA_LOG_TYPE: const.LOG_TYPE_EXERCISE,
                    const.DATA_LOG_ITEM_ID: "chin-tuck",
                }
            )
            for _ in range(10)
        )
    )
    await hass.async_block_till_done()

    gm = coordinator.gamification_manager
    # 10 x 10 for the logs, 10 for testing-waters, 25 for face-gym-rat
    assert gm.xp == 135
    assert gm.earned_badges() == [const.BADGE_TESTING_WATERS, const.BADGE_FACE_GYM_RAT]
    assert sorted(event.data[const.FIELD_BADGE_KEY] for event in events) == [
        const.BADGE_FACE_GYM_RAT,
        const.BADGE_TESTING_WATERS,
    ]


async def test_evaluate_service_is_idempotent(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator
) -> None:
    """A manual evaluation after the automatic one awards nothing new."""
    coordinator.log_manager.logs.append(make_log(const.LOG_TYPE_PHOTO, photo_uri="x"))

    first = await call_service(hass, const.SERVICE_EVALUATE_BADGES, return_response=True)
    second = await call_service(hass, const.SERVICE_EVALUATE_BADGES, return_response=True)

    assert first == {"awarded": [const.BADGE_SAY_CHEESE, const.BADGE_TESTING_PEN]}
    assert second == {"awarded": []}


async def test_non_positive_xp_ignored(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator
) -> None:
    """XP never decreases."""
    gm = coordinator.gamification_manager
    assert await gm.async_grant_xp(15, "test") == 15
    assert await gm.async_grant_xp(-5, "test") == 15
    assert await gm.async_grant_xp(0, "test") == 15
    assert gm.xp == 15


async def test_failed_save_rolls_back_awards(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator
) -> None:
    """An award that could not be saved is granted by the next evaluation."""
    gm = coordinator.gamification_manager
    coordinator.log_manager.logs.append(make_log())
    events = async_capture_events(hass, const.EVENT_BADGE_EARNED)

    with (
        patch.object(
            coordinator.store._store,  # pylint: disable=protected-access
            "async_save",
            AsyncMock(side_effect=OSError("disk full")),
        ),
        pytest.raises(PersistenceError),
    ):
        await gm.async_evaluate()

    assert gm.earned_badges() == []
    assert gm.xp == 0
    await hass.async_block_till_done()
    assert events == []

    assert await gm.async_evaluate() == [const.BADGE_TESTING_WATERS]
    await hass.async_block_till_done()
    assert len(events) == 1
    assert gm.xp == 10


async def test_failed_save_rolls_back_explicit_award(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator
) -> None:
    """Explicit awards and XP grants leave no trace when the save fails."""
    gm = coordinator.gamification_manager

    with patch.object(
        coordinator.store._store,  # pylint: disable=protected-access
        "async_save",
        AsyncMock(side_effect=OSError("disk full")),
    ):
        with pytest.raises(PersistenceError):
            await gm.async_award_badge(const.BADGE_EXPLORER)
        with pytest.raises(PersistenceError):
            await gm.async_grant_xp(15, "test")

    assert gm.earned_badges() == []
    assert gm.xp == 0
    assert await gm.async_award_badge(const.BADGE_EXPLORER) is True


async def test_failed_save_keeps_toast_pending(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator
) -> None:
    """A toast flag that could not be saved stays pending."""
    gm = coordinator.gamification_manager
    await gm.async_award_badge(const.BADGE_EXPLORER)

    with (
        patch.object(
            coordinator.store._store,  # pylint: disable=protected-access
            "async_save",
            AsyncMock(side_effect=OSError("disk full")),
        ),
        pytest.raises(PersistenceError),
    ):
        await gm.async_mark_toast_shown(const.BADGE_EXPLORER)

    assert gm.shown_toasts == []
