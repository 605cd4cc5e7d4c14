import json
import math
from datetime import datetime

import pytest
import pytz

from verdict.models import AppSettings, CommentatorStyle, DesignPreset, TierLimits
from verdict.quota import QuotaTracker
from verdict.storage import BoundedCollectionStore, SettingsStore, StorageKeys, clear_all_data
from verdict.storage.backends import MemoryBackend
from verdict.timeutils import to_ms

from conftest import FakeClock


def utc_ms(*args):
    return to_ms(pytz.utc.localize(datetime(*args)))


def test_week_starts_monday_midnight(quota):
    assert quota.week_start(utc_ms(2024, 6, 12, 12, 0)) == utc_ms(2024, 6, 10)
    assert quota.week_start(utc_ms(2024, 6, 10, 0, 0)) == utc_ms(2024, 6, 10)
    assert quota.week_start(utc_ms(2024, 6, 16, 23, 59)) == utc_ms(2024, 6, 10)


def test_week_start_uses_configured_timezone():
    tracker = QuotaTracker(timezone_str="America/New_York")
    # Monday 02:00 UTC is still Sunday evening in New York
    now = utc_ms(2024, 6, 17, 2, 0)
    expected = to_ms(pytz.timezone("America/New_York").localize(datetime(2024, 6, 10)))
    assert tracker.week_start(now) == expected


def test_free_tier_limits(quota):
    settings = AppSettings(analyses_this_week=4)
    assert quota.can_start(settings)
    assert quota.remaining(settings) == 1
    assert quota.max_sides(settings) == 3

    quota.record_usage(settings)
    assert not quota.can_start(settings)
    assert quota.remaining(settings) == 0


def test_pro_bypasses_limits(quota):
    settings = AppSettings(is_pro=True, analyses_this_week=50)
    assert quota.can_start(settings)
    assert math.isinf(quota.remaining(settings))
    assert quota.max_sides(settings) == 5


def test_tier_limits_follow_configured_values():
    tracker = QuotaTracker(free_analyses_per_week=2, free_max_sides=4, pro_max_sides=6)

    assert tracker.tier(AppSettings()) == TierLimits(analyses_per_week=2, max_sides=4)
    assert tracker.tier(AppSettings(is_pro=True)) == TierLimits(analyses_per_week=math.inf, max_sides=6)
    assert not tracker.can_start(AppSettings(analyses_this_week=2))


def test_rollover_only_applies_to_stale_windows(quota):
    now = utc_ms(2024, 6, 12, 12, 0)
    current = AppSettings(analyses_this_week=3, week_start_timestamp=utc_ms(2024, 6, 10))
    stale = AppSettings(analyses_this_week=3, week_start_timestamp=utc_ms(2024, 6, 3))

    assert not quota.is_stale(current, now)
    assert quota.apply_rollover(current, now) is False
    assert current.analyses_this_week == 3

    assert quota.is_stale(stale, now)
    assert quota.apply_rollover(stale, now) is True
    assert (stale.analyses_this_week, stale.week_start_timestamp) == (0, utc_ms(2024, 6, 10))


@pytest.mark.asyncio
async def test_counter_resets_when_monday_passes():
    clock = FakeClock(utc_ms(2024, 6, 16, 23, 59))
    backend = MemoryBackend()
    quota = QuotaTracker(clock=clock)
    settings_store = SettingsStore(BoundedCollectionStore(backend), quota, clock=clock)
    await settings_store.save_settings(
        AppSettings(analyses_this_week=5, week_start_timestamp=utc_ms(2024, 6, 10))
    )

    assert (await settings_store.load_settings()).analyses_this_week == 5

    clock.now = utc_ms(2024, 6, 17, 0, 1)
    settings = await settings_store.load_settings()

    assert settings.analyses_this_week == 0
    assert settings.week_start_timestamp == utc_ms(2024, 6, 17)
    persisted = json.loads(await backend.get_item(StorageKeys.SETTINGS))["data"]
    assert persisted["analysesThisWeek"] == 0
    assert persisted["weekStartTimestamp"] == utc_ms(2024, 6, 17)


@pytest.mark.asyncio
async def test_missing_settings_are_defaults(settings_store, clock, quota):
    settings = await settings_store.load_settings()

    assert settings.haptics_enabled is True
    assert settings.is_pro is False
    assert settings.design_preset == DesignPreset.SOFT_PREMIUM
    assert settings.week_start_timestamp == quota.week_start(clock.now)


@pytest.mark.asyncio
async def test_corrupted_settings_fall_back_to_defaults(clock):
    backend = MemoryBackend({StorageKeys.SETTINGS: "{broken"})
    settings_store = SettingsStore(BoundedCollectionStore(backend), QuotaTracker(clock=clock), clock=clock)

    assert (await settings_store.load_settings()).analyses_this_week == 0


@pytest.mark.asyncio
async def test_unversioned_v1_settings_are_migrated(clock, quota):
    stored = {"hapticsEnabled": False, "reduceMotion": True, "isPro": True,
              "analysesThisWeek": 2, "weekStartTimestamp": quota.week_start(clock.now)}
    backend = MemoryBackend({StorageKeys.SETTINGS: json.dumps(stored)})
    settings_store = SettingsStore(BoundedCollectionStore(backend), quota, clock=clock)

    settings = await settings_store.load_settings()

    assert settings.haptics_enabled is False
    assert settings.reduce_motion is True
    assert settings.is_pro is True
    assert settings.analyses_this_week == 2
    assert settings.design_preset == DesignPreset.SOFT_PREMIUM


@pytest.mark.asyncio
async def test_settings_are_saved_in_envelope(settings_store, backend, clock):
    await settings_store.update_settings(default_commentator_style="savage", haptics_enabled=False)

    envelope = json.loads(await backend.get_item(StorageKeys.SETTINGS))
    assert envelope["version"] == 3
    assert envelope["migratedAt"] == clock.now
    assert envelope["data"]["defaultCommentatorStyle"] == "savage"
    assert envelope["data"]["hapticsEnabled"] is False

    settings = await settings_store.load_settings()
    assert settings.default_commentator_style == CommentatorStyle.SAVAGE


@pytest.mark.asyncio
async def test_update_rejects_unknown_settings(settings_store):
    with pytest.raises(AttributeError):
        await settings_store.update_settings(dark_mode=True)


@pytest.mark.asyncio
async def test_update_rejects_invalid_enum_value(settings_store):
    with pytest.raises(ValueError):
        await settings_store.update_settings(design_preset="rainbow")


@pytest.mark.asyncio
async def test_clear_all_data_keeps_templates_and_draft(store, backend):
    for key in (StorageKeys.ANALYSES, StorageKeys.SETTINGS, StorageKeys.INSIGHTS,
                StorageKeys.TEMPLATES, StorageKeys.DRAFT):
        await backend.set_item(key, "[]")

    await clear_all_data(store)

    assert backend.keys() == {StorageKeys.TEMPLATES, StorageKeys.DRAFT}
