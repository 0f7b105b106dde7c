"""Tests for per-user timezone resolution."""

import logging

import pytest

from taskday.errors import InvalidTimezone
from taskday.timezones import TimezoneResolver


@pytest.fixture
def resolver(preferences, cache):
    return TimezoneResolver(preferences, cache, ttl=30)


class TestResolve:
    def test_stored_zone(self, resolver, preferences):
        preferences.timezones["u1"] = "Asia/Singapore"
        assert resolver.resolve("u1") == "Asia/Singapore"

    def test_missing_is_utc(self, resolver):
        assert resolver.resolve("nobody") == "UTC"

    def test_invalid_is_utc_with_warning(self, resolver, preferences, caplog):
        preferences.timezones["u1"] = "Mars/Olympus_Mons"
        with caplog.at_level(logging.WARNING, logger="taskday.timezones"):
            assert resolver.resolve("u1") == "UTC"
        assert "Mars/Olympus_Mons" in caplog.text

    @pytest.mark.parametrize("value", [5, ["Europe/London"], {"id": "Asia/Tokyo"}])
    def test_non_string_is_utc(self, resolver, preferences, caplog, value):
        preferences.timezones["u1"] = value
        with caplog.at_level(logging.WARNING, logger="taskday.timezones"):
            assert resolver.resolve("u1") == "UTC"
        assert "Invalid timezone" in caplog.text

    def test_cached_within_ttl(self, resolver, preferences, clock):
        preferences.timezones["u1"] = "Europe/London"
        resolver.resolve("u1")
        preferences.timezones["u1"] = "Asia/Tokyo"
        clock.advance(29)
        assert resolver.resolve("u1") == "Europe/London"
        assert preferences.timezone_calls == 1

    def test_refreshed_after_ttl(self, resolver, preferences, clock):
        preferences.timezones["u1"] = "Europe/London"
        resolver.resolve("u1")
        preferences.timezones["u1"] = "Asia/Tokyo"
        clock.advance(31)
        assert resolver.resolve("u1") == "Asia/Tokyo"
        assert preferences.timezone_calls == 2

    def test_cache_is_per_user(self, resolver, preferences):
        preferences.timezones.update({"u1": "Europe/London", "u2": "Asia/Tokyo"})
        assert resolver.resolve("u1") == "Europe/London"
        assert resolver.resolve("u2") == "Asia/Tokyo"

    def test_invalidate(self, resolver, preferences):
        preferences.timezones["u1"] = "Europe/London"
        resolver.resolve("u1")
        preferences.timezones["u1"] = "Asia/Tokyo"
        resolver.invalidate("u1")
        assert resolver.resolve("u1") == "Asia/Tokyo"


class TestResolveFailures:
    def test_lookup_failure_is_utc(self, resolver, preferences, caplog):
        preferences.fail = True
        with caplog.at_level(logging.WARNING, logger="taskday.timezones"):
            assert resolver.resolve("u1") == "UTC"
        assert "lookup failed" in caplog.text

    def test_lookup_failure_uses_last_known_zone(self, resolver, preferences, clock):
        preferences.timezones["u1"] = "America/New_York"
        resolver.resolve("u1")
        clock.advance(60)
        preferences.fail = True
        assert resolver.resolve("u1") == "America/New_York"

    def test_fallback_is_cached(self, resolver, preferences):
        preferences.fail = True
        resolver.resolve("u1")
        resolver.resolve("u1")
        assert preferences.timezone_calls == 1


class TestUpdateTimezone:
    def test_persists_and_invalidates(self, resolver, preferences):
        preferences.timezones["u1"] = "Europe/London"
        resolver.resolve("u1")
        assert resolver.update_timezone("u1", " Asia/Kolkata ") == "Asia/Kolkata"
        assert preferences.timezones["u1"] == "Asia/Kolkata"
        assert resolver.resolve("u1") == "Asia/Kolkata"

    def test_rejects_invalid(self, resolver, preferences):
        with pytest.raises(InvalidTimezone):
            resolver.update_timezone("u1", "Not/AZone")
        assert "u1" not in preferences.timezones


class TestCompletedWindow:
    def test_stored(self, resolver, preferences):
        preferences.windows["u1"] = 30
        assert resolver.completed_window("u1") == 30

    def test_lookup_failure_uses_default(self, preferences, cache):
        resolver = TimezoneResolver(preferences, cache, default_completed_window=3)
        preferences.fail = True
        assert resolver.completed_window("u1") == 3

    @pytest.mark.parametrize("value", [-1, "7", None, True])
    def test_invalid_uses_default(self, resolver, preferences, value):
        preferences.windows["u1"] = value
        assert resolver.completed_window("u1") == 7
