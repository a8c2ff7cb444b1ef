import unittest
from datetime import datetime, timedelta, timezone

from src.domain.exceptions import ConfigurationException
from src.domain.models import RangeDescriptor
from src.domain.ranges import coerce_range_days, range_day_count, resolve_range


NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


class TestCoerceRangeDays(unittest.TestCase):
    def test_valid_inputs_are_clamped_to_seven_through_ninety(self) -> None:
        for value in ["1", 3, 7, "14", 30.9, "45.5", 90, 91, "365", 10_000]:
            with self.subTest(value=value):
                days = coerce_range_days(value)
                self.assertGreaterEqual(days, 7)
                self.assertLessEqual(days, 90)

    def test_truncates_fractional_days(self) -> None:
        self.assertEqual(coerce_range_days("14.9"), 14)

    def test_invalid_inputs_use_default(self) -> None:
        for value in [None, "", "abc", "0", 0, "-5", -1, "nan", "inf", float("inf")]:
            with self.subTest(value=value):
                self.assertEqual(coerce_range_days(value), 30)

    def test_small_positive_value_clamps_up(self) -> None:
        self.assertEqual(coerce_range_days("0.5"), 7)


class TestResolveRange(unittest.TestCase):
    def test_day_window_ends_now(self) -> None:
        descriptor = resolve_range(range_days="14", now=NOW)

        self.assertEqual(descriptor.until, NOW)
        self.assertEqual(descriptor.since, NOW - timedelta(days=14))
        self.assertEqual(descriptor.label, "Last 14 days")

    def test_default_window_is_thirty_days(self) -> None:
        descriptor = resolve_range(now=NOW)

        self.assertEqual(descriptor.label, "Last 30 days")
        self.assertEqual(range_day_count(descriptor), 30)

    def test_explicit_bounds_used_verbatim(self) -> None:
        descriptor = resolve_range(
            since="2024-01-01T00:00:00Z",
            until="2024-01-31T23:59:59Z",
            range_days="7",
        )

        self.assertEqual(descriptor.since, datetime(2024, 1, 1, tzinfo=timezone.utc))
        self.assertEqual(descriptor.until, datetime(2024, 1, 31, 23, 59, 59, tzinfo=timezone.utc))
        self.assertEqual(descriptor.label, "2024-01-01 → 2024-01-31")

    def test_date_only_bounds_are_treated_as_utc(self) -> None:
        descriptor = resolve_range(since="2024-03-01", until="2024-03-08")

        self.assertEqual(descriptor.since.tzinfo, timezone.utc)
        self.assertEqual(range_day_count(descriptor), 7)

    def test_single_bound_falls_back_to_day_window(self) -> None:
        descriptor = resolve_range(since="2024-01-01T00:00:00Z", range_days="10", now=NOW)

        self.assertEqual(descriptor.label, "Last 10 days")

    def test_since_after_until_is_rejected(self) -> None:
        with self.assertRaises(ConfigurationException):
            resolve_range(since="2024-02-01T00:00:00Z", until="2024-01-01T00:00:00Z")

    def test_unparseable_bound_is_rejected(self) -> None:
        with self.assertRaises(ConfigurationException):
            resolve_range(since="last tuesday", until="2024-01-01T00:00:00Z")

    def test_descriptor_is_immutable(self) -> None:
        descriptor = resolve_range(now=NOW)

        with self.assertRaises(Exception):
            descriptor.label = "changed"


class TestRangeDayCount(unittest.TestCase):
    def test_rounds_to_nearest_day(self) -> None:
        descriptor = RangeDescriptor(since=NOW - timedelta(days=6, hours=13), until=NOW, label="x")
        self.assertEqual(range_day_count(descriptor), 7)

    def test_minimum_is_one(self) -> None:
        descriptor = RangeDescriptor(since=NOW - timedelta(hours=2), until=NOW, label="x")
        self.assertEqual(range_day_count(descriptor), 1)
