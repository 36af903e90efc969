from datetime import date, datetime, timedelta, timezone as dt_timezone

from django.test import SimpleTestCase, override_settings

from timesheets.services.deadlines import day_key, due_date_matches, is_overdue, to_calendar_day


@override_settings(TIME_ZONE='Asia/Kolkata', USE_TZ=True)
class DeadlineClassifierTest(SimpleTestCase):

    def setUp(self):
        self.reference = date(2026, 3, 10)

    def test_strictly_earlier_days_are_overdue(self):
        for days in (1, 2, 30, 365):
            with self.subTest(days=days):
                self.assertTrue(is_overdue(self.reference - timedelta(days=days), self.reference))

    def test_same_day_and_future_are_not_overdue(self):
        for days in (0, 1, 7):
            with self.subTest(days=days):
                self.assertFalse(is_overdue(self.reference + timedelta(days=days), self.reference))

    def test_missing_due_date_is_never_overdue(self):
        self.assertFalse(is_overdue(None, self.reference))
        self.assertFalse(is_overdue('', self.reference))

    def test_time_of_day_is_ignored(self):
        due = datetime(2026, 3, 9, 23, 59)
        reference = datetime(2026, 3, 10, 0, 1)
        self.assertTrue(is_overdue(due, reference))
        self.assertFalse(is_overdue(datetime(2026, 3, 10, 23, 0), reference))

    def test_aware_datetimes_use_local_calendar_day(self):
        # 20:00 UTC is 01:30 the next day in Asia/Kolkata
        value = datetime(2026, 3, 9, 20, 0, tzinfo=dt_timezone.utc)
        self.assertEqual(to_calendar_day(value), date(2026, 3, 10))
        self.assertEqual(day_key('2026-03-09T20:00:00Z'), '2026-03-10')

    def test_strings_are_parsed(self):
        self.assertEqual(to_calendar_day('2026-03-10'), date(2026, 3, 10))
        self.assertEqual(to_calendar_day('2026-03-10T09:15:00'), date(2026, 3, 10))
        self.assertIsNone(to_calendar_day('soon'))

    def test_impossible_dates_give_none(self):
        self.assertIsNone(to_calendar_day('2026-02-30'))
        self.assertIsNone(to_calendar_day('2026-02-30T10:00:00'))
        self.assertIsNone(day_key('2026-13-01T00:00:00Z'))
        self.assertFalse(is_overdue('2026-02-30T10:00:00', self.reference))

    def test_unsupported_type_raises(self):
        with self.assertRaises(TypeError):
            to_calendar_day(20260310)

    def test_due_date_matches_on_calendar_day(self):
        self.assertTrue(due_date_matches('2026-03-10T18:00:00', self.reference))
        self.assertFalse(due_date_matches('2026-03-11', self.reference))
        self.assertFalse(due_date_matches(None, self.reference))

    def test_day_key(self):
        self.assertEqual(day_key(date(2026, 1, 5)), '2026-01-05')
        self.assertIsNone(day_key(None))
