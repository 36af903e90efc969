import queue
from datetime import date
from smtplib import SMTPException
from unittest import mock

from django.core import mail
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework.test import APITestCase

from timesheets.tests.fakes import make_employee

from .events import EventBus, publish
from .services import notify


@override_settings(SLACK_BOT_TOKEN='', TIMESHEET_NOTIFICATION_RECIPIENTS=['lead@example.com'])
class NotifyTest(TestCase):

    def setUp(self):
        self.manager = make_employee('M800', role='MANAGER')
        self.employee = make_employee('E800', manager=self.manager)

    def submitted_payload(self):
        return {'employee': self.employee, 'date': date(2026, 3, 10), 'task_count': 3, 'total_hours': '8h 0m'}

    def test_daily_submission_email(self):
        result = notify('timesheet_submitted', self.submitted_payload())

        self.assertTrue(result.success)
        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(sorted(message.to), ['lead@example.com', 'm800@example.com'])
        self.assertIn('3 task(s) (8h 0m)', message.body)

    def test_unknown_event_is_reported(self):
        result = notify('nope', {})
        self.assertFalse(result.success)
        self.assertIn('nope', result.error)

    def test_email_failure_is_returned_not_raised(self):
        with mock.patch('notifications.services.send_mail', side_effect=SMTPException('smtp down')):
            result = notify('timesheet_submitted', self.submitted_payload())
        self.assertFalse(result.success)
        self.assertIn('smtp down', result.error)

    def test_bad_payload_is_returned_not_raised(self):
        result = notify('time_entry_approved', {})
        self.assertFalse(result.success)

    @override_settings(SLACK_BOT_TOKEN='xoxb-test', SLACK_MANAGEMENT_CHANNEL_ID='C1')
    def test_slack_failure_is_reported(self):
        self.employee.slack_user_id = 'U1'
        self.employee.save()
        with mock.patch('notifications.services.SlackNotificationService.send_message', return_value=False), \
                mock.patch('notifications.services.SlackNotificationService.notify_management', return_value=True):
            result = notify('timesheet_submitted', self.submitted_payload())
        self.assertFalse(result.success)
        self.assertIn('E800', result.error)
        self.assertEqual(len(mail.outbox), 1)


class EventBusTest(SimpleTestCase):

    def test_fan_out_to_every_subscriber(self):
        bus = EventBus()
        first, second = bus.subscribe(), bus.subscribe()

        event = bus.publish('time_entry_created', {'id': 1, 'date': date(2026, 3, 10)})

        self.assertEqual(first.get_nowait().id, event.id)
        self.assertEqual(second.get_nowait().data, {'id': 1, 'date': '2026-03-10'})

    def test_unsubscribed_queue_gets_nothing(self):
        bus = EventBus()
        subscriber = bus.subscribe()
        bus.unsubscribe(subscriber)
        bus.publish('time_entry_deleted', {'id': 1})
        with self.assertRaises(queue.Empty):
            subscriber.get_nowait()

    def test_full_subscriber_is_dropped_and_its_stream_ends(self):
        bus = EventBus(queue_size=1)
        subscriber = bus.subscribe()
        first = bus.publish('time_entry_created', {'id': 1})
        bus.publish('time_entry_created', {'id': 2})
        bus.publish('time_entry_created', {'id': 3})
        self.assertEqual(bus.subscriber_count, 0)

        frames = list(bus.stream(subscriber, heartbeat_seconds=0.01))

        self.assertEqual(len(frames), 2)
        self.assertEqual(frames[0], ": connected\n\n")
        self.assertIn(f"id: {first.id}", frames[1])

    def test_history_is_bounded(self):
        bus = EventBus(history_size=2)
        for n in range(3):
            bus.publish('time_entry_updated', {'n': n})
        self.assertEqual([e.data['n'] for e in bus.recent()], [1, 2])
        self.assertEqual([e.data['n'] for e in bus.recent(1)], [2])
        self.assertEqual([e.data['n'] for e in bus.recent(-1)], [1, 2])

    def test_sse_frame(self):
        event = EventBus().publish('timesheet_submitted', {'taskCount': 2})
        frame = event.to_sse()
        self.assertIn('event: timesheet_submitted', frame)
        self.assertIn('"type": "timesheet_submitted"', frame)
        self.assertTrue(frame.endswith('\n\n'))

    def test_stream_sends_heartbeat_and_events(self):
        bus = EventBus()
        subscriber = bus.subscribe()
        stream = bus.stream(subscriber, heartbeat_seconds=0.01)

        self.assertEqual(next(stream), ": connected\n\n")
        self.assertTrue(next(stream).startswith(": heartbeat"))
        bus.publish('time_entry_created', {'id': 5})
        self.assertIn('event: time_entry_created', next(stream))
        stream.close()
        self.assertEqual(bus.subscriber_count, 0)

    def test_unserializable_payload_is_dropped(self):
        self.assertIsNone(EventBus().publish('x', {'obj': object()}))

    def test_publish_never_raises(self):
        with mock.patch('notifications.events.get_event_bus', side_effect=RuntimeError('boom')):
            self.assertIsNone(publish('time_entry_created', {}))


class RecentEventsApiTest(APITestCase):

    def setUp(self):
        self.bus = EventBus()
        for n in range(3):
            self.bus.publish('time_entry_updated', {'n': n})
        patcher = mock.patch('notifications.views.get_event_bus', return_value=self.bus)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.client.force_authenticate(user=make_employee('E810').user)

    def numbers(self, **params):
        response = self.client.get('/api/events/recent/', params)
        self.assertEqual(response.status_code, 200)
        return [event['data']['n'] for event in response.data]

    def test_limit_returns_newest(self):
        self.assertEqual(self.numbers(limit=2), [1, 2])

    def test_non_positive_or_bad_limit_returns_everything(self):
        for limit in ('-1', '0', 'abc'):
            with self.subTest(limit=limit):
                self.assertEqual(self.numbers(limit=limit), [0, 1, 2])
