import logging

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from employees.models import Employee

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Look up each active employee's Slack user ID by email and store it"

    def add_arguments(self, parser):
        parser.add_argument(
            '--overwrite',
            action='store_true',
            help='Refresh IDs that are already set',
        )

    def handle(self, *args, **options):
        if not settings.SLACK_BOT_TOKEN:
            raise CommandError("SLACK_BOT_TOKEN is not configured.")

        client = WebClient(token=settings.SLACK_BOT_TOKEN)
        employees = Employee.objects.filter(is_active=True)
        if not options['overwrite']:
            employees = employees.filter(slack_user_id__isnull=True) | employees.filter(slack_user_id='')

        updated_count = 0
        for emp in employees:
            if not emp.email:
                logger.warning(f"Skipping {emp.get_full_name()} (no email)")
                continue

            try:
                result = client.users_lookupByEmail(email=emp.email)
            except SlackApiError as e:
                if e.response['error'] == 'users_not_found':
                    logger.warning(f"No Slack user found for {emp.get_full_name()} ({emp.email})")
                else:
                    logger.error(f"Error for {emp.get_full_name()}: {e.response['error']}")
                continue

            slack_id = result['user']['id']
            if emp.slack_user_id != slack_id:
                emp.slack_user_id = slack_id
                emp.save(update_fields=['slack_user_id'])
                logger.info(f"Mapped {emp.get_full_name()} -> {slack_id}")
                updated_count += 1

        self.stdout.write(self.style.SUCCESS(f"Updated {updated_count} employee(s)."))
