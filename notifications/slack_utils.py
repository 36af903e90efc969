import logging

from django.conf import settings
from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

logger = logging.getLogger(__name__)


class SlackNotificationService:
    def __init__(self, token=None, management_channel=None):
        self.client = WebClient(token=token or settings.SLACK_BOT_TOKEN)
        self.management_channel = management_channel or settings.SLACK_MANAGEMENT_CHANNEL_ID

    @staticmethod
    def is_configured():
        return bool(settings.SLACK_BOT_TOKEN)

    def get_slack_id_by_email(self, email):
        """
        Looks up a Slack User ID by their email address.
        """
        try:
            response = self.client.users_lookupByEmail(email=email)
            if response["ok"]:
                return response["user"]["id"]
        except SlackApiError as e:
            logger.error(f"Error looking up Slack user by email {email}: {e.response['error']}")
        return None

    def get_or_set_slack_id(self, employee):
        """
        Gets the slack_user_id from the employee model or fetches and saves it if missing.
        """
        if employee.slack_user_id:
            return employee.slack_user_id

        slack_id = self.get_slack_id_by_email(employee.email)
        if slack_id:
            employee.slack_user_id = slack_id
            employee.save(update_fields=['slack_user_id'])
            return slack_id
        return None

    def send_message(self, employee_or_channel, message_text, blocks=None):
        """
        Sends a message to an employee (DM) or a specific channel ID.
        """
        if isinstance(employee_or_channel, str):
            target_id = employee_or_channel
        else:
            target_id = self.get_or_set_slack_id(employee_or_channel)

        if not target_id:
            logger.warning(f"No Slack target found for {employee_or_channel}")
            return False

        try:
            self.client.chat_postMessage(
                channel=target_id,
                text=message_text,
                blocks=blocks
            )
            return True
        except SlackApiError as e:
            logger.error(f"Error sending Slack message: {e.response['error']}")
            return False

    def notify_management(self, message_text, blocks=None):
        """ Sends a message to the pre-configured management channel. """
        if not self.management_channel:
            logger.warning("SLACK_MANAGEMENT_CHANNEL_ID not configured.")
            return False
        return self.send_message(self.management_channel, message_text, blocks=blocks)

    @staticmethod
    def timesheet_submitted_message(employee, date, task_count, total_hours):
        """ Hi @Name, You have successfully submitted N tasks (Xh Ym) for 18-Oct-2026. """
        return (
            f"Hi @{employee.get_full_name()}\n"
            f" You have successfully submitted {task_count} task(s) ({total_hours}) for {date:%d-%b-%Y}."
        )

    @staticmethod
    def timesheet_digest_blocks(employee, date, task_count, total_hours):
        """ Management channel summary of one day's submission. """
        return [
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": (
                        f"📋 *New Timesheet Submission*\n"
                        f"*Employee:* {employee.get_full_name()} ({employee.employee_id})\n"
                        f"*Date:* {date:%d-%b-%Y}\n"
                        f"*Tasks:* {task_count}\n"
                        f"*Hours:* {total_hours}"
                    )
                }
            }
        ]

    @staticmethod
    def entry_status_message(entry, status_msg, reason=None):
        """ Hi @Name !! Your time entry for Date (Project) has been Approved. """
        message = (
            f"Hi @{entry.employee.get_full_name()} !!\n"
            f" Your time entry for {entry.date:%d-%b-%Y} ({entry.project_name}) has been {status_msg}.\n"
            f" Task: {entry.task_description}"
        )
        if reason:
            message += f"\n Reason: {reason}"
        return message

    @staticmethod
    def task_postponed_message(postponement):
        """ @Name postponed task X from A to B (#n). Reason - ... """
        actor = postponement.postponed_by
        actor_name = actor.get_full_name() if actor else "Someone"
        previous = postponement.previous_due_date or "N/A"
        return (
            f"@{actor_name} postponed task {postponement.task_id}"
            f"{f' ({postponement.project_code})' if postponement.project_code else ''}"
            f" from {previous} to {postponement.new_due_date} (postponement #{postponement.postpone_count}).\n"
            f" Reason - {postponement.reason}"
        )
