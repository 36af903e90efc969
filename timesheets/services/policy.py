"""
Durable store for the timesheet blocking policy.

Nothing is cached: every read goes to the database so an update applies to
the next gate evaluation.
"""
import logging
from dataclasses import dataclass

from django.db import DatabaseError

from timesheets.exceptions import UpstreamError, ValidationError
from timesheets.models import TimesheetSetting

logger = logging.getLogger(__name__)

# Used when the stored policy cannot be read: submissions stay open.
DEFAULT_BLOCK_UNASSIGNED_PROJECT_TASKS = False


@dataclass(frozen=True)
class TimesheetPolicy:
    block_unassigned_project_tasks: bool = DEFAULT_BLOCK_UNASSIGNED_PROJECT_TASKS

    def to_dict(self):
        return {'blockUnassignedProjectTasks': self.block_unassigned_project_tasks}


DEFAULT_POLICY = TimesheetPolicy()


@dataclass(frozen=True)
class PolicyReadResult:
    policy: TimesheetPolicy
    error: Exception = None

    @property
    def ok(self):
        return self.error is None


class PolicyStore:

    def get_policy(self):
        """Read the policy. On a storage error return DEFAULT_POLICY with the error."""
        try:
            setting = TimesheetSetting.objects.filter(pk=TimesheetSetting.SINGLETON_PK).first()
        except DatabaseError as e:
            logger.error(f"Reading timesheet policy failed, using default: {e}")
            return PolicyReadResult(policy=DEFAULT_POLICY, error=e)

        if setting is None:
            return PolicyReadResult(policy=DEFAULT_POLICY)
        return PolicyReadResult(
            policy=TimesheetPolicy(block_unassigned_project_tasks=setting.block_unassigned_project_tasks)
        )

    def set_policy(self, block_unassigned_project_tasks, actor=None):
        if not isinstance(block_unassigned_project_tasks, bool):
            raise ValidationError("blockUnassignedProjectTasks must be a boolean")

        try:
            TimesheetSetting.objects.update_or_create(
                pk=TimesheetSetting.SINGLETON_PK,
                defaults={
                    'block_unassigned_project_tasks': block_unassigned_project_tasks,
                    'updated_by': actor,
                },
            )
        except DatabaseError as e:
            logger.error(f"Writing timesheet policy failed: {e}")
            raise UpstreamError("Failed to save timesheet settings") from e

        logger.info(f"blockUnassignedProjectTasks set to {block_unassigned_project_tasks}")
        return TimesheetPolicy(block_unassigned_project_tasks=block_unassigned_project_tasks)
