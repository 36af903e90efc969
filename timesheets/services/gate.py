"""
Pending-resolution gate.

For one employee and one day, find the PMS tasks that must be postponed or
acknowledged before that employee's timesheet can be submitted. A task is
pending when it is due on the target day, is not completed, and is either
assigned to the employee or the policy blocks on unassigned project tasks too.
"""
import logging
from dataclasses import dataclass, field

from pms.clients import get_pms_client
from timesheets.exceptions import ValidationError

from .deadlines import day_key, due_date_matches, to_calendar_day
from .policy import PolicyStore

logger = logging.getLogger(__name__)


@dataclass
class PendingTask:
    task: object
    project: object
    is_assigned_to_employee: bool

    def to_dict(self):
        data = self.task.to_dict()
        data.update({
            'projectCode': self.project.code,
            'projectName': self.project.name,
            'projectDeadline': self.project.due_date,
            'isAssignedToEmployee': self.is_assigned_to_employee,
        })
        return data


@dataclass
class SkippedItem:
    """A project or task the scan could not evaluate."""
    project_code: str
    task_id: str
    cause: str

    def to_dict(self):
        return {'projectCode': self.project_code, 'taskId': self.task_id, 'cause': self.cause}


@dataclass
class GateResult:
    pending: list = field(default_factory=list)
    skipped: list = field(default_factory=list)
    policy: object = None

    @property
    def blocked(self):
        return bool(self.pending)

    def to_dict(self):
        return {
            'pending': [item.to_dict() for item in self.pending],
            'skipped': [item.to_dict() for item in self.skipped],
            'policy': self.policy.to_dict() if self.policy else None,
        }


class PendingResolutionGate:

    def __init__(self, pms=None, policy_store=None):
        self.pms = pms
        self.policy_store = policy_store or PolicyStore()

    def compute_pending(self, employee, target_date, policy=None):
        """
        Scan every task visible to `employee` and return a GateResult.

        `policy` is read from the policy store when not given. Failing to list
        the employee's projects raises UpstreamError; a project whose tasks
        cannot be listed, or a task that cannot be evaluated, is reported in
        GateResult.skipped and the scan goes on.
        """
        target = to_calendar_day(target_date)
        if target is None:
            raise ValidationError("date is required")

        if policy is None:
            policy = self.policy_store.get_policy().policy

        pms = self.pms or get_pms_client()
        employee_code = employee.employee_id
        department = employee.department_name
        result = GateResult(policy=policy)

        projects = pms.list_projects(employee.role_name, employee_code, department)

        for project in projects:
            try:
                tasks = pms.list_tasks(project.code, department)
            except Exception as e:
                logger.warning(f"Skipping project {project.code}: {e}")
                result.skipped.append(SkippedItem(project_code=project.code, task_id=None, cause=str(e)))
                continue

            for task in tasks:
                try:
                    include, assigned = self._evaluate(task, employee_code, target, policy)
                except Exception as e:
                    logger.warning(f"Skipping task {task.id} of project {project.code}: {e}")
                    result.skipped.append(SkippedItem(project_code=project.code, task_id=task.id, cause=str(e)))
                    continue

                if include:
                    result.pending.append(
                        PendingTask(task=task, project=project, is_assigned_to_employee=assigned)
                    )

        logger.info(
            f"Gate for {employee_code} on {target}: {len(result.pending)} pending, "
            f"{len(result.skipped)} skipped"
        )
        return result

    def _evaluate(self, task, employee_code, target, policy):
        assigned = task.is_assigned_to(employee_code)
        due_key = day_key(task.due_date)
        not_completed = not task.completed
        matches = due_date_matches(task.due_date, target)

        include = matches and not_completed and (assigned or policy.block_unassigned_project_tasks)

        if include:
            reason = 'included'
        elif due_key is None:
            reason = 'no deadline'
        elif not matches:
            reason = f'date mismatch ({due_key})'
        elif not not_completed:
            reason = 'already completed'
        else:
            reason = 'not assigned to employee'
        logger.debug(f"Task {task.id} [{task.assignee or '-'}] {reason}")

        return include, assigned
