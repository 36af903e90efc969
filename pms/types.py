"""
Read models for rows coming back from the project-management system.

The PMS owns these records; only a task's due date is ever written back.
"""
from dataclasses import dataclass, field


def _text(value):
    return '' if value is None else str(value)


@dataclass
class Project:
    code: str
    name: str = ''
    due_date: object = None
    description: str = ''
    department: str = ''
    raw: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_row(cls, row):
        return cls(
            code=_text(row.get('project_code') or row.get('code')),
            name=_text(row.get('project_name') or row.get('title') or row.get('name')),
            due_date=row.get('end_date'),
            description=_text(row.get('description')),
            department=_text(row.get('department')),
            raw=dict(row),
        )

    def to_dict(self):
        data = dict(self.raw)
        data.update({
            'project_code': self.code,
            'project_name': self.name,
            'end_date': self.due_date,
            'description': self.description,
            'department': self.department,
        })
        return data


@dataclass
class Task:
    id: str
    project_code: str = ''
    name: str = ''
    assignee: str = ''
    members: list = field(default_factory=list)
    due_date: object = None
    is_completed: bool = False
    status: str = ''
    raw: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_row(cls, row, project_code=None):
        members = row.get('task_members')
        return cls(
            id=_text(row.get('id')),
            project_code=_text(row.get('project_code') or project_code),
            name=_text(row.get('task_name') or row.get('name')),
            assignee=_text(row.get('assignee') or row.get('assigned_to')),
            members=[_text(m) for m in members] if isinstance(members, (list, tuple)) else [],
            due_date=row.get('end_date'),
            is_completed=bool(row.get('is_completed')),
            status=_text(row.get('status')),
            raw=dict(row),
        )

    @property
    def completed(self):
        return self.is_completed or self.status.lower() == 'completed'

    def is_assigned_to(self, employee_code):
        if not employee_code:
            return False
        return self.assignee == employee_code or employee_code in self.members

    def to_dict(self):
        data = dict(self.raw)
        data.update({
            'id': self.id,
            'project_code': self.project_code,
            'task_name': self.name,
            'assignee': self.assignee or None,
            'task_members': list(self.members),
            'end_date': self.due_date,
            'is_completed': self.is_completed,
            'status': self.status or None,
        })
        return data
