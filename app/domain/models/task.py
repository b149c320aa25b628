"""
Task reference as seen by time tracking.
Tasks are owned by the project management side; only the fields needed
to attribute time are carried here.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TaskRef:
    id: str
    project_id: str
    task_type_id: Optional[str] = None
    title: Optional[str] = None

    def belongs_to(self, project_id: str) -> bool:
        return self.project_id == project_id
