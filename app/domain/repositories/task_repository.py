"""Task lookup interface.
Time tracking only needs to resolve a task to its project and task type.
"""

from abc import ABC, abstractmethod
from typing import Optional

from app.domain.models.task import TaskRef


class TaskRepository(ABC):

    @abstractmethod
    async def find_by_id(self, task_id: str) -> Optional[TaskRef]:
        """
        Find a task by its ID.
        Returns None if not found.
        """
        pass

    @abstractmethod
    async def add(self, task: TaskRef) -> TaskRef:
        """Register a task so time can be attributed to it."""
        pass
