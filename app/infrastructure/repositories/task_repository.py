"""
Task repository implementation using SQLAlchemy.
"""

from typing import Optional
from sqlalchemy.orm import Session

from app.domain.models.task import TaskRef
from app.domain.repositories.task_repository import TaskRepository as TaskRepositoryInterface
from app.infrastructure.db.models import TaskModel
from app.infrastructure.mappers.task_mapper import TaskMapper


class SQLAlchemyTaskRepository(TaskRepositoryInterface):
    """SQLAlchemy implementation of task repository."""

    def __init__(self, session: Session):
        self.session = session
        self.mapper = TaskMapper()

    async def find_by_id(self, task_id: str) -> Optional[TaskRef]:
        model = self.session.get(TaskModel, task_id)
        if not model:
            return None
        return self.mapper.model_to_domain(model)

    async def add(self, task: TaskRef) -> TaskRef:
        self.session.add(self.mapper.domain_to_model(task))
        self.session.flush()
        return task
