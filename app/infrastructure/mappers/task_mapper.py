"""
Task mapper for converting between task references and database models.
"""

from app.domain.models.task import TaskRef
from app.infrastructure.db.models import TaskModel


class TaskMapper:
    """Maps between TaskRef and TaskModel."""

    def domain_to_model(self, task: TaskRef) -> TaskModel:
        return TaskModel(
            id=task.id,
            project_id=task.project_id,
            task_type_id=task.task_type_id,
            title=task.title,
        )

    def model_to_domain(self, model: TaskModel) -> TaskRef:
        return TaskRef(
            id=model.id,
            project_id=model.project_id,
            task_type_id=model.task_type_id,
            title=model.title,
        )
