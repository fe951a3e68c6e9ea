"""
Task storage accessor.

Each operation opens one session from the pool, runs a single parameterized
statement and releases the connection when the ``with`` block exits.
"""
import abc
import logging
from typing import List, Optional

from sqlalchemy import delete, insert, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..core.errors import StorageError, TaskNotFoundError
from ..models.task import Task
from ..schemas.task import TaskOut

logger = logging.getLogger(__name__)


class TaskRepository(abc.ABC):
    """Storage capability the request handlers depend on."""

    @abc.abstractmethod
    def create(self, title: str, description: str, user_id: int) -> int:
        """Insert a task and return its generated id."""

    @abc.abstractmethod
    def get_by_id(self, task_id: int) -> Optional[TaskOut]:
        """Return the task, or None when it does not exist."""

    @abc.abstractmethod
    def update(self, task_id: int, title: str, description: str) -> None:
        """Replace title and description. Raises TaskNotFoundError when no row matched."""

    @abc.abstractmethod
    def delete(self, task_id: int) -> None:
        """Hard delete. Raises TaskNotFoundError when no row matched."""

    @abc.abstractmethod
    def list_by_user(self, user_id: int) -> List[TaskOut]:
        """All tasks owned by user_id, ordered by id."""

    @abc.abstractmethod
    def ping(self) -> bool:
        """True when storage is reachable."""


class SQLTaskRepository(TaskRepository):
    """TaskRepository over a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def create(self, title: str, description: str, user_id: int) -> int:
        stmt = (
            insert(Task)
            .values(title=title, description=description, user_id=user_id)
            .returning(Task.id)
        )
        try:
            with self.session_factory() as db:
                task_id = db.execute(stmt).scalar_one()
                db.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"failed to insert task: {e}") from e
        return task_id

    def get_by_id(self, task_id: int) -> Optional[TaskOut]:
        try:
            with self.session_factory() as db:
                task = db.execute(
                    select(Task).where(Task.id == task_id)
                ).scalar_one_or_none()
                if task is None:
                    return None
                return TaskOut.model_validate(task)
        except SQLAlchemyError as e:
            raise StorageError(f"failed to retrieve task: {e}") from e

    def update(self, task_id: int, title: str, description: str) -> None:
        stmt = (
            update(Task)
            .where(Task.id == task_id)
            .values(title=title, description=description)
        )
        try:
            with self.session_factory() as db:
                updated = db.execute(stmt).rowcount
                db.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"failed to update task: {e}") from e
        if updated == 0:
            raise TaskNotFoundError()

    def delete(self, task_id: int) -> None:
        try:
            with self.session_factory() as db:
                deleted = db.execute(delete(Task).where(Task.id == task_id)).rowcount
                db.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"failed to delete task: {e}") from e
        if deleted == 0:
            raise TaskNotFoundError()

    def list_by_user(self, user_id: int) -> List[TaskOut]:
        stmt = select(Task).where(Task.user_id == user_id).order_by(Task.id)
        try:
            with self.session_factory() as db:
                tasks = db.execute(stmt).scalars().all()
                return [TaskOut.model_validate(task) for task in tasks]
        except SQLAlchemyError as e:
            raise StorageError(f"failed to query tasks by user_id: {e}") from e

    def ping(self) -> bool:
        try:
            with self.session_factory() as db:
                db.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database connection check failed: {e}")
            return False
