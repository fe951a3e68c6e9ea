import logging
from fastapi import APIRouter, Depends, Request, status

from ..core.errors import StorageError, TaskNotFoundError
from ..repositories.tasks import TaskRepository
from ..schemas.task import (
    StorageId,
    TaskRequest, TaskCreatedResponse, TaskResponse, TaskUpdatedResponse,
    TaskIdData, TaskDeletedResponse, TaskListResponse
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_task_repository(request: Request) -> TaskRepository:
    """Repository handle the application was built with"""
    return request.app.state.task_repository


@router.post("/create_task", response_model=TaskCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskRequest,
    repository: TaskRepository = Depends(get_task_repository)
):
    """Create a new task"""
    try:
        task_id = repository.create(task_data.title, task_data.description, task_data.user_id)
    except StorageError as e:
        logger.error(f"Database error: failed to insert task for user_id={task_data.user_id}: {e}")
        raise

    logger.info(f"Task created successfully: task_id={task_id}")
    return TaskCreatedResponse(task_id=task_id)


@router.get("/tasks/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: StorageId,
    repository: TaskRepository = Depends(get_task_repository)
):
    """Get a specific task by ID"""
    try:
        task = repository.get_by_id(task_id)
    except StorageError as e:
        logger.error(f"Database error: failed to retrieve task_id={task_id}: {e}")
        raise

    if task is None:
        logger.warning(f"Task not found: task_id={task_id}")
        raise TaskNotFoundError()

    logger.info(f"Task retrieved successfully: task_id={task_id}")
    return TaskResponse(data=task)


@router.put("/tasks/{task_id}", response_model=TaskUpdatedResponse)
def update_task(
    task_id: StorageId,
    task_data: TaskRequest,
    repository: TaskRepository = Depends(get_task_repository)
):
    """Update title and description of a task"""
    try:
        repository.update(task_id, task_data.title, task_data.description)
    except TaskNotFoundError:
        logger.warning(f"Task not found for update: task_id={task_id}")
        raise
    except StorageError as e:
        logger.error(f"Database error: failed to update task_id={task_id}: {e}")
        raise

    logger.info(f"Task updated successfully: task_id={task_id}")
    return TaskUpdatedResponse(data=TaskIdData(task_id=task_id))


@router.delete("/tasks/{task_id}", response_model=TaskDeletedResponse)
def delete_task(
    task_id: StorageId,
    repository: TaskRepository = Depends(get_task_repository)
):
    """Delete a task"""
    try:
        existing = repository.get_by_id(task_id)
    except StorageError as e:
        logger.error(f"Database error while checking task existence: task_id={task_id}: {e}")
        raise

    if existing is None:
        logger.warning(f"Task not found: task_id={task_id}")
        raise TaskNotFoundError()

    try:
        repository.delete(task_id)
    except TaskNotFoundError:
        # Removed by a concurrent request after the existence check
        logger.warning(f"Task disappeared before delete: task_id={task_id}")
        raise
    except StorageError as e:
        logger.error(f"Database error: failed to delete task_id={task_id}: {e}")
        raise

    logger.info(f"Task deleted successfully: task_id={task_id}")
    return TaskDeletedResponse(message=f"Task with ID {task_id} has been deleted")


@router.get("/task_user/{user_id}", response_model=TaskListResponse)
def get_tasks_by_user(
    user_id: StorageId,
    repository: TaskRepository = Depends(get_task_repository)
):
    """Get all tasks owned by a user"""
    try:
        tasks = repository.list_by_user(user_id)
    except StorageError as e:
        logger.error(f"Database error: failed to retrieve tasks for user_id={user_id}: {e}")
        raise

    return TaskListResponse(data=tasks)
