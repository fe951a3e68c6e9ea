"""
Pydantic schemas for Task Service.
"""
import re
from datetime import datetime
from typing import Annotated, List
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictInt, field_validator
from pydantic_core import PydanticCustomError

# Signed 64-bit range of the storage integer columns
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_INTEGER_LITERAL = re.compile(r"[+-]?[0-9]+")


def parse_storage_id(value):
    """
    Accept only plain decimal integer literals inside the storage range.

    Rejects forms lax int parsing would let through ("1.0", " 1", "1_000").
    """
    if isinstance(value, str):
        if not _INTEGER_LITERAL.fullmatch(value):
            raise PydanticCustomError("int_parsing", "Input should be an integer")
        value = int(value)
    if isinstance(value, int) and not isinstance(value, bool):
        if not INT64_MIN <= value <= INT64_MAX:
            raise PydanticCustomError("int_range", "Input is out of the integer range")
    return value


# Path parameter type for task and user ids
StorageId = Annotated[int, BeforeValidator(parse_storage_id)]


class TaskRequest(BaseModel):
    """Body of create and update requests"""
    title: str = Field(..., max_length=200, description="Task title")
    description: str = Field("", description="Task description")
    user_id: StrictInt = Field(
        ..., ge=INT64_MIN, le=INT64_MAX, description="ID of the user who owns the task"
    )

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("required", "field is required")
        return value

    @field_validator("description", mode="before")
    @classmethod
    def description_default(cls, value):
        return "" if value is None else value

    @field_validator("user_id")
    @classmethod
    def user_id_not_zero(cls, value: int) -> int:
        if value == 0:
            raise PydanticCustomError("required", "field is required")
        return value


class TaskOut(BaseModel):
    """Task as stored"""
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Task ID")
    user_id: int = Field(..., description="User ID who owns the task")
    title: str = Field(..., description="Task title")
    description: str = Field("", description="Task description")
    status: str = Field(..., description="Task status")
    created_at: datetime = Field(..., description="Task creation timestamp")


class TaskCreatedResponse(BaseModel):
    status: str = "success"
    task_id: int


class TaskResponse(BaseModel):
    status: str = "success"
    data: TaskOut


class TaskIdData(BaseModel):
    task_id: int


class TaskUpdatedResponse(BaseModel):
    status: str = "success"
    data: TaskIdData


class TaskDeletedResponse(BaseModel):
    status: str = "success"
    message: str


class TaskListResponse(BaseModel):
    status: str = "success"
    data: List[TaskOut] = Field(default_factory=list)
