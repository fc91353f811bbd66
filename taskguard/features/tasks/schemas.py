"""
Pydantic schemas for tasks.
"""
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskguard.core.rbac import TaskType


TaskStatus = Literal["todo", "in-progress", "done"]
TaskPriority = Literal["low", "medium", "high"]


class TaskCreate(BaseModel):
    """Schema for creating a task. Owner and organization come from the caller."""
    title: str = Field(..., min_length=3, max_length=100)
    content: str = ""
    type: TaskType
    priority: TaskPriority = "medium"


class TaskUpdate(BaseModel):
    """Schema for updating a task. Only provided fields are changed."""
    title: Optional[str] = Field(None, min_length=3, max_length=100)
    content: Optional[str] = None
    status: Optional[TaskStatus] = None
    type: Optional[TaskType] = None
    priority: Optional[TaskPriority] = None

    @field_validator("title", "content", "status", "type", "priority", mode="before")
    @classmethod
    def reject_null(cls, v):
        # Omitted fields stay unchanged; explicit null is rejected
        if v is None:
            raise ValueError("Field may not be null")
        return v


class TaskResponse(BaseModel):
    id: str
    title: str
    content: str
    status: str
    priority: str
    type: str
    organization_id: str
    owner_id: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
