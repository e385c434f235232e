# ================================
# 📁 lambdaroute/interfaces/types/task.py
# ================================
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class TaskStatus(str, Enum):
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self is not TaskStatus.RUNNING


class TaskHandle(BaseModel):
    """Locator of a remote asynchronous operation. One per invocation attempt."""
    model_config = ConfigDict(frozen=True)

    url: str = Field(..., min_length=1, description="Absolute URL of the task status endpoint.")
    task_id: Optional[str] = None


class TaskOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: TaskStatus
    result_payload: Optional[str] = None
    error_message: Optional[str] = None


class ComparisonOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    matched: bool
    expected: str
    actual: str
    diagnostic: Optional[str] = None
