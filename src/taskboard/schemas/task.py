"""Pydantic schemas for tasks.

Learn: Separate schemas for create/patch/filter keeps the service API clean.
- TaskCreate: fields a caller may set on a new task. There is no owner
  field; unknown keys (an attempted owner_id, say) are dropped.
- TaskPatch: merge-style update, only fields the caller actually sent are
  written (exclude_unset), so "not sent" and "sent as null" differ.
- TaskFilter: optional, independently combinable AND filters
- TaskSort: closed set of orderings
"""

import enum
import uuid
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    project_id: uuid.UUID
    is_completed: bool = False
    is_removed: bool = False
    due_date: Optional[datetime] = None


# Columns a patch may clear by sending null.
NULLABLE_PATCH_FIELDS = {"due_date"}


class TaskPatch(BaseModel):
    """Partial update for one task. Only fields that were sent are applied."""

    id: uuid.UUID
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    is_completed: Optional[bool] = None
    is_removed: Optional[bool] = None
    due_date: Optional[datetime] = None
    project_id: Optional[uuid.UUID] = None

    def changes(self) -> dict[str, Any]:
        """Column values to write. Nulls on non-nullable columns are ignored."""
        sent = self.model_dump(exclude_unset=True, exclude={"id"})
        return {
            k: v for k, v in sent.items()
            if v is not None or k in NULLABLE_PATCH_FIELDS
        }


class TaskFilter(BaseModel):
    is_completed: Optional[bool] = None
    is_removed: Optional[bool] = None
    due_date: Optional[date] = None  # matches the whole UTC day
    project_id: Optional[uuid.UUID] = None


class TaskSort(str, enum.Enum):
    DUE_DATE_ASC = "DUE_DATE_ASC"
    DUE_DATE_DESC = "DUE_DATE_DESC"
