from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .results import Failure


class DraftSave(BaseModel):
    title: str | None = Field(default=None, max_length=255)
    content: str | None = None
    mood: str | None = Field(default=None, max_length=50)


class DraftModel(BaseModel):
    id: str
    title: str | None = None
    content: str | None = None
    mood: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DraftSuccess(BaseModel):
    success: Literal[True] = True
    data: DraftModel | None


DraftResult = DraftSuccess | Failure
