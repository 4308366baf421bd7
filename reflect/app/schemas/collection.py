from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .journal import EntryModel


class CollectionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=2000)


class CollectionModel(BaseModel):
    id: str
    user_id: str
    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CollectionListResponse(BaseModel):
    items: list[CollectionModel]


class CollectionDeleteResponse(BaseModel):
    ok: bool = True


class CollectionView(BaseModel):
    """A collection (or the virtual unorganized bucket) with its entries."""

    id: str
    name: str
    description: str | None = None
    entries: list[EntryModel]
