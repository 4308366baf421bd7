from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ..services.moods import get_mood_by_id
from .mood import MoodModel
from .results import Failure


class EntryCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    mood: str = Field(..., min_length=1, max_length=50)
    mood_query: str | None = Field(default=None, max_length=100)
    collection_id: str | None = None


class EntryUpdate(EntryCreate):
    pass


class CollectionRef(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class EntryModel(BaseModel):
    id: str
    user_id: str
    title: str
    content: str
    mood: str
    mood_score: int
    mood_image_url: str | None = None
    collection_id: str | None = None
    collection: CollectionRef | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field(return_type=MoodModel | None)
    def mood_data(self) -> MoodModel | None:
        mood = get_mood_by_id(self.mood)
        return MoodModel.model_validate(mood.as_dict()) if mood else None


class EntryListQuery(BaseModel):
    collection_id: str | None = None
    order: Literal["asc", "desc"] = "desc"


class EntryListData(BaseModel):
    entries: list[EntryModel]


class EntryListSuccess(BaseModel):
    success: Literal[True] = True
    data: EntryListData


EntryListResult = EntryListSuccess | Failure


__all__ = [
    "CollectionRef",
    "EntryCreate",
    "EntryListData",
    "EntryListQuery",
    "EntryListResult",
    "EntryListSuccess",
    "EntryModel",
    "EntryUpdate",
]
