from __future__ import annotations

from pydantic import BaseModel


class MoodModel(BaseModel):
    id: str
    label: str
    emoji: str
    score: int
    color: str
    prompt: str
    image_query: str


class MoodListResponse(BaseModel):
    items: list[MoodModel]
