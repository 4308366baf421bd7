from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserSync(BaseModel):
    name: str | None = Field(default=None, max_length=255)
    email: EmailStr | None = None
    image_url: str | None = None


class UserModel(BaseModel):
    id: str
    external_id: str
    name: str | None = None
    email: str | None = None
    image_url: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
