from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class Failure(BaseModel):
    """Tagged failure returned instead of raising for recoverable data errors."""

    success: Literal[False] = False
    error: str


__all__ = ["Failure"]
