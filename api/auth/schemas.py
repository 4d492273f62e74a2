"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class ConnectionCheckRequest(BaseModel):
    host: str | None = Field(default=None, max_length=255)
    database: str | None = Field(default=None, max_length=255)
    # The mobile client sends the store code in `user`.
    user: str = Field(default="", max_length=64)
    password: str = Field(default="", max_length=256)


class StatusResponse(BaseModel):
    status: Literal["success", "error"]
    message: str
