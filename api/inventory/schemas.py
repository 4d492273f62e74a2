"""
Inventory API schemas (request/response models).
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class DbConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    host: str | None = Field(default=None, max_length=255)
    database: str | None = Field(default=None, max_length=255)
    # Store credentials; the search itself does not use them.
    user: str | None = None
    password: str | None = None


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    keyword: str = ""
    db_config: DbConfig | None = Field(default=None, alias="dbConfig")


class InventoryRow(BaseModel):
    """
    One row of `trStock` as the mobile client sees it.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    sku: str
    quantity: float
    description: str | None = None


class SearchResponse(BaseModel):
    status: Literal["success"] = "success"
    data: list[InventoryRow]
    count: int
