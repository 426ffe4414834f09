"""Pydantic schemas for catalog operations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from multistore.core.constants import MAX_NAME_LENGTH


class CategoryCreate(BaseModel):
    """Schema for creating a category."""

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)


class CategoryResponse(BaseModel):
    """Schema for category response data."""

    id: UUID
    name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    """Schema for creating a product."""

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    description: str | None = None
    category_id: UUID | None = None
    is_published: bool = True


class ProductResponse(BaseModel):
    """Schema for product response data."""

    id: UUID
    name: str
    description: str | None = None
    category_id: UUID | None = None
    is_published: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
