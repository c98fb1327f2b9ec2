from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Upper bound of the INTEGER columns backing ids and stock.
MAX_INT = 2**31 - 1


class Book(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    author: Optional[str] = None
    published_date: Optional[date] = None
    stock: int = 0
    created_at: datetime
    updated_at: datetime


class BookPayload(BaseModel):
    """Client-writable fields of a book.

    Used for both create and full-replace update: an omitted optional field
    means its default, never "leave unchanged". Unknown keys, including
    ``id``, ``created_at`` and ``updated_at``, are dropped.
    """

    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=1, max_length=225)
    author: Optional[str] = Field(default=None, max_length=50)
    published_date: Optional[date] = None
    stock: int = Field(default=0, ge=0, le=MAX_INT)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, value):
        # Length limits apply to the stripped title.
        if isinstance(value, str):
            return value.strip()
        return value
