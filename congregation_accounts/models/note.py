"""Note model. Notes are free text and carry no accounting meaning."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Note(BaseModel):
    """A titled free-form note shared by both ledgers."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = None
    title: str = Field(default="", max_length=200)
    content: str = Field(default="")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
