"""
Sequence counter model.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Counter(BaseModel):
    """Named sequence counter. value is the last value handed out."""

    name: str = Field(..., min_length=1, max_length=100)
    value: int = Field(0, ge=0)
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
