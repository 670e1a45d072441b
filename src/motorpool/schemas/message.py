"""Pydantic schemas for messages."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)
    to_user_id: Optional[uuid.UUID] = None


class MessageRead(BaseModel):
    id: uuid.UUID
    from_user_id: uuid.UUID
    to_user_id: Optional[uuid.UUID] = None
    content: str
    date_time: datetime

    model_config = {"from_attributes": True}
