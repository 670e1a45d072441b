"""Pydantic schemas for cars.

Learn: the same input schema serves create (POST) and update (PUT) since
an update replaces all business fields.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CarWrite(BaseModel):
    make: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    year: int = Field(..., ge=1886, le=2100)


class CarRead(BaseModel):
    id: uuid.UUID
    make: str
    model: str
    year: int
    deleted_flag: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
