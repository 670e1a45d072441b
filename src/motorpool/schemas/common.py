"""Response envelope shared by every endpoint.

Learn: all responses, success or failure, have the same three keys:
success (bool), message (short human-readable text) and data (the
payload, or error details on failure).
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None
