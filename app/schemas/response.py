"""
app/schemas/response.py

Purpose: Shared error envelope for every non-2xx response
"""

from pydantic import BaseModel, Field
from typing import Optional, Any


class ErrorResponse(BaseModel):
    """
    Standard error response structure.
    """
    error: str = Field(description="Safe, human-readable explanation")
    code: str = Field(description="Machine-readable error code, e.g. COOLDOWN_ACTIVE")
    details: Optional[Any] = Field(default=None, description="Structured context such as remaining_seconds")
