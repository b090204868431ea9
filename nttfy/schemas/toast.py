"""
Toast response schema.
"""
from pydantic import BaseModel


class ToastResponse(BaseModel):
    """Response schema for the current toast"""
    message: str | None = None
