"""
Theme response schema.
"""
from pydantic import BaseModel

from nttfy.models import Theme


class ThemeResponse(BaseModel):
    """Response schema for the current theme"""
    theme: Theme
