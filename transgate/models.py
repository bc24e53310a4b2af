"""
Request and response models.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class TranslationRequest(BaseModel):
    """
    Decoded inbound translation request.

    texts is whatever the decoded JSON held; validate_params() checks that
    it is a list of 1 to 50 entries.
    """
    texts: Any = None
    target: Optional[str] = None
    token: Optional[str] = None
    user_agent: str = Field(default="", alias="userAgent")

    class Config:
        populate_by_name = True


class ErrorResponse(BaseModel):
    """Body of every non-200 response."""
    error: str
    details: str
