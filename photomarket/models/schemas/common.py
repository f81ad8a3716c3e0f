"""Common Pydantic schemas used across the application."""
from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str

    class Config:
        from_attributes = True


class CountResponse(BaseModel):
    """Message plus the number of affected records."""

    message: str
    updated_count: int
