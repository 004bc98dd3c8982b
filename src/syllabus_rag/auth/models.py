"""
Authentication Models

This module defines the authenticated identity handed to protected routes
after JWT verification.
"""

from pydantic import BaseModel, Field, ConfigDict


class UserContext(BaseModel):
    """
    Authenticated user context derived from a verified JWT.

    ``user_id`` is the owner key that partitions the vector index.
    """

    user_id: str = Field(
        ...,
        min_length=1,
        description="Opaque user identifier; owner of indexed chunks.",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )
