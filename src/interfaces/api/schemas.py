# src/interfaces/api/schemas.py
"""Pydantic models for FastAPI request/response validation.

Defines the webhook payload and the response schemas for the HTTP endpoints.
"""

from pydantic import BaseModel, Field


class WebhookResponse(BaseModel):
    """Response body for POST /hubot/st2.

    Always returned with HTTP 200 so StackStorm does not retry delivery on a
    payload it cannot fix.

    Attributes:
        status: "completed" or "failed".
        msg: Human-readable outcome.
    """

    status: str = Field(..., description="completed or failed")
    msg: str = Field(..., description="Outcome description")


class AliasListResponse(BaseModel):
    """Response body for GET /aliases.

    Attributes:
        generation: Number of registry snapshots installed so far.
        aliases: Number of aliases in the current snapshot.
        commands: Help line per registered format.
    """

    generation: int = Field(..., description="Registry snapshot generation")
    aliases: int = Field(..., description="Number of loaded aliases")
    commands: list[str] = Field(
        default_factory=list, description="Help line per registered format"
    )
