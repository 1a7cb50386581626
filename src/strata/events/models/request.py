"""Events emitted by the transport."""

from pydantic import Field

from .base import BaseEvent


class RequestRetryEvent(BaseEvent):
    """Emitted before a failed request exchange is sent again."""

    event_type: str = Field(default="request.retry")
    url: str = Field(description="Request URL")
    attempt: int = Field(ge=1, description="Failed attempt number (1-indexed)")
    max_retries: int = Field(ge=1, description="Maximum retry attempts")
    error_message: str = Field(default="", description="Error that triggered retry")
    retry_delay: float = Field(default=0.0, ge=0, description="Delay in seconds")
