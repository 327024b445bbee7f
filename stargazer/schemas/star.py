"""
Stargazer Backend — Pydantic Response Schemas
==============================================

What:  Pydantic models defining the JSON contract of the API.
How:   FastAPI uses them to serialize responses and to generate the OpenAPI
       document. Request bodies are form-encoded and read with Form(...)
       parameters in the route handlers, so there are no request models here.

Design Decision:
    Schemas are separate from SQLAlchemy models so the exposed fields are an
    explicit choice rather than whatever columns the table happens to have.
"""

from typing import Optional

from pydantic import BaseModel, Field


class StarResponse(BaseModel):
    """
    What:  JSON representation of a star.
    Who:   Returned by GET /stars (as array items) and GET /stars/{name}.
    """
    id: int = Field(description="Database-assigned identifier")
    name: str = Field(description="Unique name, e.g. 'owner/repo'")
    description: str = Field(description="Free-text description")
    url: str = Field(description="Link to the starred resource")

    model_config = {"from_attributes": True}


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "star 'octocat/hello-world' was not found",
            "request_id": "1a2b3c4d"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
