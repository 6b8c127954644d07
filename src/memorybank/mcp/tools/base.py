"""Base classes for tool parameters."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class BaseParams(BaseModel):
    """Base class for all tool parameters.

    Uses extra="forbid" to reject unknown fields with clear errors.
    """

    model_config = ConfigDict(extra="forbid")

    project_root_path: str | None = Field(
        None, description="Project root. Defaults to the server's project."
    )
