"""Data models for ingress monitors."""

from typing import Dict

from pydantic import BaseModel, Field


class Monitor(BaseModel):
    """Provider-agnostic representation of a website monitor."""

    id: str = Field("", description="Provider specific monitor ID, empty until created")
    name: str = Field(..., description="Display name of the monitor, used as lookup key")
    url: str = Field(..., description="URL that the monitor supervises")
    annotations: Dict[str, str] = Field(
        default_factory=dict,
        description="Annotations of the ingress, read by providers for custom configuration",
    )
