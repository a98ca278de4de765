"""Provider model schemas."""
from typing import Optional

from pydantic import BaseModel, Field


class ModelInfo(BaseModel):
    """Model entry normalized from a provider's listing payload."""

    id: str = Field(..., description="Model identifier used in requests")
    name: str = Field(..., description="Human-readable model name")
    created: Optional[int] = Field(
        None, description="Creation or modification time, Unix epoch seconds"
    )
    owned_by: Optional[str] = Field(None, description="Owning organization")
