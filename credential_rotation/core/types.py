from typing import Optional
from pydantic import BaseModel, Field


class RotationStats(BaseModel):
    total: int
    available: int
    blocked: int
    cursor: int
    # masked, never the full secret
    current_credential: Optional[str] = Field(default=None)
