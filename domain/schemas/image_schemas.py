from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class UploadRequest:
    """A single uploaded file part, alive for one ingestion call."""

    filename: str
    data: bytes
    content_type: Optional[str] = None
    content_length: Optional[int] = None

    @property
    def size(self) -> int:
        return len(self.data)


class UploadResponse(BaseModel):
    """Schema for a successful image upload"""

    success: bool = Field(True, description="Always true for stored uploads")
    path: str = Field(..., description="Public path to store on a meal's image field")
    message: Optional[str] = Field(None, description="Human-readable message")
