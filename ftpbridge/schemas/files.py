"""Remote file schemas."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class FileEntry(BaseModel):
    """One entry of a remote directory listing."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    size: int = 0
    is_directory: bool = Field(False, alias="isDirectory")
    # None when the server reports no usable modification time
    date_modified: Optional[datetime] = Field(None, alias="dateModified")

    @field_serializer("date_modified")
    def serialize_date_modified(self, value: Optional[datetime]) -> Optional[str]:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return (
            value.astimezone(timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z")
        )


class CsvUpload(BaseModel):
    """A CSV file queued for upload."""

    filename: str
    content: bytes
