# vidshelf/models.py
from __future__ import annotations

from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictStr, TypeAdapter, field_validator


class VideoRecord(BaseModel):
    """One playable entry of the catalog document.

    Missing or ``null`` fields decode as empty strings so that validation,
    not parsing, decides whether the record is usable.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    title: StrictStr = ""
    description: StrictStr = ""
    file_name: StrictStr = Field("", alias="fileName")

    @field_validator("title", "description", "file_name", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


# The catalog is immutable; a reload replaces it wholesale.
Catalog = Tuple[VideoRecord, ...]

# Top-level null decodes as "no records"; null elements decode as empty records.
CATALOG_DOCUMENT: TypeAdapter[Optional[List[Optional[VideoRecord]]]] = TypeAdapter(
    Optional[List[Optional[VideoRecord]]]
)


def is_catalog(value: Any) -> bool:
    return isinstance(value, tuple) and all(isinstance(v, VideoRecord) for v in value)
