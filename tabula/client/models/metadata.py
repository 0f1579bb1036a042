"""Record and page metadata returned alongside records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RecordMetadata(BaseModel):
    """Per-record metadata (the ``_meta`` wire property).

    Unknown keys sent by the service (search score, highlights) are kept.
    """

    version: int = 0
    table: str | None = None
    warnings: list[str] | None = None

    model_config = ConfigDict(frozen=True, extra="allow")


class PageInfo(BaseModel):
    """Cursor position and availability of further rows."""

    cursor: str = ""
    more: bool = False

    model_config = ConfigDict(frozen=True)


class RecordsMetadata(BaseModel):
    """Metadata returned by a table query."""

    page: PageInfo = Field(default_factory=PageInfo)

    model_config = ConfigDict(frozen=True)
