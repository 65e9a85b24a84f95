from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class LogOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


class LogPage(BaseModel):
    """Contiguous slice of a log source, lines ordered oldest to newest."""

    model_config = ConfigDict(frozen=True)

    source: str
    lines: list[str] = Field(default_factory=list)
    offset: int = 0
    limit: int = 0
    next_offset: int = 0
    has_more: bool = False


class LogPageResponse(BaseModel):
    """Wire shape of ``GET /api/logs/{source_id}``."""

    lines: list[str]
    hasMore: bool
    limit: int
    offset: int
    nextOffset: int
    source: str

    @classmethod
    def from_page(cls, page: LogPage) -> LogPageResponse:
        return cls(
            lines=page.lines,
            hasMore=page.has_more,
            limit=page.limit,
            offset=page.offset,
            nextOffset=page.next_offset,
            source=page.source,
        )
