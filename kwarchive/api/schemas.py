#!/usr/bin/env python3
"""
kwarchive API Schemas - Pydantic Models for Request/Response Validation
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.errors import MalformedQuery


class TimeRange(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    start: datetime = Field(..., alias="from")
    end: datetime = Field(..., alias="to")

    @field_validator("start", "end")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    @property
    def unix_start(self) -> float:
        return self.start.timestamp()

    @property
    def unix_end(self) -> float:
        return self.end.timestamp()


class QuerySpec(BaseModel):
    """One sub-query as sent by the query editor; unknown fields are ignored."""
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    ref_id: str = Field("", alias="refId")
    query_text: str = Field("", alias="queryText")
    unit_conversion: int = Field(0, alias="unitConversion")
    transform: int = 0
    hide: bool = False
    format: str = ""
    time_range: Optional[TimeRange] = Field(None, alias="timeRange")

    def keyword_path(self) -> Tuple[str, str]:
        """Split "service.keyword"; segments past the second are ignored."""
        segments = self.query_text.split(".")
        if len(segments) < 2:
            raise MalformedQuery(f"query text {self.query_text!r} is not service.keyword")
        return segments[0], segments[1]


class QueryDataRequest(BaseModel):
    range: TimeRange
    # Validated one by one so a bad query only fails its own slot
    queries: List[Any] = Field(default_factory=list)


class QueryResult(BaseModel):
    frames: List[Dict[str, Any]] = Field(default_factory=list)
    error: Optional[str] = None


class QueryDataResponse(BaseModel):
    results: Dict[str, QueryResult]


class HealthResponse(BaseModel):
    status: str
    message: str
