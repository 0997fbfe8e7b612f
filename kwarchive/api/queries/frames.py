"""
Response frames.

A Frame holds parallel time/value arrays for one query. Three response
shapes are produced:
- success with data (build_frame)
- success with a frame holding only the requested range endpoints
  (boundary_frame), used when there is nothing to show
- failure carrying an error next to a boundary frame or partial data
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from ..schemas import QuerySpec, TimeRange
from .series import KeywordKind, Series

EMPTY_FRAME_NAME = "response"


@dataclass
class Frame:
    name: str
    ref_id: Optional[str]
    time: List[pd.Timestamp]
    values: Optional[List[Any]] = None
    kind: Optional[KeywordKind] = None

    def __post_init__(self):
        if self.values is not None and len(self.values) != len(self.time):
            raise ValueError(
                f"frame {self.name!r}: {len(self.time)} times but {len(self.values)} values"
            )

    def __len__(self) -> int:
        return len(self.time)

    def _value_field(self) -> Dict[str, Any]:
        if self.kind is KeywordKind.STRING:
            return {"name": "", "type": "string", "values": list(self.values)}
        # JSON has no inf/NaN (zero dt in a derivative)
        values = [float(v) if math.isfinite(v) else None for v in self.values]
        return {"name": "", "type": "number", "values": values}

    def to_dict(self) -> Dict[str, Any]:
        fields = []
        if self.values is not None:
            fields.append(self._value_field())
        fields.append({
            "name": "time",
            "type": "time",
            "values": [t.isoformat() for t in self.time],
        })
        return {"name": self.name, "refId": self.ref_id, "fields": fields}


@dataclass
class DataResponse:
    """Result slot of one sub-query: zero or more frames and an optional error."""
    frames: List[Frame] = field(default_factory=list)
    error: Optional[Exception] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frames": [f.to_dict() for f in self.frames],
            "error": str(self.error) if self.error is not None else None,
        }


def build_frame(series: Series, query: QuerySpec) -> Frame:
    """Frame named after the query text, value field first, then time."""
    return Frame(
        name=query.query_text,
        ref_id=query.ref_id,
        time=list(series.times),
        values=series.values.tolist(),
        kind=series.kind,
    )


def boundary_frame(time_range: TimeRange, ref_id: Optional[str] = None) -> Frame:
    """Frame with only the requested range endpoints and no values."""
    return Frame(
        name=EMPTY_FRAME_NAME,
        ref_id=ref_id,
        time=[pd.Timestamp(time_range.start), pd.Timestamp(time_range.end)],
    )


def empty_response(time_range: TimeRange, ref_id: Optional[str] = None) -> DataResponse:
    return DataResponse(frames=[boundary_frame(time_range, ref_id)])


def error_response(error: Exception, time_range: Optional[TimeRange],
                   ref_id: Optional[str] = None) -> DataResponse:
    frames = [boundary_frame(time_range, ref_id)] if time_range is not None else []
    return DataResponse(frames=frames, error=error)


def series_response(series: Series, query: QuerySpec) -> DataResponse:
    """Data frame, with the iteration error attached when the fetch ended early."""
    return DataResponse(frames=[build_frame(series, query)], error=series.iteration_error)
