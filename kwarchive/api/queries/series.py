"""
Series container shared by the query modules.

A Series is a two-column DataFrame (time, value) ordered by time,
tagged with the kind of the keyword it was fetched for.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import pandas as pd

from ...core.errors import RowIterationError

STRING_TYPE = "KTL_STRING"


class KeywordKind(Enum):
    SCALAR = "scalar"
    STRING = "string"

    @classmethod
    def from_type(cls, keyword_type: Optional[str]) -> "KeywordKind":
        """Map a metadata ``type`` column onto a kind."""
        return cls.STRING if keyword_type == STRING_TYPE else cls.SCALAR


def empty_frame(kind: KeywordKind) -> pd.DataFrame:
    dtype = "float64" if kind is KeywordKind.SCALAR else "object"
    return pd.DataFrame({
        "time": pd.to_datetime([], utc=True),
        "value": pd.Series([], dtype=dtype),
    })


@dataclass
class Series:
    kind: KeywordKind
    data: pd.DataFrame
    # Set when the cursor failed after some rows were read
    iteration_error: Optional[RowIterationError] = None

    def __len__(self) -> int:
        return len(self.data)

    @property
    def times(self) -> pd.Series:
        return self.data["time"]

    @property
    def values(self) -> pd.Series:
        return self.data["value"]

    @classmethod
    def empty(cls, kind: KeywordKind) -> "Series":
        return cls(kind=kind, data=empty_frame(kind))
