"""
Series transforms: first derivative and delta.

Both drop the first sample: for i in [1, n) the output point is stamped
with time[i], the later end of the interval. A series of one sample or
less therefore transforms into an empty series.
"""

import logging
from enum import IntEnum

import numpy as np
import pandas as pd

from ...core.errors import UnknownTransform
from .series import KeywordKind, Series

logger = logging.getLogger("kwarchive.server")


class Transform(IntEnum):
    NONE = 0
    DERIVATIVE = 1
    DERIVATIVE_1HZ = 2
    DERIVATIVE_10HZ = 3
    DERIVATIVE_100HZ = 4
    DELTA = 5

    @classmethod
    def from_code(cls, code) -> "Transform":
        try:
            return cls(code)
        except ValueError:
            raise UnknownTransform(code) from None


# Decimal places kept by the rounded derivative variants
_DERIVATIVE_DECIMALS = {
    Transform.DERIVATIVE: None,
    Transform.DERIVATIVE_1HZ: 0,
    Transform.DERIVATIVE_10HZ: 1,
    Transform.DERIVATIVE_100HZ: 2,
}


def round_half_away(values: np.ndarray, decimals: int) -> np.ndarray:
    """Round to ``decimals`` places, halves away from zero."""
    scale = 10.0 ** decimals
    with np.errstate(invalid="ignore"):
        scaled = np.asarray(values, dtype="float64") * scale
        whole = np.trunc(scaled)
        # scaled - whole is exact, so no carry from adding 0.5
        rounded = np.where(np.abs(scaled - whole) >= 0.5, whole + np.sign(scaled), whole)
    return rounded / scale


def derivative(data: pd.DataFrame, decimals=None) -> pd.DataFrame:
    """dv/dt between consecutive samples, dt in seconds."""
    dt = data["time"].diff().dt.total_seconds()
    with np.errstate(divide="ignore", invalid="ignore"):
        dvdt = data["value"].diff().to_numpy() / dt.to_numpy()
    if decimals is not None:
        dvdt = round_half_away(dvdt, decimals)
    return pd.DataFrame({
        "time": data["time"].iloc[1:].reset_index(drop=True),
        "value": pd.Series(dvdt[1:], dtype="float64"),
    })


def delta(data: pd.DataFrame) -> pd.DataFrame:
    """Forward difference, like numpy.diff: the sampling interval is taken as 1."""
    return pd.DataFrame({
        "time": data["time"].iloc[1:].reset_index(drop=True),
        "value": data["value"].diff().iloc[1:].reset_index(drop=True).astype("float64"),
    })


def apply_transform(series: Series, option: Transform) -> Series:
    """
    Apply a transform to a scalar series.

    String-valued series are returned untouched whatever the option.
    """
    if series.kind is KeywordKind.STRING or option is Transform.NONE:
        return series

    if option is Transform.DELTA:
        data = delta(series.data)
    else:
        data = derivative(series.data, _DERIVATIVE_DECIMALS[option])

    logger.debug(f"{option.name.lower()} transform: {len(series)} -> {len(data)} samples")
    return Series(kind=series.kind, data=data, iteration_error=series.iteration_error)
