"""
Derating factors (IEC 60364-5-52).

- Ca: ambient temperature correction, Table B.52.14, per insulation class.
- Cg: grouping correction, per installation-method class and circuit count.

Both are total functions: out-of-band inputs clamp to the documented
floor/ceiling bands, no extrapolation.
"""

from __future__ import annotations

import math
from enum import Enum

from .keys import Insulation, InstallationMethod


class MethodClass(str, Enum):
    ENCLOSED = "enclosed"
    TOUCHING = "touching"
    SPACED = "spaced"


# (inclusive upper bound °C, factor), ascending
TEMPERATURE_BANDS: dict[Insulation, tuple[tuple[float, float], ...]] = {
    # 70 °C thermoplastic
    Insulation.PVC: (
        (10.0, 1.22),
        (15.0, 1.17),
        (20.0, 1.12),
        (25.0, 1.06),
        (30.0, 1.00),
        (35.0, 0.94),
        (40.0, 0.87),
        (45.0, 0.79),
        (50.0, 0.71),
        (55.0, 0.61),
        (60.0, 0.50),
    ),
    # 90 °C thermosetting
    Insulation.XLPE: (
        (10.0, 1.15),
        (15.0, 1.12),
        (20.0, 1.08),
        (25.0, 1.04),
        (30.0, 1.00),
        (35.0, 0.96),
        (40.0, 0.91),
        (45.0, 0.87),
        (50.0, 0.82),
        (55.0, 0.76),
        (60.0, 0.71),
        (65.0, 0.65),
        (70.0, 0.58),
        (75.0, 0.50),
        (80.0, 0.41),
        (85.0, 0.32),
    ),
}

# (max circuit count, factor), ascending; the last band is the floor
GROUPING_BANDS: dict[MethodClass, tuple[tuple[int, float], ...]] = {
    MethodClass.ENCLOSED: (
        (1, 1.00),
        (2, 0.80),
        (3, 0.70),
        (4, 0.65),
        (5, 0.60),
        (6, 0.57),
        (9, 0.54),
        (12, 0.52),
        (15, 0.50),
        (19, 0.48),
        (20, 0.45),
    ),
    MethodClass.TOUCHING: (
        (1, 1.00),
        (2, 0.85),
        (3, 0.79),
        (4, 0.75),
        (5, 0.73),
        (6, 0.72),
        (9, 0.70),
        (10, 0.68),
    ),
    MethodClass.SPACED: (
        (1, 1.00),
        (2, 0.88),
        (3, 0.82),
        (4, 0.77),
        (5, 0.75),
        (6, 0.73),
        (7, 0.70),
    ),
}

_METHOD_CLASSES: dict[InstallationMethod, MethodClass] = {
    InstallationMethod.A: MethodClass.ENCLOSED,
    InstallationMethod.B: MethodClass.ENCLOSED,
    InstallationMethod.C: MethodClass.TOUCHING,
    InstallationMethod.F_TOUCHING: MethodClass.TOUCHING,
    InstallationMethod.E: MethodClass.SPACED,
    InstallationMethod.F_SPACED_H: MethodClass.SPACED,
    InstallationMethod.F_SPACED_V: MethodClass.SPACED,
    InstallationMethod.G_SPACED_H: MethodClass.SPACED,
    InstallationMethod.G_SPACED_V: MethodClass.SPACED,
}


def method_class(method: InstallationMethod) -> MethodClass:
    return _METHOD_CLASSES[InstallationMethod(method)]


def temperature_factor(insulation: Insulation, ambient_temp_c: float) -> float:
    """
    Ca for the insulation class.

    The lowest band whose upper bound is >= ambient applies; above the highest
    bound the class's lowest factor is returned.
    """
    if not isinstance(ambient_temp_c, (int, float)) or isinstance(ambient_temp_c, bool):
        raise TypeError("ambient_temp_c must be a number")
    ambient = float(ambient_temp_c)
    if math.isnan(ambient):
        raise ValueError("ambient_temp_c must not be NaN")
    bands = TEMPERATURE_BANDS[Insulation(insulation)]
    for upper_c, factor in bands:
        if ambient <= upper_c:
            return factor
    return min(factor for _, factor in bands)


def grouping_factor(cls: MethodClass, circuits: int) -> float:
    """Cg for `circuits` circuits grouped under method class `cls`."""
    if not isinstance(circuits, int) or isinstance(circuits, bool):
        raise TypeError("circuits must be an integer")
    if circuits < 1:
        raise ValueError("circuits must be >= 1")
    bands = GROUPING_BANDS[MethodClass(cls)]
    for max_count, factor in bands:
        if circuits <= max_count:
            return factor
    # beyond the largest banded count
    return bands[-1][1]


def grouping_factor_for_method(method: InstallationMethod, circuits: int) -> float:
    return grouping_factor(method_class(method), circuits)
