from __future__ import annotations

import math
from typing import Any

from .keys import ConstructionKey, SystemType
from .models import SizingRequest


def is_finite(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        num = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(num)


def _positive(errors: list[str], field: str, value: Any) -> None:
    if not is_finite(value):
        errors.append(f"{field} must be a finite number")
    elif float(value) <= 0.0:
        errors.append(f"{field} must be > 0")


def validate_key(key: Any) -> list[str]:
    if not isinstance(key, ConstructionKey):
        return ["key must be a ConstructionKey"]
    errors: list[str] = []
    if key.phase_count not in (1, 3):
        errors.append("phase_count must be 1 or 3")
    elif key.system_type == SystemType.DC and key.phase_count != 1:
        errors.append("DC circuits must have phase_count=1 (two loaded conductors)")
    return errors


def validate_request(request: SizingRequest) -> list[str]:
    """
    Caller-level checks run before the pipeline (NaN, out-of-range).
    Table coverage is not checked here.
    """
    errors: list[str] = []
    _positive(errors, "design_current_a", request.design_current_a)
    _positive(errors, "system_voltage_v", request.system_voltage_v)

    if not is_finite(request.length_m):
        errors.append("length_m must be a finite number")
    elif float(request.length_m) < 0.0:
        errors.append("length_m must be >= 0")

    if not is_finite(request.ambient_temp_c):
        errors.append("ambient_temp_c must be a finite number")

    if not is_finite(request.max_vd_pct):
        errors.append("max_vd_pct must be a finite number")
    elif not 0.0 < float(request.max_vd_pct) <= 100.0:
        errors.append("max_vd_pct must be in (0, 100]")

    circuits = request.circuits
    if not isinstance(circuits, int) or isinstance(circuits, bool):
        errors.append("circuits must be an integer")
    elif circuits < 1:
        errors.append("circuits must be >= 1")

    errors.extend(validate_key(request.key))
    return errors
